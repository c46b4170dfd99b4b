from dataclasses import dataclass, field
from enum import Enum
from typing import List, Optional

import numpy as np
from PIL import Image
from pydantic import BaseModel, ConfigDict
from pydantic.alias_generators import to_camel

from photobooth.errors import CaptureLimitError

SMILE_TEXT = "SMILE!"


class Screen(str, Enum):
    idle = "idle"
    template = "template"
    result = "result"


class SelectionOutcome(str, Enum):
    selected = "selected"
    confirmed = "confirmed"


@dataclass
class BoothSession:
    """Mutable state of the single session running on the kiosk."""

    shot_index: int = 0
    countdown_text: str = ""
    shots: List[Image.Image] = field(default_factory=list)
    frozen_frame: Optional[np.ndarray] = None
    freeze_until: float = 0.0
    selected_template_index: Optional[int] = None
    screen: Screen = Screen.idle
    alert: Optional[str] = None
    generation: int = 0

    def is_frozen(self, now: float) -> bool:
        return self.frozen_frame is not None and now < self.freeze_until

    def add_shot(self, shot: Image.Image, total_shots: int) -> None:
        if len(self.shots) >= total_shots:
            raise CaptureLimitError(f"Session already holds {total_shots} shots")
        self.shots.append(shot)

    def reset_capture(self) -> None:
        self.shot_index = 0
        self.shots.clear()
        self.frozen_frame = None
        self.freeze_until = 0.0

    def reset(self) -> None:
        self.reset_capture()
        self.countdown_text = ""
        self.selected_template_index = None
        self.alert = None
        self.screen = Screen.idle
        self.generation += 1


class UploadResult(BaseModel):
    session_id: Optional[str] = None
    collage_url: Optional[str] = None


class SaveResponse(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    ok: bool = True
    session_id: str
    collage_url: str


class BoothStateResponse(BaseModel):
    screen: Screen
    shot_index: int
    total_shots: int
    countdown_text: str
    shots_captured: int
    frozen: bool
    selected_template_index: Optional[int] = None
    alert: Optional[str] = None
    session_id: Optional[str] = None
    collage_url: Optional[str] = None
    collage_ready: bool = False
    qr_ready: bool = False


class TriggerResponse(BaseModel):
    accepted: bool


class TemplatePreview(BaseModel):
    index: int
    name: str
    selected: bool
    preview: Optional[str] = None


class TemplateClickResponse(BaseModel):
    outcome: SelectionOutcome
    selected_index: Optional[int] = None
    screen: Screen
