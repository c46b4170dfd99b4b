import json
import logging
from pathlib import Path
from typing import List, Optional, Union

from pydantic import BaseModel, ConfigDict, Field, ValidationError
from pydantic.alias_generators import to_camel

from photobooth.errors import ConfigError

logger = logging.getLogger(__name__)


class _ConfigModel(BaseModel):
    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        frozen=True,
        extra="ignore",
    )


class Slot(_ConfigModel):
    x: int
    y: int


class TemplateSpec(_ConfigModel):
    name: str
    file: str
    width: int = Field(gt=0)
    height: int = Field(gt=0)
    slots: List[Slot] = []


class CaptureSettings(_ConfigModel):
    photo_width: int = Field(gt=0)
    photo_height: int = Field(gt=0)
    total_shots: int = Field(default=3, ge=1)

    @property
    def photo_size(self) -> tuple:
        return self.photo_width, self.photo_height


class CountdownSettings(_ConfigModel):
    seconds: int = Field(default=3, ge=1)
    step_ms: int = Field(default=500, gt=0)


class QrSettings(_ConfigModel):
    size: int = Field(default=300, gt=0)
    margin: int = Field(default=4, ge=0)


class BoothConfig(_ConfigModel):
    site_name: Optional[str] = None
    capture: CaptureSettings
    countdown: CountdownSettings = CountdownSettings()
    templates: List[TemplateSpec] = []
    save_api_url: str = "/api/save"
    public_base_url: Optional[str] = None
    qr: QrSettings = QrSettings()


def load_booth_config(path: Union[str, Path]) -> BoothConfig:
    path = Path(path)
    try:
        raw = json.loads(path.read_text(encoding="utf-8"))
        config = BoothConfig.model_validate(raw)
    except (OSError, json.JSONDecodeError, ValidationError) as e:
        raise ConfigError(f"Failed to load {path}: {e}") from e

    if not config.templates:
        logger.warning("No templates configured in %s", path)
    logger.info(
        "[CONFIG] %s: %d shots of %dx%d, %d templates",
        config.site_name or path.name,
        config.capture.total_shots,
        config.capture.photo_width,
        config.capture.photo_height,
        len(config.templates),
    )
    return config
