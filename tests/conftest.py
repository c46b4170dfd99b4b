"""Shared test fixtures."""

from dataclasses import dataclass, field
from typing import List, Optional

import httpx
import numpy as np
import pytest
from PIL import Image

from photobooth.main import app
from photobooth.models.config import BoothConfig
from photobooth.services.booth import BoothService
from photobooth.services.camera import CameraService
from photobooth.services.collage import CollageBuilder
from photobooth.services.countdown import CountdownController
from photobooth.services.qr import QrRenderer
from photobooth.services.templates import TemplateSelector
from photobooth.services.upload import UploadClient

RED_BGR = (0, 0, 255)
BLUE_BGR = (255, 0, 0)


def split_frame(width: int = 640, height: int = 480) -> np.ndarray:
    """BGR frame whose left half is red and right half is blue."""
    frame = np.zeros((height, width, 3), dtype=np.uint8)
    frame[:, : width // 2] = RED_BGR
    frame[:, width // 2:] = BLUE_BGR
    return frame


@dataclass
class FakeFrameSource:
    """Frame source that always returns the same frame."""

    frame: Optional[np.ndarray] = field(default_factory=split_frame)
    can_open: bool = True
    opened: bool = False
    released: bool = False

    def open(self) -> bool:
        self.opened = self.can_open
        return self.can_open

    def read(self) -> Optional[np.ndarray]:
        if self.frame is None:
            return None
        return self.frame.copy()

    def release(self) -> None:
        self.released = True


@dataclass
class FakeClock:
    now: float = 100.0

    def __call__(self) -> float:
        return self.now


@dataclass
class SleepRecorder:
    """Async sleep replacement that returns immediately and records each call."""

    calls: List[float] = field(default_factory=list)

    async def __call__(self, seconds: float) -> None:
        self.calls.append(seconds)


def save_response(request: httpx.Request) -> httpx.Response:
    return httpx.Response(
        200,
        json={
            "ok": True,
            "sessionId": "1700000000000",
            "collageUrl": "/photos/collage/session_1700000000000_collage.jpg",
        },
    )


@pytest.fixture
def overlay_dir(tmp_path):
    """Assets dir holding an overlay that is opaque white in its first 10 columns."""
    overlay = Image.new("RGBA", (300, 50), (0, 0, 0, 0))
    overlay.paste((255, 255, 255, 255), (0, 0, 10, 50))
    (tmp_path / "templates").mkdir()
    overlay.save(tmp_path / "templates" / "band.png")
    return tmp_path


@pytest.fixture
def booth_config() -> BoothConfig:
    return BoothConfig.model_validate({
        "siteName": "Test Booth",
        "capture": {"photoWidth": 100, "photoHeight": 50, "totalShots": 3},
        "countdown": {"seconds": 3, "stepMs": 10},
        "templates": [
            {
                "name": "Band",
                "file": "templates/band.png",
                "width": 300,
                "height": 50,
                "slots": [{"x": 0, "y": 0}, {"x": 100, "y": 0}, {"x": 200, "y": 0}],
            },
            {
                "name": "Missing",
                "file": "templates/missing.png",
                "width": 120,
                "height": 200,
                "slots": [{"x": 10, "y": 10}, {"x": 10, "y": 70}],
            },
        ],
        "publicBaseUrl": "",
    })


@pytest.fixture
def frame_source() -> FakeFrameSource:
    return FakeFrameSource()


@pytest.fixture
def clock() -> FakeClock:
    return FakeClock()


@pytest.fixture
def camera(frame_source, clock) -> CameraService:
    return CameraService(frame_source, display_width=1000, freeze_seconds=1.0, clock=clock)


@pytest.fixture
def builder(overlay_dir) -> CollageBuilder:
    return CollageBuilder(str(overlay_dir), quality=90)


@pytest.fixture
def make_booth(camera, builder, booth_config):
    def _make(handler=save_response, sleep=None) -> BoothService:
        http_client = httpx.AsyncClient(transport=httpx.MockTransport(handler))
        booth = BoothService(
            camera=camera,
            countdown=CountdownController(camera, smile_delay=0.25, freeze_delay=1.0, sleep=sleep or SleepRecorder()),
            selector=TemplateSelector(builder),
            builder=builder,
            uploader=UploadClient(http_client=http_client, encoder=builder),
            qr=QrRenderer(),
        )
        booth.configure(booth_config)
        return booth

    return _make


@pytest.fixture
def client_app():
    yield app
    app.dependency_overrides.clear()


@pytest.fixture
def photos_root(tmp_path):
    """Photo directory tree as created by the settings module at import."""
    root = tmp_path / "photos"
    (root / "raw").mkdir(parents=True)
    (root / "collage").mkdir()
    return root
