import base64
import logging
import time
from typing import Callable, Optional, Protocol, Tuple

import cv2
import numpy as np
from PIL import Image

from photobooth.config import settings
from photobooth.errors import CameraUnavailableError
from photobooth.models.config import BoothConfig
from photobooth.models.session import BoothSession

logger = logging.getLogger(__name__)

PROMPT_TEXT = "PRESS TO START"
# HERSHEY_SIMPLEX cap height in pixels at font scale 1.0
_FONT_BASE_PX = 22.0


class FrameSource(Protocol):
    def open(self) -> bool: ...

    def read(self) -> Optional[np.ndarray]: ...

    def release(self) -> None: ...


class Cv2FrameSource:
    def __init__(self, index: int = 0, width: int = 1920, height: int = 1080, fps: int = 30):
        self.index = index
        self.width = width
        self.height = height
        self.fps = fps
        self.capture = None

    def open(self) -> bool:
        self.capture = cv2.VideoCapture(self.index)
        if not self.capture.isOpened():
            self.capture = None
            return False

        self.capture.set(cv2.CAP_PROP_FRAME_WIDTH, self.width)
        self.capture.set(cv2.CAP_PROP_FRAME_HEIGHT, self.height)
        self.capture.set(cv2.CAP_PROP_FPS, self.fps)
        return True

    def read(self) -> Optional[np.ndarray]:
        if self.capture is None:
            return None
        ret, frame = self.capture.read()
        if not ret:
            return None
        return frame

    def release(self) -> None:
        if self.capture is not None:
            self.capture.release()
            self.capture = None


def compute_center_crop(src_w: int, src_h: int, target_w: int, target_h: int) -> Tuple[float, float, float, float]:
    """Return ``(sx, sy, sw, sh)`` of the centered region matching the target aspect ratio."""
    target_aspect = target_w / target_h
    source_aspect = src_w / src_h

    if source_aspect > target_aspect:
        sh = float(src_h)
        sw = sh * target_aspect
        return (src_w - sw) / 2, 0.0, sw, sh

    sw = float(src_w)
    sh = sw / target_aspect
    return 0.0, (src_h - sh) / 2, sw, sh


def _has_dimensions(frame: Optional[np.ndarray]) -> bool:
    return frame is not None and frame.ndim >= 2 and frame.shape[0] > 0 and frame.shape[1] > 0


def _draw_text(canvas: np.ndarray, text: str, height_px: float, position: Tuple[float, float],
               align: str, baseline: str, alpha: float) -> None:
    font = cv2.FONT_HERSHEY_SIMPLEX
    scale = height_px / _FONT_BASE_PX
    thickness = max(1, int(round(scale * 2)))
    (text_w, text_h), _ = cv2.getTextSize(text, font, scale, thickness)

    x, y = position
    if align == "center":
        x -= text_w / 2
    if baseline == "top":
        y += text_h
    elif baseline == "middle":
        y += text_h / 2

    overlay = canvas.copy()
    cv2.putText(overlay, text, (int(x), int(y)), font, scale, (255, 255, 255), thickness, cv2.LINE_AA)
    cv2.addWeighted(overlay, alpha, canvas, 1 - alpha, 0, dst=canvas)


class CameraService:
    def __init__(self, source: FrameSource, display_width: int = 1000,
                 freeze_seconds: float = 1.0, clock: Callable[[], float] = time.monotonic):
        self.source = source
        self.display_width = display_width
        self.freeze_seconds = freeze_seconds
        self.clock = clock
        self.display_size: Optional[Tuple[int, int]] = None
        self.is_active = False

    def activate(self) -> None:
        if self.is_active:
            logger.info("[CAM] stream already active")
            return

        logger.info("[CAM] requesting camera")
        if not self.source.open():
            raise CameraUnavailableError("Could not open camera")
        self.is_active = True

        frame = self.source.read()
        if not _has_dimensions(frame):
            logger.warning("[CAM] frame dimensions not available yet")
            return

        height, width = frame.shape[:2]
        logger.info("[CAM] stream: %dx%d", width, height)
        self.display_size = self._display_size_for(width, height)

    def _display_size_for(self, width: int, height: int) -> Tuple[int, int]:
        aspect = width / height
        return self.display_width, int(round(self.display_width / aspect))

    def _canvas_size(self, frame: Optional[np.ndarray]) -> Tuple[int, int]:
        if self.display_size is None and _has_dimensions(frame):
            self.display_size = self._display_size_for(frame.shape[1], frame.shape[0])
        if self.display_size is not None:
            return self.display_size
        return self.display_width, self.display_width * 3 // 4

    def render_frame(self, session: BoothSession, config: Optional[BoothConfig]) -> np.ndarray:
        frame = self.source.read() if self.is_active else None
        cw, ch = self._canvas_size(frame)
        frozen = session.is_frozen(self.clock())

        if frozen:
            canvas = cv2.resize(session.frozen_frame, (cw, ch))
        elif _has_dimensions(frame):
            canvas = cv2.flip(cv2.resize(frame, (cw, ch)), 1)
        else:
            canvas = np.zeros((ch, cw, 3), dtype=np.uint8)

        if frozen or config is None:
            return canvas

        total_shots = config.capture.total_shots
        if session.shot_index < total_shots:
            _draw_text(canvas, f"{session.shot_index + 1}/{total_shots}", cw * 0.04,
                       (40, 30), "left", "top", 0.85)

        if session.countdown_text:
            _draw_text(canvas, session.countdown_text, cw * 0.2,
                       (cw / 2, ch / 2), "center", "middle", 0.4)
        elif session.shot_index < total_shots:
            _draw_text(canvas, PROMPT_TEXT, cw * 0.04,
                       (cw / 2, ch - 60), "center", "bottom", 0.7)

        return canvas

    def capture_shot(self, session: BoothSession, config: BoothConfig) -> Image.Image:
        frame = self.source.read() if self.is_active else None
        if not _has_dimensions(frame):
            raise CameraUnavailableError("Camera not ready yet.")

        vh, vw = frame.shape[:2]
        target_w, target_h = config.capture.photo_size
        sx, sy, sw, sh = compute_center_crop(vw, vh, target_w, target_h)
        x0, y0 = int(round(sx)), int(round(sy))
        x1, y1 = min(vw, x0 + int(round(sw))), min(vh, y0 + int(round(sh)))

        cropped = cv2.resize(frame[y0:y1, x0:x1], (target_w, target_h), interpolation=cv2.INTER_AREA)
        shot = Image.fromarray(cv2.cvtColor(cropped, cv2.COLOR_BGR2RGB))
        session.add_shot(shot, config.capture.total_shots)
        logger.info("[CAPTURE] shot captured, total: %d", len(session.shots))

        cw, ch = self._canvas_size(frame)
        session.frozen_frame = cv2.flip(cv2.resize(frame, (cw, ch)), 1)
        session.freeze_until = self.clock() + self.freeze_seconds
        return shot

    def get_preview_frame(self, session: BoothSession, config: Optional[BoothConfig]) -> Optional[str]:
        if not self.is_active:
            return None

        canvas = self.render_frame(session, config)
        ok, buffer = cv2.imencode('.jpg', canvas, [cv2.IMWRITE_JPEG_QUALITY, settings.preview_quality])
        if not ok:
            return None
        return base64.b64encode(buffer).decode('utf-8')

    def cleanup(self):
        self.source.release()
        self.is_active = False


camera_service = CameraService(
    Cv2FrameSource(settings.camera_index, settings.camera_width, settings.camera_height, settings.camera_fps),
    display_width=settings.display_width,
    freeze_seconds=settings.freeze_seconds,
)
