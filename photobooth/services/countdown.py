import asyncio
import logging
from typing import Awaitable, Callable, Optional

from photobooth.errors import CameraUnavailableError
from photobooth.models.config import BoothConfig
from photobooth.models.session import SMILE_TEXT, BoothSession
from photobooth.services.camera import CameraService

logger = logging.getLogger(__name__)

Sleep = Callable[[float], Awaitable[None]]


class CountdownController:
    """Runs one countdown → smile → capture → freeze sequence per trigger."""

    def __init__(self, camera: CameraService, smile_delay: float = 0.25,
                 freeze_delay: float = 1.0, sleep: Sleep = asyncio.sleep):
        self.camera = camera
        self.smile_delay = smile_delay
        self.freeze_delay = freeze_delay
        self.sleep = sleep

    async def run(self, session: BoothSession, config: BoothConfig, seconds: Optional[int] = None) -> bool:
        """Take one shot. Returns True once the session holds every shot."""
        step = config.countdown.step_ms / 1000
        total_shots = config.capture.total_shots

        logger.info("[COUNTDOWN] start, shots taken: %d", session.shot_index)
        remaining = seconds if seconds is not None else config.countdown.seconds
        session.countdown_text = str(remaining)

        while True:
            await self.sleep(step)
            remaining -= 1
            if remaining <= 0:
                break
            session.countdown_text = str(remaining)

        session.countdown_text = SMILE_TEXT
        await self.sleep(self.smile_delay)

        try:
            self.camera.capture_shot(session, config)
        except CameraUnavailableError as e:
            logger.error("[COUNTDOWN] capture failed: %s", e)
            session.alert = str(e)
            session.countdown_text = ""
            return False
        session.countdown_text = ""

        await self.sleep(self.freeze_delay)
        session.shot_index += 1
        logger.info("[COUNTDOWN] shot complete, shots taken now: %d", session.shot_index)
        return session.shot_index >= total_shots
