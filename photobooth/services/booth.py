"""Kiosk flow: idle → countdown per shot → template selection → result.

``BoothService`` owns the single ``BoothSession``. Every mutation happens on
the event loop, either in a request handler or in one of the background tasks
spawned here, so the session needs no locking.
"""

import asyncio
import base64
import logging
from typing import List, Optional, Set

from PIL import Image

from photobooth.config import settings
from photobooth.errors import CameraUnavailableError, InvalidScreenError, PhotoboothError, UploadError
from photobooth.models.config import BoothConfig
from photobooth.models.session import (
    BoothSession, BoothStateResponse, Screen, SelectionOutcome, TemplatePreview, UploadResult
)
from photobooth.services.camera import CameraService, camera_service
from photobooth.services.collage import CollageBuilder, collage_builder
from photobooth.services.countdown import CountdownController
from photobooth.services.qr import QrRenderer
from photobooth.services.templates import TemplateSelector
from photobooth.services.upload import UploadClient

logger = logging.getLogger(__name__)


class BoothService:
    def __init__(self, camera: CameraService, countdown: CountdownController, selector: TemplateSelector,
                 builder: CollageBuilder, uploader: UploadClient, qr: QrRenderer):
        self.camera = camera
        self.countdown = countdown
        self.selector = selector
        self.builder = builder
        self.uploader = uploader
        self.qr = qr

        self.config: Optional[BoothConfig] = None
        self.session = BoothSession()
        self.collage: Optional[Image.Image] = None
        self.upload_result: Optional[UploadResult] = None
        self._countdown_task: Optional[asyncio.Task] = None
        self._tasks: Set[asyncio.Task] = set()

    def configure(self, config: BoothConfig) -> None:
        self.config = config

    def activate_camera(self) -> bool:
        try:
            self.camera.activate()
        except CameraUnavailableError as e:
            logger.error("[CAM] error: %s", e)
            self.session.alert = f"Camera failed: {e}"
            return False
        return True

    @property
    def countdown_running(self) -> bool:
        return self._countdown_task is not None and not self._countdown_task.done()

    def trigger(self) -> bool:
        """Handle a click on the idle screen. Returns whether a countdown started."""
        if self.config is None:
            logger.warning("[FLOW] config not loaded yet")
            return False
        if not self.camera.is_active:
            logger.warning("[FLOW] camera not ready yet")
            return False
        if self.session.screen != Screen.idle:
            logger.info("[FLOW] not on idle screen, ignore click")
            return False
        if self.session.countdown_text or self.countdown_running:
            logger.info("[FLOW] countdown running, ignore click")
            return False

        if self.session.shot_index >= self.config.capture.total_shots:
            self.session.reset_capture()

        self._countdown_task = self._spawn(self._run_countdown(self.session.generation))
        return True

    async def _run_countdown(self, generation: int) -> None:
        complete = await self.countdown.run(self.session, self.config)
        if not complete or generation != self.session.generation:
            return

        logger.info("[FLOW] reached %d shots, go to template selection", self.config.capture.total_shots)
        await self.selector.populate(self.session, self.config)
        if generation != self.session.generation:
            logger.info("[FLOW] session was reset while rendering templates")
            self.selector.clear()
            return
        self.session.screen = Screen.template

    async def click_template(self, index: int, origin: str) -> SelectionOutcome:
        if self.session.screen != Screen.template:
            raise InvalidScreenError("Template selection is not open")

        outcome = self.selector.click(self.session, index)
        if outcome == SelectionOutcome.confirmed:
            self.session.screen = Screen.result
            shots = list(self.session.shots)
            self._spawn(self._build_and_upload(index, shots, origin, self.session.generation))
        return outcome

    async def _build_and_upload(self, template_index: int, shots: List[Image.Image],
                                origin: str, generation: int) -> None:
        try:
            collage = await asyncio.to_thread(self.builder.build, shots, self.config, template_index)
        except PhotoboothError as e:
            logger.error("[COLLAGE] build failed: %s", e)
            if generation == self.session.generation:
                self.session.alert = str(e)
            return
        if generation != self.session.generation:
            return
        self.collage = collage

        try:
            result = await self.uploader.upload(shots, collage, self.config, origin)
        except UploadError as e:
            if generation == self.session.generation:
                self.session.alert = str(e)
            return

        if generation != self.session.generation:
            logger.info("[UPLOAD] session was reset, dropping result %s", result.session_id)
            return
        self.upload_result = result
        if result.collage_url:
            self.qr.render(result.collage_url, self.config.qr.size, self.config.qr.margin)

    def return_to_idle(self) -> None:
        logger.info("[FLOW] result → idle")
        if self.countdown_running:
            logger.info("[FLOW] cancelling running countdown")
            self._countdown_task.cancel()
        self.session.reset()
        self.collage = None
        self.upload_result = None
        self.selector.clear()
        self.qr.clear()

    def snapshot(self) -> BoothStateResponse:
        session = self.session
        result = self.upload_result or UploadResult()
        return BoothStateResponse(
            screen=session.screen,
            shot_index=session.shot_index,
            total_shots=self.config.capture.total_shots if self.config else 0,
            countdown_text=session.countdown_text,
            shots_captured=len(session.shots),
            frozen=session.is_frozen(self.camera.clock()),
            selected_template_index=session.selected_template_index,
            alert=session.alert,
            session_id=result.session_id,
            collage_url=result.collage_url,
            collage_ready=self.collage is not None,
            qr_ready=self.qr.canvas is not None,
        )

    def preview_frame(self) -> Optional[str]:
        return self.camera.get_preview_frame(self.session, self.config)

    def template_previews(self) -> List[TemplatePreview]:
        if self.config is None:
            return []

        previews = []
        for index, image in enumerate(self.selector.previews):
            previews.append(TemplatePreview(
                index=index,
                name=self.config.templates[index].name,
                selected=self.session.selected_template_index == index,
                preview=base64.b64encode(self.builder.encode_jpeg(image)).decode('utf-8'),
            ))
        return previews

    def collage_jpeg(self) -> Optional[bytes]:
        if self.collage is None:
            return None
        return self.builder.encode_jpeg(self.collage)

    def _spawn(self, coro) -> asyncio.Task:
        task = asyncio.create_task(coro)
        self._tasks.add(task)
        task.add_done_callback(self._task_done)
        return task

    def _task_done(self, task: asyncio.Task) -> None:
        self._tasks.discard(task)
        if not task.cancelled() and task.exception() is not None:
            logger.error("Booth task failed", exc_info=task.exception())

    async def wait_for_tasks(self) -> None:
        while self._tasks:
            await asyncio.gather(*list(self._tasks), return_exceptions=True)

    async def shutdown(self) -> None:
        for task in list(self._tasks):
            task.cancel()
        await self.wait_for_tasks()
        await self.uploader.close()
        self.camera.cleanup()


booth_service = BoothService(
    camera=camera_service,
    countdown=CountdownController(
        camera_service,
        smile_delay=settings.smile_delay_seconds,
        freeze_delay=settings.freeze_seconds,
    ),
    selector=TemplateSelector(collage_builder),
    builder=collage_builder,
    uploader=UploadClient.create(),
    qr=QrRenderer(),
)
