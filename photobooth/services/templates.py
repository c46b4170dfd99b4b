import asyncio
import logging
from typing import List

from PIL import Image

from photobooth.errors import TemplateIndexError
from photobooth.models.config import BoothConfig, TemplateSpec
from photobooth.models.session import BoothSession, SelectionOutcome
from photobooth.services.collage import CollageBuilder

logger = logging.getLogger(__name__)


class TemplateSelector:
    def __init__(self, builder: CollageBuilder):
        self.builder = builder
        self.previews: List[Image.Image] = []

    def _render_preview(self, template: TemplateSpec, shots: List[Image.Image], config: BoothConfig) -> Image.Image:
        logger.info("[TEMPLATE] Processing template: %s", template.name)
        overlay = self.builder.load_overlay(template)
        return self.builder.compose(shots, template, config.capture, overlay).convert("RGB")

    async def populate(self, session: BoothSession, config: BoothConfig) -> List[Image.Image]:
        logger.info("[TEMPLATE] Populating template screen with %d templates", len(config.templates))
        session.selected_template_index = None
        self.previews = []

        shots = list(session.shots)
        self.previews = list(await asyncio.gather(*(
            asyncio.to_thread(self._render_preview, template, shots, config)
            for template in config.templates
        )))
        logger.info("[TEMPLATE] All templates rendered.")
        return self.previews

    def click(self, session: BoothSession, index: int) -> SelectionOutcome:
        if not 0 <= index < len(self.previews):
            raise TemplateIndexError(f"Invalid template index: {index}")

        if session.selected_template_index == index:
            logger.info("[TEMPLATE] confirmed index: %d", index)
            session.selected_template_index = None
            return SelectionOutcome.confirmed

        logger.info("[TEMPLATE] selected index: %d", index)
        session.selected_template_index = index
        return SelectionOutcome.selected

    def clear(self) -> None:
        self.previews = []
