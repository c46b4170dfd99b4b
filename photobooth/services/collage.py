import io
import logging
import os
from typing import List, Optional, Sequence

from PIL import Image

from photobooth.config import settings
from photobooth.errors import CaptureIncompleteError, TemplateIndexError
from photobooth.models.config import BoothConfig, CaptureSettings, TemplateSpec

logger = logging.getLogger(__name__)


class CollageBuilder:
    def __init__(self, assets_dir: str, quality: int = 90):
        self.assets_dir = assets_dir
        self.quality = quality

    def template_path(self, template: TemplateSpec) -> str:
        if os.path.isabs(template.file):
            return template.file
        return os.path.join(self.assets_dir, template.file.lstrip("/"))

    def load_overlay(self, template: TemplateSpec) -> Optional[Image.Image]:
        path = self.template_path(template)
        try:
            with Image.open(path) as img:
                overlay = img.convert("RGBA")
        except OSError as e:
            logger.warning("[TEMPLATE] Image %s failed to load: %s", template.file, e)
            return None
        return overlay

    def compose(self, shots: Sequence[Image.Image], template: TemplateSpec,
                capture: CaptureSettings, overlay: Optional[Image.Image]) -> Image.Image:
        """Draw shots into the template slots, then the overlay on top.

        The result is RGBA at the template size; regions covered by neither a
        shot nor the overlay stay fully transparent.
        """
        canvas = Image.new("RGBA", (template.width, template.height), (0, 0, 0, 0))

        for i, shot in enumerate(shots):
            if i >= len(template.slots):
                continue
            slot = template.slots[i]
            photo = shot.convert("RGBA").resize(capture.photo_size, Image.Resampling.LANCZOS)
            canvas.paste(photo, (slot.x, slot.y))

        if overlay is not None:
            canvas.alpha_composite(overlay.resize(canvas.size, Image.Resampling.LANCZOS))

        return canvas

    def build(self, shots: List[Image.Image], config: BoothConfig, template_index: int) -> Image.Image:
        if not 0 <= template_index < len(config.templates):
            raise TemplateIndexError(f"Invalid template index: {template_index}")

        total_shots = config.capture.total_shots
        if len(shots) != total_shots:
            raise CaptureIncompleteError(f"Collage needs {total_shots} shots, have {len(shots)}")

        template = config.templates[template_index]
        logger.info("[COLLAGE] building with template %s", template.name)
        overlay = self.load_overlay(template)
        if overlay is None:
            logger.warning("[COLLAGE] continuing without template overlay")

        collage = self.compose(shots, template, config.capture, overlay)
        logger.info("[COLLAGE] done, %d photos drawn", min(len(shots), len(template.slots)))
        return collage.convert("RGB")

    def encode_jpeg(self, image: Image.Image) -> bytes:
        buffer = io.BytesIO()
        image.convert("RGB").save(buffer, format='JPEG', quality=self.quality)
        return buffer.getvalue()


collage_builder = CollageBuilder(settings.static_dir, quality=settings.jpeg_quality)
