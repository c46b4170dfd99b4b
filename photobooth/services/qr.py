import io
import logging
from typing import Optional

import qrcode
from qrcode.exceptions import DataOverflowError
from PIL import Image

logger = logging.getLogger(__name__)

DARK_COLOR = "#FFFFFF"
LIGHT_COLOR = "#2c2c2c"


class QrRenderer:
    def __init__(self):
        self.canvas: Optional[Image.Image] = None

    def render(self, url: str, size: int = 300, margin: int = 4) -> Optional[Image.Image]:
        if not url:
            return None

        logger.info("[QR] rendering for: %s", url)
        qr = qrcode.QRCode(
            error_correction=qrcode.constants.ERROR_CORRECT_M,
            box_size=10,
            border=margin,
        )
        qr.add_data(url)
        try:
            qr.make(fit=True)
        except DataOverflowError as e:
            logger.error("[QR] Error rendering: %s", e)
            return None

        img = qr.make_image(fill_color=DARK_COLOR, back_color=LIGHT_COLOR).convert("RGB")
        self.canvas = img.resize((size, size), Image.Resampling.NEAREST)
        logger.info("[QR] done")
        return self.canvas

    def clear(self) -> None:
        self.canvas = None

    def to_png(self) -> Optional[bytes]:
        if self.canvas is None:
            return None
        buffer = io.BytesIO()
        self.canvas.save(buffer, format="PNG")
        return buffer.getvalue()
