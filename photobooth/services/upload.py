"""Client side of the photo upload: multipart POST to the save endpoint."""

import logging
from typing import List, Optional

import httpx
from PIL import Image

from photobooth.errors import UploadError
from photobooth.models.config import BoothConfig
from photobooth.models.session import UploadResult
from photobooth.services.collage import CollageBuilder, collage_builder

logger = logging.getLogger(__name__)

UPLOAD_FAILED_MESSAGE = "Failed to save photos on server."


def resolve_public_url(collage_url: str, public_base_url: Optional[str], origin: str) -> str:
    """Turn a server-relative collage path into an absolute URL for the QR code."""
    if collage_url.startswith("http"):
        return collage_url

    if public_base_url and public_base_url.strip():
        base = public_base_url.rstrip("/")
    else:
        base = origin.rstrip("/")
    return f"{base}{collage_url}"


class UploadClient:
    def __init__(self, http_client: httpx.AsyncClient, encoder: CollageBuilder, timeout: float = 30.0):
        self.http_client = http_client
        self.encoder = encoder
        self.timeout = timeout

    @classmethod
    def create(cls) -> "UploadClient":
        return cls(http_client=httpx.AsyncClient(), encoder=collage_builder)

    def build_files(self, shots: List[Image.Image], collage: Image.Image) -> list:
        files = []
        for i, shot in enumerate(shots, start=1):
            files.append((f"raw{i}", (f"raw{i}.jpg", self.encoder.encode_jpeg(shot), "image/jpeg")))
        files.append(("collage", ("collage.jpg", self.encoder.encode_jpeg(collage), "image/jpeg")))
        return files

    async def upload(self, shots: List[Image.Image], collage: Image.Image,
                     config: BoothConfig, origin: str) -> UploadResult:
        logger.info("[UPLOAD] start")
        files = self.build_files(shots, collage)
        save_url = str(httpx.URL(origin).join(config.save_api_url))

        try:
            response = await self.http_client.post(save_url, files=files, timeout=self.timeout)
        except httpx.HTTPError as e:
            logger.error("[UPLOAD] request to %s failed: %s", save_url, e)
            raise UploadError(UPLOAD_FAILED_MESSAGE) from e

        logger.info("[UPLOAD] response status: %d", response.status_code)
        if not response.is_success:
            logger.error("[UPLOAD] failed: %s", response.text)
            raise UploadError(UPLOAD_FAILED_MESSAGE)

        try:
            data = response.json()
        except ValueError as e:
            logger.error("[UPLOAD] response is not JSON: %s", response.text)
            raise UploadError(UPLOAD_FAILED_MESSAGE) from e
        logger.info("[UPLOAD] Saved session: %s", data)

        session_id = data.get("sessionId")
        collage_url = data.get("collageUrl")
        if not collage_url:
            logger.warning("[UPLOAD] No collageUrl in response.")
            return UploadResult(session_id=session_id)

        absolute_url = resolve_public_url(collage_url, config.public_base_url, origin)
        logger.info("[UPLOAD] QR absolute URL: %s", absolute_url)
        return UploadResult(session_id=session_id, collage_url=absolute_url)

    async def close(self) -> None:
        await self.http_client.aclose()
