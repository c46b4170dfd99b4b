import logging
from typing import Optional

from fastapi import APIRouter, Depends, File, UploadFile
from fastapi.responses import PlainTextResponse

from photobooth.api.dependencies import get_photo_storage
from photobooth.errors import FileTooLargeError
from photobooth.models.session import SaveResponse
from photobooth.services.storage import PhotoStorage

logger = logging.getLogger(__name__)

router = APIRouter(tags=["save"])


async def _read_capped(upload: UploadFile, max_bytes: int) -> bytes:
    data = await upload.read(max_bytes + 1)
    if len(data) > max_bytes:
        raise FileTooLargeError(f"File too large: {upload.filename} exceeds {max_bytes} bytes")
    return data


@router.post("/save", response_model=SaveResponse)
async def save_photos(
        raw1: Optional[UploadFile] = File(None),
        raw2: Optional[UploadFile] = File(None),
        raw3: Optional[UploadFile] = File(None),
        collage: Optional[UploadFile] = File(None),
        storage: PhotoStorage = Depends(get_photo_storage)
):
    uploads = {"raw1": raw1, "raw2": raw2, "raw3": raw3, "collage": collage}
    logger.info("Received files: %s", [name for name, upload in uploads.items() if upload is not None])

    if collage is None:
        logger.error("No collage file received")
        return PlainTextResponse("No collage file received", status_code=400)

    try:
        raws = {}
        for index, upload in enumerate((raw1, raw2, raw3), start=1):
            if upload is None:
                continue
            raws[index] = await _read_capped(upload, storage.max_file_bytes)
        collage_bytes = await _read_capped(collage, storage.max_file_bytes)

        saved = storage.save_session(raws, collage_bytes)
    except FileTooLargeError as e:
        logger.error("Rejected upload: %s", e)
        return PlainTextResponse(str(e), status_code=413)
    except Exception:
        logger.exception("Error in /api/save")
        return PlainTextResponse("Server error while saving files", status_code=500)

    return SaveResponse(session_id=saved.session_id, collage_url=saved.collage_url)
