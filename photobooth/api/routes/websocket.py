from fastapi import APIRouter, WebSocket, WebSocketDisconnect, Depends
import json
import asyncio
import logging

from photobooth.config import settings
from photobooth.services.booth import BoothService
from photobooth.api.dependencies import get_booth_service

logger = logging.getLogger(__name__)

router = APIRouter()

@router.websocket("/ws")
async def websocket_endpoint(
    websocket: WebSocket,
    booth: BoothService = Depends(get_booth_service)
):
    await websocket.accept()
    try:
        while True:
            frame = booth.preview_frame()
            if frame:
                await websocket.send_text(json.dumps({
                    "type": "preview",
                    "data": frame
                }))
            await asyncio.sleep(1 / settings.preview_fps)
    except WebSocketDisconnect:
        logger.info("Preview client disconnected")
    except Exception:
        logger.exception("WebSocket error")
