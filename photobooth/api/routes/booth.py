from typing import List

from fastapi import APIRouter, Depends, HTTPException, Request
from fastapi.responses import Response

from photobooth.api.dependencies import get_booth_service
from photobooth.errors import InvalidScreenError, TemplateIndexError
from photobooth.models.session import (
    BoothStateResponse, TemplateClickResponse, TemplatePreview, TriggerResponse
)
from photobooth.services.booth import BoothService

router = APIRouter(prefix="/booth", tags=["booth"])


def _origin(request: Request) -> str:
    return str(request.base_url).rstrip("/")


@router.get("/config")
async def get_config(booth: BoothService = Depends(get_booth_service)):
    if booth.config is None:
        raise HTTPException(status_code=503, detail="Configuration not loaded")
    return booth.config.model_dump(by_alias=True)


@router.get("/state", response_model=BoothStateResponse)
async def get_state(booth: BoothService = Depends(get_booth_service)):
    return booth.snapshot()


@router.post("/trigger", response_model=TriggerResponse)
async def trigger(booth: BoothService = Depends(get_booth_service)):
    return TriggerResponse(accepted=booth.trigger())


@router.get("/templates", response_model=List[TemplatePreview])
async def list_templates(booth: BoothService = Depends(get_booth_service)):
    return booth.template_previews()


@router.post("/templates/{index}/click", response_model=TemplateClickResponse)
async def click_template(index: int, request: Request, booth: BoothService = Depends(get_booth_service)):
    try:
        outcome = await booth.click_template(index, _origin(request))
    except TemplateIndexError as e:
        raise HTTPException(status_code=404, detail=str(e))
    except InvalidScreenError as e:
        raise HTTPException(status_code=409, detail=str(e))

    return TemplateClickResponse(
        outcome=outcome,
        selected_index=booth.session.selected_template_index,
        screen=booth.session.screen,
    )


@router.post("/reset", response_model=BoothStateResponse)
async def reset(booth: BoothService = Depends(get_booth_service)):
    booth.return_to_idle()
    return booth.snapshot()


@router.get("/qr.png")
async def get_qr(booth: BoothService = Depends(get_booth_service)):
    png = booth.qr.to_png()
    if png is None:
        raise HTTPException(status_code=404, detail="QR code not ready")
    return Response(content=png, media_type="image/png")


@router.get("/collage.jpg")
async def get_collage(booth: BoothService = Depends(get_booth_service)):
    jpeg = booth.collage_jpeg()
    if jpeg is None:
        raise HTTPException(status_code=404, detail="Collage not ready")
    return Response(content=jpeg, media_type="image/jpeg")
