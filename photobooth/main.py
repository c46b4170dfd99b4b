import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from fastapi.staticfiles import StaticFiles
from fastapi.responses import HTMLResponse

from photobooth.app_logging import configure_logging
from photobooth.config import settings
from photobooth.api.routes import booth, save, websocket
from photobooth.models.config import load_booth_config
from photobooth.services.booth import booth_service
from photobooth.templates.index import get_html_template

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    configure_logging()
    # ConfigError propagates: the server does not start without a booth config.
    booth_service.configure(load_booth_config(settings.booth_config_path))
    booth_service.activate_camera()
    logger.info("[INIT] Photobooth ready.")
    yield
    await booth_service.shutdown()


app = FastAPI(
    title=settings.app_name,
    description=settings.app_description,
    debug=settings.debug,
    lifespan=lifespan,
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# Include routers
app.include_router(save.router, prefix="/api")
app.include_router(booth.router, prefix="/api")
app.include_router(websocket.router)
app.mount(settings.photos_url_prefix, StaticFiles(directory=settings.photos_dir), name="photos")
app.mount("/static", StaticFiles(directory=settings.static_dir), name="static")

@app.get("/")
async def get_index():
    site_name = booth_service.config.site_name if booth_service.config else None
    return HTMLResponse(get_html_template(site_name or settings.app_name))

@app.get("/health")
async def health_check():
    return {"status": "healthy", "camera_active": booth_service.camera.is_active}
