from pathlib import Path

from pydantic_settings import BaseSettings, SettingsConfigDict
import os

PACKAGE_DIR = Path(__file__).resolve().parent


class Settings(BaseSettings):
    app_name: str = "Kiosk Photobooth"
    app_description: str = "A kiosk photobooth that captures shots, builds a templated collage and serves it by QR code"
    debug: bool = False

    host: str = "0.0.0.0"
    port: int = 3000

    camera_index: int = 0
    camera_width: int = 1920
    camera_height: int = 1080
    camera_fps: int = 30
    display_width: int = 1000
    preview_fps: int = 15

    jpeg_quality: int = 90
    preview_quality: int = 60
    max_upload_bytes: int = 10 * 1024 * 1024

    freeze_seconds: float = 1.0
    smile_delay_seconds: float = 0.25

    photos_dir: str = "photos"
    photos_url_prefix: str = "/photos"
    static_dir: str = str(PACKAGE_DIR / "static")
    booth_config_path: str = str(PACKAGE_DIR / "static" / "config.json")

    model_config = SettingsConfigDict(env_file=".env", extra="ignore")

    @property
    def raw_dir(self) -> str:
        return os.path.join(self.photos_dir, "raw")

    @property
    def collage_dir(self) -> str:
        return os.path.join(self.photos_dir, "collage")


settings = Settings()
os.makedirs(settings.raw_dir, exist_ok=True)
os.makedirs(settings.collage_dir, exist_ok=True)
