import logging
import os
import threading
import time
from dataclasses import dataclass, field
from typing import Callable, Dict, List

from photobooth.config import settings

logger = logging.getLogger(__name__)

RAW_FIELDS = ("raw1", "raw2", "raw3")


class SessionIdFactory:
    """Millisecond timestamps, bumped forward so no two calls return the same id."""

    def __init__(self, clock: Callable[[], float] = time.time):
        self.clock = clock
        self._last = 0
        self._lock = threading.Lock()

    def __call__(self) -> str:
        now_ms = int(self.clock() * 1000)
        with self._lock:
            session_ms = max(now_ms, self._last + 1)
            self._last = session_ms
        return str(session_ms)


@dataclass
class SavedSession:
    session_id: str
    collage_url: str
    collage_path: str
    raw_paths: List[str] = field(default_factory=list)


class PhotoStorage:
    def __init__(self, photos_dir: str, url_prefix: str = "/photos",
                 max_file_bytes: int = 10 * 1024 * 1024, id_factory: Callable[[], str] = None):
        self.raw_dir = os.path.join(photos_dir, "raw")
        self.collage_dir = os.path.join(photos_dir, "collage")
        self.url_prefix = url_prefix.rstrip("/")
        self.max_file_bytes = max_file_bytes
        self.id_factory = id_factory or SessionIdFactory()

    def save_session(self, raws: Dict[int, bytes], collage: bytes) -> SavedSession:
        session_id = self.id_factory()

        raw_paths = []
        for index in sorted(raws):
            raw_path = os.path.join(self.raw_dir, f"session_{session_id}_raw{index}.jpg")
            with open(raw_path, 'wb') as f:
                f.write(raws[index])
            logger.info("Saved raw: %s", raw_path)
            raw_paths.append(raw_path)

        collage_filename = f"session_{session_id}_collage.jpg"
        collage_path = os.path.join(self.collage_dir, collage_filename)
        with open(collage_path, 'wb') as f:
            f.write(collage)
        logger.info("Saved collage: %s", collage_path)

        return SavedSession(
            session_id=session_id,
            collage_url=f"{self.url_prefix}/collage/{collage_filename}",
            collage_path=collage_path,
            raw_paths=raw_paths,
        )


photo_storage = PhotoStorage(
    settings.photos_dir,
    url_prefix=settings.photos_url_prefix,
    max_file_bytes=settings.max_upload_bytes,
)
