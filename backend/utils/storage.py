# utils/storage.py
import logging
import time
from pathlib import Path
from typing import Union
from urllib.parse import urljoin

from config import settings
from utils.errors import ObjectNotFound

logger = logging.getLogger(__name__)


class LocalStorage:
    """Stores bucket objects as files under ``{root}/{bucket_id}/{name}``."""

    def __init__(self, root: Union[str, Path] = None):
        self.root = Path(root or settings.STORAGE_ROOT)

    def path_for(self, bucket_id: str, name: str) -> Path:
        base = (self.root / bucket_id).resolve()
        path = (base / name).resolve()
        # Object names may contain folders but must stay inside the bucket
        if base not in path.parents:
            raise ObjectNotFound(f"Invalid object name: {name}")
        return path

    def upload_file(self, bucket_id: str, name: str, content: bytes) -> Path:
        path = self.path_for(bucket_id, name)
        try:
            path.parent.mkdir(parents=True, exist_ok=True)
            with open(path, "wb") as buffer:
                buffer.write(content)
            return path
        except OSError as e:
            logger.error(f"Failed to write object {bucket_id}/{name}: {e}")
            raise

    def delete_file(self, bucket_id: str, name: str) -> bool:
        path = self.path_for(bucket_id, name)
        try:
            path.unlink()
            return True
        except FileNotFoundError:
            return False
        except OSError as e:
            logger.error(f"Failed to delete object {bucket_id}/{name}: {e}")
            return False


def get_storage() -> LocalStorage:
    return LocalStorage(settings.STORAGE_ROOT)


def object_name(owner_id, filename: str) -> str:
    """Object name convention: "{owner_id}/{epoch_millis}.{ext}"."""
    ext = (filename or "").split(".")[-1]
    return f"{owner_id}/{int(time.time() * 1000)}.{ext}"


def public_path(bucket_id: str, name: str) -> str:
    return f"/storage/{bucket_id}/{name}"


def full_url(base_url: str, path: str) -> str:
    return urljoin(str(base_url), path.lstrip("/"))
