"""
Speech Collector — Object Storage
==================================
Audio recordings are stored as objects addressed by a relative key such as
``recordings/<user_id>/<sentence_id>_<uuid>.webm``.

LocalObjectStorage keeps objects on disk under settings.storage_dir.

Usage:
    from app.object_storage import get_storage
    storage = get_storage()
    storage.upload_file(key, data)
    storage.delete_file(key)
"""

from __future__ import annotations

from functools import lru_cache
from pathlib import Path

from loguru import logger

from app.config import get_settings


class ObjectNotFoundError(FileNotFoundError):
    """Raised when an object key does not exist in storage."""


class LocalObjectStorage:
    """Filesystem-backed object store rooted at a single directory."""

    def __init__(self, root: str | Path):
        self.root = Path(root).resolve()

    def _path_for(self, key: str) -> Path:
        path = (self.root / key).resolve()
        if path == self.root or self.root not in path.parents:
            raise ValueError(f"Object key escapes storage root: {key!r}")
        return path

    def upload_file(self, key: str, data: bytes) -> str:
        """Write *data* under *key*, creating parent folders. Returns the key."""
        path = self._path_for(key)
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_bytes(data)
        logger.debug(f"[ObjectStorage] Stored {key} ({len(data)} bytes)")
        return key

    def exists(self, key: str) -> bool:
        return self._path_for(key).is_file()

    def delete_file(self, key: str) -> None:
        """Remove the object stored under *key*."""
        path = self._path_for(key)
        if not path.is_file():
            raise ObjectNotFoundError(f"No object stored under {key!r}")
        path.unlink()
        logger.debug(f"[ObjectStorage] Deleted {key}")


@lru_cache
def get_storage() -> LocalObjectStorage:
    """Cached storage client built from settings.storage_dir."""
    return LocalObjectStorage(get_settings().storage_dir)
