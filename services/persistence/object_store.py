from __future__ import annotations

import logging
import mimetypes
import re
from pathlib import Path

from core.config import settings

logger = logging.getLogger(__name__)

SAFE_NAME = re.compile(r"[^A-Za-z0-9._-]")


class ObjectStoreError(Exception):
    pass


def safe_key(key: str) -> str:
    """Sanitize every path segment; reject traversal and empty keys."""
    parts = [p for p in key.strip("/").split("/") if p]
    if not parts or any(p in {".", ".."} for p in parts):
        raise ObjectStoreError(f"invalid key: {key!r}")
    return "/".join(SAFE_NAME.sub("_", p) for p in parts)


class LocalObjectStore:
    """Blob storage on the local filesystem, addressed by slash-separated keys."""

    def __init__(self, root: str | Path, public_base_url: str):
        self.root = Path(root)
        self.public_base_url = public_base_url.rstrip("/")

    def _path(self, key: str) -> Path:
        return self.root / safe_key(key)

    def url_for(self, key: str) -> str:
        return f"{self.public_base_url}/media/{safe_key(key)}"

    def put(self, key: str, data: bytes) -> str:
        key = safe_key(key)
        dest = self._path(key)
        dest.parent.mkdir(parents=True, exist_ok=True)

        # write then rename so readers never see a half-written blob
        tmp = dest.with_suffix(dest.suffix + ".part")
        with tmp.open("wb") as f:
            f.write(data)
        tmp.replace(dest)

        logger.info("stored blob %s (%d bytes)", key, len(data))
        return self.url_for(key)

    def open(self, key: str) -> tuple[Path, str]:
        path = self._path(key)
        if not path.is_file():
            raise FileNotFoundError(key)
        ctype = mimetypes.guess_type(path.name)[0] or "application/octet-stream"
        return path, ctype


def get_object_store() -> LocalObjectStore:
    return LocalObjectStore(settings.STORAGE_ROOT, settings.PUBLIC_BASE_URL)
