"""
Object storage for retailer images.

Objects are addressed by a relative key (retailer-uploads/<retailer>/...)
and exposed through a public base URL. The local implementation writes
under UPLOAD_DIR, which main.py serves at /public-assets.
"""

import os
import logging
from pathlib import Path

logger = logging.getLogger(__name__)

PUBLIC_MOUNT = "/public-assets"


class LocalObjectStorage:
    """Filesystem-backed bucket"""

    def __init__(self, root: str, public_base_url: str):
        self.root = Path(root).resolve()
        self.public_base_url = public_base_url.rstrip("/")

    @classmethod
    def from_env(cls) -> "LocalObjectStorage":
        return cls(
            root=os.getenv("UPLOAD_DIR", "./public-assets"),
            public_base_url=os.getenv("PUBLIC_ASSET_BASE_URL", f"http://localhost:8000{PUBLIC_MOUNT}"),
        )

    def _resolve(self, key: str) -> Path:
        path = (self.root / key).resolve()
        if self.root not in path.parents:
            raise ValueError(f"Object key escapes storage root: {key}")
        return path

    def upload(self, key: str, content: bytes, content_type: str = "application/octet-stream", upsert: bool = True) -> str:
        path = self._resolve(key)
        if path.exists() and not upsert:
            raise FileExistsError(key)
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_bytes(content)
        logger.info(f"Stored {key} ({len(content)} bytes, {content_type})")
        return key

    def exists(self, key: str) -> bool:
        return self._resolve(key).is_file()

    def public_url(self, key: str) -> str:
        return f"{self.public_base_url}/{key}"
