"""Public-disk blob storage for uploaded documents.

Blobs live under ``<root>/files/<uuid><ext>`` and are served by the API
process at ``<public_base_url>/storage/...``.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from pathlib import Path
from uuid import uuid4

from app.config import settings

logger = logging.getLogger("app.storage")

BLOB_DIRECTORY = "files"
PUBLIC_URL_PREFIX = "/storage"


@dataclass
class PublicStorage:
    """Filesystem storage with public URLs, addressed by relative path."""

    root: Path
    base_url: str

    def _resolve(self, path: str) -> Path:
        resolved = (self.root / path).resolve()
        if not resolved.is_relative_to(self.root.resolve()):
            raise ValueError(f"path escapes storage root: {path}")
        return resolved

    def save(self, content: bytes, original_name: str) -> str:
        """Write bytes under a fresh UUID name and return the relative path."""
        directory = self.root / BLOB_DIRECTORY
        directory.mkdir(parents=True, exist_ok=True)

        suffix = Path(original_name).suffix.lower()
        relative = f"{BLOB_DIRECTORY}/{uuid4()}{suffix}"
        with open(self._resolve(relative), "wb") as buf:
            buf.write(content)

        logger.debug("stored blob: %s (%d bytes)", relative, len(content))
        return relative

    def read(self, path: str) -> bytes:
        return self._resolve(path).read_bytes()

    def exists(self, path: str) -> bool:
        return self._resolve(path).is_file()

    def delete(self, path: str) -> bool:
        """Remove a blob. Returns False when it was already gone.

        I/O failures other than a missing file propagate to the caller.
        """
        target = self._resolve(path)
        try:
            target.unlink()
        except FileNotFoundError:
            return False
        logger.debug("deleted blob: %s", path)
        return True

    def url(self, path: str) -> str:
        return f"{self.base_url.rstrip('/')}{PUBLIC_URL_PREFIX}/{path}"


public_storage = PublicStorage(root=Path(settings.storage_root), base_url=settings.public_base_url)
