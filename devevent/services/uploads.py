"""Image storage for event posters."""

from __future__ import annotations

import logging
import uuid
from pathlib import Path
from typing import Protocol

from devevent.domain.errors import UploadError

logger = logging.getLogger(__name__)


class ImageStore(Protocol):
    def upload(self, data: bytes, filename: str) -> str:
        """Store *data* and return a publicly addressable URL."""
        ...


class LocalImageStore:
    """Writes images under a directory served at ``base_url``."""

    def __init__(self, directory: Path, base_url: str, folder: str = "") -> None:
        self.directory = directory
        self.base_url = base_url.rstrip("/")
        self.folder = folder.strip("/")

    def upload(self, data: bytes, filename: str) -> str:
        if not data:
            raise UploadError("Image file is empty")

        name = f"{uuid.uuid4().hex}{Path(filename).suffix.lower()}"
        target_dir = self.directory / self.folder if self.folder else self.directory
        try:
            target_dir.mkdir(parents=True, exist_ok=True)
            (target_dir / name).write_bytes(data)
        except OSError as exc:
            raise UploadError(f"Image upload failed: {exc}") from exc

        logger.info("Stored image %s (%d bytes)", name, len(data))
        parts = [self.base_url, self.folder, name] if self.folder else [self.base_url, name]
        return "/".join(parts)
