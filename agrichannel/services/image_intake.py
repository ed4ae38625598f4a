import logging
import os
import secrets
import time
from pathlib import Path
from typing import BinaryIO, Optional

from agrichannel.core.errors import InvalidFileError

logger = logging.getLogger(__name__)

ALLOWED_EXTENSIONS = {".jpeg", ".jpg", ".png", ".webp"}
ALLOWED_MIME_TYPES = {"image/jpeg", "image/jpg", "image/png", "image/webp"}
MAX_UPLOAD_BYTES = 4 * 1024 * 1024


def generate_filename(ext: str) -> str:
    """``<ms timestamp>-<12 hex chars><ext>``"""
    return f"{int(time.time() * 1000)}-{secrets.token_hex(6)}{ext}"


class ImageIntake:
    """Validates uploaded listing images and keeps them under ``media_root``."""

    def __init__(self, media_root: Path, max_bytes: int = MAX_UPLOAD_BYTES):
        self.media_root = Path(media_root)
        self.max_bytes = max_bytes

    def _path_for(self, filename: str) -> Path:
        # stored names never contain directories
        return self.media_root / Path(filename).name

    def accept(self, original_name: Optional[str], content_type: Optional[str], stream: BinaryIO) -> str:
        ext = os.path.splitext(original_name or "")[1].lower()
        mime = (content_type or "").split(";")[0].strip().lower()

        if ext not in ALLOWED_EXTENSIONS or mime not in ALLOWED_MIME_TYPES:
            raise InvalidFileError("Invalid file type")

        contents = stream.read(self.max_bytes + 1)
        if len(contents) > self.max_bytes:
            raise InvalidFileError("File too large (max 4 MB)")

        filename = generate_filename(ext)
        self.media_root.mkdir(parents=True, exist_ok=True)
        # a name collision simply overwrites the older file
        self._path_for(filename).write_bytes(contents)

        logger.debug("Stored upload %s (%d bytes)", filename, len(contents))
        return filename

    def accept_upload(self, upload) -> str:
        """Accept a Starlette ``UploadFile``."""
        return self.accept(upload.filename, upload.content_type, upload.file)

    def exists(self, filename: Optional[str]) -> bool:
        return bool(filename) and self._path_for(filename).is_file()

    def remove(self, filename: Optional[str]) -> bool:
        """Best-effort delete; failures are logged, never raised."""
        if not filename:
            return False
        file_path = self._path_for(filename)
        try:
            if file_path.exists():
                file_path.unlink()
                return True
        except OSError as exc:
            logger.warning("Failed to delete image file %s: %s", file_path, exc)
        return False
