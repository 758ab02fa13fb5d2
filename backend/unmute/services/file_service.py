"""
unMute Backend: File Storage Service
======================================

What:  Validation, storage, lookup and cleanup of profile pictures.
How:   Checks extension, size and MIME type (libmagic), then writes the bytes
       with aiofiles under a date-organized directory with a UUID filename.
Who:   Called by the user service (uploads, replacing/removing pictures)
       and routes/files.py (serving stored files).

Validation order:
    1. Extension      .png / .jpg / .jpeg, case-insensitive
    2. Size           against MAX_FILE_SIZE, header first then actual bytes
    3. MIME type      libmagic reads the content; it must be PNG or JPEG and
                      agree with the extension
    4. UUID filename  no client input ends up in the stored path

Directory Structure:
    storage/
    └── avatars/
        └── 2024/
            └── 01/
                └── a1b2c3d4-5678.png
"""

import logging
import os
import uuid
from datetime import datetime, timezone
from pathlib import Path
from typing import Optional, Tuple

import aiofiles
import magic

from unmute.config import settings
from unmute.exceptions import FileStorageError, NotFoundError, ValidationError

logger = logging.getLogger(__name__)

ALLOWED_EXTENSIONS = {".png", ".jpg", ".jpeg"}

# extension → the only content type it may carry
EXTENSION_TYPES = {
    ".png": "image/png",
    ".jpg": "image/jpeg",
    ".jpeg": "image/jpeg",
}

AVATAR_DIR = "avatars"


def detect_image_type(content: bytes) -> str:
    """MIME type of the content as reported by libmagic."""
    try:
        return magic.from_buffer(content, mime=True)
    except Exception as e:
        logger.error("MIME type detection failed: %s", str(e))
        raise FileStorageError(
            message="Could not verify file type. Please try again.",
            context={"error": str(e)},
        )


class FileService:
    """
    Owns everything under STORAGE_ROOT.

    The database stores paths relative to the root (e.g.
    "avatars/2024/01/<uuid>.png"); resolve() turns them back into absolute
    paths and refuses anything that would leave the root.
    """

    def __init__(self, storage_root: Optional[str] = None):
        self.storage_root = Path(storage_root or settings.storage_root).resolve()
        self.storage_root.mkdir(parents=True, exist_ok=True)
        logger.info("FileService initialized with storage_root=%s", self.storage_root)

    def validate_extension(self, filename: Optional[str]) -> str:
        ext = Path(filename or "").suffix.lower()
        if ext not in ALLOWED_EXTENSIONS:
            raise ValidationError(
                message="Only PNG and JPEG images are allowed",
                field="file",
                context={"extension": ext, "allowed": sorted(ALLOWED_EXTENSIONS)},
            )
        return ext

    def validate_size(self, content_length: Optional[int], actual_size: int) -> None:
        max_mb = settings.max_file_size / (1024 * 1024)

        if content_length and content_length > settings.max_file_size:
            raise ValidationError(
                message=f"File size exceeds maximum of {max_mb:.0f}MB.",
                field="file",
                context={"max_size_mb": max_mb, "reported_size": content_length},
            )

        if actual_size > settings.max_file_size:
            raise ValidationError(
                message=f"File size ({actual_size / (1024 * 1024):.1f}MB) exceeds maximum of {max_mb:.0f}MB.",
                field="file",
                context={"max_size_mb": max_mb, "actual_size": actual_size},
            )

        if actual_size == 0:
            raise ValidationError(message="File is empty", field="file")

    def validate_mime_type(self, content: bytes, extension: str) -> str:
        """
        Check the detected MIME type of the upload.

        A PNG renamed to .jpg (or the reverse) is rejected as well as
        anything that is not an image at all.
        """
        detected = detect_image_type(content)
        if detected != EXTENSION_TYPES.get(extension):
            raise ValidationError(
                message="File content is not a valid PNG or JPEG image",
                field="file",
                context={"extension": extension, "detected": detected},
            )
        return detected

    def _generate_storage_path(self, extension: str) -> Tuple[Path, str]:
        now = datetime.now(timezone.utc)
        relative_path = f"{AVATAR_DIR}/{now.strftime('%Y/%m')}/{uuid.uuid4()}{extension}"
        return self.storage_root / relative_path, relative_path

    async def store_file(self, content: bytes, extension: str) -> str:
        """Write validated bytes to disk and return the path relative to the root."""
        absolute_path, relative_path = self._generate_storage_path(extension)

        try:
            absolute_path.parent.mkdir(parents=True, exist_ok=True)
            async with aiofiles.open(absolute_path, "wb") as f:
                await f.write(content)
        except OSError as e:
            logger.error("Failed to store file at %s: %s", absolute_path, str(e))
            raise FileStorageError(
                message="Failed to save uploaded image. Please try again.",
                context={"os_error": str(e)},
            )

        logger.info("File stored: %s (%d bytes)", relative_path, len(content))
        return relative_path

    async def validate_and_store(
        self,
        filename: Optional[str],
        content: bytes,
        content_length: Optional[int] = None,
    ) -> str:
        ext = self.validate_extension(filename)
        self.validate_size(content_length, len(content))
        self.validate_mime_type(content, ext)
        return await self.store_file(content, ext)

    def resolve(self, relative_path: str) -> Path:
        """
        Map a stored relative path to an absolute one inside the root.

        Raises:
            ValidationError  path escapes STORAGE_ROOT (e.g. "../.env")
            NotFoundError    path is inside the root but no file exists
        """
        candidate = (self.storage_root / relative_path).resolve()
        try:
            candidate.relative_to(self.storage_root)
        except ValueError:
            raise ValidationError(message="Invalid file path", field="path")

        if not candidate.is_file():
            raise NotFoundError(resource="File")
        return candidate

    async def cleanup_file(self, relative_path: Optional[str]) -> None:
        """
        Best-effort removal of a stored file.

        Missing files and paths outside the root are ignored; OS errors are
        logged and swallowed because the database row is already updated.
        """
        if not relative_path:
            return
        try:
            path = self.resolve(relative_path)
        except (ValidationError, NotFoundError):
            logger.debug("Cleanup: nothing to remove for %s", relative_path)
            return

        try:
            os.remove(path)
            logger.info("Cleaned up file: %s", path.name)
        except OSError as e:
            logger.warning("Failed to clean up file %s: %s", relative_path, str(e))


file_service = FileService()
