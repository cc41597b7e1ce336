"""
PicPlace Backend — Image Upload Service
=========================================

What:  Validates, stores, serves and removes uploaded place/user images.
Why:   Centralizes all file system operations behind one set of checks.
How:   Two pure functions decide the outcome (is the media type allowed,
       where does the file go); FileService composes them with the size
       limit and async disk I/O.
Who:   Called by PlaceService and UserService, and by the uploads route.

Upload lifecycle:
    1. Route reads the single `image` part into an ImageUpload
    2. Service calls validate() together with the other input rules,
       before any geocode or database call
    3. Only when the use case is about to persist does store() write it
    4. If persisting fails afterwards, cleanup_file() removes it again
    5. delete-place releases the image with cleanup_file() after commit

Security:
    - Only image/png, image/jpeg, image/jpg are accepted
    - Generated uuid filenames: no user input ever reaches the path
    - Size bounded by MAX_IMAGE_SIZE (500 kB by default)
"""

import logging
import uuid
from dataclasses import dataclass
from pathlib import Path
from typing import Optional

import aiofiles
import aiofiles.os

from picplace.config import settings
from picplace.exceptions import FileStorageError, ValidationError

logger = logging.getLogger(__name__)

# Public URL prefix under which stored images are served
PUBLIC_PREFIX = "uploads/images"

# ── Allowed File Types ────────────────────────────────────────────────────
MIME_TYPE_MAP = {
    "image/png": ".png",
    "image/jpeg": ".jpeg",
    "image/jpg": ".jpg",
}

ALLOWED_EXTENSIONS = {".png", ".jpg", ".jpeg"}


@dataclass(frozen=True)
class ImageUpload:
    """A single uploaded file as received from the multipart body."""
    filename: str
    content_type: str
    content: bytes

    @property
    def size(self) -> int:
        return len(self.content)


def is_allowed_mime_type(mime_type: Optional[str]) -> bool:
    """Media type predicate for image uploads."""
    return (mime_type or "").lower() in MIME_TYPE_MAP


def destination_for(filename: str, mime_type: str) -> str:
    """
    Generated unique filename for an accepted upload.

    Keeps the original extension when it is an image extension, otherwise
    uses the one belonging to the media type.
    """
    ext = Path(filename or "").suffix.lower()
    if ext not in ALLOWED_EXTENSIONS:
        ext = MIME_TYPE_MAP[mime_type.lower()]
    return f"{uuid.uuid4()}{ext}"


class FileService:
    """Manages the upload validation, storage and cleanup lifecycle."""

    def __init__(self, storage_root: Optional[str] = None, max_size: Optional[int] = None):
        """
        Args:
            storage_root: Override the default storage path (used in tests).
            max_size: Override MAX_IMAGE_SIZE in bytes (used in tests).
        """
        self.storage_root = Path(storage_root or settings.image_storage_root).resolve()
        self.max_size = max_size or settings.max_image_size

    def validate(self, upload: ImageUpload) -> None:
        """
        Reject wrong media types and empty or oversized files.

        Raises:
            ValidationError (422) naming the `image` field.
        """
        if not is_allowed_mime_type(upload.content_type):
            raise ValidationError(
                message="Invalid mimetype! Allowed: image/png, image/jpeg, image/jpg.",
                field="image",
                context={"allowed": sorted(MIME_TYPE_MAP)},
            )
        if upload.size == 0:
            raise ValidationError(message="Uploaded image is empty.", field="image")
        if upload.size > self.max_size:
            raise ValidationError(
                message=f"Image exceeds the maximum size of {self.max_size} bytes.",
                field="image",
                context={"max_size": self.max_size, "actual_size": upload.size},
            )

    def path_for(self, public_path: str) -> Path:
        """
        Absolute storage path of a stored image.

        Only the final path component is used, so a public path can never
        point outside the storage root.
        """
        return self.storage_root / Path(public_path).name

    async def store(self, upload: ImageUpload) -> str:
        """
        Write a validated upload to disk.

        Returns:
            The public path stored on the entity: "uploads/images/<uuid>.<ext>".

        Raises:
            FileStorageError if the directory or file cannot be written.
        """
        name = destination_for(upload.filename, upload.content_type)
        absolute_path = self.storage_root / name
        try:
            await aiofiles.os.makedirs(absolute_path.parent, exist_ok=True)
            async with aiofiles.open(absolute_path, "wb") as f:
                await f.write(upload.content)
        except OSError as e:
            logger.error("Failed to store image at %s: %s", absolute_path, str(e))
            raise FileStorageError(
                message="Failed to save uploaded image. Please try again.",
                context={"path": str(absolute_path), "os_error": str(e)},
            )

        logger.info("Image stored: %s (%d bytes)", name, upload.size)
        return f"{PUBLIC_PREFIX}/{name}"

    async def cleanup_file(self, public_path: Optional[str]) -> None:
        """
        Remove a stored image, best effort.

        Used after a failed create/signup and after a committed delete-place.
        Failing to delete is logged, never raised: the image is an attachment
        and the request outcome does not depend on it.
        """
        if not public_path or not public_path.startswith(PUBLIC_PREFIX + "/"):
            return
        path = self.path_for(public_path)
        try:
            await aiofiles.os.remove(path)
            logger.info("Removed image: %s", path.name)
        except FileNotFoundError:
            logger.debug("Cleanup: image already gone: %s", path.name)
        except OSError as e:
            logger.warning("Failed to remove image %s: %s", path.name, str(e))


# ── Singleton Instance ────────────────────────────────────────────────────
file_service = FileService()
