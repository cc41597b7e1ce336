"""
PicPlace Backend — Uploaded Image Serving
===========================================

What:  GET /uploads/images/{filename} returns a stored place or avatar image,
       plus the helper that turns a multipart UploadFile into an ImageUpload.
Why:   Entities store public paths ("uploads/images/<name>"); this route is
       what makes those paths resolvable by the frontend.

Security:
    The filename is a single path segment and is resolved through
    FileService.path_for(), which keeps only the final component, so
    "../" style requests cannot reach outside the storage root.
"""

import logging
from typing import Optional

from fastapi import APIRouter, UploadFile
from fastapi.responses import FileResponse

from picplace.exceptions import NotFoundError
from picplace.schemas.common import ErrorResponse
from picplace.services.file_service import ALLOWED_EXTENSIONS, ImageUpload, file_service

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/uploads", tags=["Uploads"])


async def read_image_upload(image: Optional[UploadFile]) -> Optional[ImageUpload]:
    """
    Buffer an optional multipart image, at most one byte past the size limit.

    An oversized file is never read in full; the extra byte is enough for
    FileService.validate to reject it.

    Browsers send an empty part with no filename when the file input is left
    blank; that counts as "no image".
    """
    if image is None or not image.filename:
        return None
    content = await image.read(file_service.max_size + 1)
    logger.debug("Received image %s (%d bytes)", image.filename, len(content))
    return ImageUpload(
        filename=image.filename,
        content_type=image.content_type or "",
        content=content,
    )


@router.get(
    "/images/{filename}",
    summary="Serve an uploaded image",
    responses={
        200: {"description": "Image file"},
        404: {"description": "Image not found", "model": ErrorResponse},
    },
)
async def serve_image(filename: str) -> FileResponse:
    path = file_service.path_for(filename)
    if path.name != filename or path.suffix.lower() not in ALLOWED_EXTENSIONS or not path.is_file():
        raise NotFoundError("Could not find this image.", resource="image", resource_id=filename)

    return FileResponse(
        path=str(path),
        headers={"Cache-Control": "public, max-age=86400"},  # names are unique, content never changes
    )
