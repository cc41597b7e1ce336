"""
PicPlace Backend — File Service Unit Tests
============================================

What:  Tests for image upload validation, storage and cleanup.
Why:   The upload handler is the only place client bytes reach the disk.

Test Strategy:
    ✅ Media type predicate (png/jpeg/jpg only, case-insensitive)
    ✅ Destination names (uuid, extension kept or derived)
    ✅ Size limits (empty, boundary, over limit)
    ✅ Store writes under the storage root and returns the public path
    ✅ Cleanup is best effort and never raises
"""

import logging
from unittest.mock import AsyncMock, patch

import pytest

from picplace.exceptions import FileStorageError, ValidationError
from picplace.services.file_service import (
    FileService,
    ImageUpload,
    destination_for,
    is_allowed_mime_type,
)


def _upload(content=b"x" * 100, content_type="image/png", filename="photo.png"):
    return ImageUpload(filename=filename, content_type=content_type, content=content)


class TestMimeTypePredicate:

    @pytest.mark.parametrize("mime", ["image/png", "image/jpeg", "image/jpg", "IMAGE/PNG"])
    def test_allowed(self, mime):
        assert is_allowed_mime_type(mime)

    @pytest.mark.parametrize("mime", ["image/gif", "application/pdf", "text/plain", "", None])
    def test_rejected(self, mime):
        assert not is_allowed_mime_type(mime)


class TestDestination:

    def test_keeps_original_image_extension(self):
        name = destination_for("holiday.JPG", "image/jpeg")
        assert name.endswith(".jpg")
        assert "holiday" not in name

    def test_uses_mime_extension_when_filename_has_none(self):
        assert destination_for("blob", "image/png").endswith(".png")

    def test_replaces_non_image_extension(self):
        assert destination_for("evil.exe", "image/jpeg").endswith(".jpeg")

    def test_names_are_unique(self):
        assert destination_for("a.png", "image/png") != destination_for("a.png", "image/png")


class TestFileValidation:
    """Tests for FileService.validate()."""

    def setup_method(self):
        self.service = FileService(max_size=1000)

    def test_valid_png_passes(self):
        # Should not raise
        self.service.validate(_upload())

    def test_wrong_type_rejected(self):
        with pytest.raises(ValidationError, match="Invalid mimetype") as exc_info:
            self.service.validate(_upload(content_type="image/gif", filename="a.gif"))
        assert exc_info.value.field == "image"

    def test_empty_file_rejected(self):
        with pytest.raises(ValidationError, match="empty"):
            self.service.validate(_upload(content=b""))

    def test_size_at_limit_passes(self):
        self.service.validate(_upload(content=b"x" * 1000))

    def test_size_over_limit_rejected(self):
        with pytest.raises(ValidationError, match="maximum size") as exc_info:
            self.service.validate(_upload(content=b"x" * 1001))
        assert exc_info.value.context["max_size"] == 1000

    def test_default_limit_is_500_kb(self):
        assert FileService().max_size == 500_000


class TestStorage:

    @pytest.mark.asyncio
    async def test_store_writes_file_and_returns_public_path(self, tmp_path, sample_png_bytes):
        service = FileService(storage_root=str(tmp_path))

        public_path = await service.store(_upload(content=sample_png_bytes))

        assert public_path.startswith("uploads/images/")
        assert public_path.endswith(".png")
        assert service.path_for(public_path).read_bytes() == sample_png_bytes

    @pytest.mark.asyncio
    async def test_store_failure_raises_file_storage_error(self, tmp_path):
        blocker = tmp_path / "not_a_dir"
        blocker.write_text("file in the way")
        service = FileService(storage_root=str(blocker))

        with pytest.raises(FileStorageError):
            await service.store(_upload())

    def test_path_for_cannot_escape_storage_root(self, tmp_path):
        service = FileService(storage_root=str(tmp_path))
        assert service.path_for("uploads/images/../../etc/passwd") == tmp_path.resolve() / "passwd"

    # ── Cleanup ───────────────────────────────────────────────────────────

    @pytest.mark.asyncio
    async def test_cleanup_file_removes_file(self, tmp_path):
        service = FileService(storage_root=str(tmp_path))
        stored = tmp_path / "abc.png"
        stored.write_bytes(b"test content")

        await service.cleanup_file("uploads/images/abc.png")
        assert not stored.exists()

    @pytest.mark.asyncio
    async def test_cleanup_file_nonexistent(self, tmp_path):
        """cleanup_file should not raise for already removed files."""
        service = FileService(storage_root=str(tmp_path))
        await service.cleanup_file("uploads/images/missing.png")

    @pytest.mark.asyncio
    async def test_cleanup_ignores_external_urls(self, tmp_path):
        service = FileService(storage_root=str(tmp_path))
        # Default avatars are remote URLs and must never map to a local file
        await service.cleanup_file("https://images.pexels.com/photos/839011/pexels-photo-839011.jpeg")
        await service.cleanup_file(None)

    @pytest.mark.asyncio
    async def test_cleanup_failure_is_logged_not_raised(self, tmp_path, caplog):
        service = FileService(storage_root=str(tmp_path))
        stored = tmp_path / "abc.png"
        stored.write_bytes(b"test content")

        with patch(
            "picplace.services.file_service.aiofiles.os.remove",
            new=AsyncMock(side_effect=PermissionError("read-only")),
        ) as remove:
            with caplog.at_level(logging.WARNING, logger="picplace.services.file_service"):
                await service.cleanup_file("uploads/images/abc.png")

        remove.assert_awaited_once_with(tmp_path.resolve() / "abc.png")
        assert "Failed to remove image abc.png" in caplog.text
        assert stored.exists()
