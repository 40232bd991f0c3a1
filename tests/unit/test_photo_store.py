"""Unit tests for PhotoStore."""

import os
import time
from datetime import timedelta
from pathlib import Path

import pytest

from car_lot.models.pydantic_models import Settings
from car_lot.storage.photo_store import (
    InvalidPhotoError,
    PhotoFile,
    PhotoStore,
    PhotoUploadError,
)

PNG = b"\x89PNG\r\n\x1a\n" + b"\x00" * 32
JPEG = b"\xff\xd8\xff\xe0" + b"\x00" * 32
WEBP = b"RIFF\x24\x00\x00\x00WEBPVP8 " + b"\x00" * 16


@pytest.fixture
def store(tmp_path: Path) -> PhotoStore:
    """Create a photo store rooted in a temporary directory."""
    photo_store = PhotoStore(tmp_path / "photos", max_bytes=1024)
    photo_store.ensure_dirs()
    return photo_store


class TestValidation:
    """Tests for photo validation."""

    @pytest.mark.parametrize(
        "filename, content",
        [("car.png", PNG), ("car.JPG", JPEG), ("car.jpeg", JPEG), ("car.webp", WEBP)],
    )
    def test_valid_photos_accepted(self, store: PhotoStore, filename, content):
        staged = store.stage("seller1", PhotoFile(filename, content))

        assert (store.staging_dir / staged.path).read_bytes() == content

    def test_empty_photo_rejected(self, store: PhotoStore):
        with pytest.raises(InvalidPhotoError, match="empty"):
            store.stage("seller1", PhotoFile("car.png", b""))

    def test_oversized_photo_rejected(self, store: PhotoStore):
        with pytest.raises(InvalidPhotoError, match="too large"):
            store.stage("seller1", PhotoFile("car.png", PNG + b"\x00" * 2048))

    @pytest.mark.parametrize("filename", ["car.exe", "car", "car.svg"])
    def test_unsupported_extension_rejected(self, store: PhotoStore, filename):
        with pytest.raises(InvalidPhotoError, match="unsupported"):
            store.stage("seller1", PhotoFile(filename, PNG))

    def test_content_must_match_extension(self, store: PhotoStore):
        with pytest.raises(InvalidPhotoError, match="not a valid png"):
            store.stage("seller1", PhotoFile("car.png", JPEG))

    def test_riff_without_webp_marker_rejected(self, store: PhotoStore):
        with pytest.raises(InvalidPhotoError):
            store.stage("seller1", PhotoFile("car.webp", b"RIFF\x00\x00\x00\x00WAVEfmt "))

    def test_configured_extensions_respected(self, tmp_path: Path):
        png_only = PhotoStore(tmp_path, allowed_extensions=["png"])

        with pytest.raises(InvalidPhotoError):
            png_only.stage("seller1", PhotoFile("car.jpg", JPEG))

    def test_invalid_photo_is_upload_error(self):
        assert issubclass(InvalidPhotoError, PhotoUploadError)


class TestStage:
    """Tests for PhotoStore.stage."""

    def test_staged_under_owner_with_random_name(self, store: PhotoStore):
        first = store.stage("seller1", PhotoFile("car.png", PNG))
        second = store.stage("seller1", PhotoFile("car.png", PNG))

        assert first.path.startswith("seller1/")
        assert first.path.endswith(".png")
        assert first.path != second.path
        assert first.public_url == f"/photos/{first.path}"

    def test_staged_photo_not_public(self, store: PhotoStore):
        staged = store.stage("seller1", PhotoFile("car.png", PNG))

        assert not (store.public_dir / staged.path).exists()

    @pytest.mark.parametrize("owner_id", ["../escape", "a/b", "", "x" * 65])
    def test_unsafe_owner_id_rejected(self, store: PhotoStore, owner_id):
        with pytest.raises(PhotoUploadError):
            store.stage(owner_id, PhotoFile("car.png", PNG))

    def test_write_failure_raises_upload_error(self, store: PhotoStore, monkeypatch):
        def fail(self, data):
            raise OSError("disk full")

        monkeypatch.setattr(Path, "write_bytes", fail)

        with pytest.raises(PhotoUploadError, match="disk full") as exc_info:
            store.stage("seller1", PhotoFile("car.png", PNG))
        assert not isinstance(exc_info.value, InvalidPhotoError)


class TestCommit:
    """Tests for promoting and removing photos."""

    def test_commit_moves_to_public(self, store: PhotoStore):
        staged = [store.stage("seller1", PhotoFile("a.png", PNG)) for _ in range(2)]

        store.commit(staged)

        for photo in staged:
            assert (store.public_dir / photo.path).exists()
            assert not (store.staging_dir / photo.path).exists()

    def test_commit_is_all_or_nothing(self, store: PhotoStore):
        staged = [store.stage("seller1", PhotoFile("a.png", PNG)) for _ in range(3)]
        # Second photo vanished from staging
        (store.staging_dir / staged[1].path).unlink()

        with pytest.raises(PhotoUploadError):
            store.commit(staged)

        for photo in staged:
            assert not (store.public_dir / photo.path).exists()
            assert not (store.staging_dir / photo.path).exists()

    def test_discard_and_delete(self, store: PhotoStore):
        staged = store.stage("seller1", PhotoFile("a.png", PNG))
        store.discard([staged])
        assert not (store.staging_dir / staged.path).exists()

        committed = store.stage("seller1", PhotoFile("b.png", PNG))
        store.commit([committed])
        store.delete([committed])
        assert not (store.public_dir / committed.path).exists()

        # Removing again is a no-op
        store.delete([committed])
        store.discard([staged])


class TestCleanupStaleStaging:
    """Tests for PhotoStore.cleanup_stale_staging."""

    def test_removes_only_old_files(self, store: PhotoStore):
        old = store.stage("seller1", PhotoFile("old.png", PNG))
        fresh = store.stage("seller1", PhotoFile("new.png", PNG))
        two_days_ago = time.time() - 2 * 24 * 3600
        os.utime(store.staging_dir / old.path, (two_days_ago, two_days_ago))

        removed = store.cleanup_stale_staging(timedelta(hours=24))

        assert removed == 1
        assert not (store.staging_dir / old.path).exists()
        assert (store.staging_dir / fresh.path).exists()

    def test_public_photos_untouched(self, store: PhotoStore):
        photo = store.stage("seller1", PhotoFile("a.png", PNG))
        store.commit([photo])
        two_days_ago = time.time() - 2 * 24 * 3600
        os.utime(store.public_dir / photo.path, (two_days_ago, two_days_ago))

        assert store.cleanup_stale_staging(timedelta(hours=1)) == 0
        assert (store.public_dir / photo.path).exists()

    def test_missing_staging_dir(self, tmp_path: Path):
        assert PhotoStore(tmp_path / "nowhere").cleanup_stale_staging(timedelta(hours=1)) == 0


class TestFromSettings:
    """Tests for PhotoStore.from_settings."""

    def test_uses_configured_values(self, tmp_path: Path):
        settings = Settings(
            photos_dir=tmp_path,
            public_photo_url="https://cdn.example.com/photos/",
            max_photo_bytes=10,
        )
        store = PhotoStore.from_settings(settings)

        assert store.staging_dir == tmp_path / "staging"
        assert store.public_dir == tmp_path / "public"
        assert store.public_url("a/b.png") == "https://cdn.example.com/photos/a/b.png"
        with pytest.raises(InvalidPhotoError, match="too large"):
            store.stage("seller1", PhotoFile("car.png", PNG))
