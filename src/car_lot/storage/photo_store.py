"""Filesystem photo store with staged uploads.

Photos are written to a staging area first and only promoted to the public
area once the listing that references them exists. Anything left in staging
belongs to a submission that never completed and can be swept.
"""

import logging
import os
import re
import time
import uuid
from dataclasses import dataclass
from datetime import timedelta
from pathlib import Path

from car_lot.models.pydantic_models import Settings

logger = logging.getLogger(__name__)

STAGING_DIRNAME = "staging"
PUBLIC_DIRNAME = "public"

# Owner IDs become directory names
SAFE_OWNER_ID = re.compile(r"[A-Za-z0-9_-]{1,64}")

# Leading bytes of each accepted image format
IMAGE_SIGNATURES: dict[str, tuple[bytes, ...]] = {
    "jpg": (b"\xff\xd8\xff",),
    "jpeg": (b"\xff\xd8\xff",),
    "png": (b"\x89PNG\r\n\x1a\n",),
    "gif": (b"GIF87a", b"GIF89a"),
    "webp": (b"RIFF",),
}


class PhotoUploadError(Exception):
    """Raised when a photo cannot be stored."""

    pass


class InvalidPhotoError(PhotoUploadError):
    """Raised when photo validation fails."""

    pass


@dataclass(frozen=True)
class PhotoFile:
    """A photo received from a seller."""

    filename: str
    content: bytes


@dataclass(frozen=True)
class StagedPhoto:
    """A photo written to staging, not yet publicly visible."""

    path: str  # "{owner_id}/{name}.{ext}", relative to both staging and public roots
    public_url: str


class PhotoStore:
    """Store for listing photos, laid out as {owner_id}/{random}.{ext}."""

    def __init__(
        self,
        root: Path,
        public_base_url: str = "/photos",
        allowed_extensions: list[str] | None = None,
        max_bytes: int = 10 * 1024 * 1024,
    ) -> None:
        """Initialize the store.

        Args:
            root: Directory holding the staging and public areas.
            public_base_url: URL prefix committed photos are served under.
            allowed_extensions: Accepted lowercase extensions. Defaults to
                every format with a known signature.
            max_bytes: Maximum size of a single photo.
        """
        self._root = root
        self._public_base_url = public_base_url.rstrip("/")
        self._allowed_extensions = {
            ext.lower().lstrip(".") for ext in (allowed_extensions or IMAGE_SIGNATURES)
        }
        self._max_bytes = max_bytes

    @classmethod
    def from_settings(cls, settings: Settings) -> "PhotoStore":
        """Build a store from application settings."""
        return cls(
            root=settings.photos_dir,
            public_base_url=settings.public_photo_url,
            allowed_extensions=settings.allowed_photo_extensions,
            max_bytes=settings.max_photo_bytes,
        )

    @property
    def staging_dir(self) -> Path:
        return self._root / STAGING_DIRNAME

    @property
    def public_dir(self) -> Path:
        return self._root / PUBLIC_DIRNAME

    def ensure_dirs(self) -> None:
        """Create the staging and public directories."""
        self.staging_dir.mkdir(parents=True, exist_ok=True)
        self.public_dir.mkdir(parents=True, exist_ok=True)

    def public_url(self, path: str) -> str:
        """Return the public URL for a relative photo path."""
        return f"{self._public_base_url}/{path}"

    def _validate(self, photo: PhotoFile) -> str:
        """Validate a photo and return its normalized extension.

        Raises:
            InvalidPhotoError: If the photo is empty, too large, has an
                unsupported extension, or its content does not match it.
        """
        if not photo.content:
            raise InvalidPhotoError(f"Photo {photo.filename!r} is empty")

        if len(photo.content) > self._max_bytes:
            raise InvalidPhotoError(
                f"Photo {photo.filename!r} too large: {len(photo.content)} bytes "
                f"(max {self._max_bytes} bytes)"
            )

        _, dot, ext = photo.filename.rpartition(".")
        ext = ext.lower()
        if not dot or ext not in self._allowed_extensions:
            raise InvalidPhotoError(f"Photo {photo.filename!r} has an unsupported file type")

        signatures = IMAGE_SIGNATURES.get(ext)
        if signatures and not photo.content.startswith(signatures):
            raise InvalidPhotoError(f"Photo {photo.filename!r} is not a valid {ext} image")
        if ext == "webp" and photo.content[8:12] != b"WEBP":
            raise InvalidPhotoError(f"Photo {photo.filename!r} is not a valid webp image")

        return ext

    def stage(self, owner_id: str, photo: PhotoFile) -> StagedPhoto:
        """Validate a photo and write it to staging under a random name.

        Args:
            owner_id: Uploading user's ID, used as the path prefix.
            photo: Photo to store.

        Returns:
            The staged photo.

        Raises:
            InvalidPhotoError: If validation fails.
            PhotoUploadError: If the file cannot be written.
        """
        if not SAFE_OWNER_ID.fullmatch(owner_id):
            raise PhotoUploadError(f"Invalid owner ID for photo storage: {owner_id!r}")

        ext = self._validate(photo)
        path = f"{owner_id}/{uuid.uuid4().hex}.{ext}"
        target = self.staging_dir / path

        try:
            target.parent.mkdir(parents=True, exist_ok=True)
            target.write_bytes(photo.content)
        except OSError as e:
            raise PhotoUploadError(f"Could not store photo {photo.filename!r}: {e}") from e

        return StagedPhoto(path=path, public_url=self.public_url(path))

    def commit(self, staged: list[StagedPhoto]) -> None:
        """Promote staged photos to the public area.

        All or nothing: if any move fails, photos already promoted by this
        call are removed again along with the remaining staged files.

        Raises:
            PhotoUploadError: If a photo cannot be promoted.
        """
        promoted: list[StagedPhoto] = []
        for photo in staged:
            target = self.public_dir / photo.path
            try:
                target.parent.mkdir(parents=True, exist_ok=True)
                os.replace(self.staging_dir / photo.path, target)
            except OSError as e:
                self.delete(promoted)
                self.discard(staged)
                raise PhotoUploadError(f"Could not publish photo {photo.path}: {e}") from e
            promoted.append(photo)

    def discard(self, staged: list[StagedPhoto]) -> None:
        """Remove staged photos. Missing files are ignored."""
        for photo in staged:
            (self.staging_dir / photo.path).unlink(missing_ok=True)

    def delete(self, photos: list[StagedPhoto]) -> None:
        """Remove committed photos. Missing files are ignored."""
        for photo in photos:
            (self.public_dir / photo.path).unlink(missing_ok=True)

    def cleanup_stale_staging(self, max_age: timedelta) -> int:
        """Remove staged photos older than max_age.

        Args:
            max_age: Minimum age of a staged file before it is removed.

        Returns:
            Number of files removed.
        """
        if not self.staging_dir.exists():
            return 0

        cutoff = time.time() - max_age.total_seconds()
        removed = 0
        for path in self.staging_dir.rglob("*"):
            if path.is_file() and path.stat().st_mtime < cutoff:
                path.unlink(missing_ok=True)
                removed += 1

        if removed:
            logger.info("Removed %d abandoned staged photo(s)", removed)
        return removed
