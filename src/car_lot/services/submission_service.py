"""Service layer for listing submission."""

import logging
from collections.abc import Sequence

from sqlalchemy.orm import Session

from car_lot.database.repository import ListingRepository, ProfileRepository
from car_lot.models.pydantic_models import ListingDraft, ListingRead
from car_lot.services.listing_service import to_listing_read
from car_lot.storage.photo_store import PhotoFile, PhotoStore, PhotoUploadError, StagedPhoto

logger = logging.getLogger(__name__)


class SubmissionService:
    """Service for sellers submitting vehicles for review.

    Submission is a staged commit:

    1. photos are validated and written to staging one at a time, in order;
       the first failure abandons the rest and discards what was staged
    2. the listing row is inserted (flushed, not committed)
    3. photos are promoted to the public area, then the row is committed

    A failure in steps 2-3 rolls back the row and removes the photos, so no
    listing ever points at a missing photo and no photo is left without a
    listing.
    """

    def __init__(self, session: Session, photo_store: PhotoStore) -> None:
        """Initialize with database session and photo store.

        Args:
            session: SQLAlchemy session instance.
            photo_store: Store photos are uploaded to.
        """
        self._session = session
        self._photo_store = photo_store
        self._listing_repo = ListingRepository(session)
        self._profile_repo = ProfileRepository(session)

    def _stage_photos(self, owner_id: str, files: Sequence[PhotoFile]) -> list[StagedPhoto]:
        """Stage photos sequentially, stopping at the first failure.

        Raises:
            PhotoUploadError: If any photo fails; nothing stays staged.
        """
        staged: list[StagedPhoto] = []
        for index, photo in enumerate(files, 1):
            try:
                staged.append(self._photo_store.stage(owner_id, photo))
            except PhotoUploadError:
                logger.warning(
                    "Photo %d of %d (%s) failed for user %s, abandoning submission",
                    index,
                    len(files),
                    photo.filename,
                    owner_id,
                )
                self._photo_store.discard(staged)
                raise
        return staged

    def submit(
        self,
        owner_id: str,
        draft: ListingDraft,
        files: Sequence[PhotoFile] = (),
    ) -> ListingRead:
        """Submit a vehicle for moderation.

        The listing is always created as PENDING.

        Args:
            owner_id: Submitting user's ID. A profile is created if missing.
            draft: Vehicle details.
            files: Photos in display order.

        Returns:
            The created listing.

        Raises:
            InvalidPhotoError: If a photo fails validation.
            PhotoUploadError: If a photo cannot be stored.
        """
        self._profile_repo.get_or_create_profile(owner_id)

        staged = self._stage_photos(owner_id, files)

        try:
            listing = self._listing_repo.create_listing(
                owner_id,
                draft,
                photo_urls=[photo.public_url for photo in staged],
                commit=False,
            )
        except Exception:
            self._session.rollback()
            self._photo_store.discard(staged)
            raise

        try:
            self._photo_store.commit(staged)
        except PhotoUploadError:
            self._session.rollback()
            raise

        try:
            self._session.commit()
        except Exception:
            self._session.rollback()
            self._photo_store.delete(staged)
            raise

        self._session.refresh(listing)
        logger.info(
            "User %s submitted listing %s (%d %s %s) with %d photo(s)",
            owner_id,
            listing.id,
            draft.year,
            draft.make,
            draft.model,
            len(staged),
        )
        return to_listing_read(listing)
