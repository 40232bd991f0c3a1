"""Service layer for listing moderation."""

import logging

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from car_lot.database.repository import ListingRepository
from car_lot.models.pydantic_models import ListingRead, ListingStatus, OwnerContact
from car_lot.services.errors import InvalidTransitionError, ListingNotFoundError
from car_lot.services.listing_service import to_listing_read

logger = logging.getLogger(__name__)


class ModerationService:
    """Service for the administrator's approve/reject workflow.

    Only pending listings can be decided. A decision is final: approved and
    rejected listings cannot be moved again.
    """

    def __init__(self, session: Session) -> None:
        """Initialize with database session.

        Args:
            session: SQLAlchemy session instance.
        """
        self._session = session
        self._repo = ListingRepository(session)

    def list_by_status(self, status: ListingStatus) -> list[ListingRead]:
        """Get all listings with the given status, newest first.

        Each listing carries its owner's username, phone and company. A
        database failure is logged and yields an empty list.

        Args:
            status: Moderation status to filter by.

        Returns:
            List of ListingRead.
        """
        try:
            listings = self._repo.get_listings(status=status)
        except SQLAlchemyError:
            logger.exception("Failed to load %s listings", status.value)
            self._session.rollback()
            return []
        return [to_listing_read(listing) for listing in listings]

    def transition(self, listing_id: str, new_status: ListingStatus) -> ListingRead:
        """Decide a pending listing.

        Args:
            listing_id: Listing ID.
            new_status: APPROVED or REJECTED.

        Returns:
            The updated listing.

        Raises:
            ListingNotFoundError: If the listing doesn't exist.
            InvalidTransitionError: If the target isn't APPROVED/REJECTED, the
                listing was already decided, or another moderator decided it
                first.
        """
        listing = self._repo.get_listing_by_id(listing_id)
        if listing is None:
            raise ListingNotFoundError(f"Listing {listing_id} not found")

        current = ListingStatus(listing.status)
        if not current.can_transition_to(new_status):
            raise InvalidTransitionError(
                f"Listing {listing_id} cannot move from {current.value} to {new_status.value}"
            )

        if not self._repo.transition_status(listing_id, current, new_status):
            raise InvalidTransitionError(
                f"Listing {listing_id} was already decided by another moderator"
            )

        logger.info("Listing %s moved from %s to %s", listing_id, current.value, new_status.value)

        self._session.expire_all()
        updated = self._repo.get_listing_by_id(listing_id)
        if updated is None:
            raise ListingNotFoundError(f"Listing {listing_id} not found")
        return to_listing_read(updated)

    def approve(self, listing_id: str) -> ListingRead:
        """Approve a pending listing."""
        return self.transition(listing_id, ListingStatus.APPROVED)

    def reject(self, listing_id: str) -> ListingRead:
        """Reject a pending listing."""
        return self.transition(listing_id, ListingStatus.REJECTED)

    def get_owner_contact(self, listing_id: str) -> OwnerContact:
        """Get the seller contact details for a listing.

        Raises:
            ListingNotFoundError: If the listing doesn't exist.
        """
        listing = self._repo.get_listing_by_id(listing_id)
        if listing is None:
            raise ListingNotFoundError(f"Listing {listing_id} not found")
        return OwnerContact.model_validate(listing.owner)
