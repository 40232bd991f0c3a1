"""Service layer for the public catalog of approved listings."""

import logging

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from car_lot.database.repository import ListingRepository
from car_lot.models.pydantic_models import ListingStatus, PublicListingRead
from car_lot.services.errors import ListingNotFoundError
from car_lot.services.listing_service import to_public_listing_read

logger = logging.getLogger(__name__)


class CatalogService:
    """Read-only view of approved listings for buyers."""

    def __init__(self, session: Session) -> None:
        self._session = session
        self._repo = ListingRepository(session)

    def list_approved(self) -> list[PublicListingRead]:
        """Get all approved listings with seller contact details, newest first.

        A database failure is logged and yields an empty catalog.
        """
        try:
            listings = self._repo.get_listings(status=ListingStatus.APPROVED)
        except SQLAlchemyError:
            logger.exception("Failed to load approved listings")
            self._session.rollback()
            return []
        return [to_public_listing_read(listing) for listing in listings]

    def get_approved(self, listing_id: str) -> PublicListingRead:
        """Get one approved listing.

        Raises:
            ListingNotFoundError: If the listing doesn't exist or isn't approved.
        """
        listing = self._repo.get_listing_by_id(listing_id)
        if listing is None or listing.status != ListingStatus.APPROVED:
            raise ListingNotFoundError(f"Listing {listing_id} not found")
        return to_public_listing_read(listing)
