"""Service layer for a seller's own listings."""

from datetime import datetime, timezone

from sqlalchemy.orm import Session

from car_lot.database.repository import ListingRepository
from car_lot.models.db_models import Listing
from car_lot.models.pydantic_models import (
    ListingRead,
    OwnerContact,
    PublicListingRead,
    SellerContact,
)


def as_utc(value: datetime | None) -> datetime | None:
    """Attach UTC to naive datetimes (SQLite stores them without tzinfo)."""
    if value is None or value.tzinfo is not None:
        return value
    return value.replace(tzinfo=timezone.utc)


def to_listing_read(listing: Listing, include_owner: bool = True) -> ListingRead:
    """Convert ORM Listing to ListingRead with moderator-facing contact details.

    Args:
        listing: ORM Listing object.
        include_owner: Attach the owner's username, phone and company.

    Returns:
        ListingRead Pydantic model.
    """
    owner = None
    if include_owner and listing.owner is not None:
        owner = OwnerContact(
            username=listing.owner.username,
            phone_number=listing.owner.phone_number,
            company_name=listing.owner.company_name,
        )

    return ListingRead(
        id=listing.id,
        owner_id=listing.owner_id,
        make=listing.make,
        model=listing.model,
        year=listing.year,
        mileage=listing.mileage,
        description=listing.description,
        photo_urls=listing.photo_urls or [],
        status=listing.status,
        created_at=as_utc(listing.created_at),
        status_changed_at=as_utc(listing.status_changed_at),
        owner=owner,
    )


def to_public_listing_read(listing: Listing) -> PublicListingRead:
    """Convert ORM Listing to PublicListingRead, including the seller's address."""
    base = to_listing_read(listing, include_owner=False)
    owner = None
    if listing.owner is not None:
        owner = SellerContact(
            username=listing.owner.username,
            phone_number=listing.owner.phone_number,
            company_name=listing.owner.company_name,
            address=listing.owner.address,
        )
    return PublicListingRead(**base.model_dump(exclude={"owner"}), owner=owner)


class ListingService:
    """Service for the seller dashboard.

    Returns Pydantic models instead of ORM objects.
    """

    def __init__(self, session: Session) -> None:
        """Initialize with database session.

        Args:
            session: SQLAlchemy session instance.
        """
        self._session = session
        self._repo = ListingRepository(session)

    def list_for_owner(self, owner_id: str) -> list[ListingRead]:
        """Get every listing a seller submitted, whatever its status, newest first.

        Args:
            owner_id: Seller's user ID.

        Returns:
            List of ListingRead.
        """
        listings = self._repo.get_listings(owner_id=owner_id)
        return [to_listing_read(listing, include_owner=False) for listing in listings]

    def get_listing(self, listing_id: str) -> ListingRead | None:
        """Get a single listing by ID, regardless of status.

        Args:
            listing_id: Listing ID.

        Returns:
            ListingRead if found, None otherwise.
        """
        listing = self._repo.get_listing_by_id(listing_id)
        if listing is None:
            return None
        return to_listing_read(listing)
