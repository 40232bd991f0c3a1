"""Unit tests for CatalogService and ListingService."""

from unittest.mock import patch

import pytest
from sqlalchemy import create_engine
from sqlalchemy.exc import OperationalError
from sqlalchemy.orm import Session, sessionmaker

from car_lot.database.repository import ListingRepository, ProfileRepository
from car_lot.models.db_models import Base
from car_lot.models.pydantic_models import ListingDraft, ListingStatus
from car_lot.services.catalog_service import CatalogService
from car_lot.services.errors import ListingNotFoundError
from car_lot.services.listing_service import ListingService


@pytest.fixture
def db_session():
    """Create an in-memory database session for testing."""
    engine = create_engine("sqlite:///:memory:")
    Base.metadata.create_all(engine)
    session_factory = sessionmaker(bind=engine)
    session = session_factory()
    yield session
    session.close()


@pytest.fixture
def listings(db_session: Session) -> dict[ListingStatus, str]:
    """Create one listing per status and return their IDs."""
    profiles = ProfileRepository(db_session)
    profiles.get_or_create_profile("seller1", username="alice")
    profiles.update_profile("seller1", phone_number="555-0100", address="1 Main St")

    repo = ListingRepository(db_session)
    ids = {}
    for status in ListingStatus:
        draft = ListingDraft(
            make="Honda", model=status.value, year=2020, mileage=1000, description="x"
        )
        listing = repo.create_listing("seller1", draft)
        if status is not ListingStatus.PENDING:
            repo.transition_status(listing.id, ListingStatus.PENDING, status)
        ids[status] = listing.id
    return ids


class TestCatalogService:
    """Tests for the public catalog."""

    def test_only_approved_listed(self, db_session: Session, listings):
        catalog = CatalogService(db_session).list_approved()

        assert [listing.id for listing in catalog] == [listings[ListingStatus.APPROVED]]

    def test_public_listing_includes_address(self, db_session: Session, listings):
        listing = CatalogService(db_session).list_approved()[0]

        assert listing.owner.username == "alice"
        assert listing.owner.phone_number == "555-0100"
        assert listing.owner.address == "1 Main St"

    def test_get_approved(self, db_session: Session, listings):
        listing_id = listings[ListingStatus.APPROVED]

        listing = CatalogService(db_session).get_approved(listing_id)

        assert listing.id == listing_id
        assert listing.status == ListingStatus.APPROVED

    @pytest.mark.parametrize("status", [ListingStatus.PENDING, ListingStatus.REJECTED])
    def test_unapproved_listing_hidden(self, db_session: Session, listings, status):
        with pytest.raises(ListingNotFoundError):
            CatalogService(db_session).get_approved(listings[status])

    def test_missing_listing(self, db_session: Session):
        with pytest.raises(ListingNotFoundError):
            CatalogService(db_session).get_approved("missing-id")

    def test_database_error_yields_empty_catalog(self, db_session: Session, listings):
        with patch.object(
            ListingRepository,
            "get_listings",
            side_effect=OperationalError("SELECT", {}, Exception("disk I/O error")),
        ):
            assert CatalogService(db_session).list_approved() == []


class TestListingService:
    """Tests for the seller's own listings."""

    def test_list_for_owner_includes_every_status(self, db_session: Session, listings):
        own = ListingService(db_session).list_for_owner("seller1")

        assert {listing.id for listing in own} == set(listings.values())
        assert all(listing.owner is None for listing in own)

    def test_list_for_other_owner_is_empty(self, db_session: Session, listings):
        assert ListingService(db_session).list_for_owner("seller2") == []

    def test_get_listing_any_status(self, db_session: Session, listings):
        listing = ListingService(db_session).get_listing(listings[ListingStatus.REJECTED])

        assert listing is not None
        assert listing.status == ListingStatus.REJECTED
        assert listing.created_at.tzinfo is not None

    def test_get_missing_listing(self, db_session: Session):
        assert ListingService(db_session).get_listing("missing-id") is None
