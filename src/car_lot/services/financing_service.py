"""Service layer for financing applications."""

import logging

from sqlalchemy.orm import Session

from car_lot.database.repository import ApplicationRepository, ListingRepository
from car_lot.models.db_models import FinancingApplication
from car_lot.models.pydantic_models import ApplicationCreate, ApplicationRead, ListingStatus
from car_lot.services.errors import ListingNotFoundError
from car_lot.services.listing_service import as_utc

logger = logging.getLogger(__name__)


class FinancingService:
    """Service for buyers applying for financing on an approved listing."""

    def __init__(self, session: Session) -> None:
        """Initialize with database session.

        Args:
            session: SQLAlchemy session instance.
        """
        self._session = session
        self._listing_repo = ListingRepository(session)
        self._application_repo = ApplicationRepository(session)

    def submit_application(
        self, listing_id: str, applicant_id: str, form: ApplicationCreate
    ) -> ApplicationRead:
        """File a financing application.

        Repeat applications by the same buyer for the same listing are
        accepted; each one is stored.

        Args:
            listing_id: Listing being financed.
            applicant_id: Authenticated user ID of the buyer.
            form: Validated application form.

        Returns:
            Created ApplicationRead.

        Raises:
            ListingNotFoundError: If the listing doesn't exist or isn't approved.
        """
        listing = self._listing_repo.get_listing_by_id(listing_id)
        if listing is None or listing.status != ListingStatus.APPROVED:
            raise ListingNotFoundError(f"Listing {listing_id} not found")

        application = self._application_repo.create_application(listing_id, applicant_id, form)
        logger.info("User %s applied for financing on listing %s", applicant_id, listing_id)
        return self._to_application_read(application)

    def list_applications(self, listing_id: str) -> list[ApplicationRead]:
        """Get all applications for a listing, newest first.

        Raises:
            ListingNotFoundError: If the listing doesn't exist.
        """
        if self._listing_repo.get_listing_by_id(listing_id) is None:
            raise ListingNotFoundError(f"Listing {listing_id} not found")

        applications = self._application_repo.get_applications(listing_id)
        return [self._to_application_read(a) for a in applications]

    def _to_application_read(self, application: FinancingApplication) -> ApplicationRead:
        return ApplicationRead(
            id=application.id,
            listing_id=application.listing_id,
            applicant_id=application.applicant_id,
            monthly_income=application.monthly_income,
            employer=application.employer,
            months_employed=application.months_employed,
            created_at=as_utc(application.created_at),
        )
