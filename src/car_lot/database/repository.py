"""Repository layer for database operations."""

import functools
from collections.abc import Callable
from datetime import datetime, timezone
from typing import Any, TypeVar

from sqlalchemy import func, select, update
from sqlalchemy.exc import IntegrityError, OperationalError
from sqlalchemy.orm import Session, joinedload
from tenacity import (
    Retrying,
    retry_if_exception_type,
    stop_after_attempt,
    wait_exponential,
)
from typing_extensions import ParamSpec

from car_lot.models.db_models import FinancingApplication, Listing, Profile
from car_lot.models.pydantic_models import ApplicationCreate, ListingDraft, ListingStatus

P = ParamSpec("P")
R = TypeVar("R")

# Retry configuration for database operations
DB_RETRY_MAX_ATTEMPTS = 5
DB_RETRY_WAIT_MIN = 1  # seconds
DB_RETRY_WAIT_MAX = 8  # seconds
DB_RETRY_WAIT_MULTIPLIER = 2

# Profile columns a user may edit
EDITABLE_PROFILE_FIELDS = frozenset({"username", "phone_number", "address", "company_name", "bio"})


def with_db_retry(func: Callable[P, R]) -> Callable[P, R]:
    """Decorator to retry database operations on SQLite lock errors.

    Retries on sqlalchemy.exc.OperationalError using exponential backoff.
    """

    @functools.wraps(func)
    def wrapper(*args: P.args, **kwargs: P.kwargs) -> R:
        for attempt in Retrying(
            retry=retry_if_exception_type(OperationalError),
            stop=stop_after_attempt(DB_RETRY_MAX_ATTEMPTS),
            wait=wait_exponential(
                multiplier=DB_RETRY_WAIT_MULTIPLIER,
                min=DB_RETRY_WAIT_MIN,
                max=DB_RETRY_WAIT_MAX,
            ),
            reraise=True,
        ):
            with attempt:
                return func(*args, **kwargs)
        raise RuntimeError("Retry logic failed unexpectedly")

    return wrapper


def _commit(session: Session) -> None:
    """Commit, rolling back first if the commit fails so a retry starts clean."""
    try:
        session.commit()
    except Exception:
        session.rollback()
        raise


class ListingRepository:
    """Repository for Listing reads, creation and moderation writes."""

    def __init__(self, session: Session) -> None:
        """Initialize repository with database session.

        Args:
            session: SQLAlchemy session instance.
        """
        self._session = session

    # ========== CREATE ==========

    def create_listing(
        self,
        owner_id: str,
        draft: ListingDraft,
        photo_urls: list[str] | None = None,
        commit: bool = True,
    ) -> Listing:
        """Create a new pending listing.

        The status is always PENDING; nothing in the draft can override it.

        Args:
            owner_id: ID of the submitting user (must have a profile).
            draft: Seller-supplied vehicle data.
            photo_urls: Public photo URLs in upload order.
            commit: Commit immediately. When False the row is only flushed,
                leaving the caller to commit or roll back.

        Returns:
            Created Listing ORM object.
        """
        listing = Listing(
            owner_id=owner_id,
            make=draft.make,
            model=draft.model,
            year=draft.year,
            mileage=draft.mileage,
            description=draft.description,
            photo_urls=list(photo_urls or []),
            status=ListingStatus.PENDING,
        )

        self._session.add(listing)
        if commit:
            _commit(self._session)
            self._session.refresh(listing)
        else:
            self._session.flush()

        return listing

    # ========== READ ==========

    def get_listing_by_id(self, listing_id: str) -> Listing | None:
        """Get a listing by its ID, with its owner loaded.

        Args:
            listing_id: Listing ID.

        Returns:
            Listing if found, None otherwise.
        """
        stmt = (
            select(Listing)
            .options(joinedload(Listing.owner))
            .where(Listing.id == listing_id)
        )
        return self._session.scalars(stmt).first()

    def get_listings(
        self,
        status: ListingStatus | None = None,
        owner_id: str | None = None,
    ) -> list[Listing]:
        """Get listings, newest first, with owner profiles eagerly loaded.

        No pagination: the full filtered set is returned.

        Args:
            status: Filter by moderation status.
            owner_id: Filter by owning user.

        Returns:
            List of Listing ORM objects ordered by created_at descending.
        """
        stmt = select(Listing).options(joinedload(Listing.owner))

        if status is not None:
            stmt = stmt.where(Listing.status == status)

        if owner_id is not None:
            stmt = stmt.where(Listing.owner_id == owner_id)

        stmt = stmt.order_by(Listing.created_at.desc())
        return list(self._session.scalars(stmt).all())

    def count_listings(
        self,
        status: ListingStatus | None = None,
        owner_id: str | None = None,
    ) -> int:
        """Count listings matching the given filters.

        Args:
            status: Filter by moderation status.
            owner_id: Filter by owning user.

        Returns:
            Number of matching listings.
        """
        stmt = select(func.count(Listing.id))

        if status is not None:
            stmt = stmt.where(Listing.status == status)

        if owner_id is not None:
            stmt = stmt.where(Listing.owner_id == owner_id)

        return self._session.scalar(stmt) or 0

    # ========== UPDATE ==========

    @with_db_retry
    def transition_status(
        self,
        listing_id: str,
        from_status: ListingStatus,
        to_status: ListingStatus,
    ) -> bool:
        """Move a listing from one status to another.

        The write is conditional on the current status, so of two concurrent
        callers deciding the same listing only one succeeds.

        Args:
            listing_id: Listing ID.
            from_status: Status the listing must currently have.
            to_status: New status.

        Returns:
            True if the row was updated, False if it no longer had from_status
            (or does not exist).
        """
        stmt = (
            update(Listing)
            .where(Listing.id == listing_id, Listing.status == from_status)
            .values(status=to_status, status_changed_at=datetime.now(timezone.utc))
        )
        result = self._session.execute(stmt)
        _commit(self._session)
        return result.rowcount == 1


class ProfileRepository:
    """Repository for Profile operations."""

    def __init__(self, session: Session) -> None:
        """Initialize repository with database session.

        Args:
            session: SQLAlchemy session instance.
        """
        self._session = session

    def get_profile(self, user_id: str) -> Profile | None:
        """Get a profile by user ID.

        Args:
            user_id: Authenticated user ID.

        Returns:
            Profile if found, None otherwise.
        """
        return self._session.get(Profile, user_id)

    @with_db_retry
    def get_or_create_profile(
        self, user_id: str, username: str | None = None
    ) -> tuple[Profile, bool]:
        """Get existing profile or create a new one.

        Args:
            user_id: Authenticated user ID.
            username: Username for a new profile. Defaults to the user ID.

        Returns:
            Tuple of (Profile, created) where created is True if new.
        """
        profile = self.get_profile(user_id)
        if profile is not None:
            return profile, False

        profile = Profile(id=user_id, username=username or user_id)
        self._session.add(profile)
        try:
            _commit(self._session)
        except IntegrityError:
            # Another request inserted the same user first
            existing = self.get_profile(user_id)
            if existing is None:
                raise
            return existing, False
        self._session.refresh(profile)

        return profile, True

    @with_db_retry
    def update_profile(self, user_id: str, **kwargs: Any) -> Profile | None:
        """Update editable profile fields.

        Args:
            user_id: Authenticated user ID.
            **kwargs: Fields to update. Unknown or read-only keys are ignored.

        Returns:
            Updated Profile if found, None otherwise.
        """
        profile = self.get_profile(user_id)
        if profile is None:
            return None

        for key, value in kwargs.items():
            if key in EDITABLE_PROFILE_FIELDS:
                setattr(profile, key, value)

        _commit(self._session)
        self._session.refresh(profile)

        return profile


class ApplicationRepository:
    """Repository for FinancingApplication operations."""

    def __init__(self, session: Session) -> None:
        """Initialize repository with database session.

        Args:
            session: SQLAlchemy session instance.
        """
        self._session = session

    @with_db_retry
    def create_application(
        self, listing_id: str, applicant_id: str, data: ApplicationCreate
    ) -> FinancingApplication:
        """Create a financing application.

        No uniqueness is enforced per (listing, applicant).

        Args:
            listing_id: Listing the application is for.
            applicant_id: Authenticated user ID of the applicant.
            data: Validated application form.

        Returns:
            Created FinancingApplication ORM object.
        """
        application = FinancingApplication(
            listing_id=listing_id,
            applicant_id=applicant_id,
            monthly_income=data.monthly_income,
            employer=data.employer,
            months_employed=data.months_employed,
        )
        self._session.add(application)
        _commit(self._session)
        self._session.refresh(application)

        return application

    def get_applications(self, listing_id: str) -> list[FinancingApplication]:
        """Get all applications for a listing, newest first.

        Args:
            listing_id: Listing ID.

        Returns:
            List of FinancingApplication ORM objects.
        """
        stmt = (
            select(FinancingApplication)
            .where(FinancingApplication.listing_id == listing_id)
            .order_by(FinancingApplication.created_at.desc(), FinancingApplication.id.desc())
        )
        return list(self._session.scalars(stmt).all())
