"""FastAPI dependency injection for database sessions, identity and services."""

from collections.abc import Generator
from typing import Annotated

from fastapi import Depends, Header, HTTPException, Request
from sqlalchemy.orm import Session

from car_lot.database.engine import get_session_factory
from car_lot.models.pydantic_models import Settings
from car_lot.services.catalog_service import CatalogService
from car_lot.services.financing_service import FinancingService
from car_lot.services.listing_service import ListingService
from car_lot.services.moderation_service import ModerationService
from car_lot.services.profile_service import ProfileService
from car_lot.services.submission_service import SubmissionService
from car_lot.storage.photo_store import SAFE_OWNER_ID, PhotoStore


def get_db() -> Generator[Session, None, None]:
    """Dependency that provides a database session.

    Yields:
        Database session that is automatically closed after use.
    """
    session_factory = get_session_factory()
    session = session_factory()
    try:
        yield session
    finally:
        session.close()


def get_settings(request: Request) -> Settings:
    """Dependency that provides the settings the app was created with."""
    return request.app.state.settings


def get_photo_store(request: Request) -> PhotoStore:
    """Dependency that provides the app's photo store."""
    return request.app.state.photo_store


DbSession = Annotated[Session, Depends(get_db)]
SettingsDep = Annotated[Settings, Depends(get_settings)]


def get_current_user_id(
    x_user_id: Annotated[str | None, Header(description="Authenticated user ID")] = None,
) -> str:
    """Dependency that provides the caller's user ID.

    Authentication happens upstream; the gateway forwards the verified user
    ID in the X-User-Id header.

    Raises:
        HTTPException: 401 if the header is missing or malformed.
    """
    if not x_user_id:
        raise HTTPException(status_code=401, detail="Not authenticated")
    if not SAFE_OWNER_ID.fullmatch(x_user_id):
        raise HTTPException(status_code=401, detail="Invalid user ID")
    return x_user_id


CurrentUserId = Annotated[str, Depends(get_current_user_id)]


def require_admin(user_id: CurrentUserId, settings: SettingsDep) -> str:
    """Dependency that only lets configured administrators through.

    Raises:
        HTTPException: 403 if the caller isn't an administrator.
    """
    if user_id not in settings.admin_user_ids:
        raise HTTPException(status_code=403, detail="Administrator access required")
    return user_id


AdminUserId = Annotated[str, Depends(require_admin)]


def get_catalog_service(session: DbSession) -> CatalogService:
    """Dependency that provides a CatalogService instance."""
    return CatalogService(session)


def get_listing_service(session: DbSession) -> ListingService:
    """Dependency that provides a ListingService instance."""
    return ListingService(session)


def get_moderation_service(session: DbSession) -> ModerationService:
    """Dependency that provides a ModerationService instance."""
    return ModerationService(session)


def get_submission_service(
    session: DbSession,
    photo_store: Annotated[PhotoStore, Depends(get_photo_store)],
) -> SubmissionService:
    """Dependency that provides a SubmissionService instance."""
    return SubmissionService(session, photo_store)


def get_profile_service(session: DbSession) -> ProfileService:
    """Dependency that provides a ProfileService instance."""
    return ProfileService(session)


def get_financing_service(session: DbSession) -> FinancingService:
    """Dependency that provides a FinancingService instance."""
    return FinancingService(session)


# Type aliases for cleaner dependency injection
CatalogServiceDep = Annotated[CatalogService, Depends(get_catalog_service)]
ListingServiceDep = Annotated[ListingService, Depends(get_listing_service)]
ModerationServiceDep = Annotated[ModerationService, Depends(get_moderation_service)]
SubmissionServiceDep = Annotated[SubmissionService, Depends(get_submission_service)]
ProfileServiceDep = Annotated[ProfileService, Depends(get_profile_service)]
FinancingServiceDep = Annotated[FinancingService, Depends(get_financing_service)]
