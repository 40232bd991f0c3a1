"""Service layer for profile operations."""

from sqlalchemy.orm import Session

from car_lot.database.repository import ProfileRepository
from car_lot.models.pydantic_models import ProfileRead, ProfileUpdate


class ProfileService:
    """Service for reading and editing a user's own profile."""

    def __init__(self, session: Session) -> None:
        """Initialize with database session.

        Args:
            session: SQLAlchemy session instance.
        """
        self._session = session
        self._repo = ProfileRepository(session)

    def get_profile(self, user_id: str) -> ProfileRead:
        """Get a user's profile, creating an empty one on first access.

        Args:
            user_id: Authenticated user ID.

        Returns:
            ProfileRead.
        """
        profile, _ = self._repo.get_or_create_profile(user_id)
        return ProfileRead.model_validate(profile)

    def update_profile(self, user_id: str, changes: ProfileUpdate) -> ProfileRead:
        """Apply the fields set in changes to a user's profile.

        Fields left out of the request are untouched; fields explicitly set to
        null are cleared (except username, which is required).

        Args:
            user_id: Authenticated user ID.
            changes: Partial update.

        Returns:
            Updated ProfileRead.
        """
        self._repo.get_or_create_profile(user_id)

        fields = changes.model_dump(exclude_unset=True)
        if fields.get("username") is None:
            fields.pop("username", None)

        profile = self._repo.update_profile(user_id, **fields)
        return ProfileRead.model_validate(profile)
