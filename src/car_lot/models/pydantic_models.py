"""Pydantic models for data validation."""

from datetime import datetime, timezone
from decimal import Decimal
from enum import Enum
from pathlib import Path

from pydantic import BaseModel, ConfigDict, Field

# Default data locations
DEFAULT_DB_PATH = Path(__file__).parent.parent.parent.parent / "data" / "car_lot.db"
DEFAULT_PHOTOS_DIR = Path(__file__).parent.parent.parent.parent / "data" / "photos"


def utc_now() -> datetime:
    """Return current UTC datetime (timezone-aware)."""
    return datetime.now(timezone.utc)


class ListingStatus(str, Enum):
    """Moderation status of a listing."""

    PENDING = "pending"
    APPROVED = "approved"
    REJECTED = "rejected"

    def can_transition_to(self, target: "ListingStatus") -> bool:
        """Only pending listings can be decided, and only to approved or rejected."""
        return self is ListingStatus.PENDING and target in (
            ListingStatus.APPROVED,
            ListingStatus.REJECTED,
        )


class Settings(BaseModel):
    """Application settings loaded from config/settings.yaml."""

    db_path: Path = Field(DEFAULT_DB_PATH, description="SQLite database file")
    database_url: str | None = Field(
        None, description="SQLAlchemy URL of an external database; overrides db_path"
    )
    photos_dir: Path = Field(DEFAULT_PHOTOS_DIR, description="Root directory of the photo store")
    public_photo_url: str = Field("/photos", description="Base URL committed photos are served from")
    max_photo_bytes: int = Field(10 * 1024 * 1024, gt=0, description="Maximum size of one photo")
    allowed_photo_extensions: list[str] = Field(
        default_factory=lambda: ["jpg", "jpeg", "png", "webp", "gif"],
        description="Accepted photo file extensions (lowercase, no dot)",
    )
    admin_user_ids: list[str] = Field(
        default_factory=list, description="User IDs allowed to moderate listings"
    )
    staging_max_age_hours: int = Field(
        24, ge=1, description="Age after which abandoned staged photos are removed"
    )

    # YAML reads unquoted numeric user IDs as ints
    model_config = ConfigDict(frozen=True, coerce_numbers_to_str=True)


class ListingDraft(BaseModel):
    """Seller-supplied listing data. Status is never taken from the seller."""

    make: str = Field(..., min_length=1, max_length=100)
    model: str = Field(..., min_length=1, max_length=100)
    year: int = Field(..., ge=1886, le=2100)
    mileage: int = Field(..., ge=0, description="Mileage in km")
    description: str = Field(..., min_length=1)


class OwnerContact(BaseModel):
    """Seller contact details shown to moderators."""

    username: str
    phone_number: str | None = None
    company_name: str | None = None

    model_config = ConfigDict(from_attributes=True)


class SellerContact(OwnerContact):
    """Seller contact details shown on the public catalog."""

    address: str | None = None


class ListingRead(ListingDraft):
    """Listing data as read from the database."""

    id: str
    owner_id: str
    photo_urls: list[str] = Field(default_factory=list)
    status: ListingStatus
    created_at: datetime
    status_changed_at: datetime | None = None
    owner: OwnerContact | None = None

    model_config = ConfigDict(from_attributes=True)


class PublicListingRead(ListingRead):
    """Approved listing with the seller's public contact details."""

    owner: SellerContact | None = None


class ProfileRead(BaseModel):
    """Profile data as read from the database."""

    id: str
    username: str
    phone_number: str | None = None
    address: str | None = None
    company_name: str | None = None
    bio: str | None = None
    created_at: datetime

    model_config = ConfigDict(from_attributes=True)


class ProfileUpdate(BaseModel):
    """Partial profile update. Unset fields are left unchanged."""

    username: str | None = Field(None, min_length=1, max_length=100)
    phone_number: str | None = Field(None, max_length=30)
    address: str | None = Field(None, max_length=300)
    company_name: str | None = Field(None, max_length=200)
    bio: str | None = None


class ApplicationCreate(BaseModel):
    """Data required to file a financing application."""

    monthly_income: Decimal = Field(..., ge=0, max_digits=12, decimal_places=2)
    employer: str = Field(..., min_length=1, max_length=200)
    months_employed: int = Field(..., ge=0)


class ApplicationRead(ApplicationCreate):
    """Financing application as read from the database."""

    id: int
    listing_id: str
    applicant_id: str
    created_at: datetime

    model_config = ConfigDict(from_attributes=True)
