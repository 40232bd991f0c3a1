"""SQLAlchemy ORM models."""

import uuid
from datetime import datetime, timezone
from decimal import Decimal

from sqlalchemy import JSON, DateTime, Enum, ForeignKey, Integer, Numeric, String, Text
from sqlalchemy.orm import DeclarativeBase, Mapped, mapped_column, relationship

from car_lot.models.pydantic_models import ListingStatus


def utc_now() -> datetime:
    """Return current UTC datetime (timezone-aware)."""
    return datetime.now(timezone.utc)


def new_listing_id() -> str:
    """Return a fresh opaque listing identifier."""
    return str(uuid.uuid4())


class Base(DeclarativeBase):
    """Base class for all ORM models."""

    pass


class Profile(Base):
    """Contact and business details for a user account."""

    __tablename__ = "profiles"

    id: Mapped[str] = mapped_column(String(64), primary_key=True)  # Authenticated user ID
    username: Mapped[str] = mapped_column(String(100), nullable=False)
    phone_number: Mapped[str | None] = mapped_column(String(30), nullable=True)
    address: Mapped[str | None] = mapped_column(String(300), nullable=True)
    company_name: Mapped[str | None] = mapped_column(String(200), nullable=True)
    bio: Mapped[str | None] = mapped_column(Text, nullable=True)
    created_at: Mapped[datetime] = mapped_column(DateTime, default=utc_now, nullable=False)

    # Relationships
    listings: Mapped[list["Listing"]] = relationship("Listing", back_populates="owner")

    def __repr__(self) -> str:
        return f"<Profile(id='{self.id}', username='{self.username}')>"


class Listing(Base):
    """Vehicle submitted by a seller, gated behind moderation."""

    __tablename__ = "listings"

    id: Mapped[str] = mapped_column(String(36), primary_key=True, default=new_listing_id)
    owner_id: Mapped[str] = mapped_column(
        String(64), ForeignKey("profiles.id"), nullable=False, index=True
    )

    # Vehicle details
    make: Mapped[str] = mapped_column(String(100), nullable=False)
    model: Mapped[str] = mapped_column(String(100), nullable=False)
    year: Mapped[int] = mapped_column(Integer, nullable=False)
    mileage: Mapped[int] = mapped_column(Integer, nullable=False)  # km
    description: Mapped[str] = mapped_column(Text, nullable=False)
    photo_urls: Mapped[list[str]] = mapped_column(JSON, default=list)  # Upload order

    # Moderation
    status: Mapped[ListingStatus] = mapped_column(
        Enum(ListingStatus), default=ListingStatus.PENDING, nullable=False, index=True
    )
    status_changed_at: Mapped[datetime | None] = mapped_column(DateTime, nullable=True)

    created_at: Mapped[datetime] = mapped_column(
        DateTime, default=utc_now, nullable=False, index=True
    )

    # Relationships
    owner: Mapped["Profile"] = relationship("Profile", back_populates="listings")
    applications: Mapped[list["FinancingApplication"]] = relationship(
        "FinancingApplication", back_populates="listing", cascade="all, delete-orphan"
    )

    def __repr__(self) -> str:
        return (
            f"<Listing(id='{self.id}', vehicle='{self.year} {self.make} {self.model}', "
            f"status={self.status})>"
        )


class FinancingApplication(Base):
    """Buyer's financing request for one listing."""

    __tablename__ = "financing_applications"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    listing_id: Mapped[str] = mapped_column(
        String(36), ForeignKey("listings.id", ondelete="CASCADE"), nullable=False, index=True
    )
    applicant_id: Mapped[str] = mapped_column(String(64), nullable=False, index=True)
    monthly_income: Mapped[Decimal] = mapped_column(Numeric(12, 2), nullable=False)
    employer: Mapped[str] = mapped_column(String(200), nullable=False)
    months_employed: Mapped[int] = mapped_column(Integer, nullable=False)
    created_at: Mapped[datetime] = mapped_column(DateTime, default=utc_now, nullable=False)

    # Relationships
    listing: Mapped["Listing"] = relationship("Listing", back_populates="applications")

    def __repr__(self) -> str:
        return f"<FinancingApplication(id={self.id}, listing_id='{self.listing_id}')>"
