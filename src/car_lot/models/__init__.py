"""Data models for car-lot."""

from car_lot.models.pydantic_models import (
    ApplicationCreate,
    ApplicationRead,
    ListingDraft,
    ListingRead,
    ListingStatus,
    OwnerContact,
    ProfileRead,
    ProfileUpdate,
    Settings,
)

__all__ = [
    "ApplicationCreate",
    "ApplicationRead",
    "ListingDraft",
    "ListingRead",
    "ListingStatus",
    "OwnerContact",
    "ProfileRead",
    "ProfileUpdate",
    "Settings",
]
