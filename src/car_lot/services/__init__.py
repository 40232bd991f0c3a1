"""Service layer for car-lot business logic."""

from car_lot.services.catalog_service import CatalogService
from car_lot.services.errors import (
    InvalidTransitionError,
    ListingNotFoundError,
    ServiceError,
)
from car_lot.services.financing_service import FinancingService
from car_lot.services.listing_service import ListingService
from car_lot.services.moderation_service import ModerationService
from car_lot.services.profile_service import ProfileService
from car_lot.services.submission_service import SubmissionService

__all__ = [
    "CatalogService",
    "FinancingService",
    "InvalidTransitionError",
    "ListingNotFoundError",
    "ListingService",
    "ModerationService",
    "ProfileService",
    "ServiceError",
    "SubmissionService",
]
