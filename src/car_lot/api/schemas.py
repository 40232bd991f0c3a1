"""API response schemas."""

from pydantic import BaseModel, Field

from car_lot.models.pydantic_models import (
    ApplicationRead,
    ListingRead,
    ListingStatus,
    PublicListingRead,
)


class ListingList(BaseModel):
    """Unpaginated listings response."""

    listings: list[ListingRead]
    count: int = Field(description="Number of listings in this response")


class ModerationQueue(ListingList):
    """Listings in one moderation status."""

    status: ListingStatus


class CatalogResponse(BaseModel):
    """Approved listings on the public catalog."""

    listings: list[PublicListingRead]
    count: int = Field(description="Number of listings in this response")


class ApplicationListResponse(BaseModel):
    """Financing applications filed against a listing."""

    applications: list[ApplicationRead]
    count: int = Field(description="Number of applications in this response")


class ErrorResponse(BaseModel):
    """Standard error response."""

    detail: str
