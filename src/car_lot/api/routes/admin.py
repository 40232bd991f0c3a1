"""Administrator moderation endpoints."""

from fastapi import APIRouter, HTTPException, Query

from car_lot.api.dependencies import AdminUserId, FinancingServiceDep, ModerationServiceDep
from car_lot.api.schemas import ApplicationListResponse, ErrorResponse, ModerationQueue
from car_lot.models.pydantic_models import ListingRead, ListingStatus, OwnerContact
from car_lot.services.errors import InvalidTransitionError, ListingNotFoundError

router = APIRouter()


@router.get("", response_model=ModerationQueue)
async def list_listings(
    admin_id: AdminUserId,
    service: ModerationServiceDep,
    status: ListingStatus = Query(ListingStatus.PENDING, description="Status to review"),
) -> ModerationQueue:
    """Get every listing in one moderation status, newest first.

    Each listing includes the seller's username, phone and company.
    """
    listings = service.list_by_status(status)
    return ModerationQueue(status=status, listings=listings, count=len(listings))


def _decide(service: ModerationServiceDep, listing_id: str, status: ListingStatus) -> ListingRead:
    try:
        return service.transition(listing_id, status)
    except ListingNotFoundError as e:
        raise HTTPException(status_code=404, detail=str(e)) from e
    except InvalidTransitionError as e:
        raise HTTPException(status_code=409, detail=str(e)) from e


@router.post(
    "/{listing_id}/approve",
    response_model=ListingRead,
    responses={
        404: {"model": ErrorResponse, "description": "Listing not found"},
        409: {"model": ErrorResponse, "description": "Listing is not pending"},
    },
)
async def approve_listing(
    listing_id: str,
    admin_id: AdminUserId,
    service: ModerationServiceDep,
) -> ListingRead:
    """Approve a pending listing, making it public."""
    return _decide(service, listing_id, ListingStatus.APPROVED)


@router.post(
    "/{listing_id}/reject",
    response_model=ListingRead,
    responses={
        404: {"model": ErrorResponse, "description": "Listing not found"},
        409: {"model": ErrorResponse, "description": "Listing is not pending"},
    },
)
async def reject_listing(
    listing_id: str,
    admin_id: AdminUserId,
    service: ModerationServiceDep,
) -> ListingRead:
    """Reject a pending listing."""
    return _decide(service, listing_id, ListingStatus.REJECTED)


@router.get("/{listing_id}/owner", response_model=OwnerContact)
async def get_owner(
    listing_id: str,
    admin_id: AdminUserId,
    service: ModerationServiceDep,
) -> OwnerContact:
    """Get the seller's contact details for a listing."""
    try:
        return service.get_owner_contact(listing_id)
    except ListingNotFoundError as e:
        raise HTTPException(status_code=404, detail=str(e)) from e


@router.get("/{listing_id}/applications", response_model=ApplicationListResponse)
async def list_applications(
    listing_id: str,
    admin_id: AdminUserId,
    service: FinancingServiceDep,
) -> ApplicationListResponse:
    """Get the financing applications filed against a listing, newest first."""
    try:
        applications = service.list_applications(listing_id)
    except ListingNotFoundError as e:
        raise HTTPException(status_code=404, detail=str(e)) from e
    return ApplicationListResponse(applications=applications, count=len(applications))
