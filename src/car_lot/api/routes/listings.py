"""Public catalog and financing application endpoints."""

from fastapi import APIRouter, HTTPException

from car_lot.api.dependencies import CatalogServiceDep, CurrentUserId, FinancingServiceDep
from car_lot.api.schemas import CatalogResponse, ErrorResponse
from car_lot.models.pydantic_models import ApplicationCreate, ApplicationRead, PublicListingRead
from car_lot.services.errors import ListingNotFoundError

router = APIRouter()


@router.get("", response_model=CatalogResponse)
async def list_listings(service: CatalogServiceDep) -> CatalogResponse:
    """Get all approved listings, newest first.

    Each listing includes the seller's username, phone, company and address.
    """
    listings = service.list_approved()
    return CatalogResponse(listings=listings, count=len(listings))


@router.get("/{listing_id}", response_model=PublicListingRead)
async def get_listing(
    listing_id: str,
    service: CatalogServiceDep,
) -> PublicListingRead:
    """Get a single approved listing by ID.

    Raises:
        HTTPException: 404 if the listing doesn't exist or isn't approved.
    """
    try:
        return service.get_approved(listing_id)
    except ListingNotFoundError as e:
        raise HTTPException(status_code=404, detail=str(e)) from e


@router.post(
    "/{listing_id}/applications",
    response_model=ApplicationRead,
    status_code=201,
    responses={404: {"model": ErrorResponse, "description": "Listing not found"}},
)
async def create_application(
    listing_id: str,
    request: ApplicationCreate,
    user_id: CurrentUserId,
    service: FinancingServiceDep,
) -> ApplicationRead:
    """Apply for financing on an approved listing.

    Args:
        listing_id: The listing ID.
        request: Monthly income, employer and months employed.

    Returns:
        The created application.
    """
    try:
        return service.submit_application(listing_id, user_id, request)
    except ListingNotFoundError:
        raise HTTPException(status_code=404, detail=f"Listing {listing_id} not found") from None
