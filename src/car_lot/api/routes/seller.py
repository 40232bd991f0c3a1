"""Seller dashboard endpoints: own listings, submission and profile."""

from fastapi import APIRouter, File, Form, HTTPException, UploadFile

from car_lot.api.dependencies import (
    CurrentUserId,
    ListingServiceDep,
    ProfileServiceDep,
    SubmissionServiceDep,
)
from car_lot.api.schemas import ErrorResponse, ListingList
from car_lot.models.pydantic_models import ListingDraft, ListingRead, ProfileRead, ProfileUpdate
from car_lot.storage.photo_store import InvalidPhotoError, PhotoFile, PhotoUploadError

router = APIRouter()


@router.get("/listings", response_model=ListingList)
async def list_my_listings(
    user_id: CurrentUserId,
    service: ListingServiceDep,
) -> ListingList:
    """Get the caller's listings of every status, newest first."""
    listings = service.list_for_owner(user_id)
    return ListingList(listings=listings, count=len(listings))


@router.post(
    "/listings",
    response_model=ListingRead,
    status_code=201,
    summary="Submit a vehicle for review",
    responses={
        400: {"model": ErrorResponse, "description": "Invalid photo"},
        502: {"model": ErrorResponse, "description": "Photo storage failed"},
    },
)
async def submit_listing(
    user_id: CurrentUserId,
    service: SubmissionServiceDep,
    make: str = Form(..., min_length=1, max_length=100),
    model: str = Form(..., min_length=1, max_length=100),
    year: int = Form(..., ge=1886, le=2100),
    mileage: int = Form(..., ge=0, description="Mileage in km"),
    description: str = Form(..., min_length=1),
    # A file input left blank arrives as an empty part, sometimes decoded as a str
    photos: list[UploadFile | str] | None = File(None, description="Photos in display order"),
) -> ListingRead:
    """Submit a vehicle for moderation.

    Photos are stored in the order given. If any photo is rejected or fails to
    upload, nothing is created. The listing always starts as pending.
    """
    draft = ListingDraft(
        make=make,
        model=model,
        year=year,
        mileage=mileage,
        description=description,
    )

    files = []
    for upload in photos or []:
        if isinstance(upload, str):
            if upload:
                raise HTTPException(status_code=400, detail="Photo must be sent as a file")
            continue

        content = await upload.read()
        if not upload.filename:
            if not content:
                continue
            raise HTTPException(status_code=400, detail="No filename provided")
        files.append(PhotoFile(filename=upload.filename, content=content))

    try:
        return service.submit(user_id, draft, files)
    except InvalidPhotoError as e:
        raise HTTPException(status_code=400, detail=str(e)) from e
    except PhotoUploadError as e:
        raise HTTPException(status_code=502, detail=str(e)) from e


@router.get("/profile", response_model=ProfileRead)
async def get_my_profile(
    user_id: CurrentUserId,
    service: ProfileServiceDep,
) -> ProfileRead:
    """Get the caller's profile."""
    return service.get_profile(user_id)


@router.put("/profile", response_model=ProfileRead)
async def update_my_profile(
    request: ProfileUpdate,
    user_id: CurrentUserId,
    service: ProfileServiceDep,
) -> ProfileRead:
    """Update the caller's contact details. Omitted fields are unchanged."""
    return service.update_profile(user_id, request)
