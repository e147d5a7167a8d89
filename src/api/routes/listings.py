"""Food listing API routes."""

from fastapi import APIRouter, Query

from src.api.deps import CurrentUser, ListingServiceDep
from src.schemas.listing import ListingCreate, ListingCreateResponse, ListingListResponse

router = APIRouter(prefix="/listings", tags=["listings"])


@router.post(
    "",
    response_model=ListingCreateResponse,
    summary="Create listing",
    description="Creates a food listing. Only providers may create listings.",
)
async def create_listing(
    data: ListingCreate,
    user: CurrentUser,
    service: ListingServiceDep,
) -> ListingCreateResponse:
    """Create a listing for the authenticated provider.

    Raises:
        AuthorizationError: 403 if the user is not a provider.
        ValidationError: 400 if a required field is missing.
    """
    listing = await service.create_listing(user.user_id, data.model_dump(exclude_none=True))
    return ListingCreateResponse(id=listing.get("id"))


@router.get(
    "",
    response_model=ListingListResponse,
    summary="Browse listings",
    description="Lists food listings, newest first.",
)
async def browse_listings(
    user: CurrentUser,
    service: ListingServiceDep,
    listing_status: str = Query(default="available", alias="status", description="Listing status filter"),
    limit: int = Query(default=50, ge=1, le=100, description="Maximum number of results"),
) -> ListingListResponse:
    """Browse listings visible to any signed-in user."""
    items = await service.browse_listings(status=listing_status, limit=limit)
    return ListingListResponse(items=[dict(item) for item in items], count=len(items))
