"""
Listing API endpoints: listing CRUD with multipart image uploads, and listing reviews.
Multipart field names follow the ``listing[...]`` convention of the web client.
"""

from fastapi import APIRouter, Depends, File, Form, UploadFile, status
from typing import Optional, List
from uuid import UUID
import json

from app.models.listing import Listing
from app.models.user import User
from app.services.image import ImageService
from app.services.listing import ListingService
from app.services.review import ReviewService
from app.schemas.listing import (
    ListingCreate,
    ListingUpdate,
    ListingResponse,
    ListingDetailResponse,
    ListingEnvelope,
    MessageResponse
)
from app.schemas.review import ReviewCreateRequest, ReviewEnvelope
from app.utils.dependencies import (
    get_current_active_user,
    get_image_service,
    get_listing_service,
    get_review_service,
    require_listing_owner,
    require_review_author
)
from app.schemas.error import get_crud_error_responses, get_error_responses


router = APIRouter(prefix="/listings", tags=["Listings"])


def _blank_to_none(value: Optional[str]) -> Optional[str]:
    if value is None or not value.strip():
        return None
    return value


def _parse_amenities(*sources: Optional[List[str]]) -> Optional[List[str]]:
    """Merge repeated form values; a single JSON array string is expanded."""
    values = [v for source in sources for v in (source or [])]
    if not values:
        return None

    amenities: List[str] = []
    for value in values:
        text = value.strip()
        if text.startswith("["):
            try:
                parsed = json.loads(text)
            except ValueError:
                parsed = None
            if isinstance(parsed, list):
                amenities.extend(str(item) for item in parsed)
                continue
        amenities.append(value)
    return amenities


def _listing_fields(
    title: Optional[str],
    description: Optional[str],
    location: Optional[str],
    country: Optional[str],
    price: Optional[str],
    bedrooms: Optional[str],
    bathrooms: Optional[str],
    area: Optional[str],
    category: Optional[str],
    property_category: Optional[str],
    amenities: Optional[List[str]],
) -> dict:
    fields = {
        "title": _blank_to_none(title),
        "description": _blank_to_none(description),
        "location": _blank_to_none(location),
        "country": _blank_to_none(country),
        "price": _blank_to_none(price),
        "bedrooms": _blank_to_none(bedrooms),
        "bathrooms": _blank_to_none(bathrooms),
        "area": _blank_to_none(area),
        "category": _blank_to_none(category),
        "property_category": _blank_to_none(property_category),
        "amenities": amenities,
    }
    return {key: value for key, value in fields.items() if value is not None}


def _detail(listing: Listing) -> ListingDetailResponse:
    return ListingDetailResponse.model_validate(listing.to_dict(include_owner=True, include_reviews=True))


@router.get(
    "",
    response_model=List[ListingResponse],
    status_code=status.HTTP_200_OK,
    summary="List all listings",
    description="Get every listing, newest first. Each listing carries its primary image."
)
async def list_listings(
    listing_service: ListingService = Depends(get_listing_service)
) -> List[ListingResponse]:
    listings = await listing_service.list_listings()
    return [ListingResponse.model_validate(listing.to_dict()) for listing in listings]


@router.get(
    "/owner/properties",
    response_model=List[ListingResponse],
    status_code=status.HTTP_200_OK,
    summary="List my listings",
    description="Get the listings owned by the authenticated user.",
    responses=get_error_responses(401)
)
async def list_owner_listings(
    current_user: User = Depends(get_current_active_user),
    listing_service: ListingService = Depends(get_listing_service)
) -> List[ListingResponse]:
    listings = await listing_service.get_owner_listings(current_user)
    return [ListingResponse.model_validate(listing.to_dict()) for listing in listings]


@router.get(
    "/{listing_id}",
    response_model=ListingDetailResponse,
    status_code=status.HTTP_200_OK,
    summary="Get listing",
    description="Get a listing with its owner and its reviews including their authors.",
    responses=get_error_responses(400, 404)
)
async def get_listing(
    listing_id: UUID,
    listing_service: ListingService = Depends(get_listing_service)
) -> ListingDetailResponse:
    """
    Get a listing by ID.

    Raises:
        NotFoundError: If the listing doesn't exist
    """
    listing = await listing_service.get_listing(listing_id)
    return _detail(listing)


@router.post(
    "",
    response_model=ListingEnvelope,
    status_code=status.HTTP_201_CREATED,
    summary="Create listing",
    description="Create a listing from a multipart form with 1 to 8 images. "
                "The location is geocoded; the first image becomes the primary image.",
    responses=get_crud_error_responses()
)
async def create_listing(
    title: Optional[str] = Form(None, alias="listing[title]"),
    description: Optional[str] = Form(None, alias="listing[description]"),
    location: Optional[str] = Form(None, alias="listing[location]"),
    country: Optional[str] = Form(None, alias="listing[country]"),
    price: Optional[str] = Form(None, alias="listing[price]"),
    bedrooms: Optional[str] = Form(None, alias="listing[bedrooms]"),
    bathrooms: Optional[str] = Form(None, alias="listing[bathrooms]"),
    area: Optional[str] = Form(None, alias="listing[area]"),
    category: Optional[str] = Form(None, alias="listing[type]"),
    property_category: Optional[str] = Form(None, alias="listing[propertyCategory]"),
    amenities: Optional[List[str]] = Form(None, alias="listing[amenities]"),
    amenities_list: Optional[List[str]] = Form(None, alias="listing[amenities][]"),
    images: Optional[List[UploadFile]] = File(None, alias="listing[images]"),
    current_user: User = Depends(get_current_active_user),
    image_service: ImageService = Depends(get_image_service),
    listing_service: ListingService = Depends(get_listing_service)
) -> ListingEnvelope:
    """
    Create a new listing.

    Raises:
        ValidationError: If fields are invalid, no images are given or the location is blank
        LocationUnresolvedError: If the location cannot be geocoded
        UploadProviderError: If the image host fails
    """
    uploads = await image_service.read_uploads(images)
    fields = _listing_fields(
        title, description, location, country, price, bedrooms, bathrooms, area,
        category, property_category, _parse_amenities(amenities, amenities_list)
    )

    # File and location errors take precedence over field errors
    listing_service.check_create_request(uploads, fields.get("location"))
    listing_data = ListingCreate.model_validate(fields)

    listing = await listing_service.create_listing(listing_data, uploads, current_user)
    return ListingEnvelope(message="New Property Created!", listing=_detail(listing))


@router.get(
    "/{listing_id}/edit",
    response_model=ListingDetailResponse,
    status_code=status.HTTP_200_OK,
    summary="Get listing for editing",
    description="Get a listing for its owner's edit form.",
    responses=get_crud_error_responses()
)
async def get_listing_for_edit(
    listing_id: UUID,
    current_user: User = Depends(get_current_active_user),
    listing_service: ListingService = Depends(get_listing_service)
) -> ListingDetailResponse:
    """
    Get a listing for its owner's edit form.

    Raises:
        NotFoundError: If the listing doesn't exist
        ListingOwnershipError: If the user is not the owner
    """
    listing = await listing_service.get_listing_for_edit(listing_id, current_user)
    return _detail(listing)


@router.put(
    "/{listing_id}",
    response_model=ListingEnvelope,
    status_code=status.HTTP_200_OK,
    summary="Update listing",
    description="Patch listing fields and reconcile images: existing images listed in "
                "listing[keepImages][] are kept in order, new files are appended, the rest are removed.",
    responses=get_crud_error_responses()
)
async def update_listing(
    listing_id: UUID,
    title: Optional[str] = Form(None, alias="listing[title]"),
    description: Optional[str] = Form(None, alias="listing[description]"),
    location: Optional[str] = Form(None, alias="listing[location]"),
    country: Optional[str] = Form(None, alias="listing[country]"),
    price: Optional[str] = Form(None, alias="listing[price]"),
    bedrooms: Optional[str] = Form(None, alias="listing[bedrooms]"),
    bathrooms: Optional[str] = Form(None, alias="listing[bathrooms]"),
    area: Optional[str] = Form(None, alias="listing[area]"),
    category: Optional[str] = Form(None, alias="listing[type]"),
    property_category: Optional[str] = Form(None, alias="listing[propertyCategory]"),
    amenities: Optional[List[str]] = Form(None, alias="listing[amenities]"),
    amenities_list: Optional[List[str]] = Form(None, alias="listing[amenities][]"),
    keep_images: Optional[List[str]] = Form(None, alias="listing[keepImages][]"),
    images: Optional[List[UploadFile]] = File(None, alias="listing[images]"),
    _: Listing = Depends(require_listing_owner),
    image_service: ImageService = Depends(get_image_service),
    listing_service: ListingService = Depends(get_listing_service)
) -> ListingEnvelope:
    """
    Update a listing owned by the current user.

    Raises:
        NotFoundError: If the listing doesn't exist
        ListingOwnershipError: If the user is not the owner
        ValidationError: If the final image set would be empty or hold more than 8 images
    """
    uploads = await image_service.read_uploads(images)
    listing_data = ListingUpdate.model_validate(
        _listing_fields(
            title, description, location, country, price, bedrooms, bathrooms, area,
            category, property_category, _parse_amenities(amenities, amenities_list)
        )
    )

    listing = await listing_service.update_listing(listing_id, listing_data, keep_images or [], uploads)
    return ListingEnvelope(message="Property Details Updated!", listing=_detail(listing))


@router.delete(
    "/{listing_id}",
    response_model=MessageResponse,
    status_code=status.HTTP_200_OK,
    summary="Delete listing",
    description="Delete a listing, its reviews and its stored images.",
    responses=get_crud_error_responses()
)
async def delete_listing(
    listing_id: UUID,
    _: Listing = Depends(require_listing_owner),
    listing_service: ListingService = Depends(get_listing_service)
) -> MessageResponse:
    await listing_service.delete_listing(listing_id)
    return MessageResponse(message="Property Deleted!")


@router.post(
    "/{listing_id}/reviews",
    response_model=ReviewEnvelope,
    status_code=status.HTTP_201_CREATED,
    summary="Add review",
    description="Add a review with a rating from 1 to 5 to a listing.",
    responses=get_error_responses(400, 401, 404)
)
async def create_review(
    listing_id: UUID,
    body: ReviewCreateRequest,
    current_user: User = Depends(get_current_active_user),
    review_service: ReviewService = Depends(get_review_service)
) -> ReviewEnvelope:
    review = await review_service.create_review(listing_id, body.review, current_user)
    return ReviewEnvelope.model_validate({
        "message": "Review added successfully!",
        "review": review.to_dict(include_author=True),
    })


@router.delete(
    "/{listing_id}/reviews/{review_id}",
    response_model=MessageResponse,
    status_code=status.HTTP_200_OK,
    summary="Delete review",
    description="Delete a review. Only its author may delete it.",
    responses=get_crud_error_responses()
)
async def delete_review(
    listing_id: UUID,
    review_id: UUID,
    _: object = Depends(require_review_author),
    review_service: ReviewService = Depends(get_review_service)
) -> MessageResponse:
    await review_service.delete_review(listing_id, review_id)
    return MessageResponse(message="Review deleted successfully!")
