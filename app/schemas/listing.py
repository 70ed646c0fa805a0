"""
Pydantic schemas for listing requests and responses.
"""

from pydantic import BaseModel, ConfigDict, Field, field_validator
from typing import Optional, List, Any
from datetime import datetime
from decimal import Decimal
from app.models.listing import ListingCategory
from app.schemas.user import UserResponse
from app.schemas.review import ReviewResponse


def _clean_text(value: Any, field_name: str) -> Any:
    if value is None:
        return value
    if not isinstance(value, str):
        return value
    if not value.strip():
        raise ValueError(f"{field_name} cannot be empty")
    return value.strip()


def _clean_amenities(value: Any) -> List[str]:
    """Strip, drop blanks and de-duplicate while keeping first-seen order."""
    if value is None:
        return []
    if isinstance(value, str):
        value = [value]

    seen = []
    for item in value:
        label = str(item).strip()
        if label and label not in seen:
            seen.append(label)
    return seen


class ListingBase(BaseModel):
    """Listing attributes shared by create and update."""

    title: str = Field(
        ...,
        min_length=1,
        max_length=255,
        description="Listing title",
        examples=["Lakeview Cabin"]
    )

    description: str = Field(
        ...,
        min_length=1,
        description="Detailed property description",
        examples=["Quiet two-bedroom cabin a short walk from the shore."]
    )

    location: str = Field(
        ...,
        min_length=1,
        max_length=255,
        description="Free-text location, geocoded on create",
        examples=["Lake Tahoe, CA"]
    )

    country: str = Field(
        ...,
        min_length=1,
        max_length=100,
        description="Country of the property",
        examples=["United States"]
    )

    price: Decimal = Field(
        ...,
        ge=0,
        max_digits=12,
        decimal_places=2,
        description="Asking price or monthly rent",
        examples=[1800]
    )

    bedrooms: Optional[int] = Field(None, ge=0, examples=[2])
    bathrooms: Optional[int] = Field(None, ge=0, examples=[1])
    area: Optional[int] = Field(None, ge=0, description="Area in square feet", examples=[950])

    category: Optional[ListingCategory] = Field(
        None,
        description="buy or rent",
        examples=["rent"]
    )

    property_category: Optional[str] = Field(
        None,
        max_length=100,
        examples=["cabin"]
    )

    amenities: List[str] = Field(
        default_factory=list,
        description="Amenity labels; duplicates are dropped",
        examples=[["Wifi", "Fireplace"]]
    )

    @field_validator('title', 'description', 'location', 'country')
    @classmethod
    def validate_text(cls, v, info):
        return _clean_text(v, info.field_name.capitalize())

    @field_validator('property_category')
    @classmethod
    def validate_property_category(cls, v):
        if v is None:
            return v
        return v.strip() or None

    @field_validator('amenities', mode='before')
    @classmethod
    def validate_amenities(cls, v):
        return _clean_amenities(v)


class ListingCreate(ListingBase):
    """Schema for creating a new listing."""


class ListingUpdate(BaseModel):
    """Field patch for an existing listing; omitted fields keep their value."""

    title: Optional[str] = Field(None, min_length=1, max_length=255)
    description: Optional[str] = Field(None, min_length=1)
    location: Optional[str] = Field(None, min_length=1, max_length=255)
    country: Optional[str] = Field(None, min_length=1, max_length=100)
    price: Optional[Decimal] = Field(None, ge=0, max_digits=12, decimal_places=2)
    bedrooms: Optional[int] = Field(None, ge=0)
    bathrooms: Optional[int] = Field(None, ge=0)
    area: Optional[int] = Field(None, ge=0)
    category: Optional[ListingCategory] = None
    property_category: Optional[str] = Field(None, max_length=100)
    amenities: Optional[List[str]] = None

    @field_validator('title', 'description', 'location', 'country')
    @classmethod
    def validate_text(cls, v, info):
        return _clean_text(v, info.field_name.capitalize())

    @field_validator('amenities', mode='before')
    @classmethod
    def validate_amenities(cls, v):
        if v is None:
            return v
        return _clean_amenities(v)

    def changes(self) -> dict:
        """Fields that were supplied with a value."""
        return self.model_dump(exclude_none=True)


class ImageResponse(BaseModel):
    url: str
    external_id: str
    original_filename: str


class GeometryResponse(BaseModel):
    type: str = "Point"
    coordinates: List[float] = Field(..., min_length=2, max_length=2, description="[longitude, latitude]")


class ListingResponse(BaseModel):
    """Listing as returned by the API."""

    model_config = ConfigDict(from_attributes=True)

    id: str
    title: str
    description: str
    location: str
    country: str
    price: float
    bedrooms: Optional[int] = None
    bathrooms: Optional[int] = None
    area: Optional[int] = None
    category: Optional[ListingCategory] = None
    property_category: Optional[str] = None
    amenities: List[str] = []
    image: Optional[ImageResponse] = Field(None, description="Primary image, equal to images[0]")
    images: List[ImageResponse]
    geometry: GeometryResponse
    owner_id: str
    created_at: datetime
    updated_at: datetime


class ListingDetailResponse(ListingResponse):
    """Listing with owner and reviews."""

    owner: Optional[UserResponse] = None
    reviews: List[ReviewResponse] = []


class ListingEnvelope(BaseModel):
    message: str = Field(..., examples=["New Property Created!"])
    listing: ListingDetailResponse


class MessageResponse(BaseModel):
    message: str = Field(..., examples=["Property Deleted!"])
