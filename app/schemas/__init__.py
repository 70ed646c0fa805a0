"""
Pydantic schemas for request/response validation.
"""

# User schemas
from .user import (
    SignupRequest,
    LoginRequest,
    UserResponse,
    UserEnvelope,
    AuthResponse
)

# Review schemas
from .review import (
    ReviewCreate,
    ReviewCreateRequest,
    ReviewResponse,
    ReviewEnvelope
)

# Listing schemas
from .listing import (
    ListingBase,
    ListingCreate,
    ListingUpdate,
    ImageResponse,
    GeometryResponse,
    ListingResponse,
    ListingDetailResponse,
    ListingEnvelope,
    MessageResponse
)

# Error schemas
from .error import ErrorDetail, ErrorResponse

__all__ = [
    # User
    "SignupRequest",
    "LoginRequest",
    "UserResponse",
    "UserEnvelope",
    "AuthResponse",

    # Review
    "ReviewCreate",
    "ReviewCreateRequest",
    "ReviewResponse",
    "ReviewEnvelope",

    # Listing
    "ListingBase",
    "ListingCreate",
    "ListingUpdate",
    "ImageResponse",
    "GeometryResponse",
    "ListingResponse",
    "ListingDetailResponse",
    "ListingEnvelope",
    "MessageResponse",

    # Error
    "ErrorDetail",
    "ErrorResponse"
]
