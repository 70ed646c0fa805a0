"""
Pydantic schemas for listing reviews.
"""

from pydantic import BaseModel, Field, field_validator
from typing import Optional
from datetime import datetime
from app.schemas.user import UserResponse


class ReviewCreate(BaseModel):
    rating: int = Field(..., ge=1, le=5, description="Rating from 1 to 5", examples=[4])
    comment: str = Field(..., min_length=1, max_length=2000, examples=["Great view, friendly host."])

    @field_validator('comment')
    @classmethod
    def validate_comment(cls, v):
        if not v or not v.strip():
            raise ValueError("Comment cannot be empty")
        return v.strip()


class ReviewCreateRequest(BaseModel):
    """Request body shaped as ``{"review": {...}}``."""

    review: ReviewCreate


class ReviewResponse(BaseModel):
    id: str
    rating: int
    comment: str
    listing_id: str
    author_id: str
    created_at: datetime
    author: Optional[UserResponse] = None


class ReviewEnvelope(BaseModel):
    message: str = Field(..., examples=["Review added successfully!"])
    review: ReviewResponse
