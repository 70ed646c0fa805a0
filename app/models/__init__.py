"""
Database models for the ProRental API.
Includes User, Listing, ListingImage and Review models with relationships and validation.
"""

from app.models.user import User
from app.models.listing import Listing, ListingCategory
from app.models.image import ListingImage
from app.models.review import Review

# Export all models for easy importing
__all__ = [
    "User",
    "Listing",
    "ListingCategory",
    "ListingImage",
    "Review",
]
