"""
Repository layer for data access operations.
Provides async database operations with proper error handling.
"""

from app.repositories.base import BaseRepository
from app.repositories.user import UserRepository
from app.repositories.listing import ListingRepository
from app.repositories.review import ReviewRepository

__all__ = [
    "BaseRepository",
    "UserRepository",
    "ListingRepository",
    "ReviewRepository",
]
