"""
API route handlers for the ProRental API.
"""

from .listings import router as listings_router
from .users import router as users_router

__all__ = ["listings_router", "users_router"]
