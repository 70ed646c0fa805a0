"""
FastAPI dependency injection utilities for authentication, services and database sessions.
Provides reusable dependencies for route protection and ownership checks.
"""

from typing import Optional
import uuid
from fastapi import Depends, Request
from fastapi.security import HTTPBearer, HTTPAuthorizationCredentials
from sqlalchemy.ext.asyncio import AsyncSession
from app.config import get_settings
from app.database import get_db
from app.models.listing import Listing
from app.models.review import Review
from app.models.user import User
from app.services.auth import AuthService
from app.services.geocoding import MapboxGeocoder
from app.services.image import ImageService
from app.services.listing import ListingService
from app.services.review import ReviewService
from app.utils.exceptions import AuthenticationError, InvalidTokenError


# HTTP Bearer token security scheme; the auth cookie is accepted as well
security = HTTPBearer(auto_error=False)


def get_image_service(request: Request) -> ImageService:
    """Image service built at application start-up."""
    return request.app.state.image_service


def get_geocoder(request: Request) -> MapboxGeocoder:
    """Geocoder built at application start-up."""
    return request.app.state.geocoder


async def get_auth_service(db: AsyncSession = Depends(get_db)) -> AuthService:
    return AuthService(db)


async def get_listing_service(
    db: AsyncSession = Depends(get_db),
    image_service: ImageService = Depends(get_image_service),
    geocoder: MapboxGeocoder = Depends(get_geocoder)
) -> ListingService:
    """
    Get listing service instance.

    Args:
        db: Database session
        image_service: Injected image service
        geocoder: Injected geocoder

    Returns:
        ListingService instance
    """
    return ListingService(db, image_service, geocoder, get_settings())


async def get_review_service(db: AsyncSession = Depends(get_db)) -> ReviewService:
    return ReviewService(db)


def _extract_token(request: Request, credentials: Optional[HTTPAuthorizationCredentials]) -> Optional[str]:
    if credentials and credentials.credentials:
        return credentials.credentials
    return request.cookies.get(get_settings().auth_cookie_name)


async def get_current_user(
    request: Request,
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(security),
    auth_service: AuthService = Depends(get_auth_service)
) -> User:
    """
    Get current authenticated user from a bearer token or the auth cookie.

    Raises:
        AuthenticationError: If no token is provided
        InvalidTokenError: If the token is invalid or expired
    """
    token = _extract_token(request, credentials)
    if not token:
        raise AuthenticationError()

    return await auth_service.get_current_user(token)


async def get_current_active_user(
    current_user: User = Depends(get_current_user)
) -> User:
    """
    Get current active user.

    Raises:
        InvalidTokenError: If the account has been deactivated
    """
    if not current_user.is_active:
        raise InvalidTokenError("Your account is inactive")

    return current_user


async def require_listing_owner(
    listing_id: uuid.UUID,
    current_user: User = Depends(get_current_active_user),
    listing_service: ListingService = Depends(get_listing_service)
) -> Listing:
    """
    Ensure the current user owns the listing in the path.

    Raises:
        NotFoundError: If the listing doesn't exist
        ListingOwnershipError: If the user is not the owner
    """
    return await listing_service.ensure_owner(listing_id, current_user)


async def require_review_author(
    listing_id: uuid.UUID,
    review_id: uuid.UUID,
    current_user: User = Depends(get_current_active_user),
    review_service: ReviewService = Depends(get_review_service)
) -> Review:
    """
    Ensure the current user wrote the review in the path.

    Raises:
        NotFoundError: If the listing or review doesn't exist
        ReviewAuthorshipError: If the user is not the author
    """
    return await review_service.ensure_author(listing_id, review_id, current_user)
