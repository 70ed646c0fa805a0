"""
Service layer for business logic implementation.
Contains services for authentication, listings, reviews, images, geocoding and error handling.
"""

from .auth import AuthService
from .listing import ListingService
from .review import ReviewService
from .image import ImageService, ImageUpload, UploadedImage, UploadConstraints
from .storage import ImageStorage, CloudinaryImageStorage, StoredImage
from .geocoding import MapboxGeocoder, Coordinates
from .error_handler import ErrorHandlerService

__all__ = [
    "AuthService",
    "ListingService",
    "ReviewService",
    "ImageService",
    "ImageUpload",
    "UploadedImage",
    "UploadConstraints",
    "ImageStorage",
    "CloudinaryImageStorage",
    "StoredImage",
    "MapboxGeocoder",
    "Coordinates",
    "ErrorHandlerService"
]
