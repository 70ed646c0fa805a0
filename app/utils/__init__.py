"""
Utility modules for the ProRental API.
"""

from .auth import (
    create_access_token,
    verify_token,
    TokenPayload
)

from .exceptions import (
    ErrorKind,
    APIException,
    ValidationError,
    NotFoundError,
    AuthenticationError,
    AuthorizationError,
    InvalidCredentialsError,
    InvalidTokenError,
    ListingOwnershipError,
    ReviewAuthorshipError,
    DuplicateResourceError,
    LocationUnresolvedError,
    GeocodingProviderError,
    PayloadTooLargeError,
    TooManyFilesError,
    UnsupportedMediaTypeError,
    UploadProviderError,
    UnknownError
)

# Dependencies are imported directly where needed to avoid circular imports

__all__ = [
    # Auth utilities
    "create_access_token",
    "verify_token",
    "TokenPayload",

    # Exceptions
    "ErrorKind",
    "APIException",
    "ValidationError",
    "NotFoundError",
    "AuthenticationError",
    "AuthorizationError",
    "InvalidCredentialsError",
    "InvalidTokenError",
    "ListingOwnershipError",
    "ReviewAuthorshipError",
    "DuplicateResourceError",
    "LocationUnresolvedError",
    "GeocodingProviderError",
    "PayloadTooLargeError",
    "TooManyFilesError",
    "UnsupportedMediaTypeError",
    "UploadProviderError",
    "UnknownError",
]
