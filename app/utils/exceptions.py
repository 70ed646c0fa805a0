"""
Custom exception classes for the ProRental API.
Every exception carries an ErrorKind; the HTTP status is derived from the kind.
"""

from typing import Any, Dict, Optional, List
from fastapi import HTTPException, status
import enum


class ErrorKind(str, enum.Enum):
    """Tagged error kinds surfaced by services and adapters."""
    VALIDATION = "validation_error"
    LOCATION_UNRESOLVED = "location_unresolved"
    PAYLOAD_TOO_LARGE = "payload_too_large"
    TOO_MANY_FILES = "too_many_files"
    UNSUPPORTED_MEDIA_TYPE = "unsupported_media_type"
    AUTHENTICATION = "authentication_error"
    AUTHORIZATION = "authorization_error"
    NOT_FOUND = "not_found"
    CONFLICT = "conflict"
    UPLOAD_PROVIDER = "upload_provider_error"
    GEOCODING_PROVIDER = "geocoding_provider_error"
    UNKNOWN = "unknown_error"


STATUS_BY_KIND: Dict[ErrorKind, int] = {
    ErrorKind.VALIDATION: status.HTTP_400_BAD_REQUEST,
    ErrorKind.LOCATION_UNRESOLVED: status.HTTP_400_BAD_REQUEST,
    ErrorKind.PAYLOAD_TOO_LARGE: status.HTTP_400_BAD_REQUEST,
    ErrorKind.TOO_MANY_FILES: status.HTTP_400_BAD_REQUEST,
    ErrorKind.UNSUPPORTED_MEDIA_TYPE: status.HTTP_400_BAD_REQUEST,
    ErrorKind.AUTHENTICATION: status.HTTP_401_UNAUTHORIZED,
    ErrorKind.AUTHORIZATION: status.HTTP_403_FORBIDDEN,
    ErrorKind.NOT_FOUND: status.HTTP_404_NOT_FOUND,
    ErrorKind.CONFLICT: status.HTTP_409_CONFLICT,
    ErrorKind.UPLOAD_PROVIDER: status.HTTP_500_INTERNAL_SERVER_ERROR,
    ErrorKind.GEOCODING_PROVIDER: status.HTTP_500_INTERNAL_SERVER_ERROR,
    ErrorKind.UNKNOWN: status.HTTP_500_INTERNAL_SERVER_ERROR,
}


class APIException(HTTPException):
    """Base API exception class."""

    kind: ErrorKind = ErrorKind.UNKNOWN

    def __init__(
        self,
        detail: str,
        kind: Optional[ErrorKind] = None,
        headers: Optional[Dict[str, Any]] = None
    ):
        if kind is not None:
            self.kind = kind
        super().__init__(status_code=STATUS_BY_KIND[self.kind], detail=detail, headers=headers)

    @property
    def error_code(self) -> str:
        return self.kind.value


class ValidationError(APIException):
    """Malformed or missing input."""

    kind = ErrorKind.VALIDATION

    def __init__(
        self,
        detail: str,
        field_errors: Optional[List[Dict[str, str]]] = None
    ):
        super().__init__(detail)
        self.field_errors = field_errors or []


class NotFoundError(APIException):
    """Resource not found exception."""

    kind = ErrorKind.NOT_FOUND

    def __init__(self, resource: str, resource_id: Optional[str] = None):
        detail = f"{resource} does not exist!"
        if resource_id:
            detail = f"{resource} not found with ID: {resource_id}"
        super().__init__(detail)


class AuthenticationError(APIException):
    """Authentication required exception."""

    kind = ErrorKind.AUTHENTICATION

    def __init__(self, detail: str = "You must be logged in to perform this action"):
        super().__init__(detail, headers={"WWW-Authenticate": "Bearer"})


class InvalidCredentialsError(AuthenticationError):
    """Invalid login credentials exception."""

    def __init__(self, detail: str = "Invalid email or password"):
        super().__init__(detail)


class InvalidTokenError(AuthenticationError):
    """Invalid or expired JWT token exception."""

    def __init__(self, detail: str = "Invalid or expired session"):
        super().__init__(detail)


class AuthorizationError(APIException):
    """Access forbidden exception."""

    kind = ErrorKind.AUTHORIZATION

    def __init__(self, detail: str = "Access forbidden"):
        super().__init__(detail)


class ListingOwnershipError(AuthorizationError):
    """Caller is not the owner of the listing."""

    def __init__(self, detail: str = "You are not the owner of this property."):
        super().__init__(detail)


class ReviewAuthorshipError(AuthorizationError):
    """Caller is not the author of the review."""

    def __init__(self, detail: str = "You are not the author of this review."):
        super().__init__(detail)


class DuplicateResourceError(APIException):
    """Duplicate resource exception."""

    kind = ErrorKind.CONFLICT

    def __init__(self, resource: str, identifier: str):
        super().__init__(f"{resource} with identifier '{identifier}' already exists")


class LocationUnresolvedError(APIException):
    """The geocoder recognised no place for the given location text."""

    kind = ErrorKind.LOCATION_UNRESOLVED

    def __init__(self, location: Optional[str] = None):
        detail = "Could not find the specified location. Please provide a more specific address."
        if location:
            detail = f"Could not find the location '{location}'. Please provide a more specific address."
        super().__init__(detail)


class GeocodingProviderError(APIException):
    """The geocoding provider could not be reached or answered unusably."""

    kind = ErrorKind.GEOCODING_PROVIDER

    def __init__(self, detail: str = "Failed to geocode location. Please check the location and try again."):
        super().__init__(detail)


# File upload exceptions
class PayloadTooLargeError(APIException):
    """A single file exceeds the per-file size limit."""

    kind = ErrorKind.PAYLOAD_TOO_LARGE

    def __init__(self, filename: str, max_size: int):
        max_mb = max_size / (1024 * 1024)
        super().__init__(f"File '{filename}' is too large. Maximum size is {max_mb:g}MB per file.")


class TooManyFilesError(APIException):
    """More files than allowed in one upload batch."""

    kind = ErrorKind.TOO_MANY_FILES

    def __init__(self, count: int, limit: int):
        super().__init__(f"Too many files uploaded ({count}). Maximum {limit} images allowed.")


class UnsupportedMediaTypeError(APIException):
    """File matches neither an allowed extension nor an allowed content type."""

    kind = ErrorKind.UNSUPPORTED_MEDIA_TYPE

    def __init__(self, filename: str, supported_types: List[str]):
        supported = ", ".join(supported_types)
        super().__init__(f"Unsupported file '{filename}'. Only image files ({supported}) are allowed!")


class UploadProviderError(APIException):
    """The image host is unreachable, misconfigured or rejected the upload."""

    kind = ErrorKind.UPLOAD_PROVIDER

    def __init__(self, detail: str = "Failed to upload image to cloud storage. Please try again."):
        super().__init__(detail)


class UnknownError(APIException):
    """Fallback for failures that match no other kind."""

    kind = ErrorKind.UNKNOWN

    def __init__(self, detail: str = "An unexpected error occurred. Please try again later."):
        super().__init__(detail)
