"""
Error response schemas for API documentation.
Every error body carries a human-readable ``error`` string and the error kind as ``code``.
"""

from pydantic import BaseModel, Field
from typing import List, Optional, Any, Dict


class ErrorDetail(BaseModel):
    """Schema for individual field error."""

    field: Optional[str] = Field(None, description="Field name that caused the error", examples=["listing[price]"])
    message: str = Field(..., description="Human-readable error message", examples=["Input should be greater than or equal to 0"])
    type: Optional[str] = Field(None, description="Error type identifier", examples=["greater_than_equal"])


class ErrorResponse(BaseModel):
    """Schema for standardized error responses."""

    error: str = Field(..., description="Human-readable error message", examples=["Property does not exist!"])
    code: str = Field(..., description="Error kind", examples=["not_found"])
    timestamp: str = Field(..., description="Error timestamp in ISO format", examples=["2024-01-01T00:00:00Z"])
    request_id: Optional[str] = Field(None, description="Request identifier for tracking", examples=["abc12345"])
    details: Optional[List[ErrorDetail]] = Field(None, description="Field errors for validation failures")


_DESCRIPTIONS = {
    400: ("Bad Request - validation, location or upload constraint error", "validation_error", "Location is required"),
    401: ("Unauthorized - authentication required", "authentication_error", "You must be logged in to perform this action"),
    403: ("Forbidden - not the owner or author", "authorization_error", "You are not the owner of this property."),
    404: ("Not Found - resource does not exist", "not_found", "Property does not exist!"),
    409: ("Conflict - resource already exists", "conflict", "User with identifier 'ada@example.com' already exists"),
    500: ("Internal Server Error - provider or unexpected failure", "upload_provider_error",
          "Failed to upload image to cloud storage. Please try again."),
}


def get_error_responses(*status_codes: int) -> Dict[int, Dict[str, Any]]:
    """
    Build OpenAPI ``responses`` entries for the given status codes.

    Args:
        status_codes: HTTP status codes to include

    Returns:
        Dictionary suitable for a route decorator's ``responses`` argument
    """
    responses = {}
    for code in status_codes:
        if code not in _DESCRIPTIONS:
            continue
        description, kind, message = _DESCRIPTIONS[code]
        responses[code] = {
            "description": description,
            "model": ErrorResponse,
            "content": {
                "application/json": {
                    "example": {
                        "error": message,
                        "code": kind,
                        "timestamp": "2024-01-01T00:00:00Z",
                        "request_id": "abc12345",
                    }
                }
            },
        }
    return responses


def get_crud_error_responses() -> Dict[int, Dict[str, Any]]:
    return get_error_responses(400, 401, 403, 404, 500)
