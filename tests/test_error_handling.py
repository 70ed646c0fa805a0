"""
Tests for error kinds, status mapping and error response formatting.
"""

import json

import pytest
from fastapi import HTTPException
from pydantic import BaseModel, Field, ValidationError as PydanticValidationError
from sqlalchemy.exc import IntegrityError, OperationalError

from app.services.error_handler import ErrorHandlerService
from app.utils.exceptions import (
    AuthenticationError,
    DuplicateResourceError,
    ErrorKind,
    GeocodingProviderError,
    InvalidCredentialsError,
    ListingOwnershipError,
    LocationUnresolvedError,
    NotFoundError,
    PayloadTooLargeError,
    ReviewAuthorshipError,
    TooManyFilesError,
    UnknownError,
    UnsupportedMediaTypeError,
    UploadProviderError,
    ValidationError
)


class _Sample(BaseModel):
    rating: int = Field(..., ge=1, le=5)


class TestErrorKinds:
    """Each exception carries a kind and the status derived from it."""

    @pytest.mark.parametrize(
        "exception,kind,status_code",
        [
            (ValidationError("bad"), ErrorKind.VALIDATION, 400),
            (LocationUnresolvedError("Atlantis"), ErrorKind.LOCATION_UNRESOLVED, 400),
            (PayloadTooLargeError("huge.jpg", 5 * 1024 * 1024), ErrorKind.PAYLOAD_TOO_LARGE, 400),
            (TooManyFilesError(9, 8), ErrorKind.TOO_MANY_FILES, 400),
            (UnsupportedMediaTypeError("a.pdf", ["jpg", "png"]), ErrorKind.UNSUPPORTED_MEDIA_TYPE, 400),
            (AuthenticationError(), ErrorKind.AUTHENTICATION, 401),
            (InvalidCredentialsError(), ErrorKind.AUTHENTICATION, 401),
            (ListingOwnershipError(), ErrorKind.AUTHORIZATION, 403),
            (ReviewAuthorshipError(), ErrorKind.AUTHORIZATION, 403),
            (NotFoundError("Property"), ErrorKind.NOT_FOUND, 404),
            (DuplicateResourceError("User", "ada@example.com"), ErrorKind.CONFLICT, 409),
            (UploadProviderError(), ErrorKind.UPLOAD_PROVIDER, 500),
            (GeocodingProviderError(), ErrorKind.GEOCODING_PROVIDER, 500),
            (UnknownError(), ErrorKind.UNKNOWN, 500),
        ]
    )
    def test_kind_and_status(self, exception, kind, status_code):
        assert exception.kind == kind
        assert exception.error_code == kind.value
        assert exception.status_code == status_code

    def test_messages(self):
        assert NotFoundError("Property").detail == "Property does not exist!"
        assert "5MB" in PayloadTooLargeError("huge.jpg", 5 * 1024 * 1024).detail
        assert "Atlantis" in LocationUnresolvedError("Atlantis").detail
        assert "jpg, png" in UnsupportedMediaTypeError("a.pdf", ["jpg", "png"]).detail

    def test_authentication_errors_carry_challenge_header(self):
        assert AuthenticationError().headers == {"WWW-Authenticate": "Bearer"}


class TestErrorHandlerService:
    """Test error response formatting."""

    def test_format_error_response(self):
        response = ErrorHandlerService.format_error_response(
            error_code="validation_error",
            message="Title cannot be empty",
            details=[{"field": "title", "message": "Title cannot be empty"}],
            request_id="abc12345"
        )

        assert response["error"] == "Title cannot be empty"
        assert response["code"] == "validation_error"
        assert response["request_id"] == "abc12345"
        assert response["details"][0]["field"] == "title"
        assert response["timestamp"].endswith("Z")

    def test_format_error_response_without_details(self):
        response = ErrorHandlerService.format_error_response(error_code="not_found", message="Gone")

        assert "details" not in response
        assert "request_id" not in response

    def test_handle_api_exception(self):
        response = ErrorHandlerService.handle_api_exception(
            ValidationError("Bad form", field_errors=[{"field": "price", "message": "must be positive"}])
        )

        body = json.loads(response.body)
        assert response.status_code == 400
        assert body["error"] == "Bad form"
        assert body["code"] == "validation_error"
        assert body["details"] == [{"field": "price", "message": "must be positive"}]
        assert body["request_id"]

    def test_handle_pydantic_validation_error(self):
        with pytest.raises(PydanticValidationError) as exc_info:
            _Sample(rating=9)

        response = ErrorHandlerService.handle_validation_error(exc_info.value)

        body = json.loads(response.body)
        assert response.status_code == 400
        assert body["code"] == "validation_error"
        assert body["details"][0]["field"] == "rating"
        assert body["error"].startswith("rating:")

    def test_handle_integrity_error(self):
        error = IntegrityError("INSERT INTO users", {}, Exception("UNIQUE constraint failed: users.email"))

        response = ErrorHandlerService.handle_database_error(error)

        assert response.status_code == 409
        assert json.loads(response.body)["code"] == "conflict"

    def test_handle_other_database_error(self):
        error = OperationalError("SELECT 1", {}, Exception("connection refused"))

        response = ErrorHandlerService.handle_database_error(error)

        body = json.loads(response.body)
        assert response.status_code == 500
        assert body["error"] == "Database operation failed"
        assert "connection refused" not in body["error"]

    def test_handle_http_exception(self):
        response = ErrorHandlerService.handle_http_exception(HTTPException(status_code=405, detail="Method Not Allowed"))

        body = json.loads(response.body)
        assert response.status_code == 405
        assert body["code"] == "http_405"
        assert body["error"] == "Method Not Allowed"

    def test_handle_unexpected_error_hides_details(self):
        response = ErrorHandlerService.handle_unexpected_error(RuntimeError("secret stack detail"))

        body = json.loads(response.body)
        assert response.status_code == 500
        assert body["code"] == "unknown_error"
        assert "secret" not in body["error"]
