"""
Pydantic schemas for user requests and responses.
Signup accepts the camelCase field names sent by the web client.
"""

from pydantic import AliasChoices, BaseModel, ConfigDict, EmailStr, Field, field_validator
from typing import Optional


class SignupRequest(BaseModel):
    """Schema for registering a new user."""

    model_config = ConfigDict(populate_by_name=True)

    first_name: str = Field(
        ...,
        min_length=1,
        max_length=100,
        validation_alias=AliasChoices("firstName", "first_name"),
        examples=["Ada"]
    )

    last_name: str = Field(
        ...,
        min_length=1,
        max_length=100,
        validation_alias=AliasChoices("lastName", "last_name"),
        examples=["Lovelace"]
    )

    email: EmailStr = Field(..., examples=["ada@example.com"])

    password: str = Field(
        ...,
        min_length=8,
        max_length=128,
        description="Password (minimum 8 characters)",
        examples=["securepassword123"]
    )

    @field_validator('email')
    @classmethod
    def normalize_email(cls, v):
        return v.lower().strip()

    @field_validator('first_name', 'last_name')
    @classmethod
    def validate_name(cls, v):
        if not v or not v.strip():
            raise ValueError("Name cannot be empty")
        return v.strip()


class LoginRequest(BaseModel):
    email: EmailStr = Field(..., examples=["ada@example.com"])
    password: str = Field(..., min_length=1, examples=["securepassword123"])

    @field_validator('email')
    @classmethod
    def normalize_email(cls, v):
        return v.lower().strip()


class UserResponse(BaseModel):
    """Public user representation."""

    id: str
    first_name: str
    last_name: str
    email: str


class UserEnvelope(BaseModel):
    message: Optional[str] = None
    user: UserResponse


class AuthResponse(BaseModel):
    """Login result; the token is also set as an HTTP-only cookie."""

    message: str = Field(..., examples=["Login successful!"])
    user: UserResponse
    access_token: str
    token_type: str = "bearer"
    expires_in: int = Field(..., description="Token lifetime in seconds")
