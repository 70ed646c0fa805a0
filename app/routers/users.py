"""
User API endpoints for signup, login, logout and the current user.
Successful signup and login set the access token as an HTTP-only cookie.
"""

from fastapi import APIRouter, Depends, Response, status
from app.config import settings
from app.models.user import User
from app.services.auth import AuthService
from app.schemas.user import (
    SignupRequest,
    LoginRequest,
    UserResponse,
    UserEnvelope,
    AuthResponse
)
from app.schemas.listing import MessageResponse
from app.utils.dependencies import get_auth_service, get_current_active_user
from app.schemas.error import get_error_responses


router = APIRouter(prefix="/users", tags=["Users"])


def _set_auth_cookie(response: Response, token: str) -> None:
    response.set_cookie(
        key=settings.auth_cookie_name,
        value=token,
        max_age=settings.access_token_expire_minutes * 60,
        httponly=True,
        secure=settings.auth_cookie_secure,
        samesite="lax",
    )


@router.post(
    "/signup",
    response_model=UserEnvelope,
    status_code=status.HTTP_201_CREATED,
    summary="Register",
    description="Create an account and log it in.",
    responses=get_error_responses(400, 409)
)
async def signup(
    signup_data: SignupRequest,
    response: Response,
    auth_service: AuthService = Depends(get_auth_service)
) -> UserEnvelope:
    """
    Register a new user.

    Raises:
        DuplicateResourceError: If the email is already registered
    """
    user = await auth_service.register_user(signup_data)
    _set_auth_cookie(response, auth_service.create_access_token(user))

    return UserEnvelope(
        message="User registered successfully!",
        user=UserResponse.model_validate(user.to_dict())
    )


@router.post(
    "/login",
    response_model=AuthResponse,
    status_code=status.HTTP_200_OK,
    summary="Log in",
    description="Authenticate with email and password. The token is returned and set as a cookie.",
    responses=get_error_responses(400, 401)
)
async def login(
    login_data: LoginRequest,
    response: Response,
    auth_service: AuthService = Depends(get_auth_service)
) -> AuthResponse:
    """
    Authenticate user and return a JWT access token.

    Raises:
        InvalidCredentialsError: If credentials are invalid
    """
    user, access_token = await auth_service.login(login_data.email, login_data.password)
    _set_auth_cookie(response, access_token)

    return AuthResponse(
        message="Login successful!",
        user=UserResponse.model_validate(user.to_dict()),
        access_token=access_token,
        token_type="bearer",
        expires_in=settings.access_token_expire_minutes * 60
    )


@router.get(
    "/logout",
    response_model=MessageResponse,
    status_code=status.HTTP_200_OK,
    summary="Log out",
    description="Clear the auth cookie."
)
async def logout(response: Response) -> MessageResponse:
    response.delete_cookie(
        key=settings.auth_cookie_name,
        httponly=True,
        secure=settings.auth_cookie_secure,
        samesite="lax",
    )
    return MessageResponse(message="You are logged out!")


@router.get(
    "/me",
    response_model=UserEnvelope,
    status_code=status.HTTP_200_OK,
    summary="Current user",
    description="Get the authenticated user.",
    responses=get_error_responses(401)
)
async def get_me(
    current_user: User = Depends(get_current_active_user)
) -> UserEnvelope:
    return UserEnvelope(user=UserResponse.model_validate(current_user.to_dict()))
