"""
Authentication service for signup, login and token handling.
"""

from typing import Tuple
from sqlalchemy.ext.asyncio import AsyncSession
from app.repositories.user import UserRepository
from app.models.user import User
from app.schemas.user import SignupRequest
from app.utils.auth import create_access_token, verify_token
from app.utils.exceptions import (
    DuplicateResourceError,
    InvalidCredentialsError,
    InvalidTokenError,
    ValidationError
)
from jose import JWTError
import uuid
import logging

logger = logging.getLogger(__name__)


class AuthService:
    """
    Authentication service for managing user accounts and sessions.
    Tokens are stateless JWTs; logout is handled by clearing the client's cookie.
    """

    def __init__(self, db_session: AsyncSession):
        self.db = db_session
        self.user_repo = UserRepository(db_session)

    async def register_user(self, signup: SignupRequest) -> User:
        """
        Register a new user.

        Args:
            signup: Validated signup data

        Returns:
            Created user

        Raises:
            DuplicateResourceError: If the email is already registered
            ValidationError: If the email or password is rejected
        """
        if await self.user_repo.get_by_email(signup.email):
            raise DuplicateResourceError("User", signup.email)

        try:
            user = await self.user_repo.create_user(signup.model_dump())
        except ValueError as e:
            raise ValidationError(str(e))

        logger.info(f"User registered: {user.email} (ID: {user.id})")
        return user

    async def authenticate_user(self, email: str, password: str) -> User:
        """
        Authenticate user with email and password.

        Raises:
            InvalidCredentialsError: If the credentials don't match an active account
        """
        if not email or not password:
            raise InvalidCredentialsError()

        user = await self.user_repo.authenticate_user(email, password)
        if not user:
            logger.warning(f"Failed login attempt for {email.lower().strip()}")
            raise InvalidCredentialsError()

        return user

    def create_access_token(self, user: User) -> str:
        return create_access_token(user_id=user.id, email=user.email)

    async def login(self, email: str, password: str) -> Tuple[User, str]:
        """
        Authenticate user and issue an access token.

        Returns:
            Tuple of (user, access_token)
        """
        user = await self.authenticate_user(email, password)
        token = self.create_access_token(user)
        logger.info(f"User logged in: {user.email}")
        return user, token

    async def get_current_user(self, token: str) -> User:
        """
        Resolve the user behind an access token.

        Raises:
            InvalidTokenError: If the token is invalid, expired or names an unknown or inactive user
        """
        try:
            payload = verify_token(token)
            user_id = uuid.UUID(payload.user_id)
        except (JWTError, ValueError) as e:
            logger.debug(f"Rejected access token: {e}")
            raise InvalidTokenError()

        user = await self.user_repo.get_by_id(user_id)
        if not user or not user.is_active:
            raise InvalidTokenError()

        return user
