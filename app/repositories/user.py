"""
User repository for registration and credential checks.
"""

from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy import select
from app.repositories.base import BaseRepository
from app.models.user import User
from typing import Optional, Dict, Any
import logging

logger = logging.getLogger(__name__)


class UserRepository(BaseRepository[User]):
    """Repository for user accounts."""

    def __init__(self, db: AsyncSession):
        super().__init__(User, db)

    async def create_user(self, user_data: Dict[str, Any]) -> User:
        """
        Create a new user with email normalisation and password hashing.

        Args:
            user_data: Dictionary with first_name, last_name, email and password

        Returns:
            Created user instance

        Raises:
            ValueError: If the email is invalid, taken, or the password is too short
        """
        data = dict(user_data)
        try:
            email = User.validate_email_format(data["email"])

            if await self.get_by_email(email):
                raise ValueError(f"User with email {email} already exists")

            hashed_password = User.hash_password(data.pop("password"))

            created_user = await self.create({
                "first_name": data["first_name"].strip(),
                "last_name": data["last_name"].strip(),
                "email": email,
                "hashed_password": hashed_password,
                "is_active": data.get("is_active", True),
            })
            logger.info(f"Created user: {created_user.email} (ID: {created_user.id})")
            return created_user
        except ValueError as e:
            logger.warning(f"User validation failed: {e}")
            raise

    async def get_by_email(self, email: str) -> Optional[User]:
        """
        Get user by email address.

        Returns:
            User instance if found, None otherwise
        """
        try:
            normalized_email = email.lower().strip()
            result = await self.db.execute(select(User).where(User.email == normalized_email))
            user = result.scalar_one_or_none()

            if not user:
                logger.debug(f"User with email {normalized_email} not found")

            return user
        except Exception as e:
            logger.error(f"Failed to get user by email {email}: {e}")
            raise

    async def authenticate_user(self, email: str, password: str) -> Optional[User]:
        """
        Authenticate user with email and password.

        Returns:
            User instance if the credentials match an active account, None otherwise
        """
        user = await self.get_by_email(email)
        if not user:
            logger.debug(f"Authentication failed: user {email} not found")
            return None

        if not user.is_active:
            logger.debug(f"Authentication failed: user {email} is inactive")
            return None

        if not user.verify_password(password):
            logger.debug(f"Authentication failed: invalid password for {email}")
            return None

        logger.debug(f"User authenticated successfully: {email}")
        return user
