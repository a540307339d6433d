"""
User Data Access Object.

WHY: UserDAO provides database operations for User model, following
the DAO pattern for separation of concerns and testability.
"""

from typing import Optional
from sqlalchemy import select, func
from sqlalchemy.ext.asyncio import AsyncSession

from pricing_api.dao.base import BaseDAO
from pricing_api.models.user import User, UserRole
from pricing_api.core.exceptions import ResourceAlreadyExistsError


class UserDAO(BaseDAO[User]):
    """Data Access Object for User model."""

    def __init__(self, session: AsyncSession):
        """Initialize UserDAO with session."""
        super().__init__(User, session)

    async def get_by_email(self, email: str) -> Optional[User]:
        """
        Retrieve user by email address.

        WHY: Email is the login identifier. Case-insensitive comparison
        prevents duplicate accounts with different casing.

        Example:
            >>> user = await user_dao.get_by_email("admin@example.com")
            >>> user.email
            'admin@example.com'
        """
        result = await self.session.execute(
            select(User).where(func.lower(User.email) == email.lower())
        )
        return result.scalar_one_or_none()

    async def email_exists(self, email: str) -> bool:
        result = await self.session.execute(
            select(User.id).where(func.lower(User.email) == email.lower()).limit(1)
        )
        return result.scalar_one_or_none() is not None

    async def create_user(
        self,
        email: str,
        hashed_password: str,
        name: str,
        role: UserRole = UserRole.USER,
    ) -> User:
        """
        Create a new user.

        Args:
            email: User's email address
            hashed_password: Already hashed password (use hash_password())
            name: User's full name
            role: admin, director or user

        Returns:
            Created User instance

        Raises:
            ResourceAlreadyExistsError: If email already exists
        """
        if await self.email_exists(email):
            raise ResourceAlreadyExistsError(
                message="User with this email already exists",
                resource_type="User",
                email=email,
            )

        return await self.create(
            email=email,
            hashed_password=hashed_password,
            name=name,
            role=role,
            is_active=True,
        )

    async def deactivate_user(self, user_id: int) -> Optional[User]:
        """
        Deactivate a user (soft delete).

        WHY: Proposals keep pointing at their creator, so users are never
        hard deleted.
        """
        return await self.update(user_id, is_active=False)
