"""
Test factories for creating test data.

WHY: Factories provide a consistent, reusable way to create test objects,
so tests stay consistent when models change.
"""

from datetime import datetime
from typing import Any, Dict, List, Optional

from sqlalchemy.ext.asyncio import AsyncSession

from pricing_api.core.auth import hash_password
from pricing_api.dao.proposal import ProposalDAO
from pricing_api.dao.user import UserDAO
from pricing_api.models.proposal import Proposal, ProposalType
from pricing_api.models.user import User, UserRole


class UserFactory:
    """
    Factory for creating User test instances.

    WHY: Provides consistent user creation with proper password hashing
    for testing authentication and role checks.
    """

    @staticmethod
    async def create(
        session: AsyncSession,
        email: str = "test@example.com",
        password: str = "TestPassword123!",
        name: str = "Test User",
        role: UserRole = UserRole.USER,
        is_active: bool = True,
    ) -> User:
        """
        Create a user for testing.

        Args:
            session: Database session
            email: User email (must be unique)
            password: Plain text password (will be hashed)
            name: User's full name
            role: admin, director or user
            is_active: Whether user is active

        Returns:
            Created User instance
        """
        user = await UserDAO(session).create_user(
            email=email,
            hashed_password=hash_password(password),
            name=name,
            role=role,
        )
        if not is_active:
            user.is_active = False
            await session.flush()

        await session.commit()
        await session.refresh(user)
        return user


class ProposalFactory:
    """Factory for creating Proposal test instances through ProposalDAO."""

    @staticmethod
    async def create(
        session: AsyncSession,
        title: str = "Proposta Teste",
        type: ProposalType = ProposalType.GENERAL,
        created_by: Optional[int] = None,
        products: Optional[List[Dict[str, Any]]] = None,
        metadata: Optional[Dict[str, Any]] = None,
        date: Optional[datetime] = None,
        **fields: Any,
    ) -> Proposal:
        """
        Create a proposal for testing.

        Args:
            session: Database session
            title: Proposal title
            type: Calculator type
            created_by: Creating user id
            products: Priced line items
            metadata: Metadata blob (discount flags, ...)
            date: Proposal date (drives the yearly number)
            **fields: Any other Proposal column

        Returns:
            Created Proposal instance
        """
        proposal = await ProposalDAO(session).create_proposal(
            created_by=created_by,
            title=title,
            type=type,
            products=products or [],
            extra_data=metadata or {},
            date=date,
            **fields,
        )
        await session.commit()
        await session.refresh(proposal)
        return proposal
