"""
Tests for UserDAO.
"""

import pytest

from pricing_api.core.exceptions import ResourceAlreadyExistsError
from pricing_api.dao.user import UserDAO
from pricing_api.models.user import UserRole


class TestUserDAO:
    """User lookups and creation."""

    async def test_get_by_email_is_case_insensitive(self, db_session, test_user):
        user = await UserDAO(db_session).get_by_email("VENDEDOR@example.com")
        assert user.id == test_user.id

    async def test_unknown_email(self, db_session):
        assert await UserDAO(db_session).get_by_email("nobody@example.com") is None

    async def test_duplicate_email(self, db_session, test_user):
        with pytest.raises(ResourceAlreadyExistsError):
            await UserDAO(db_session).create_user(
                email="Vendedor@Example.com",
                hashed_password="x",
                name="Outro",
            )

    async def test_role_defaults_to_seller(self, db_session):
        user = await UserDAO(db_session).create_user(email="novo@example.com", hashed_password="x", name="Novo")

        assert user.role == UserRole.USER
        assert user.is_active is True

    async def test_deactivate(self, db_session, test_user):
        user = await UserDAO(db_session).deactivate_user(test_user.id)
        assert user.is_active is False
