"""
Pytest configuration and fixtures.

WHY: Fixtures provide reusable test setup/teardown logic, reducing
duplication and ensuring consistent test environments.
"""

import os

# WHY: Settings are read at import time, so the environment must be ready
# before the application package is imported
os.environ.setdefault("JWT_SECRET", "test-secret-key-for-pricing-api")
os.environ.setdefault("DATABASE_URL", "sqlite+aiosqlite:///:memory:")
os.environ.setdefault("REDIS_URL", "redis://localhost:6379/15")

import pytest
import pytest_asyncio
from typing import AsyncGenerator, Dict
from sqlalchemy.ext.asyncio import AsyncSession, create_async_engine, async_sessionmaker
from sqlalchemy.pool import StaticPool
from httpx import AsyncClient, ASGITransport

from pricing_api.main import app
from pricing_api.models.base import Base
from pricing_api.models.user import UserRole
from pricing_api.db.session import get_db
from pricing_api.core import auth as auth_module

from tests.factories import UserFactory


# Test database URL
# WHY: Using SQLite for tests eliminates external database dependencies
TEST_ASYNC_DATABASE_URL = "sqlite+aiosqlite:///:memory:"


class FakeRedis:
    """
    In-memory stand-in for the token blacklist client.

    Only the commands used by core.auth are implemented; TTLs are recorded
    but never expire during a test.
    """

    def __init__(self):
        self.store: Dict[str, str] = {}
        self.ttls: Dict[str, int] = {}

    async def setex(self, key: str, ttl: int, value: str) -> bool:
        self.store[key] = value
        self.ttls[key] = ttl
        return True

    async def exists(self, *keys: str) -> int:
        return sum(1 for key in keys if key in self.store)


@pytest_asyncio.fixture(scope="function")
async def db_engine():
    """
    Create a test database engine.

    WHY: Function scope ensures each test gets a fresh database state.
    StaticPool keeps the single in-memory database shared by every session.
    """
    engine = create_async_engine(
        TEST_ASYNC_DATABASE_URL,
        echo=False,
        poolclass=StaticPool,
        connect_args={"check_same_thread": False},
    )

    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

    yield engine

    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.drop_all)

    await engine.dispose()


@pytest_asyncio.fixture
async def db_session(db_engine) -> AsyncGenerator[AsyncSession, None]:
    """
    Create a test database session.

    Yields:
        AsyncSession: Database session for the test
    """
    async_session = async_sessionmaker(
        db_engine,
        class_=AsyncSession,
        expire_on_commit=False,
    )

    async with async_session() as session:
        yield session
        await session.rollback()


@pytest_asyncio.fixture
async def client(db_session: AsyncSession) -> AsyncGenerator[AsyncClient, None]:
    """
    Create a test HTTP client.

    WHY: AsyncClient with ASGITransport exercises the full app (middleware,
    exception handlers, dependencies) without running a server.
    """

    async def override_get_db():
        yield db_session

    app.dependency_overrides[get_db] = override_get_db

    async with AsyncClient(transport=ASGITransport(app=app), base_url="http://test") as ac:
        yield ac

    app.dependency_overrides.clear()


@pytest.fixture(autouse=True)
def fake_redis(monkeypatch) -> FakeRedis:
    """
    Replace the Redis client used for the token blacklist.

    WHY: Tests must not depend on a running Redis server.
    """
    redis = FakeRedis()

    async def get_fake_redis():
        return redis

    monkeypatch.setattr(auth_module, "get_redis", get_fake_redis)
    auth_module._redis_client = None
    yield redis
    auth_module._redis_client = None


@pytest_asyncio.fixture
async def test_user(db_session: AsyncSession):
    """Seller account."""
    return await UserFactory.create(
        db_session,
        email="vendedor@example.com",
        password="SellerPassword123!",
        name="Vendedor Teste",
        role=UserRole.USER,
    )


@pytest_asyncio.fixture
async def test_admin(db_session: AsyncSession):
    """Admin account, allowed to edit the shared price tables."""
    return await UserFactory.create(
        db_session,
        email="admin@example.com",
        password="AdminPassword123!",
        name="Admin Teste",
        role=UserRole.ADMIN,
    )


@pytest_asyncio.fixture
async def test_director(db_session: AsyncSession):
    """Director account, allowed to edit commission tables."""
    return await UserFactory.create(
        db_session,
        email="diretor@example.com",
        password="DirectorPassword123!",
        name="Diretor Teste",
        role=UserRole.DIRECTOR,
    )


async def login(client: AsyncClient, email: str, password: str) -> Dict[str, str]:
    """Log in and return the Authorization header."""
    response = await client.post("/api/auth/login", json={"email": email, "password": password})
    assert response.status_code == 200, response.text
    return {"Authorization": f"Bearer {response.json()['access_token']}"}


@pytest_asyncio.fixture
async def user_headers(client: AsyncClient, test_user) -> Dict[str, str]:
    return await login(client, "vendedor@example.com", "SellerPassword123!")


@pytest_asyncio.fixture
async def admin_headers(client: AsyncClient, test_admin) -> Dict[str, str]:
    return await login(client, "admin@example.com", "AdminPassword123!")


@pytest_asyncio.fixture
async def director_headers(client: AsyncClient, test_director) -> Dict[str, str]:
    return await login(client, "diretor@example.com", "DirectorPassword123!")
