"""
Database session management.

WHY: Async database sessions are required for FastAPI's async/await pattern.
Using a context manager ensures proper connection cleanup and transaction management.
"""

from typing import AsyncGenerator
from sqlalchemy.ext.asyncio import AsyncSession, create_async_engine, async_sessionmaker

from pricing_api.core.config import settings


# WHY: pool_pre_ping recycles stale connections. Pool sizing only applies to
# server databases; SQLite (used for local runs) manages its own pool.
_engine_options = {"echo": settings.DEBUG, "pool_pre_ping": True}
if not settings.async_database_url.startswith("sqlite"):
    _engine_options.update(pool_size=10, max_overflow=20)

engine = create_async_engine(settings.async_database_url, **_engine_options)

# expire_on_commit=False prevents lazy-loading issues after commit.
AsyncSessionLocal = async_sessionmaker(
    engine,
    class_=AsyncSession,
    expire_on_commit=False,
    autocommit=False,
    autoflush=False,
)


async def get_db() -> AsyncGenerator[AsyncSession, None]:
    """
    Dependency to get database session.

    WHY: Each request gets its own session. The transaction is committed
    when the route returns and rolled back if it raises.

    Yields:
        AsyncSession: Database session for the request
    """
    async with AsyncSessionLocal() as session:
        try:
            yield session
            await session.commit()
        except Exception:
            await session.rollback()
            raise
        finally:
            await session.close()
