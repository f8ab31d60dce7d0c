"""
Async engine and sessions for the execution log store.

The API reads logs through the get_db dependency; the run logger opens its
own short-lived session per entry from AsyncSessionFactory.
"""

from typing import AsyncGenerator

from sqlalchemy.ext.asyncio import AsyncEngine, AsyncSession, async_sessionmaker, create_async_engine

from content_pipeline.config import settings


def build_engine(url: str) -> AsyncEngine:
    """Create the asyncpg engine; no connection is opened until first use."""
    return create_async_engine(
        url,
        pool_size=settings.DB_POOL_SIZE,
        max_overflow=settings.DB_MAX_OVERFLOW,
        pool_pre_ping=True,
    )


engine = build_engine(settings.async_database_url)

AsyncSessionFactory = async_sessionmaker(engine, expire_on_commit=False, autoflush=False)


async def get_db() -> AsyncGenerator[AsyncSession, None]:
    """
    FastAPI dependency yielding a session per request.

    Commits when the handler returns, rolls back if it raises.
    """
    async with AsyncSessionFactory() as session:
        try:
            yield session
            await session.commit()
        except Exception:
            await session.rollback()
            raise
