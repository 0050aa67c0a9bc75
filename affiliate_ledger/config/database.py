"""
Database engine and session factory.

Creates the async engine from settings and exposes helpers used at
startup, shutdown and per request.
"""

from collections.abc import AsyncIterator

from sqlalchemy.ext.asyncio import (
    AsyncEngine,
    AsyncSession,
    async_sessionmaker,
    create_async_engine,
)

from affiliate_ledger.config.settings import settings


def build_engine(database_url: str | None = None) -> AsyncEngine:
    """
    Create async engine.

    SQLite does not accept pool settings, so they are only passed for
    PostgreSQL.

    Args:
        database_url: Override for settings.database_url

    Returns:
        Configured AsyncEngine
    """
    url = database_url or settings.database_url

    if url.startswith("sqlite"):
        return create_async_engine(url, echo=settings.database_echo)

    return create_async_engine(
        url,
        echo=settings.database_echo,
        pool_pre_ping=True,
        pool_size=settings.database_pool_size,
        max_overflow=settings.database_max_overflow,
    )


def build_session_maker(engine: AsyncEngine) -> async_sessionmaker[AsyncSession]:
    """Create session factory bound to engine."""
    return async_sessionmaker(
        engine,
        class_=AsyncSession,
        expire_on_commit=False,
    )


engine = build_engine()
async_session_maker = build_session_maker(engine)


async def init_db(bind: AsyncEngine | None = None) -> None:
    """Create tables if they don't exist."""
    from affiliate_ledger.models import Base

    async with (bind or engine).begin() as conn:
        await conn.run_sync(Base.metadata.create_all)


async def get_session() -> AsyncIterator[AsyncSession]:
    """Yield a database session."""
    async with async_session_maker() as session:
        yield session


async def close_db() -> None:
    """Dispose engine connections."""
    await engine.dispose()
