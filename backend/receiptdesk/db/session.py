"""
Database session management.

WHY: Async database sessions are required for FastAPI's async/await pattern.
The engine is created on first use and reused for the process lifetime;
the application lifespan disposes it on shutdown.
"""

from typing import AsyncGenerator, Optional

from sqlalchemy.ext.asyncio import (
    AsyncEngine,
    AsyncSession,
    async_sessionmaker,
    create_async_engine,
)

from receiptdesk.core.config import settings


_engine: Optional[AsyncEngine] = None
_session_factory: Optional[async_sessionmaker] = None


def _engine_options() -> dict:
    # sqlite (tests, local runs) uses a static pool without size settings
    if settings.is_sqlite:
        return {"echo": settings.DATABASE_ECHO}
    return {
        "echo": settings.DATABASE_ECHO,
        "pool_pre_ping": True,
        "pool_size": 10,
        "max_overflow": 20,
    }


def get_engine() -> AsyncEngine:
    """
    Get the process-wide async engine, creating it on first use.

    WHY: pool_pre_ping recycles stale connections in long-running processes.
    """
    global _engine
    if _engine is None:
        _engine = create_async_engine(settings.async_database_url, **_engine_options())
    return _engine


def get_session_factory() -> async_sessionmaker:
    """
    Session factory bound to the process-wide engine.

    WHY: expire_on_commit=False prevents lazy-loading issues after commit.
    """
    global _session_factory
    if _session_factory is None:
        _session_factory = async_sessionmaker(
            get_engine(),
            class_=AsyncSession,
            expire_on_commit=False,
            autoflush=False,
        )
    return _session_factory


async def dispose_engine() -> None:
    """Close pooled connections. Called from the application lifespan."""
    global _engine, _session_factory
    if _engine is not None:
        await _engine.dispose()
    _engine = None
    _session_factory = None


async def get_db() -> AsyncGenerator[AsyncSession, None]:
    """
    Dependency to get database session.

    Each request gets its own session; the transaction commits when the
    handler returns and rolls back if it raises.

    Yields:
        AsyncSession: Database session for the request
    """
    async with get_session_factory()() as session:
        try:
            yield session
            await session.commit()
        except Exception:
            await session.rollback()
            raise
