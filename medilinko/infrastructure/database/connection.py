"""
Database engine and session management
"""
from sqlalchemy.ext.asyncio import (
    create_async_engine,
    AsyncEngine,
    AsyncSession,
    async_sessionmaker,
)
from typing import AsyncGenerator, Optional

from medilinko.app.config import settings

_async_engine: Optional[AsyncEngine] = None
_session_factory: Optional[async_sessionmaker[AsyncSession]] = None


def get_async_engine() -> AsyncEngine:
    """
    Get the async database engine (created once)

    Returns:
        AsyncEngine: SQLAlchemy async engine
    """
    global _async_engine
    if _async_engine is None:
        url = settings.ASYNC_DB_URI
        pool_options = {}
        if not url.startswith("sqlite"):
            # SQLite uses a static pool without sizing options
            pool_options = {
                "pool_size": settings.DB_POOL_SIZE,
                "max_overflow": settings.DB_MAX_OVERFLOW,
            }
        _async_engine = create_async_engine(
            url,
            echo=False,
            pool_pre_ping=True,  # validate connections before use
            **pool_options,
        )
    return _async_engine


def get_session_factory() -> async_sessionmaker[AsyncSession]:
    """
    Get the async session factory (created once)

    Returns:
        async_sessionmaker: async session factory
    """
    global _session_factory
    if _session_factory is None:
        engine = get_async_engine()
        _session_factory = async_sessionmaker(
            engine,
            class_=AsyncSession,
            expire_on_commit=False,
        )
    return _session_factory


async def get_async_session() -> AsyncGenerator[AsyncSession, None]:
    """
    Provide an async database session (FastAPI dependency)

    Yields:
        AsyncSession: async database session
    """
    session_factory = get_session_factory()
    async with session_factory() as session:
        yield session


async def dispose_engine() -> None:
    """Close pooled connections on shutdown"""
    global _async_engine, _session_factory
    if _async_engine is not None:
        await _async_engine.dispose()
    _async_engine = None
    _session_factory = None
