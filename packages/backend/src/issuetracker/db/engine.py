"""Async SQLAlchemy engine and session factory.

Learn: SQLAlchemy 2.0 async mode — create_async_engine for connection pooling,
AsyncSession for per-request database access, dependency injection via FastAPI.

The engine is process-wide state with an explicit lifecycle: init_db() runs
in the app lifespan (or the CLI) and close_db() disposes the pool on
shutdown. Handlers never touch the engine directly; they receive a session
through the get_db dependency.
"""

from typing import AsyncIterator, Optional

from sqlalchemy.ext.asyncio import (
    AsyncEngine,
    AsyncSession,
    async_sessionmaker,
    create_async_engine,
)

from issuetracker.config import settings
from issuetracker.errors import InternalError

_engine: Optional[AsyncEngine] = None
_session_factory: Optional[async_sessionmaker[AsyncSession]] = None


def init_db(database_url: Optional[str] = None, **engine_kwargs) -> AsyncEngine:
    """Create the engine and session factory. Call once at startup."""
    global _engine, _session_factory
    url = database_url or settings.database_url
    if not url.startswith("sqlite"):
        # Connection pool: 5 steady, up to 20 under load.
        engine_kwargs.setdefault("pool_size", 5)
        engine_kwargs.setdefault("max_overflow", 15)
    _engine = create_async_engine(url, echo=settings.debug, **engine_kwargs)
    _session_factory = async_sessionmaker(
        _engine,
        class_=AsyncSession,
        expire_on_commit=False,
    )
    return _engine


async def close_db() -> None:
    """Dispose the engine's connection pool. Call once at shutdown."""
    global _engine, _session_factory
    if _engine is not None:
        await _engine.dispose()
    _engine = None
    _session_factory = None


def get_engine() -> AsyncEngine:
    if _engine is None:
        raise InternalError("Database not initialized. Call init_db() first.")
    return _engine


def get_session_factory() -> async_sessionmaker[AsyncSession]:
    if _session_factory is None:
        raise InternalError("Database not initialized. Call init_db() first.")
    return _session_factory


async def get_db() -> AsyncIterator[AsyncSession]:
    """FastAPI dependency — yields a session per request, auto-closes."""
    async with get_session_factory()() as session:
        try:
            yield session
        finally:
            await session.close()


async def create_tables() -> None:
    """Create any missing tables. Development shortcut for `alembic upgrade head`."""
    from issuetracker.db.models import Base

    async with get_engine().begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
