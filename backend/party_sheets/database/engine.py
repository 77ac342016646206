"""
Database engine for the character table.

SQLite (aiosqlite) is the development default; PostgreSQL (asyncpg) is
used when DATABASE_URL points at it. The engine and session factory are
created lazily so importing this module never opens a connection.
"""
import logging
from contextlib import asynccontextmanager
from typing import Any, AsyncIterator, Dict, Optional

from sqlalchemy import text
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import (
    AsyncEngine,
    AsyncSession,
    async_sessionmaker,
    create_async_engine,
)
from sqlalchemy.pool import AsyncAdaptedQueuePool, NullPool
from sqlmodel import SQLModel

from party_sheets.config import get_settings

logger = logging.getLogger("party_sheets.database")

# Sync URL scheme -> async driver scheme
ASYNC_DRIVERS = {
    "postgresql://": "postgresql+asyncpg://",
    "postgres://": "postgresql+asyncpg://",
    "sqlite://": "sqlite+aiosqlite://",
}

_engine: Optional[AsyncEngine] = None
_session_factory: Optional[async_sessionmaker[AsyncSession]] = None


def get_database_url() -> str:
    """DATABASE_URL rewritten to use an async driver."""
    url = get_settings().DATABASE_URL
    for scheme, async_scheme in ASYNC_DRIVERS.items():
        if url.startswith(scheme):
            return async_scheme + url[len(scheme):]
    return url


def _engine_options(url: str) -> Dict[str, Any]:
    if url.startswith("sqlite"):
        # One file, no pooling; aiosqlite hops threads
        return {"poolclass": NullPool, "connect_args": {"check_same_thread": False}}
    return {
        "poolclass": AsyncAdaptedQueuePool,
        "pool_size": 5,
        "max_overflow": 10,
        "pool_timeout": 30,
        "pool_recycle": 1800,
        "pool_pre_ping": True,
    }


def get_engine() -> AsyncEngine:
    """Get or create the async engine."""
    global _engine

    if _engine is None:
        url = get_database_url()
        _engine = create_async_engine(url, echo=get_settings().DEBUG, **_engine_options(url))
        logger.debug(f"Created database engine for {_engine.url.render_as_string(hide_password=True)}")

    return _engine


def get_session_factory() -> async_sessionmaker[AsyncSession]:
    """Get or create the session factory."""
    global _session_factory

    if _session_factory is None:
        _session_factory = async_sessionmaker(
            get_engine(),
            class_=AsyncSession,
            expire_on_commit=False,
            autoflush=False,
        )

    return _session_factory


@asynccontextmanager
async def get_session_context() -> AsyncIterator[AsyncSession]:
    """
    One unit of work: commits on success, rolls back and re-raises on error.

    Usage:
        async with get_session_context() as session:
            repo = CharacterRepository(session)
            ...
    """
    async with get_session_factory()() as session:
        try:
            yield session
            await session.commit()
        except Exception:
            logger.exception("Database session failed, rolling back")
            await session.rollback()
            raise


async def init_db() -> None:
    """Create the character table if it does not exist yet."""
    # Registers CharacterRow with SQLModel.metadata
    from party_sheets.database import models  # noqa: F401

    async with get_engine().begin() as conn:
        await conn.run_sync(SQLModel.metadata.create_all)


async def ping_database() -> bool:
    """True when a trivial query succeeds."""
    try:
        async with get_engine().connect() as conn:
            await conn.execute(text("SELECT 1"))
    except (SQLAlchemyError, OSError) as e:
        logger.warning(f"Database ping failed: {e}")
        return False
    return True


async def close_db() -> None:
    """Dispose of the engine; the next use creates a fresh one."""
    global _engine, _session_factory

    if _engine is not None:
        await _engine.dispose()
    _engine = None
    _session_factory = None
