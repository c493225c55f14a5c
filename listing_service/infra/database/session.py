"""Async SQLAlchemy engine and session factory."""

from __future__ import annotations

import logging
from contextlib import asynccontextmanager
from typing import TYPE_CHECKING, Any

from sqlalchemy import event
from sqlalchemy.ext.asyncio import AsyncEngine, AsyncSession, async_sessionmaker, create_async_engine
from sqlalchemy.pool import StaticPool

from listing_service.core.settings import get_app_settings, get_db_settings

if TYPE_CHECKING:
    from collections.abc import AsyncGenerator

    from listing_service.core.settings import DatabaseSettings

logger = logging.getLogger(__name__)


def _enable_case_sensitive_like(dbapi_conn: Any, connection_record: Any) -> None:
    # SQLite LIKE is case-insensitive for ASCII by default; `contains` must not be
    cursor = dbapi_conn.cursor()
    cursor.execute("PRAGMA case_sensitive_like=ON")
    cursor.close()


def build_engine(settings: DatabaseSettings, *, echo: bool = False) -> AsyncEngine:
    """Create the async engine for ``settings``.

    SQLite gets case-sensitive ``LIKE``; an in-memory SQLite database is
    pinned to one connection so every session sees the same tables.
    """
    kwargs: dict[str, Any] = {"echo": settings.echo or echo}
    if settings.is_memory:
        kwargs.update(poolclass=StaticPool, connect_args={"check_same_thread": False})

    async_engine = create_async_engine(settings.url, **kwargs)
    if settings.is_sqlite:
        event.listen(async_engine.sync_engine, "connect", _enable_case_sensitive_like)
    return async_engine


def build_sessionmaker(async_engine: AsyncEngine) -> async_sessionmaker[AsyncSession]:
    return async_sessionmaker(
        async_engine,
        class_=AsyncSession,
        expire_on_commit=False,
        autoflush=False,
    )


db_settings = get_db_settings()
engine = build_engine(db_settings, echo=get_app_settings().debug)
AsyncSessionLocal = build_sessionmaker(engine)


@asynccontextmanager
async def get_async_session() -> AsyncGenerator[AsyncSession]:
    """Get async database session.

    Example:
        async with get_async_session() as session:
            page = await repo.paginate(session, params)
    """
    async with AsyncSessionLocal() as session:
        yield session


async def init_database(metadata: Any) -> None:
    """Create missing tables for ``metadata`` when ``DB_CREATE_TABLES`` is on."""
    if not db_settings.create_tables:
        logger.info("Skipping table creation", extra={"url": engine.url.render_as_string()})
        return
    async with engine.begin() as conn:
        await conn.run_sync(metadata.create_all)
    logger.info("Database tables ready", extra={"tables": sorted(metadata.tables)})


async def close_database() -> None:
    """Dispose the engine's connection pool (application shutdown)."""
    logger.info("Closing database connection")
    await engine.dispose()


__all__ = [
    "AsyncSessionLocal",
    "build_engine",
    "build_sessionmaker",
    "close_database",
    "engine",
    "get_async_session",
    "init_database",
]
