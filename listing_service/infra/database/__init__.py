"""Database infrastructure: engine, session factory and lifecycle hooks.

Example:
    from listing_service.infra.database import get_async_session

    async with get_async_session() as session:
        ...
"""

from .session import (
    AsyncSessionLocal,
    build_engine,
    build_sessionmaker,
    close_database,
    engine,
    get_async_session,
    init_database,
)

__all__ = [
    "AsyncSessionLocal",
    "build_engine",
    "build_sessionmaker",
    "close_database",
    "engine",
    "get_async_session",
    "init_database",
]
