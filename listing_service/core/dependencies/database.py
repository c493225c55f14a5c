"""Database session dependency for FastAPI route handlers.

Route handlers take ``session: AsyncSession = Depends(get_db_session)``;
scripts and tests use ``listing_service.infra.database.get_async_session``
directly. Both draw from the same session factory.
"""

from collections.abc import AsyncGenerator
from typing import Annotated

from fastapi import Depends
from sqlalchemy.ext.asyncio import AsyncSession

from listing_service.infra.database import get_async_session


async def get_db_session() -> AsyncGenerator[AsyncSession]:
    """FastAPI dependency for database session.

    Yields:
        Database session that is automatically closed after request.
    """
    async with get_async_session() as session:
        yield session


DbSession = Annotated[AsyncSession, Depends(get_db_session)]

__all__ = ["DbSession", "get_db_session"]
