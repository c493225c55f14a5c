"""Pytest configuration and shared fixtures.

Organization:
    - Application Fixtures: FastAPI app and HTTP client
    - Database Fixtures: in-memory SQLite engine and session
    - Data Fixtures: item factories
"""

from __future__ import annotations

import os
from collections.abc import AsyncGenerator, Awaitable, Callable
from datetime import UTC, datetime, timedelta
from typing import TYPE_CHECKING

import pytest
from httpx import ASGITransport, AsyncClient

if TYPE_CHECKING:
    from fastapi import FastAPI
    from sqlalchemy.ext.asyncio import AsyncEngine, AsyncSession

    from listing_service.features.items.models import Item

# Keep tests self-contained
os.environ.setdefault("DB_URL", "sqlite+aiosqlite:///:memory:")
os.environ.setdefault("LOG_JSON", "false")
os.environ.setdefault("APP_API_PREFIX", "")

BASE_TIME = datetime(2024, 1, 1, 12, 0, tzinfo=UTC)


# ============================================================================
# Database Fixtures
# ============================================================================


@pytest.fixture
async def db_engine() -> AsyncGenerator[AsyncEngine]:
    """Fresh in-memory SQLite engine (case-sensitive LIKE, single connection)."""
    from listing_service.core.settings import DatabaseSettings
    from listing_service.infra.database import build_engine

    engine = build_engine(DatabaseSettings(url="sqlite+aiosqlite:///:memory:"))
    try:
        yield engine
    finally:
        await engine.dispose()


@pytest.fixture
async def db_session(db_engine: AsyncEngine) -> AsyncGenerator[AsyncSession]:
    """Async session with all tables created, rolled back and dropped afterwards."""
    import listing_service.features.items.models  # noqa: F401
    from listing_service.core.database import Base
    from listing_service.infra.database import build_sessionmaker

    async with db_engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

    async with build_sessionmaker(db_engine)() as session:
        try:
            yield session
        finally:
            await session.rollback()

    async with db_engine.begin() as conn:
        await conn.run_sync(Base.metadata.drop_all)


# ============================================================================
# Application Fixtures
# ============================================================================


@pytest.fixture
async def app(db_session: AsyncSession) -> FastAPI:
    """FastAPI application whose routes share the test session."""
    from listing_service.app.main import create_app
    from listing_service.core.dependencies import get_db_session

    application = create_app()

    async def override_session() -> AsyncGenerator[AsyncSession]:
        yield db_session

    application.dependency_overrides[get_db_session] = override_session
    return application


@pytest.fixture
async def client(app: FastAPI) -> AsyncGenerator[AsyncClient]:
    """HTTPX client bound to the app through ASGITransport."""
    async with AsyncClient(transport=ASGITransport(app=app), base_url="http://test") as ac:
        yield ac


# ============================================================================
# Data Fixtures
# ============================================================================


type ItemFactory = Callable[..., Awaitable[list[Item]]]


@pytest.fixture
def make_items(db_session: AsyncSession) -> ItemFactory:
    """Insert items and return them in insertion (id) order.

    Accepts dicts of column values (``owner`` as an owner name) or, with
    ``count=N``, creates ``item-01`` ... ``item-N`` one minute apart.

    Example:
        items = await make_items(count=15)
        items = await make_items({"name": "find me!"}, {"name": "but not me"})
    """
    from listing_service.features.items.models import Item, ItemOwner

    async def factory(*rows: dict, count: int = 0) -> list[Item]:
        specs = list(rows) or [{"name": f"item-{n:02d}"} for n in range(1, count + 1)]
        items: list[Item] = []
        for index, spec in enumerate(specs):
            values = dict(spec)
            owner_name = values.pop("owner", None)
            values.setdefault("name", f"item-{index + 1:02d}")
            values.setdefault("email", f"{values['name'].replace(' ', '-')}@example.com")
            values.setdefault("created_at", BASE_TIME + timedelta(minutes=index))
            item = Item(**values)
            # Assign even when None so the relationship counts as loaded
            item.owner = ItemOwner(name=owner_name) if owner_name is not None else None
            items.append(item)

        db_session.add_all(items)
        await db_session.flush()
        return items

    return factory
