"""Application lifespan management.

Startup: logging, then table creation for every registered model.
Shutdown: engine disposal.
"""

from __future__ import annotations

import logging
from contextlib import asynccontextmanager
from typing import TYPE_CHECKING

from listing_service.core.database import Base
from listing_service.core.settings import get_app_settings
from listing_service.infra.logging import setup_logging

if TYPE_CHECKING:
    from collections.abc import AsyncIterator

    from fastapi import FastAPI

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncIterator[None]:
    """Manage application lifecycle.

    Args:
        app: FastAPI application instance.

    Yields:
        None during application runtime.
    """
    _ = app
    setup_logging()

    # Registers the models on Base.metadata before create_all
    import listing_service.features.items.models  # noqa: F401
    from listing_service.infra.database import close_database, init_database

    app_settings = get_app_settings()
    logger.info(
        "Starting application",
        extra={"title": app_settings.title, "version": app_settings.version},
    )
    await init_database(Base.metadata)

    try:
        yield
    finally:
        await close_database()
        logger.info("Application shutdown complete")


__all__ = ["lifespan"]
