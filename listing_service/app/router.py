"""Router registry and setup."""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

from listing_service.core.settings import get_app_settings
from listing_service.features.items.router import router as items_router

if TYPE_CHECKING:
    from fastapi import FastAPI

    from listing_service.core.settings import AppSettings

logger = logging.getLogger(__name__)


def setup_routers(app: FastAPI, app_settings: AppSettings | None = None) -> None:
    """Register all feature routers with the application.

    Args:
        app: FastAPI application instance.
        app_settings: Optional settings override for the API prefix.
    """
    app_settings = app_settings or get_app_settings()
    api_prefix = app_settings.api_prefix

    app.include_router(items_router, prefix=api_prefix)

    logger.debug("Routers configured", extra={"api_prefix": api_prefix or "/"})


__all__ = ["setup_routers"]
