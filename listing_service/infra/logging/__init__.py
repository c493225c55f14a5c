"""Logging infrastructure.

Basic usage:
    import logging

    from listing_service.infra.logging import get_lazy_logger

    logger = logging.getLogger(__name__)       # INFO/WARNING/ERROR
    lazy_logger = get_lazy_logger(__name__)    # DEBUG, evaluated on demand

    lazy_logger.debug(lambda: f"window: {[row.id for row in rows]}")

Configure once per process:
    from listing_service.infra.logging import setup_logging

    setup_logging()
"""

from listing_service.infra.logging.config import configure_logging, setup_logging
from listing_service.infra.logging.formatters import JSONFormatter
from listing_service.infra.logging.lazy import LazyLoggerAdapter, get_lazy_logger

__all__ = [
    "JSONFormatter",
    "LazyLoggerAdapter",
    "configure_logging",
    "get_lazy_logger",
    "setup_logging",
]
