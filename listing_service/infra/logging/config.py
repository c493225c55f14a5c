"""Logging configuration setup.

All handlers hang off the root logger (module loggers propagate) and are
installed through ``logging.config.dictConfig``. Output is JSON Lines by
default, plain text when ``LOG_JSON=false``.
"""

from __future__ import annotations

import logging
import logging.config
from typing import TYPE_CHECKING, Any

if TYPE_CHECKING:
    from listing_service.core.settings.logs import LoggingSettings

logger = logging.getLogger(__name__)
_LOGGING_INITIALIZED = False

TEXT_FORMAT = "%(asctime)s %(levelname)-8s %(name)s: %(message)s"


def configure_logging(
    log_level: str = "INFO",
    json_logs: bool = True,
    service_name: str | None = None,
    capture_warnings: bool = True,
    **kwargs: Any,
) -> None:
    """Configure root logging with a single stream handler.

    Args:
        log_level: Root logger level (DEBUG, INFO, WARNING, ERROR, CRITICAL).
        json_logs: Emit JSON Lines instead of plain text.
        service_name: Static ``service`` field added to JSON records.
        capture_warnings: Route ``warnings`` output through logging.
        **kwargs: Ignored extra settings (logged at DEBUG).

    Example:
        from listing_service.core.settings import get_logging_settings

        configure_logging(**get_logging_settings().to_logging_kwargs())
    """
    formatter: dict[str, Any]
    if json_logs:
        formatter = {
            "()": "listing_service.infra.logging.formatters.JSONFormatter",
            "static": {"service": service_name} if service_name else {},
        }
    else:
        formatter = {"format": TEXT_FORMAT}

    logging.config.dictConfig(
        {
            "version": 1,
            "disable_existing_loggers": False,
            "formatters": {"default": formatter},
            "handlers": {
                "console": {
                    "class": "logging.StreamHandler",
                    "formatter": "default",
                    "stream": "ext://sys.stderr",
                },
            },
            "root": {"level": log_level.upper(), "handlers": ["console"]},
        }
    )
    logging.captureWarnings(capture_warnings)

    if kwargs:
        logger.debug("Unused logging kwargs supplied: %s", ", ".join(sorted(kwargs)))


def setup_logging(
    log_settings: LoggingSettings | None = None,
    *,
    force: bool = False,
) -> None:
    """Configure logging once across entrypoints.

    Args:
        log_settings: Logging settings; loaded via get_logging_settings() when omitted.
        force: Reconfigure even if logging was already initialized.
    """
    global _LOGGING_INITIALIZED

    if _LOGGING_INITIALIZED and not force:
        return

    if log_settings is None:
        from listing_service.core.settings import get_logging_settings

        log_settings = get_logging_settings()

    configure_logging(**log_settings.to_logging_kwargs())
    _LOGGING_INITIALIZED = True


__all__ = ["configure_logging", "setup_logging"]
