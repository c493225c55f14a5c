"""Tests for logging configuration, JSON formatting and lazy messages."""

from __future__ import annotations

import json
import logging
from collections.abc import Iterator

import pytest

from listing_service.core.settings import LoggingSettings
from listing_service.infra.logging import (
    JSONFormatter,
    LazyLoggerAdapter,
    configure_logging,
    get_lazy_logger,
    setup_logging,
)
from listing_service.infra.logging import config as config_module


@pytest.fixture
def restore_root_logger() -> Iterator[None]:
    root = logging.getLogger()
    handlers, level = list(root.handlers), root.level
    yield
    root.handlers[:] = handlers
    root.setLevel(level)
    logging.captureWarnings(False)


def _record(message: str = "page served", **extra: object) -> logging.LogRecord:
    record = logging.LogRecord(
        name="listing_service.test",
        level=logging.INFO,
        pathname=__file__,
        lineno=1,
        msg=message,
        args=(),
        exc_info=None,
    )
    for key, value in extra.items():
        setattr(record, key, value)
    return record


def test_json_formatter_emits_one_object_per_record() -> None:
    formatter = JSONFormatter(static={"service": "listing-service"})

    line = formatter.format(_record(page=2, cursor="eyJpZCI6Mn0="))

    data = json.loads(line)
    assert data["message"] == "page served"
    assert data["level"] == "INFO"
    assert data["logger"] == "listing_service.test"
    assert data["service"] == "listing-service"
    assert data["page"] == 2
    assert data["cursor"] == "eyJpZCI6Mn0="
    assert data["timestamp"].endswith("Z")
    assert "\n" not in line


def test_json_formatter_keeps_exceptions_on_one_line() -> None:
    formatter = JSONFormatter()
    try:
        raise ValueError("boom")
    except ValueError:
        import sys

        record = _record()
        record.exc_info = sys.exc_info()

    line = formatter.format(record)

    assert "\n" not in line
    assert "ValueError: boom" in json.loads(line)["exception"]


def test_lazy_logger_skips_callables_below_level(caplog: pytest.LogCaptureFixture) -> None:
    caplog.set_level(logging.INFO, logger="listing_service.lazy")
    calls: list[int] = []
    lazy = get_lazy_logger("listing_service.lazy")

    lazy.debug(lambda: calls.append(1) or "never built")
    lazy.info(lambda: "built %s", lambda: 3)

    assert calls == []
    assert isinstance(lazy, LazyLoggerAdapter)
    assert caplog.records[-1].getMessage() == "built 3"


@pytest.mark.usefixtures("restore_root_logger")
def test_configure_logging_installs_single_handler() -> None:
    configure_logging(log_level="debug", json_logs=True, service_name="svc")

    root = logging.getLogger()
    assert root.level == logging.DEBUG
    assert len(root.handlers) == 1
    assert isinstance(root.handlers[0].formatter, JSONFormatter)
    assert root.handlers[0].formatter.static == {"service": "svc"}


@pytest.mark.usefixtures("restore_root_logger")
def test_configure_logging_text_mode() -> None:
    configure_logging(log_level="WARNING", json_logs=False)

    formatter = logging.getLogger().handlers[0].formatter
    assert not isinstance(formatter, JSONFormatter)
    assert formatter._fmt == config_module.TEXT_FORMAT


@pytest.mark.usefixtures("restore_root_logger")
def test_setup_logging_runs_once(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setattr(config_module, "_LOGGING_INITIALIZED", False)
    calls: list[dict[str, object]] = []
    monkeypatch.setattr(config_module, "configure_logging", lambda **kw: calls.append(kw))
    settings = LoggingSettings(level="ERROR", json_logs=False)

    setup_logging(settings)
    setup_logging(settings)
    setup_logging(settings, force=True)

    assert len(calls) == 2
    assert calls[0]["log_level"] == "ERROR"
    assert calls[0]["json_logs"] is False
