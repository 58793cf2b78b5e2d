"""Unit tests for logging configuration."""

from __future__ import annotations

import json
import logging
from collections.abc import Generator

import pytest
import structlog

from podwatch.observability.logging import (
    configure_logging,
    get_logger,
)


@pytest.fixture(autouse=True)
def restore_logging() -> Generator[None, None, None]:
    """Undo handler and structlog changes made by configure_logging."""
    root_logger = logging.getLogger()
    handlers = root_logger.handlers[:]
    level = root_logger.level
    yield
    root_logger.handlers = handlers
    root_logger.setLevel(level)
    structlog.reset_defaults()


class TestLoggingConfiguration:
    """Tests for logging configuration."""

    def test_configure_logging_json(self, capsys: pytest.CaptureFixture[str]) -> None:
        """JSON output carries the event name and bound fields."""
        configure_logging(level="INFO", format_type="json")

        get_logger("test.json").info("pod_watch_session_opened", namespace="default")

        entry = json.loads(capsys.readouterr().out.strip().splitlines()[-1])
        assert entry["event"] == "pod_watch_session_opened"
        assert entry["namespace"] == "default"
        assert entry["level"] == "info"
        assert entry["logger"] == "test.json"
        assert "timestamp" in entry

    def test_configure_logging_console(self) -> None:
        """Test console logging configuration."""
        configure_logging(level="DEBUG", format_type="console")

        assert logging.getLogger().level == logging.DEBUG
        assert get_logger("test") is not None

    def test_level_filters(self, capsys: pytest.CaptureFixture[str]) -> None:
        configure_logging(level="WARNING", format_type="json")

        logger = get_logger("test.level")
        logger.info("hidden")
        logger.warning("shown")

        out = capsys.readouterr().out
        assert "hidden" not in out
        assert "shown" in out

    def test_noisy_libraries_quieted(self) -> None:
        configure_logging(level="DEBUG")

        assert logging.getLogger("urllib3").level == logging.WARNING
        assert logging.getLogger("kubernetes").level == logging.WARNING


class TestLogContext:
    """Tests for log context management."""

    def test_initial_context_is_bound(self, capsys: pytest.CaptureFixture[str]) -> None:
        configure_logging(level="INFO", format_type="json")

        get_logger("test.bound", namespace="shop").info("bound_event")

        entry = json.loads(capsys.readouterr().out.strip().splitlines()[-1])
        assert entry["namespace"] == "shop"
