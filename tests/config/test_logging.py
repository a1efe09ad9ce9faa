"""Tests for structlog configuration."""

from __future__ import annotations

import json
import logging
from collections.abc import Generator

import pytest
import structlog

from cellvault.config.logging import configure_logging

_NAMED = ("cellvault", "alembic", "sqlalchemy")


@pytest.fixture(autouse=True)
def _restore_logging() -> Generator[None]:
    """Restore root and library logger state after each test."""
    root = logging.getLogger()
    original_handlers = root.handlers[:]
    original_level = root.level
    levels = {name: logging.getLogger(name).level for name in _NAMED}
    yield
    root.handlers = original_handlers
    root.setLevel(original_level)
    for name, level in levels.items():
        logging.getLogger(name).setLevel(level)


class TestConfigureLogging:
    def test_verbose_enables_debug(self) -> None:
        configure_logging(verbose=True)
        assert logging.getLogger("cellvault").level == logging.DEBUG
        assert logging.getLogger().level == logging.WARNING

    def test_non_verbose_sets_warning(self) -> None:
        configure_logging(verbose=False)
        assert logging.getLogger("cellvault").level == logging.WARNING

    def test_library_chatter_suppressed(self) -> None:
        configure_logging(verbose=True)
        assert logging.getLogger("alembic").level == logging.WARNING
        assert logging.getLogger("sqlalchemy").level == logging.WARNING

    def test_single_handler_installed(self) -> None:
        configure_logging()
        configure_logging()
        assert len(logging.getLogger().handlers) == 1

    def test_json_mode_output(self, capfd: pytest.CaptureFixture[str]) -> None:
        configure_logging(verbose=True, log_json=True)
        structlog.get_logger("cellvault.test").warning("json test", answer=42)
        parsed = json.loads(capfd.readouterr().err.strip())
        assert parsed["event"] == "json test"
        assert parsed["answer"] == 42
        assert parsed["level"] == "warning"
        assert parsed["logger"] == "cellvault.test"
        assert "timestamp" in parsed

    def test_stdlib_logger_goes_through_structlog(
        self, capfd: pytest.CaptureFixture[str]
    ) -> None:
        configure_logging(verbose=True, log_json=True)
        logging.getLogger("cellvault.infrastructure.store").debug("Applying batch of %d", 3)
        parsed = json.loads(capfd.readouterr().err.strip())
        assert parsed["event"] == "Applying batch of 3"
        assert parsed["level"] == "debug"

    def test_debug_hidden_when_not_verbose(self, capfd: pytest.CaptureFixture[str]) -> None:
        configure_logging(verbose=False, log_json=True)
        logging.getLogger("cellvault.infrastructure.store").debug("hidden")
        assert capfd.readouterr().err == ""
