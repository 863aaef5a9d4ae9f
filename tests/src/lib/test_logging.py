"""
Tests for structured logging setup (src/lib/logging.py).
"""

from __future__ import annotations

import json
import logging

import pytest
import structlog

from src.config.settings import Settings
from src.lib.logging import QUIET_LOGGERS, get_logger, setup_logging


@pytest.fixture(autouse=True)
def _restore_logging():
    """Put root handlers and structlog config back after each test."""
    root = logging.getLogger()
    handlers, level = root.handlers[:], root.level
    quiet_levels = {name: logging.getLogger(name).level for name in QUIET_LOGGERS}
    yield
    root.handlers[:] = handlers
    root.setLevel(level)
    for name, quiet_level in quiet_levels.items():
        logging.getLogger(name).setLevel(quiet_level)
    structlog.reset_defaults()


def _last_json_line(text: str) -> dict:
    lines = [line for line in text.splitlines() if line.strip()]
    return json.loads(lines[-1])


class TestSetupLogging:
    """Tests for setup_logging()."""

    def test_single_root_handler(self) -> None:
        setup_logging(Settings(dev_mode=False))
        setup_logging(Settings(dev_mode=False))
        assert len(logging.getLogger().handlers) == 1

    def test_level_argument(self) -> None:
        setup_logging(Settings(), level="debug")
        assert logging.getLogger().level == logging.DEBUG

    def test_unknown_level_falls_back_to_info(self) -> None:
        setup_logging(Settings(), level="chatty")
        assert logging.getLogger().level == logging.INFO

    def test_noisy_loggers_quieted(self) -> None:
        setup_logging(Settings())
        for name in QUIET_LOGGERS:
            assert logging.getLogger(name).level == logging.WARNING

    def test_stdlib_records_render_as_json(self, capsys) -> None:
        """Test plain logging calls come out as JSON in production mode."""
        setup_logging(Settings(dev_mode=False), level="INFO")
        logging.getLogger("src.services.plan_store").info("Saved plan %s", "plan-1")

        record = _last_json_line(capsys.readouterr().err)
        assert record["event"] == "Saved plan plan-1"
        assert record["level"] == "info"
        assert record["logger"] == "src.services.plan_store"
        assert "timestamp" in record

    def test_structlog_events_carry_fields(self, capsys) -> None:
        setup_logging(Settings(dev_mode=False), level="INFO")
        get_logger("src.services.schedule_generator").info("schedule_generated", items=3)

        record = _last_json_line(capsys.readouterr().err)
        assert record["event"] == "schedule_generated"
        assert record["items"] == 3

    def test_dev_mode_is_not_json(self, capsys) -> None:
        setup_logging(Settings(dev_mode=True), level="INFO")
        logging.getLogger("dev").warning("hello there")

        err = capsys.readouterr().err
        assert "hello there" in err
        with pytest.raises(json.JSONDecodeError):
            json.loads(err.strip().splitlines()[-1])
