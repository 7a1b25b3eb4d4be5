"""Tests for structured logging functionality."""

from __future__ import annotations

import json
import logging
import sys

from keeprun.logging_config import JSONFormatter, get_logger, setup_logging


def _record(msg="Test message", exc_info=None, **extra):
    record = logging.LogRecord(
        name="keeprun.test",
        level=logging.INFO,
        pathname="test.py",
        lineno=42,
        msg=msg,
        args=(),
        exc_info=exc_info,
    )
    for key, value in extra.items():
        setattr(record, key, value)
    return record


def test_json_formatter_fields():
    log_data = json.loads(JSONFormatter().format(_record()))

    assert log_data["level"] == "INFO"
    assert log_data["logger"] == "keeprun.test"
    assert log_data["message"] == "Test message"
    assert log_data["line"] == 42
    assert "timestamp" in log_data
    assert "extra" not in log_data


def test_json_formatter_extra_fields():
    log_data = json.loads(JSONFormatter().format(_record(user_id="u1", habit_id=3)))
    assert log_data["extra"] == {"user_id": "u1", "habit_id": 3}


def test_json_formatter_with_exception():
    try:
        raise ValueError("Test error")
    except ValueError:
        exc_info = sys.exc_info()

    log_data = json.loads(JSONFormatter().format(_record(exc_info=exc_info)))
    assert log_data["exception"]["type"] == "ValueError"
    assert log_data["exception"]["message"] == "Test error"
    assert "Traceback" in log_data["exception"]["traceback"]


def test_setup_logging_writes_json_file(config):
    logger = setup_logging(config)
    get_logger("services.continuity").info("Habit created", extra={"habit_id": 9})
    for handler in logger.handlers:
        handler.flush()

    log_file = config.DATA_DIR / "logs" / "keeprun.log"
    lines = [json.loads(line) for line in log_file.read_text(encoding="utf-8").splitlines()]
    assert lines[0]["message"] == "Logging initialized"
    assert lines[-1]["logger"] == "keeprun.services.continuity"
    assert lines[-1]["extra"] == {"habit_id": 9}


def test_setup_logging_is_idempotent(config):
    setup_logging(config)
    logger = setup_logging(config)
    assert len(logger.handlers) == 2


def test_get_logger_namespace():
    assert get_logger("storage").name == "keeprun.storage"
    assert get_logger("keeprun.scheduler").name == "keeprun.scheduler"
    assert get_logger("keeprun").name == "keeprun"


def test_engine_logs_habit_events(continuity, user_id, caplog):
    with caplog.at_level(logging.INFO, logger="keeprun"):
        continuity.create_habit(user_id, "Run", "exercise")
    assert any(r.getMessage() == "Habit created" for r in caplog.records)
