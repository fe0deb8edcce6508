"""Tests for structured logging functionality."""

from __future__ import annotations

import json
import logging
import logging.handlers

import pytest

from salvus.config import BaseConfig
from salvus.logging_config import JSONFormatter, RequestFilter, get_logger, setup_logging


@pytest.fixture
def config(tmp_path, monkeypatch: pytest.MonkeyPatch) -> BaseConfig:
    monkeypatch.setenv("SALVUS_DATA_DIR", str(tmp_path))
    return BaseConfig()


def _record(**overrides) -> logging.LogRecord:
    fields = dict(
        name="salvus.test",
        level=logging.INFO,
        pathname="test.py",
        lineno=42,
        msg="Purchase recorded",
        args=(),
        exc_info=None,
    )
    fields.update(overrides)
    record = logging.LogRecord(**fields)
    record.module = "test_module"
    record.funcName = "test_function"
    return record


def test_json_formatter():
    """JSONFormatter emits the standard fields."""
    log_data = json.loads(JSONFormatter().format(_record()))

    assert log_data["level"] == "INFO"
    assert log_data["logger"] == "salvus.test"
    assert log_data["message"] == "Purchase recorded"
    assert log_data["module"] == "test_module"
    assert log_data["function"] == "test_function"
    assert log_data["line"] == 42
    assert "timestamp" in log_data
    assert "extra" not in log_data


def test_json_formatter_includes_extra_fields():
    record = _record()
    record.store_code = "STR-1001"
    record.amount = 12.5

    log_data = json.loads(JSONFormatter().format(record))

    assert log_data["extra"] == {"store_code": "STR-1001", "amount": 12.5}


def test_json_formatter_with_exception():
    """JSONFormatter serializes exception details."""
    try:
        raise ValueError("Test error")
    except ValueError:
        import sys

        exc_info = sys.exc_info()

    log_data = json.loads(JSONFormatter().format(_record(level=logging.ERROR, exc_info=exc_info)))

    assert log_data["exception"]["type"] == "ValueError"
    assert "Test error" in log_data["exception"]["message"]
    assert log_data["exception"]["traceback"] is not None


def test_setup_logging(config, tmp_path):
    """Logging setup writes JSON lines to a rotating file under DATA_DIR."""
    config.DEV_MODE = True

    logger = setup_logging(config)

    assert logger.name == "salvus"
    assert logger.level == logging.INFO
    assert len(logger.handlers) == 2  # Console + File

    log_file = tmp_path / "logs" / "salvus.log"
    assert log_file.exists()

    get_logger("salvus.services.purchases").warning("Test warning message", extra={"amount": 5})
    for handler in logger.handlers:
        handler.flush()

    lines = [line for line in log_file.read_text().splitlines() if line.strip()]
    entries = [json.loads(line) for line in lines]
    assert entries[0]["message"] == "Logging initialized"
    assert entries[-1]["logger"] == "salvus.services.purchases"
    assert entries[-1]["extra"] == {"amount": 5}


def test_setup_logging_twice_keeps_two_handlers(config):
    setup_logging(config)
    logger = setup_logging(config)

    assert len(logger.handlers) == 2


def test_get_logger():
    """get_logger namespaces loose names and keeps package module names."""
    assert get_logger("module1").name == "salvus.module1"
    assert get_logger("salvus.services.dashboard").name == "salvus.services.dashboard"
    assert get_logger("salvus").name == "salvus"


@pytest.mark.parametrize("dev_mode", [True, False])
def test_logging_levels_by_mode(config, dev_mode):
    """Console logging level adjusts based on dev mode."""
    config.DEV_MODE = dev_mode

    logger = setup_logging(config)

    console_handler = next(
        handler
        for handler in logger.handlers
        if isinstance(handler, logging.StreamHandler)
        and not isinstance(handler, logging.handlers.RotatingFileHandler)
    )
    expected_level = logging.INFO if dev_mode else logging.WARNING
    assert console_handler.level == expected_level


def test_request_filter_stamps_request_fields(app):
    record = _record()

    with app.test_request_context("/api/purchases", method="POST"):
        assert RequestFilter().filter(record)

    log_data = json.loads(JSONFormatter().format(record))
    assert log_data["request"] == {"method": "POST", "path": "/api/purchases"}
    assert "extra" not in log_data


def test_request_filter_outside_requests():
    record = _record()

    assert RequestFilter().filter(record)
    assert "request" not in json.loads(JSONFormatter().format(record))
