"""
Unit tests for logging utilities.
"""
import json
import logging
import logging.handlers
import sys

import pytest
from unittest.mock import Mock

from aio_events.utils.logger import (
    JSONFormatter,
    PerformanceLogger,
    _parse_size,
    setup_logging,
)


def make_record(msg="hello", exc_info=None, **extra):
    record = logging.LogRecord(
        name="aio_events.test",
        level=logging.INFO,
        pathname=__file__,
        lineno=10,
        msg=msg,
        args=(),
        exc_info=exc_info
    )
    for key, value in extra.items():
        setattr(record, key, value)
    return record


class TestJSONFormatter:

    def test_basic_fields(self):
        entry = json.loads(JSONFormatter().format(make_record()))

        assert entry["level"] == "INFO"
        assert entry["logger"] == "aio_events.test"
        assert entry["message"] == "hello"
        assert entry["line"] == 10
        assert "timestamp" in entry

    def test_extra_fields(self):
        entry = json.loads(JSONFormatter().format(
            make_record(provider_id="p1", event_code="e1", handle=object())
        ))

        assert entry["provider_id"] == "p1"
        assert entry["event_code"] == "e1"
        # unserialisable values are stringified
        assert isinstance(entry["handle"], str)

    def test_exception_details(self):
        try:
            raise RuntimeError("boom")
        except RuntimeError:
            record = make_record(exc_info=sys.exc_info())

        entry = json.loads(JSONFormatter().format(record))

        assert entry["exception"]["type"] == "RuntimeError"
        assert entry["exception"]["message"] == "boom"
        assert "Traceback" in entry["exception"]["traceback"]


class TestSetupLogging:

    @pytest.fixture(autouse=True)
    def restore_root_logger(self):
        root = logging.getLogger()
        handlers, level = root.handlers[:], root.level
        yield
        for handler in root.handlers:
            if isinstance(handler, logging.handlers.RotatingFileHandler):
                handler.close()
        root.handlers = handlers
        root.setLevel(level)

    def test_json_format(self):
        setup_logging(log_level="DEBUG", log_format="json")

        root = logging.getLogger()
        assert root.level == logging.DEBUG
        assert len(root.handlers) == 1
        assert isinstance(root.handlers[0].formatter, JSONFormatter)

    def test_log_file(self, tmp_path):
        log_file = tmp_path / "logs" / "aio.log"

        setup_logging(log_level="INFO", log_format="text", log_file=str(log_file))
        logging.getLogger("aio_events.test").info("written")
        for handler in logging.getLogger().handlers:
            handler.flush()

        assert "written" in log_file.read_text()

    def test_unknown_level_defaults_to_info(self):
        setup_logging(log_level="chatty")

        assert logging.getLogger().level == logging.INFO


class TestParseSize:

    @pytest.mark.parametrize("size, expected", [
        ("10MB", 10 * 1024 * 1024),
        ("512kb", 512 * 1024),
        ("1GB", 1024 ** 3),
        ("2048", 2048),
        ("lots", 10 * 1024 * 1024),
    ])
    def test_parse_size(self, size, expected):
        assert _parse_size(size) == expected


class TestPerformanceLogger:

    def test_success_logged_at_level(self):
        logger = Mock()

        with PerformanceLogger("publish", logger, log_level=logging.INFO, provider_id="p1"):
            pass

        level, message = logger.log.call_args[0]
        extra = logger.log.call_args[1]["extra"]
        assert level == logging.INFO
        assert "publish" in message
        assert extra["success"] is True
        assert extra["provider_id"] == "p1"
        assert "duration_ms" in extra

    def test_failure_logged_and_reraised(self):
        logger = Mock()

        with pytest.raises(ValueError):
            with PerformanceLogger("delete", logger):
                raise ValueError("nope")

        extra = logger.warning.call_args[1]["extra"]
        assert extra["success"] is False
        assert extra["error_type"] == "ValueError"
        logger.log.assert_not_called()

