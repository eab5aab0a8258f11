"""
Tests for structured JSON logging.
"""

import json
import logging

from core.logging import JSONFormatter, StructuredLogger, get_logger


def make_record(message="hello", **extra_fields):
    record = logging.LogRecord(
        name="benchmark.test",
        level=logging.WARNING,
        pathname=__file__,
        lineno=1,
        msg=message,
        args=(),
        exc_info=None,
    )
    if extra_fields:
        record.extra_fields = extra_fields
    return record


class TestJSONFormatter:
    """Tests for JSONFormatter."""

    def test_single_line_json(self):
        output = JSONFormatter().format(make_record())

        data = json.loads(output)
        assert "\n" not in output
        assert data["level"] == "WARNING"
        assert data["logger"] == "benchmark.test"
        assert data["message"] == "hello"
        assert data["timestamp"].endswith("Z")

    def test_extra_fields_merged(self):
        data = json.loads(JSONFormatter().format(make_record(event="fetch.retry", attempt=2)))

        assert data["event"] == "fetch.retry"
        assert data["attempt"] == 2

    def test_exception_included(self):
        try:
            raise ValueError("boom")
        except ValueError:
            import sys
            record = make_record()
            record.exc_info = sys.exc_info()

        data = json.loads(JSONFormatter().format(record))

        assert "ValueError: boom" in data["exception"]


class TestStructuredLogger:
    """Tests for the event methods."""

    def test_get_logger(self):
        logger = get_logger("benchmark.runner")

        assert isinstance(logger, StructuredLogger)
        assert logger.logger.name == "benchmark.runner"

    def test_event_fields(self, caplog):
        logger = get_logger("extraction.test")

        with caplog.at_level(logging.WARNING, logger="extraction.test"):
            logger.occurrence_fallback(3, 4, 2)

        record = caplog.records[0]
        assert record.levelno == logging.WARNING
        assert record.extra_fields == {
            "event": "extraction.occurrence_fallback",
            "citation_index": 3,
            "requested": 4,
            "available": 2,
        }
        assert "Occurrence 4 of [3]" in record.getMessage()

    def test_provider_failure_logged_as_error(self, caplog):
        logger = get_logger("benchmark.test")

        with caplog.at_level(logging.INFO, logger="benchmark.test"):
            logger.provider_call_failed("olmo-32b", "HTTP 500", 120.0)

        assert caplog.records[0].levelno == logging.ERROR
        assert caplog.records[0].extra_fields["provider"] == "olmo-32b"
