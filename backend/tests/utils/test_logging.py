# backend/tests/utils/test_logging.py
"""
Tests for logging configuration.
"""

import io
import json
import logging
from datetime import date
from decimal import Decimal

import pytest

from portfolio_analytics.utils.context import correlation_scope
from portfolio_analytics.utils.logging import (
    HANDLER_NAME,
    NO_CORRELATION_ID,
    CorrelationIdFilter,
    JsonFormatter,
    _get_log_level,
    setup_logging,
)


def _record(message: str = "hello", **extra) -> logging.LogRecord:
    record = logging.LogRecord(
        name="portfolio_analytics.test",
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


@pytest.fixture
def restore_root_logger():
    root = logging.getLogger()
    handlers, level = list(root.handlers), root.level
    yield
    root.handlers[:] = handlers
    root.setLevel(level)


class TestCorrelationIdFilter:

    def test_adds_placeholder_without_scope(self):
        record = _record()

        assert CorrelationIdFilter().filter(record)
        assert record.correlation_id == NO_CORRELATION_ID

    def test_adds_current_id(self):
        record = _record()

        with correlation_scope("abc-123"):
            CorrelationIdFilter().filter(record)

        assert record.correlation_id == "abc-123"


class TestJsonFormatter:

    def test_formats_record_as_json(self):
        record = _record("Computed summary", correlation_id="abc", portfolio_id=7)

        payload = json.loads(JsonFormatter().format(record))

        assert payload["message"] == "Computed summary"
        assert payload["level"] == "INFO"
        assert payload["logger"] == "portfolio_analytics.test"
        assert payload["correlation_id"] == "abc"
        assert payload["extra"] == {"portfolio_id": 7}

    def test_non_serializable_extra_becomes_string(self):
        record = _record(when=object)

        payload = json.loads(JsonFormatter().format(record))

        assert isinstance(payload["extra"]["when"], str)

    def test_money_and_dates_in_extras(self):
        record = _record(total_value=Decimal("2400.10"), as_of=date(2024, 6, 14))

        payload = json.loads(JsonFormatter().format(record))

        assert payload["extra"] == {"total_value": "2400.10", "as_of": "2024-06-14"}


class TestSetupLogging:

    def test_text_format(self, restore_root_logger):
        setup_logging(level="DEBUG", log_format="text")

        root = logging.getLogger()
        ours = [h for h in root.handlers if h.get_name() == HANDLER_NAME]
        assert root.level == logging.DEBUG
        assert len(ours) == 1
        assert not isinstance(ours[0].formatter, JsonFormatter)
        assert logging.getLogger("sqlalchemy.engine").level == logging.WARNING

    def test_json_format(self, restore_root_logger):
        handler = setup_logging(level="info", log_format="json")

        assert isinstance(handler.formatter, JsonFormatter)

    def test_reconfiguring_replaces_only_own_handler(self, restore_root_logger):
        foreign = logging.NullHandler()
        logging.getLogger().addHandler(foreign)

        setup_logging(level="INFO")
        setup_logging(level="INFO")

        handlers = logging.getLogger().handlers
        assert foreign in handlers
        assert len([h for h in handlers if h.get_name() == HANDLER_NAME]) == 1

    def test_lines_carry_correlation_id(self, restore_root_logger):
        stream = io.StringIO()
        setup_logging(level="INFO", log_format="text", stream=stream)

        with correlation_scope("report-42"):
            logging.getLogger("portfolio_analytics.test").info("valued")

        assert "| report-42 | portfolio_analytics.test | valued" in stream.getvalue()

    def test_invalid_level(self):
        with pytest.raises(ValueError, match="Invalid log level"):
            _get_log_level("LOUD")
