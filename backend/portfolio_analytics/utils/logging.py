# backend/portfolio_analytics/utils/logging.py
"""
Logging configuration for the Portfolio Analytics Engine.

This module provides centralized logging setup with:
- Environment-based log levels
- Correlation ID on every record (one ID per computed report)
- JSON format option for log aggregation
- Suppression of noisy third-party library logs

Usage:
    from portfolio_analytics.utils import setup_logging

    # Once, before computing any report
    setup_logging()

Log Levels:
    DEBUG   - Per-position lookups, FX resolution paths
    INFO    - Report computations started/finished
    WARNING - Missing prices or FX rates that narrow an aggregate
    ERROR   - Failures requiring attention (database unreachable)

Environment Configuration:
    LOG_LEVEL=DEBUG       # Trace every price and FX lookup
    LOG_LEVEL=INFO        # One line per report plus data-quality warnings
    LOG_FORMAT=json       # Machine-readable logs
    LOG_FORMAT=text       # Human-readable logs (default)

Correlation ID:
    PortfolioAnalyticsService.summary() opens a correlation scope, so every
    line logged while one report is computed (valuation warnings, FX
    fallbacks, timeline progress) carries the same ID.

Structured Extras:
    Values passed through `extra=` are kept in the JSON output. Decimals are
    written as strings so money amounts keep their exact digits; dates are
    written in ISO format.
"""

import json
import logging
import sys
from datetime import date, datetime, timezone
from decimal import Decimal
from enum import Enum
from typing import Any, TextIO

from portfolio_analytics.config import settings
from portfolio_analytics.utils.context import get_correlation_id

# =============================================================================
# CONSTANTS
# =============================================================================

# timestamp | level | correlation_id | logger_name | message
DEFAULT_TEXT_FORMAT = "%(asctime)s | %(levelname)-8s | %(correlation_id)s | %(name)s | %(message)s"
DEFAULT_DATE_FORMAT = "%Y-%m-%d %H:%M:%S"

# Placeholder for records logged outside a correlation scope
NO_CORRELATION_ID = "no-correlation-id"

# Name of the handler installed by setup_logging(); reconfiguring replaces
# only this handler
HANDLER_NAME = "portfolio_analytics"

# SQL echo and pool chatter from the SQL-backed stores
NOISY_LOGGERS = [
    "sqlalchemy.engine",
    "sqlalchemy.pool",
    "sqlalchemy.orm",
]

# LogRecord attributes that are not user extras
_STANDARD_ATTRS = {
    "name", "msg", "args", "created", "filename", "funcName",
    "levelname", "levelno", "lineno", "module", "msecs",
    "pathname", "process", "processName", "relativeCreated",
    "stack_info", "exc_info", "exc_text", "thread", "threadName",
    "correlation_id", "message", "taskName",
}


# =============================================================================
# CORRELATION ID FILTER
# =============================================================================

class CorrelationIdFilter(logging.Filter):
    """
    Logging filter that adds the active correlation ID to log records.

    Records logged outside any correlation_scope() get NO_CORRELATION_ID,
    so the text format string can always reference %(correlation_id)s.
    """

    def filter(self, record: logging.LogRecord) -> bool:
        """
        Add correlation ID to the log record.

        Returns:
            True (always allows the record through)
        """
        correlation_id = get_correlation_id()
        record.correlation_id = correlation_id or NO_CORRELATION_ID
        return True


# =============================================================================
# JSON FORMATTER
# =============================================================================

def _json_default(value: Any) -> Any:
    if isinstance(value, Decimal):
        return str(value)
    if isinstance(value, (date, datetime)):
        return value.isoformat()
    if isinstance(value, Enum):
        return value.value
    raise TypeError(f"{type(value).__name__} is not JSON serializable")


class JsonFormatter(logging.Formatter):
    """
    JSON formatter for structured logging.

    Output format:
    {
        "timestamp": "2024-06-14T10:30:00.123+00:00",
        "level": "WARNING",
        "logger": "portfolio_analytics.services.valuation.aggregator",
        "correlation_id": "abc-123-def",
        "message": "Portfolio 1: 1 positions without value, ...",
        "extra": {"portfolio_id": 1, "total_value": "2400.00"}
    }
    """

    def format(self, record: logging.LogRecord) -> str:
        """
        Format log record as JSON.

        Args:
            record: Log record to format

        Returns:
            JSON string representation of the log record
        """
        correlation_id = getattr(record, "correlation_id", NO_CORRELATION_ID)

        log_entry: dict[str, Any] = {
            "timestamp": datetime.now(timezone.utc).isoformat(),
            "level": record.levelname,
            "logger": record.name,
            "correlation_id": correlation_id,
            "message": record.getMessage(),
        }

        if record.exc_info:
            log_entry["exception"] = self.formatException(record.exc_info)

        extra = {}
        for key, value in record.__dict__.items():
            if key in _STANDARD_ATTRS:
                continue
            try:
                json.dumps(value, default=_json_default)
                extra[key] = value
            except (TypeError, ValueError):
                extra[key] = str(value)

        if extra:
            log_entry["extra"] = extra

        return json.dumps(log_entry, default=_json_default)


# =============================================================================
# SETUP FUNCTION
# =============================================================================

def setup_logging(
        level: str | None = None,
        log_format: str | None = None,
        suppress_noisy_loggers: bool = True,
        stream: TextIO | None = None,
) -> logging.Handler:
    """
    Configure process-wide logging with correlation ID support.

    Calling it again swaps the previously installed handler; handlers added
    by the host application (or by pytest's caplog) are left in place.

    Args:
        level: Log level (DEBUG, INFO, WARNING, ERROR, CRITICAL).
               Defaults to settings.log_level.
        log_format: Output format ('text' or 'json').
                    Defaults to settings.log_format.
        suppress_noisy_loggers: If True, set SQLAlchemy loggers to WARNING.
        stream: Where to write; defaults to stdout.

    Returns:
        The installed handler

    Raises:
        ValueError: If the level is not a valid log level

    Example:
        # Trace a single report's FX lookups
        setup_logging(level="DEBUG")

        # Ship to a log aggregator
        setup_logging(level="INFO", log_format="json")
    """
    log_level_str = level or settings.log_level
    log_level = _get_log_level(log_level_str)

    format_type = (log_format or settings.log_format).lower()

    if format_type == "json":
        formatter = JsonFormatter()
    else:
        formatter = logging.Formatter(
            fmt=DEFAULT_TEXT_FORMAT,
            datefmt=DEFAULT_DATE_FORMAT,
        )

    handler = logging.StreamHandler(stream or sys.stdout)
    handler.set_name(HANDLER_NAME)
    handler.setFormatter(formatter)
    handler.addFilter(CorrelationIdFilter())

    root_logger = logging.getLogger()
    root_logger.setLevel(log_level)
    for existing in list(root_logger.handlers):
        if existing.get_name() == HANDLER_NAME:
            root_logger.removeHandler(existing)
    root_logger.addHandler(handler)

    if suppress_noisy_loggers:
        _suppress_noisy_loggers()

    logger = logging.getLogger(__name__)
    logger.info(
        f"Logging configured: level={log_level_str}, format={format_type}",
        extra={"config": {"level": log_level_str, "format": format_type}},
    )
    return handler


# =============================================================================
# HELPER FUNCTIONS
# =============================================================================

def _get_log_level(level_str: str) -> int:
    """
    Convert string log level to logging constant.

    Args:
        level_str: Log level as string (case-insensitive)

    Returns:
        logging level constant (e.g., logging.INFO)

    Raises:
        ValueError: If level_str is not a valid log level
    """
    level_str = level_str.upper().strip()

    level_mapping = {
        "DEBUG": logging.DEBUG,
        "INFO": logging.INFO,
        "WARNING": logging.WARNING,
        "WARN": logging.WARNING,
        "ERROR": logging.ERROR,
        "CRITICAL": logging.CRITICAL,
    }

    if level_str not in level_mapping:
        valid_levels = ", ".join(level_mapping.keys())
        raise ValueError(
            f"Invalid log level: '{level_str}'. "
            f"Valid levels are: {valid_levels}"
        )

    return level_mapping[level_str]


def _suppress_noisy_loggers() -> None:
    """
    Set SQLAlchemy loggers to WARNING.

    Engine echo logs every SELECT issued by the price and rate stores,
    which drowns out the per-report lines at DEBUG.
    """
    for logger_name in NOISY_LOGGERS:
        logging.getLogger(logger_name).setLevel(logging.WARNING)
