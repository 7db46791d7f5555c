# backend/portfolio_analytics/utils/context.py
"""
Execution context for the analytics engine.

Holds the correlation ID that ties together every log line emitted while
one report is being computed. Uses Python's contextvars so the value is
isolated per thread / task.

Usage:
    from portfolio_analytics.utils.context import correlation_scope

    with correlation_scope():
        ...  # all log records carry the same correlation ID

    # Or reuse an ID supplied by the caller (e.g. an HTTP request ID)
    with correlation_scope("req-123"):
        ...
"""

import uuid
from collections.abc import Iterator
from contextlib import contextmanager
from contextvars import ContextVar

_correlation_id_var: ContextVar[str | None] = ContextVar("correlation_id", default=None)


def get_correlation_id() -> str | None:
    """
    Get the current correlation ID.

    Returns:
        The correlation ID for the current computation, or None if not set.
    """
    return _correlation_id_var.get()


def set_correlation_id(correlation_id: str) -> None:
    """Set the correlation ID for the current context."""
    _correlation_id_var.set(correlation_id)


def clear_correlation_id() -> None:
    """Clear the correlation ID."""
    _correlation_id_var.set(None)


@contextmanager
def correlation_scope(correlation_id: str | None = None) -> Iterator[str]:
    """
    Run a block under a correlation ID.

    An ID already set by an outer scope is kept unless a new one is passed
    explicitly. The previous value is restored on exit.

    Args:
        correlation_id: ID to use; generated (uuid4) if None and none is set

    Yields:
        The correlation ID in effect inside the block
    """
    effective = correlation_id or get_correlation_id() or str(uuid.uuid4())
    token = _correlation_id_var.set(effective)
    try:
        yield effective
    finally:
        _correlation_id_var.reset(token)
