# backend/portfolio_analytics/utils/__init__.py
"""
Utility modules for the Portfolio Analytics Engine.

This package contains cross-cutting utilities:
- logging: Logging configuration with correlation ID support
- context: Correlation ID context for tracing one report computation
- date_utils: Calendar helpers (day ranges, month arithmetic)

Usage:
    from portfolio_analytics.utils import setup_logging
    from portfolio_analytics.utils import correlation_scope
    from portfolio_analytics.utils.date_utils import iter_days
"""

from portfolio_analytics.utils.context import (
    get_correlation_id,
    set_correlation_id,
    clear_correlation_id,
    correlation_scope,
)
from portfolio_analytics.utils.logging import setup_logging

__all__ = [
    # Logging
    "setup_logging",
    # Context
    "get_correlation_id",
    "set_correlation_id",
    "clear_correlation_id",
    "correlation_scope",
]
