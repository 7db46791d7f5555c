# backend/portfolio_analytics/services/analytics/types.py
"""
Internal data types for the analytics layer.

Serialization happens in portfolio_analytics/schemas/analytics.py.
"""

import enum
from dataclasses import dataclass
from datetime import date
from decimal import Decimal


class Period(str, enum.Enum):
    """Look-back periods for period performance."""
    WEEK = "week"
    MONTH = "month"
    QUARTER = "quarter"
    YEAR = "year"
    YTD = "ytd"


@dataclass(frozen=True)
class PeriodPerformance:
    """
    Change in portfolio value between a period start and today.

    change and change_percentage are rounded to 2 decimals. When the value at
    the period start is 0, both are 0 and the date/value fields are None.

    Attributes:
        period: Period code as requested (e.g., "month")
        change: end_value - start_value
        change_percentage: change / start_value × 100
        start_date: Period start
        end_date: Today
        start_value: Portfolio value at start_date (full precision)
        end_value: Portfolio value today (full precision)
    """

    period: str
    change: Decimal
    change_percentage: Decimal
    start_date: date | None = None
    end_date: date | None = None
    start_value: Decimal | None = None
    end_value: Decimal | None = None
