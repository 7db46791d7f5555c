# backend/portfolio_analytics/utils/date_utils.py
"""
Date utility functions for the analytics engine.

Usage:
    from portfolio_analytics.utils.date_utils import iter_days, subtract_months

    for day in iter_days(start_date, end_date):
        ...
"""

import calendar
from collections.abc import Iterator
from datetime import date, timedelta


def iter_days(start_date: date, end_date: date) -> Iterator[date]:
    """
    Yield every calendar day in a range, ascending.

    Args:
        start_date: First date in range (inclusive)
        end_date: Last date in range (inclusive)

    Example:
        >>> list(iter_days(date(2024, 1, 30), date(2024, 2, 1)))
        [date(2024, 1, 30), date(2024, 1, 31), date(2024, 2, 1)]
    """
    current = start_date
    while current <= end_date:
        yield current
        current += timedelta(days=1)


def count_days(start_date: date, end_date: date) -> int:
    """Number of calendar days in [start_date, end_date], 0 if reversed."""
    return max((end_date - start_date).days + 1, 0)


def subtract_months(d: date, months: int) -> date:
    """
    Go back a number of calendar months.

    The day is clamped to the last day of the target month, so
    31 March minus one month is 28 (or 29) February.

    Args:
        d: Starting date
        months: Calendar months to subtract (may exceed 12)

    Returns:
        The shifted date
    """
    month_index = d.year * 12 + (d.month - 1) - months
    year, month = divmod(month_index, 12)
    month += 1
    last_day = calendar.monthrange(year, month)[1]
    return date(year, month, min(d.day, last_day))


def start_of_year(d: date) -> date:
    """First day of the year containing d."""
    return date(d.year, 1, 1)
