# backend/portfolio_analytics/services/valuation/timeline.py
"""
Timeline builder for day-by-day portfolio value series.

Produces one TimelinePoint per calendar day of [start, end], ascending,
by valuing every open position at each date with PositionValuator.value_on().

Gap Policy:
    Positions without a price (latest bar <= date) or without an FX rate on
    a date are left out of that day's sum. Every date still yields a point;
    the point has no "incomplete" marker, so gaps under-report the value.

Laziness:
    build() returns a generator. Range validation happens eagerly when
    build() is called; values are computed as points are consumed, and
    the same range can be rebuilt any number of times.

Cancellation:
    Pass a threading.Event and/or timeout_seconds. The check happens before
    each point; once triggered the generator raises ComputationCancelledError
    instead of ending early, so a cut-short series is never mistaken for a
    complete one.

Complexity:
    O(days × positions) store lookups.
"""

from __future__ import annotations

import logging
import threading
import time
from collections.abc import Iterator
from datetime import date, datetime, timedelta
from decimal import Decimal

from portfolio_analytics.services.constants import (
    DEFAULT_TIMELINE_DAYS,
    MAX_TIMELINE_DAYS,
    ZERO,
)
from portfolio_analytics.services.exceptions import (
    ComputationCancelledError,
    InvalidDateRangeError,
)
from portfolio_analytics.services.valuation.calculators import PositionValuator
from portfolio_analytics.services.valuation.types import (
    PortfolioSnapshot,
    TimelinePoint,
)
from portfolio_analytics.utils.date_utils import count_days, iter_days

logger = logging.getLogger(__name__)


class TimelineBuilder:
    """
    Builds portfolio value series over date ranges.

    Attributes:
        _valuator: Per-position value lookups
        _today: As-of date used by last_days()
        _max_days: Longest accepted range, in calendar days

    Example:
        builder = TimelineBuilder(valuator, today=date(2024, 6, 14))
        for point in builder.build(portfolio, date(2024, 6, 1), date(2024, 6, 14)):
            print(point.date, point.value)
    """

    def __init__(
            self,
            valuator: PositionValuator,
            today: date,
            max_days: int = MAX_TIMELINE_DAYS,
    ) -> None:
        self._valuator = valuator
        self._today = today
        self._max_days = max_days

    def value_on(self, portfolio: PortfolioSnapshot, on: date) -> Decimal:
        """
        Total base-currency value of open positions at a date.

        Positions that can't be valued on that date are skipped.
        """
        total = ZERO
        for position in portfolio.open_positions:
            value = self._valuator.value_on(position, portfolio.base_currency, on)
            if value is not None:
                total += value
        return total

    def build(
            self,
            portfolio: PortfolioSnapshot,
            start_date: date,
            end_date: date,
            cancel_event: threading.Event | None = None,
            timeout_seconds: float | None = None,
    ) -> Iterator[TimelinePoint]:
        """
        Lazily yield one point per calendar day of [start_date, end_date].

        Args:
            portfolio: Portfolio snapshot
            start_date: First date (inclusive)
            end_date: Last date (inclusive)
            cancel_event: Set it to stop the computation
            timeout_seconds: Stop after this many seconds of wall time

        Returns:
            Generator of TimelinePoint, strictly ascending by date

        Raises:
            InvalidDateRangeError: Non-date input, start after end, or a
                range longer than the configured maximum (raised immediately)
            ComputationCancelledError: While iterating, if cancelled or timed out
        """
        self._validate_range(start_date, end_date)

        deadline = None
        if timeout_seconds is not None:
            deadline = time.monotonic() + timeout_seconds

        return self._generate(portfolio, start_date, end_date, cancel_event, deadline)

    def last_days(
            self,
            portfolio: PortfolioSnapshot,
            days: int = DEFAULT_TIMELINE_DAYS,
            cancel_event: threading.Event | None = None,
            timeout_seconds: float | None = None,
    ) -> Iterator[TimelinePoint]:
        """Timeline over [today - days, today] (days + 1 points)."""
        if days < 0:
            raise InvalidDateRangeError(f"days must be >= 0, got {days}")
        return self.build(
            portfolio,
            self._today - timedelta(days=days),
            self._today,
            cancel_event=cancel_event,
            timeout_seconds=timeout_seconds,
        )

    # =========================================================================
    # PRIVATE HELPERS
    # =========================================================================

    def _validate_range(self, start_date: date, end_date: date) -> None:
        for name, value in (("start_date", start_date), ("end_date", end_date)):
            # datetime is a date subclass but carries a time component
            if not isinstance(value, date) or isinstance(value, datetime):
                raise InvalidDateRangeError(f"{name} must be a date, got {value!r}")

        if start_date > end_date:
            raise InvalidDateRangeError(
                f"start_date ({start_date}) must be before or equal to end_date ({end_date})"
            )

        days = count_days(start_date, end_date)
        if days > self._max_days:
            raise InvalidDateRangeError(
                f"Date range of {days} days exceeds maximum of {self._max_days}"
            )

    def _generate(
            self,
            portfolio: PortfolioSnapshot,
            start_date: date,
            end_date: date,
            cancel_event: threading.Event | None,
            deadline: float | None,
    ) -> Iterator[TimelinePoint]:
        completed = 0
        for current in iter_days(start_date, end_date):
            if cancel_event is not None and cancel_event.is_set():
                logger.info(
                    f"Timeline for portfolio {portfolio.id} cancelled after {completed} points"
                )
                raise ComputationCancelledError("cancelled", completed_points=completed)
            if deadline is not None and time.monotonic() >= deadline:
                logger.warning(
                    f"Timeline for portfolio {portfolio.id} timed out after {completed} points"
                )
                raise ComputationCancelledError("timeout", completed_points=completed)

            yield TimelinePoint(date=current, value=self.value_on(portfolio, current))
            completed += 1

        logger.debug(
            f"Timeline for portfolio {portfolio.id}: {completed} points "
            f"({start_date} to {end_date})"
        )
