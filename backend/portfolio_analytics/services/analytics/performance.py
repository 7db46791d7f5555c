# backend/portfolio_analytics/services/analytics/performance.py
"""
Period performance: value today versus value at a period start.

Period Start Dates (relative to the engine's "today"):
    week    → today - 7 days
    month   → today - 1 calendar month
    quarter → today - 3 calendar months
    year    → today - 1 calendar year
    ytd     → 1 January of the current year
    other   → today (zero-length period)

Month arithmetic clamps to the end of the month: 31 March - 1 month is
the last day of February.

Both ends are valued with TimelineBuilder.value_on(), so the same
exclusion policy (no price / no FX → left out) applies at both dates.
"""

from __future__ import annotations

import logging
import threading
from datetime import date, timedelta
from decimal import Decimal, ROUND_HALF_UP

from portfolio_analytics.services.analytics.types import Period, PeriodPerformance
from portfolio_analytics.services.constants import (
    CURRENCY_PRECISION,
    DISPLAY_PERCENTAGE_PRECISION,
    HUNDRED,
    ZERO,
)
from portfolio_analytics.services.exceptions import ComputationCancelledError
from portfolio_analytics.services.valuation.timeline import TimelineBuilder
from portfolio_analytics.services.valuation.types import PortfolioSnapshot
from portfolio_analytics.utils.date_utils import start_of_year, subtract_months

logger = logging.getLogger(__name__)


class PerformanceCalculator:
    """
    Computes change and change % over standard look-back periods.

    Example:
        calculator = PerformanceCalculator(timeline_builder, today=date(2024, 6, 14))
        result = calculator.calculate(portfolio, Period.MONTH)
        result.change_percentage  # Decimal("4.25")
    """

    def __init__(self, timeline_builder: TimelineBuilder, today: date) -> None:
        self._timeline = timeline_builder
        self._today = today

    def period_start(self, period: Period | str) -> date:
        """Start date for a period code; unrecognized codes map to today."""
        try:
            period = Period(period)
        except ValueError:
            logger.debug(f"Unrecognized period {period!r}, using today")
            return self._today

        if period is Period.WEEK:
            return self._today - timedelta(days=7)
        if period is Period.MONTH:
            return subtract_months(self._today, 1)
        if period is Period.QUARTER:
            return subtract_months(self._today, 3)
        if period is Period.YEAR:
            return subtract_months(self._today, 12)
        if period is Period.YTD:
            return start_of_year(self._today)
        raise ValueError(f"Unhandled period: {period}")

    def calculate(
            self,
            portfolio: PortfolioSnapshot,
            period: Period | str,
            cancel_event: threading.Event | None = None,
    ) -> PeriodPerformance:
        """
        Performance of a portfolio over one period.

        Args:
            portfolio: Portfolio snapshot
            period: Period enum or code string
            cancel_event: Set it to abort before the next valuation

        Returns:
            PeriodPerformance; change fields are 0 when the start value is 0

        Raises:
            ComputationCancelledError: If cancel_event is set
        """
        period_code = period.value if isinstance(period, Period) else str(period)
        start_date = self.period_start(period)

        self._check_cancelled(cancel_event, completed=0)
        start_value = self._timeline.value_on(portfolio, start_date)

        if start_value == ZERO:
            return PeriodPerformance(period=period_code, change=ZERO, change_percentage=ZERO)

        self._check_cancelled(cancel_event, completed=1)
        end_value = self._timeline.value_on(portfolio, self._today)

        change = end_value - start_value
        change_percentage = change / start_value * HUNDRED

        return PeriodPerformance(
            period=period_code,
            change=change.quantize(CURRENCY_PRECISION, rounding=ROUND_HALF_UP),
            change_percentage=change_percentage.quantize(
                DISPLAY_PERCENTAGE_PRECISION, rounding=ROUND_HALF_UP
            ),
            start_date=start_date,
            end_date=self._today,
            start_value=start_value,
            end_value=end_value,
        )

    def calculate_all(
            self,
            portfolio: PortfolioSnapshot,
            cancel_event: threading.Event | None = None,
    ) -> dict[str, PeriodPerformance]:
        """Performance for every Period, keyed by period code."""
        return {
            period.value: self.calculate(portfolio, period, cancel_event=cancel_event)
            for period in Period
        }

    @staticmethod
    def _check_cancelled(cancel_event: threading.Event | None, completed: int) -> None:
        if cancel_event is not None and cancel_event.is_set():
            raise ComputationCancelledError("cancelled", completed_points=completed)
