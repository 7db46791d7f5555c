# backend/tests/services/analytics/test_performance.py
"""
Tests for the PerformanceCalculator.

This module tests:
- Period start dates (including month-end clamping)
- Change and change % against the period start value
- Zero start value guard
- Unrecognized period codes
- Cancellation
"""

import threading
from datetime import date
from decimal import Decimal

import pytest

from portfolio_analytics.services.analytics.performance import PerformanceCalculator
from portfolio_analytics.services.analytics.types import Period
from portfolio_analytics.services.currency_converter import CurrencyConverter
from portfolio_analytics.services.exceptions import ComputationCancelledError
from portfolio_analytics.services.stores import InMemoryPriceStore, InMemoryRateStore
from portfolio_analytics.services.valuation.calculators import PositionValuator
from portfolio_analytics.services.valuation.timeline import TimelineBuilder
from tests.conftest import TODAY, make_asset, make_bar, make_portfolio, make_position


OLD_STOCK = make_asset(1, "AAPL")
NEW_STOCK = make_asset(2, "ARM")


def _calculator(today: date = TODAY) -> PerformanceCalculator:
    price_store = InMemoryPriceStore([
        make_bar(OLD_STOCK, date(2023, 1, 2), "100"),
        make_bar(OLD_STOCK, date(2024, 6, 1), "110"),
        make_bar(OLD_STOCK, TODAY, "120"),
        make_bar(NEW_STOCK, date(2024, 6, 10), "50"),
    ])
    converter = CurrencyConverter(InMemoryRateStore(), today=today)
    builder = TimelineBuilder(PositionValuator(price_store, converter), today=today)
    return PerformanceCalculator(builder, today=today)


@pytest.fixture
def calculator() -> PerformanceCalculator:
    return _calculator()


@pytest.fixture
def portfolio():
    return make_portfolio(make_position(1, OLD_STOCK, quantity="10"))


# =============================================================================
# PERIOD START DATES
# =============================================================================

class TestPeriodStart:

    @pytest.mark.parametrize("period,expected", [
        (Period.WEEK, date(2024, 3, 24)),
        (Period.MONTH, date(2024, 2, 29)),
        (Period.QUARTER, date(2023, 12, 31)),
        (Period.YEAR, date(2023, 3, 31)),
        (Period.YTD, date(2024, 1, 1)),
        ("month", date(2024, 2, 29)),
        ("decade", date(2024, 3, 31)),
        ("", date(2024, 3, 31)),
    ])
    def test_period_start_from_month_end(self, period, expected):
        calculator = _calculator(today=date(2024, 3, 31))

        assert calculator.period_start(period) == expected

    def test_year_from_leap_day_clamps(self):
        calculator = _calculator(today=date(2024, 2, 29))

        assert calculator.period_start(Period.YEAR) == date(2023, 2, 28)


# =============================================================================
# CHANGE CALCULATION
# =============================================================================

class TestCalculate:

    def test_week(self, calculator, portfolio):
        result = calculator.calculate(portfolio, Period.WEEK)

        assert result.period == "week"
        assert result.start_date == date(2024, 6, 7)
        assert result.end_date == TODAY
        assert result.start_value == Decimal("1100")
        assert result.end_value == Decimal("1200")
        assert result.change == Decimal("100.00")
        assert result.change_percentage == Decimal("9.09")

    def test_year(self, calculator, portfolio):
        result = calculator.calculate(portfolio, "year")

        assert result.change == Decimal("200.00")
        assert result.change_percentage == Decimal("20.00")

    def test_zero_start_value(self, calculator):
        portfolio = make_portfolio(make_position(2, NEW_STOCK, quantity="10"))

        result = calculator.calculate(portfolio, Period.WEEK)

        assert result.period == "week"
        assert result.change == Decimal("0")
        assert result.change_percentage == Decimal("0")
        assert result.start_date is None
        assert result.start_value is None

    def test_unrecognized_period_is_zero_length(self, calculator, portfolio):
        result = calculator.calculate(portfolio, "decade")

        assert result.period == "decade"
        assert result.start_date == TODAY
        assert result.change == Decimal("0.00")
        assert result.change_percentage == Decimal("0.00")

    def test_calculate_all_covers_every_period(self, calculator, portfolio):
        results = calculator.calculate_all(portfolio)

        assert list(results) == ["week", "month", "quarter", "year", "ytd"]
        assert results["ytd"].start_value == Decimal("1000")

    def test_cancelled(self, calculator, portfolio):
        cancel = threading.Event()
        cancel.set()

        with pytest.raises(ComputationCancelledError):
            calculator.calculate(portfolio, Period.MONTH, cancel_event=cancel)
