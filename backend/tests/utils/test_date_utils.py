# backend/tests/utils/test_date_utils.py
"""
Tests for calendar helpers.
"""

from datetime import date

import pytest

from portfolio_analytics.utils.date_utils import (
    count_days,
    iter_days,
    start_of_year,
    subtract_months,
)


class TestIterDays:

    def test_inclusive_range_across_month_end(self):
        assert list(iter_days(date(2024, 1, 30), date(2024, 2, 1))) == [
            date(2024, 1, 30),
            date(2024, 1, 31),
            date(2024, 2, 1),
        ]

    def test_single_day(self):
        assert list(iter_days(date(2024, 2, 29), date(2024, 2, 29))) == [date(2024, 2, 29)]

    def test_reversed_range_is_empty(self):
        assert list(iter_days(date(2024, 2, 2), date(2024, 2, 1))) == []

    def test_count_matches_iteration(self):
        start, end = date(2023, 12, 15), date(2024, 3, 1)

        assert count_days(start, end) == len(list(iter_days(start, end)))
        assert count_days(end, start) == 0


class TestSubtractMonths:

    @pytest.mark.parametrize("start,months,expected", [
        (date(2024, 3, 31), 1, date(2024, 2, 29)),
        (date(2023, 3, 31), 1, date(2023, 2, 28)),
        (date(2024, 5, 31), 1, date(2024, 4, 30)),
        (date(2024, 1, 15), 1, date(2023, 12, 15)),
        (date(2024, 3, 31), 3, date(2023, 12, 31)),
        (date(2024, 2, 29), 12, date(2023, 2, 28)),
        (date(2024, 6, 14), 0, date(2024, 6, 14)),
        (date(2024, 6, 14), 30, date(2021, 12, 14)),
    ])
    def test_clamps_to_month_end(self, start, months, expected):
        assert subtract_months(start, months) == expected


def test_start_of_year():
    assert start_of_year(date(2024, 6, 14)) == date(2024, 1, 1)
