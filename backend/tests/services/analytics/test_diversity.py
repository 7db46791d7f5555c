# backend/tests/services/analytics/test_diversity.py
"""
Tests for the DiversityScorer (HHI-based concentration score).
"""

from decimal import Decimal

import pytest

from portfolio_analytics.services.analytics.diversity import DiversityScorer
from portfolio_analytics.services.valuation.types import AllocationBucket


def _allocation(*percentages: str) -> dict[str, AllocationBucket]:
    return {
        f"group_{i}": AllocationBucket(
            key=f"group_{i}",
            value=Decimal(p) * 10,
            percentage=Decimal(p),
            count=1,
        )
        for i, p in enumerate(percentages)
    }


@pytest.fixture
def scorer() -> DiversityScorer:
    return DiversityScorer()


class TestDiversityScore:

    def test_even_two_way_split_scores_100(self, scorer):
        assert scorer.score(_allocation("50", "50")) == Decimal("100.00")

    def test_single_group_scores_zero(self, scorer):
        assert scorer.score(_allocation("100")) == Decimal("0")

    def test_empty_allocation_scores_zero(self, scorer):
        assert scorer.score({}) == Decimal("0")

    def test_uneven_split(self, scorer):
        # hhi = 75² + 25² = 6250; min = 5000 → (10000 - 6250) / 5000 × 100
        assert scorer.score(_allocation("75", "25")) == Decimal("75.00")

    def test_rounded_three_way_split_scores_100(self, scorer):
        """A rounded three-way split still scores 100."""
        assert scorer.score(_allocation("33.33", "33.33", "33.34")) == Decimal("100.00")

    def test_full_concentration_among_several_groups_scores_zero(self, scorer):
        assert scorer.score(_allocation("100", "0")) == Decimal("0")

    @pytest.mark.parametrize("percentages", [
        ("90", "10"),
        ("60", "30", "10"),
        ("25", "25", "25", "25"),
        ("99.99", "0.01"),
        ("40", "40", "20"),
    ])
    def test_score_is_bounded(self, scorer, percentages):
        score = scorer.score(_allocation(*percentages))

        assert Decimal("0") <= score <= Decimal("100")
        assert score == score.quantize(Decimal("0.01"))

    def test_hhi(self, scorer):
        assert scorer.hhi([Decimal("60"), Decimal("40")]) == Decimal("5200")
