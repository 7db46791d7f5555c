# backend/portfolio_analytics/services/analytics/diversity.py
"""
Diversity score from an allocation breakdown.

Herfindahl-Hirschman Index (HHI):
    hhi = Σ percentage²        (percentages on a 0-100 scale → 0..10000)

    max_hhi = 10000            (everything in one group)
    min_hhi = 10000 / N        (perfectly even split over N groups)

    score = (max_hhi - hhi) / (max_hhi - min_hhi) × 100

Edge Cases:
    - No groups → 0
    - One group → 0 (min_hhi == max_hhi; maximally concentrated)
    - hhi >= max_hhi → 0
    - Score is capped at 100 and rounded to 2 decimals

The percentages fed in are the 2-decimal allocation percentages, so an
even split of unequal values can still score exactly 100.
"""

from collections.abc import Mapping
from decimal import Decimal, ROUND_HALF_UP

from portfolio_analytics.services.constants import (
    DISPLAY_PERCENTAGE_PRECISION,
    HUNDRED,
    MAX_DIVERSITY_SCORE,
    MAX_HHI,
    ZERO,
)
from portfolio_analytics.services.valuation.types import AllocationBucket


class DiversityScorer:
    """Scores concentration of an allocation breakdown from 0 (concentrated) to 100."""

    def hhi(self, percentages: list[Decimal]) -> Decimal:
        return sum((p * p for p in percentages), ZERO)

    def score(self, allocation: Mapping[str, AllocationBucket]) -> Decimal:
        """
        Diversity score of an allocation.

        Args:
            allocation: {group: AllocationBucket}, usually by asset class

        Returns:
            Score in [0, 100], 2 decimals
        """
        group_count = len(allocation)
        if group_count <= 1:
            return ZERO

        hhi = self.hhi([bucket.percentage for bucket in allocation.values()])
        if hhi >= MAX_HHI:
            return ZERO

        min_hhi = MAX_HHI / Decimal(group_count)
        score = (MAX_HHI - hhi) / (MAX_HHI - min_hhi) * HUNDRED
        score = min(score, MAX_DIVERSITY_SCORE)

        return score.quantize(DISPLAY_PERCENTAGE_PRECISION, rounding=ROUND_HALF_UP)
