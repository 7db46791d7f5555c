# backend/portfolio_analytics/services/valuation/aggregator.py
"""
Portfolio-level aggregation of position valuations.

PortfolioAggregator values every OPEN position of a portfolio as of the
engine's "today" and derives totals, allocation breakdowns and rankings.

Contribution Rule:
    A position with a known value counts toward total_value, allocation
    and largest_positions. Cost, P&L and the performer rankings also need
    its cost basis. Allocation percentages are taken over total_value, so
    they still sum to ~100.

Ranking Order:
    Sort keys use full-precision P&L % / value. Ties are broken by
    position ID ascending so results never depend on store iteration order.
"""

from __future__ import annotations

import logging
from collections import defaultdict
from datetime import date
from decimal import Decimal, ROUND_HALF_UP

from portfolio_analytics.services.constants import (
    DEFAULT_RANKING_LIMIT,
    DISPLAY_PERCENTAGE_PRECISION,
    HUNDRED,
    ZERO,
)
from portfolio_analytics.services.valuation.calculators import PositionValuator
from portfolio_analytics.services.valuation.types import (
    AllocationBucket,
    AllocationDimension,
    PortfolioSnapshot,
    PortfolioValuation,
    PositionValuation,
)

logger = logging.getLogger(__name__)


def _group_key(position: PositionValuation, dimension: AllocationDimension) -> str:
    if dimension is AllocationDimension.ASSET_CLASS:
        return position.asset.asset_class.value
    if dimension is AllocationDimension.CURRENCY:
        return position.asset.currency
    raise ValueError(f"Unknown allocation dimension: {dimension}")


class PortfolioAggregator:
    """
    Sums and ranks the open positions of a portfolio.

    Attributes:
        _valuator: Per-position valuation
        _today: As-of date for valuate()
    """

    def __init__(self, valuator: PositionValuator, today: date) -> None:
        self._valuator = valuator
        self._today = today

    def valuate(self, portfolio: PortfolioSnapshot, on: date | None = None) -> PortfolioValuation:
        """
        Value all open positions (closed positions are ignored).

        Args:
            portfolio: Portfolio snapshot
            on: Valuation date (defaults to the aggregator's today)

        Returns:
            PortfolioValuation with one entry per open position, ID order
        """
        valuation_date = on or self._today
        base_currency = portfolio.base_currency

        positions = [
            self._valuator.valuate(position, base_currency, valuation_date)
            for position in portfolio.open_positions
        ]

        warnings: list[str] = []
        unvalued = [p for p in positions if p.value is None]
        no_cost = [p for p in positions if p.value is not None and p.cost_basis is None]
        if unvalued:
            warnings.append(
                f"{len(unvalued)} of {len(positions)} positions excluded from totals "
                f"due to missing price or FX data"
            )
        if no_cost:
            warnings.append(
                f"{len(no_cost)} of {len(positions)} positions excluded from cost and P&L "
                f"due to missing purchase-currency FX data"
            )
        if unvalued or no_cost:
            logger.warning(
                f"Portfolio {portfolio.id}: {len(unvalued)} positions without value, "
                f"{len(no_cost)} without cost basis on {valuation_date}"
            )

        return PortfolioValuation(
            portfolio_id=portfolio.id,
            base_currency=base_currency,
            valuation_date=valuation_date,
            positions=positions,
            warnings=warnings,
        )

    # =========================================================================
    # ALLOCATION
    # =========================================================================

    def allocation_by(
            self,
            valuation: PortfolioValuation,
            dimension: AllocationDimension,
    ) -> dict[str, AllocationBucket]:
        """
        Group valued positions by asset class or asset currency.

        Returns:
            {key: AllocationBucket}; empty when total value is 0
        """
        total_value = valuation.total_value
        if total_value == ZERO:
            return {}

        values: dict[str, Decimal] = defaultdict(lambda: ZERO)
        counts: dict[str, int] = defaultdict(int)
        for position in valuation.valued:
            key = _group_key(position, dimension)
            values[key] += position.value
            counts[key] += 1

        return {
            key: AllocationBucket(
                key=key,
                value=value,
                percentage=(value / total_value * HUNDRED).quantize(
                    DISPLAY_PERCENTAGE_PRECISION, rounding=ROUND_HALF_UP
                ),
                count=counts[key],
            )
            for key, value in values.items()
        }

    # =========================================================================
    # RANKINGS
    # =========================================================================

    def top_performers(
            self,
            valuation: PortfolioValuation,
            limit: int = DEFAULT_RANKING_LIMIT,
    ) -> list[PositionValuation]:
        """Positions with P&L > 0, highest P&L % first."""
        winners = [
            p for p in valuation.contributing
            if p.profit_loss > ZERO
        ]
        winners.sort(key=lambda p: (-p.profit_loss_percentage, p.position_id))
        return winners[:limit]

    def worst_performers(
            self,
            valuation: PortfolioValuation,
            limit: int = DEFAULT_RANKING_LIMIT,
    ) -> list[PositionValuation]:
        """Positions with P&L < 0, lowest P&L % first."""
        losers = [
            p for p in valuation.contributing
            if p.profit_loss < ZERO
        ]
        losers.sort(key=lambda p: (p.profit_loss_percentage, p.position_id))
        return losers[:limit]

    def largest_positions(
            self,
            valuation: PortfolioValuation,
            limit: int = DEFAULT_RANKING_LIMIT,
    ) -> list[PositionValuation]:
        """Valued positions by base-currency value, largest first."""
        ranked = sorted(
            valuation.valued,
            key=lambda p: (-p.value, p.position_id),
        )
        return ranked[:limit]
