# backend/portfolio_analytics/services/valuation/__init__.py
"""
Valuation Package.

This package values portfolios in their base currency:
- Single position at a date (PositionValuator)
- All open positions with totals, allocation and rankings (PortfolioAggregator)
- Day-by-day value series (TimelineBuilder)

Architecture:
    valuation/
    ├── __init__.py              # This file - package exports
    ├── types.py                 # Snapshots and result data classes
    ├── calculators.py           # PositionValuator
    ├── aggregator.py            # PortfolioAggregator
    └── timeline.py              # TimelineBuilder

Data Flow:
    PositionSnapshot + PriceStore + CurrencyConverter → PositionValuation
    PositionValuation[] → PortfolioValuation → AllocationBucket / rankings
    PortfolioSnapshot × dates → TimelinePoint[]
"""

from portfolio_analytics.services.valuation.types import (
    AllocationBucket,
    AllocationDimension,
    AssetSnapshot,
    PortfolioSnapshot,
    PortfolioValuation,
    PositionSnapshot,
    PositionValuation,
    PriceBar,
    TimelinePoint,
)
from portfolio_analytics.services.valuation.calculators import PositionValuator
from portfolio_analytics.services.valuation.aggregator import PortfolioAggregator
from portfolio_analytics.services.valuation.timeline import TimelineBuilder

__all__ = [
    # Calculators
    "PositionValuator",
    "PortfolioAggregator",
    "TimelineBuilder",
    # Types
    "AllocationBucket",
    "AllocationDimension",
    "AssetSnapshot",
    "PortfolioSnapshot",
    "PortfolioValuation",
    "PositionSnapshot",
    "PositionValuation",
    "PriceBar",
    "TimelinePoint",
]
