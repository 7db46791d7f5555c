# backend/portfolio_analytics/services/__init__.py
"""
Service layer of the analytics engine.

Services:
- Have NO knowledge of transport (no HTTP, no CLI)
- Raise domain-specific exceptions
- Read data only through stores and repositories passed in explicitly
- Are easily testable with the in-memory stores

Usage:
    from portfolio_analytics.services import CurrencyConverter
    from portfolio_analytics.services import PortfolioAnalyticsService
    from portfolio_analytics.services import (
        PortfolioNotFoundError,
        RateUnavailableError,
    )

Architecture:
    services/
    ├── __init__.py                  # This file - main exports
    ├── exceptions.py                # Domain exceptions
    ├── constants.py                 # Precisions, bounds and defaults
    ├── protocols.py                 # PriceStore / RateStore interfaces
    ├── stores.py                    # SQL and in-memory stores
    ├── portfolio_repository.py      # Loads portfolio snapshots
    ├── currency_converter.py        # FX rate resolution and conversion
    ├── valuation/                   # Position and portfolio valuation
    │   ├── types.py
    │   ├── calculators.py
    │   ├── aggregator.py
    │   └── timeline.py
    └── analytics/                   # Derived metrics
        ├── types.py
        ├── diversity.py
        ├── performance.py
        └── service.py               # Main orchestrator
"""

from portfolio_analytics.services.exceptions import (
    ServiceError,
    ValidationError,
    InvalidDateRangeError,
    InvalidPositionError,
    NotFoundError,
    PortfolioNotFoundError,
    MarketDataError,
    RateUnavailableError,
    PriceUnavailableError,
    ComputationCancelledError,
)
from portfolio_analytics.services.currency_converter import (
    ConversionRequest,
    CurrencyConverter,
    FXRateResult,
    RateSource,
)
from portfolio_analytics.services.stores import (
    InMemoryPriceStore,
    InMemoryRateStore,
    SqlPriceStore,
    SqlRateStore,
)
from portfolio_analytics.services.portfolio_repository import SqlPortfolioRepository
from portfolio_analytics.services.analytics import PortfolioAnalyticsService

__all__ = [
    # Exceptions
    "ServiceError",
    "ValidationError",
    "InvalidDateRangeError",
    "InvalidPositionError",
    "NotFoundError",
    "PortfolioNotFoundError",
    "MarketDataError",
    "RateUnavailableError",
    "PriceUnavailableError",
    "ComputationCancelledError",
    # Currency
    "ConversionRequest",
    "CurrencyConverter",
    "FXRateResult",
    "RateSource",
    # Stores
    "InMemoryPriceStore",
    "InMemoryRateStore",
    "SqlPriceStore",
    "SqlRateStore",
    "SqlPortfolioRepository",
    # Orchestrator
    "PortfolioAnalyticsService",
]
