# backend/portfolio_analytics/services/protocols.py
"""
Protocol interfaces for the engine's data collaborators.

Using typing.Protocol enables structural subtyping:
- The SQL and in-memory stores satisfy these without inheritance
- Test doubles work without explicit inheritance
- The engine never depends on how prices and rates are persisted

All stores are read-only from the engine's point of view. Filling gaps
(fetching from a market-data provider) is the caller's job.
"""

from __future__ import annotations

from datetime import date
from decimal import Decimal
from typing import Protocol, TYPE_CHECKING

if TYPE_CHECKING:
    from portfolio_analytics.services.valuation.types import PriceBar


class PriceStore(Protocol):
    """Read access to daily price bars, keyed by asset ID."""

    def latest_on_or_before(self, asset_id: int, on: date) -> PriceBar | None:
        ...

    def exact(self, asset_id: int, on: date) -> PriceBar | None:
        ...


class RateStore(Protocol):
    """
    Read access to stored FX rates.

    Rates follow the "1 from_currency = rate × to_currency" convention.
    Currency codes are passed upper-case.
    """

    def exact(self, from_currency: str, to_currency: str, on: date) -> Decimal | None:
        ...

    def within_window(
        self,
        from_currency: str,
        to_currency: str,
        on: date,
        window_days: int,
    ) -> Decimal | None:
        ...

    def rates_on(self, on: date) -> dict[tuple[str, str], Decimal]:
        ...
