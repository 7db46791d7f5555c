# backend/portfolio_analytics/services/stores.py
"""
Price and FX rate stores.

Two implementations of each protocol from services/protocols.py:
- SqlPriceStore / SqlRateStore: read persisted rows through a SQLAlchemy Session
- InMemoryPriceStore / InMemoryRateStore: plain collections, used for
  hand-built snapshots and unit tests

Stores are read-only. They never fetch from a market-data provider;
a None result is final from the engine's point of view.

FX RATE CONVENTION:
    rate = "1 from_currency = X to_currency"

    Converting from → to:  to_amount = from_amount × rate
"""

from __future__ import annotations

import logging
from collections import defaultdict
from datetime import date, timedelta
from decimal import Decimal
from typing import Iterable

from sqlalchemy import select, and_
from sqlalchemy.orm import Session

from portfolio_analytics.models import CurrencyRate, PriceHistory
from portfolio_analytics.services.valuation.types import PriceBar

logger = logging.getLogger(__name__)


def _normalize(currency: str) -> str:
    return currency.upper().strip()


def _to_bar(row: PriceHistory) -> PriceBar:
    return PriceBar(
        asset_id=row.asset_id,
        date=row.date,
        close=row.close,
        currency=row.currency,
    )


# =============================================================================
# SQL STORES
# =============================================================================

class SqlPriceStore:
    """
    PriceStore backed by the price_history table.

    Example:
        store = SqlPriceStore(db)
        bar = store.latest_on_or_before(asset_id=1, on=date(2024, 6, 14))
    """

    def __init__(self, db: Session) -> None:
        self._db = db

    def latest_on_or_before(self, asset_id: int, on: date) -> PriceBar | None:
        """Most recent bar with date <= on."""
        query = (
            select(PriceHistory)
            .where(
                and_(
                    PriceHistory.asset_id == asset_id,
                    PriceHistory.date <= on,
                )
            )
            .order_by(PriceHistory.date.desc())
            .limit(1)
        )
        row = self._db.scalar(query)
        return _to_bar(row) if row is not None else None

    def exact(self, asset_id: int, on: date) -> PriceBar | None:
        query = select(PriceHistory).where(
            and_(
                PriceHistory.asset_id == asset_id,
                PriceHistory.date == on,
            )
        )
        row = self._db.scalar(query)
        return _to_bar(row) if row is not None else None


class SqlRateStore:
    """
    RateStore backed by the currency_rates table.

    Currency codes are expected upper-case; rows are stored that way.
    """

    def __init__(self, db: Session) -> None:
        self._db = db

    def exact(self, from_currency: str, to_currency: str, on: date) -> Decimal | None:
        query = select(CurrencyRate.rate).where(
            and_(
                CurrencyRate.from_currency == from_currency,
                CurrencyRate.to_currency == to_currency,
                CurrencyRate.date == on,
            )
        )
        return self._db.scalar(query)

    def within_window(
            self,
            from_currency: str,
            to_currency: str,
            on: date,
            window_days: int,
    ) -> Decimal | None:
        """
        Most recent direct rate dated in [on - window_days, on].

        Used only for the "today" fallback when markets were closed.
        """
        min_date = on - timedelta(days=window_days)
        query = (
            select(CurrencyRate.rate)
            .where(
                and_(
                    CurrencyRate.from_currency == from_currency,
                    CurrencyRate.to_currency == to_currency,
                    CurrencyRate.date >= min_date,
                    CurrencyRate.date <= on,
                )
            )
            .order_by(CurrencyRate.date.desc())
            .limit(1)
        )
        return self._db.scalar(query)

    def rates_on(self, on: date) -> dict[tuple[str, str], Decimal]:
        """All stored rates dated exactly on, keyed by (from, to)."""
        query = (
            select(CurrencyRate)
            .where(CurrencyRate.date == on)
            .order_by(CurrencyRate.from_currency, CurrencyRate.to_currency)
        )
        return {
            (row.from_currency, row.to_currency): row.rate
            for row in self._db.scalars(query)
        }


# =============================================================================
# IN-MEMORY STORES
# =============================================================================

class InMemoryPriceStore:
    """
    PriceStore over a list of PriceBar objects.

    A later bar for the same (asset, date) replaces an earlier one, matching
    the table's uniqueness constraint.
    """

    def __init__(self, bars: Iterable[PriceBar] = ()) -> None:
        self._bars: dict[int, dict[date, PriceBar]] = defaultdict(dict)
        for bar in bars:
            self.add(bar)

    def add(self, bar: PriceBar) -> None:
        self._bars[bar.asset_id][bar.date] = bar

    def latest_on_or_before(self, asset_id: int, on: date) -> PriceBar | None:
        candidates = [d for d in self._bars.get(asset_id, {}) if d <= on]
        if not candidates:
            return None
        return self._bars[asset_id][max(candidates)]

    def exact(self, asset_id: int, on: date) -> PriceBar | None:
        return self._bars.get(asset_id, {}).get(on)


class InMemoryRateStore:
    """
    RateStore over a {(from, to, date): rate} mapping.

    Example:
        store = InMemoryRateStore({("USD", "TRY", date(2024, 6, 14)): Decimal("30")})
    """

    def __init__(self, rates: dict[tuple[str, str, date], Decimal] | None = None) -> None:
        self._rates: dict[tuple[str, str, date], Decimal] = {}
        for (from_currency, to_currency, on), rate in (rates or {}).items():
            self.add(from_currency, to_currency, on, rate)

    def add(self, from_currency: str, to_currency: str, on: date, rate: Decimal) -> None:
        self._rates[(_normalize(from_currency), _normalize(to_currency), on)] = rate

    def exact(self, from_currency: str, to_currency: str, on: date) -> Decimal | None:
        return self._rates.get((from_currency, to_currency, on))

    def within_window(
            self,
            from_currency: str,
            to_currency: str,
            on: date,
            window_days: int,
    ) -> Decimal | None:
        min_date = on - timedelta(days=window_days)
        matches = [
            (rate_date, rate)
            for (f, t, rate_date), rate in self._rates.items()
            if f == from_currency and t == to_currency and min_date <= rate_date <= on
        ]
        if not matches:
            return None
        return max(matches, key=lambda item: item[0])[1]

    def rates_on(self, on: date) -> dict[tuple[str, str], Decimal]:
        return {
            (f, t): rate
            for (f, t, rate_date), rate in sorted(self._rates.items())
            if rate_date == on
        }
