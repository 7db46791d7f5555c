# backend/portfolio_analytics/services/valuation/calculators.py
"""
Point-in-time position valuation.

PositionValuator turns one PositionSnapshot into a PositionValuation in the
portfolio's base currency, as of a date.

Calculation:
    value_local = quantity × close            (latest bar with date <= as-of date)
    value       = value_local → base currency (FX at the as-of date)
    cost_basis  = quantity × average_cost → base currency (FX at the as-of date)
    P&L         = value - cost_basis
    P&L %       = P&L / cost_basis × 100      (0 when cost_basis == 0)

Missing Data:
    - No price bar → value is None, position contributes nothing
    - No FX rate for the asset currency → value is None
    - No FX rate for the purchase currency → cost_basis is None
      (never zero: a zero cost would inflate P&L)

Design Principles:
- Stateless apart from its collaborators
- Same code path for "today" and historical dates
- Uses Decimal for ALL financial calculations, full precision

Usage:
    valuator = PositionValuator(price_store, converter)
    result = valuator.valuate(position, base_currency="TRY", on=date(2024, 6, 14))
"""

from __future__ import annotations

import logging
from datetime import date
from decimal import Decimal

from portfolio_analytics.services.currency_converter import CurrencyConverter
from portfolio_analytics.services.exceptions import PriceUnavailableError
from portfolio_analytics.services.protocols import PriceStore
from portfolio_analytics.services.valuation.types import (
    AssetSnapshot,
    PositionSnapshot,
    PriceBar,
    PositionValuation,
)

logger = logging.getLogger(__name__)


# =============================================================================
# POSITION VALUATOR
# =============================================================================

class PositionValuator:
    """
    Values a single position in base currency at a date.

    Attributes:
        _price_store: Source of close prices
        _converter: FX conversion to base currency
    """

    def __init__(self, price_store: PriceStore, converter: CurrencyConverter) -> None:
        self._price_store = price_store
        self._converter = converter

    def valuate(
            self,
            position: PositionSnapshot,
            base_currency: str,
            on: date,
    ) -> PositionValuation:
        """
        Full valuation: price, value, cost basis and the reasons for any gaps.

        Args:
            position: Position to value
            base_currency: Portfolio base currency
            on: Valuation date

        Returns:
            PositionValuation (value / cost_basis None when unavailable)
        """
        asset = position.asset
        warnings: list[str] = []

        price_bar = self.get_price_or_none(asset, on)

        price: Decimal | None = None
        price_date: date | None = None
        value_local: Decimal | None = None
        value: Decimal | None = None
        fx_rate: Decimal | None = None

        if price_bar is None:
            warnings.append(f"No price for {asset.symbol} on or before {on}")
        else:
            price = price_bar.close
            price_date = price_bar.date
            value_local = position.quantity * price

            fx_rate = self._converter.get_rate_or_none(asset.currency, base_currency, on)
            if fx_rate is None:
                warnings.append(
                    f"No FX rate {asset.currency}/{base_currency} on {on}; "
                    f"value unavailable for {asset.symbol}"
                )
            else:
                value = self._converter.convert(value_local, asset.currency, base_currency, on)

        cost_basis = self._converter.convert(
            position.quantity * position.average_cost,
            position.purchase_currency,
            base_currency,
            on,
        )
        if cost_basis is None:
            warnings.append(
                f"No FX rate {position.purchase_currency}/{base_currency} on {on}; "
                f"cost basis unavailable for {asset.symbol}"
            )

        for warning in warnings:
            logger.debug(f"Position {position.id}: {warning}")

        return PositionValuation(
            position_id=position.id,
            asset=asset,
            quantity=position.quantity,
            base_currency=base_currency,
            valuation_date=on,
            price=price,
            price_date=price_date,
            value_local=value_local,
            value=value,
            fx_rate_used=fx_rate,
            cost_basis=cost_basis,
            warnings=warnings,
        )

    def value_on(
            self,
            position: PositionSnapshot,
            base_currency: str,
            on: date,
    ) -> Decimal | None:
        """
        Base-currency value only, skipping the cost basis.

        Used by the timeline and period calculators, which sum values over
        many dates. None means the position contributes nothing on that date.
        """
        price_bar = self.get_price_or_none(position.asset, on)
        if price_bar is None:
            return None
        return self._converter.convert(
            position.quantity * price_bar.close,
            position.asset.currency,
            base_currency,
            on,
        )

    # =========================================================================
    # PRICE LOOKUP
    # =========================================================================

    def get_price_or_none(
            self,
            asset: AssetSnapshot,
            on: date,
            exact: bool = False,
    ) -> PriceBar | None:
        """
        Price bar used to value an asset at a date.

        Args:
            asset: Asset to price
            on: Valuation date
            exact: Only accept a bar dated exactly `on` (no carry-forward)
        """
        if exact:
            return self._price_store.exact(asset.id, on)
        return self._price_store.latest_on_or_before(asset.id, on)

    def get_price(self, asset: AssetSnapshot, on: date, exact: bool = False) -> PriceBar:
        """
        Same as get_price_or_none() but raises instead of returning None.

        Raises:
            PriceUnavailableError: If no matching price bar exists
        """
        price_bar = self.get_price_or_none(asset, on, exact=exact)
        if price_bar is None:
            raise PriceUnavailableError(asset.id, on)
        return price_bar
