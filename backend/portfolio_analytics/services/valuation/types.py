# backend/portfolio_analytics/services/valuation/types.py
"""
Internal data types for the valuation engine.

These dataclasses are used internally by the valuation calculators.
They are NOT Pydantic schemas - those are defined in
portfolio_analytics/schemas/analytics.py for serialization.

Design Principles:
- Snapshots (inputs) are immutable (frozen=True)
- Use Decimal for ALL financial values (never float)
- Use date (not datetime) for valuation dates
- Missing data is None, never a sentinel zero
- Full precision everywhere; rounding happens in the schemas

Type Hierarchy:
    PriceBar            - One stored close price
    AssetSnapshot       - Asset identity needed for valuation
    PositionSnapshot    - One position as read from the store
    PortfolioSnapshot   - Portfolio with its positions
    PositionValuation   - Value / cost / P&L of one position at a date
    PortfolioValuation  - All open positions plus totals
    AllocationBucket    - One group of an allocation breakdown
    TimelinePoint       - One day of the value timeline
"""

from __future__ import annotations

import enum
from dataclasses import dataclass, field
from datetime import date
from decimal import Decimal

from portfolio_analytics.models import AssetClass, Exchange, PositionStatus
from portfolio_analytics.services.constants import ZERO, HUNDRED


# =============================================================================
# SNAPSHOTS (engine inputs)
# =============================================================================

@dataclass(frozen=True)
class PriceBar:
    """A recorded closing price for an asset on a specific date."""

    asset_id: int
    date: date
    close: Decimal
    currency: str


@dataclass(frozen=True)
class AssetSnapshot:
    """
    The parts of an Asset the engine needs.

    Attributes:
        id: Database ID of the asset
        symbol: Trading symbol (e.g., "AAPL", "XAU")
        name: Full name
        asset_class: Closed asset class enum
        currency: Currency the asset is priced in
        exchange: Exchange / source tag
    """

    id: int
    symbol: str
    name: str
    asset_class: AssetClass
    currency: str
    exchange: Exchange | None = None


@dataclass(frozen=True)
class PositionSnapshot:
    """
    A held quantity of one asset.

    Quantity and average cost are assumed > 0; the SQL repository enforces
    that when loading.
    """

    id: int
    asset: AssetSnapshot
    quantity: Decimal
    average_cost: Decimal
    purchase_currency: str
    purchase_date: date | None = None
    status: PositionStatus = PositionStatus.OPEN

    @property
    def is_open(self) -> bool:
        return self.status is PositionStatus.OPEN


@dataclass(frozen=True)
class PortfolioSnapshot:
    """
    A portfolio and all of its positions (open and closed).

    Attributes:
        id: Database ID of the portfolio
        base_currency: Currency all aggregates are reported in
        positions: Every position, in the order the store returned them
        name: Display name
    """

    id: int
    base_currency: str
    positions: tuple[PositionSnapshot, ...]
    name: str = ""

    @property
    def open_positions(self) -> list[PositionSnapshot]:
        """Open positions ordered by ID (the engine's stable base order)."""
        return sorted(
            (p for p in self.positions if p.is_open),
            key=lambda p: p.id,
        )


# =============================================================================
# POSITION VALUATION
# =============================================================================

@dataclass
class PositionValuation:
    """
    Valuation of a single position at a date, in the portfolio base currency.

    Attributes:
        position_id: Database ID of the position
        asset: Asset snapshot (symbol, name, class, currency)
        quantity: Units held
        base_currency: Portfolio base currency
        valuation_date: Date of this valuation
        price: Close price used (None if no price at or before the date)
        price_date: Date of that price bar
        value_local: quantity × price, in the asset currency
        value: value_local converted to base currency (None if price or FX missing)
        fx_rate_used: Rate applied to value_local (1 when currencies match)
        cost_basis: quantity × average_cost in base currency (None if FX missing)
        warnings: Why any of the above is missing

    Note:
        A None cost basis means "unavailable", never zero.
    """

    position_id: int
    asset: AssetSnapshot
    quantity: Decimal
    base_currency: str
    valuation_date: date
    price: Decimal | None
    price_date: date | None
    value_local: Decimal | None
    value: Decimal | None
    fx_rate_used: Decimal | None
    cost_basis: Decimal | None
    warnings: list[str] = field(default_factory=list)

    @property
    def has_complete_data(self) -> bool:
        """True if both value and cost basis are known."""
        return self.value is not None and self.cost_basis is not None

    @property
    def profit_loss(self) -> Decimal | None:
        """value - cost_basis (None if either is unknown)."""
        if not self.has_complete_data:
            return None
        return self.value - self.cost_basis

    @property
    def profit_loss_percentage(self) -> Decimal | None:
        """
        P&L as a percentage of cost basis, full precision.

        Defined as 0 when the cost basis is exactly 0 (division guard,
        not a break-even claim).
        """
        profit_loss = self.profit_loss
        if profit_loss is None:
            return None
        if self.cost_basis == ZERO:
            return ZERO
        return profit_loss / self.cost_basis * HUNDRED

    def weight_in(self, portfolio_total: Decimal) -> Decimal:
        """Share of portfolio_total held in this position, as a percentage."""
        if self.value is None or portfolio_total == ZERO:
            return ZERO
        return self.value / portfolio_total * HUNDRED


# =============================================================================
# PORTFOLIO VALUATION
# =============================================================================

@dataclass
class PortfolioValuation:
    """
    Valuation of all open positions of a portfolio at a date.

    Attributes:
        portfolio_id: Database ID of the portfolio
        base_currency: Currency of all amounts
        valuation_date: Date of this valuation
        positions: One PositionValuation per open position (ID order)
        warnings: Portfolio-level data quality warnings

    Note:
        total_value covers every valued position (price and asset-currency
        FX known). Cost and P&L totals cover only contributing positions
        (value AND cost basis known), so a missing purchase-currency rate
        hides the position's P&L but not its value.
    """

    portfolio_id: int
    base_currency: str
    valuation_date: date
    positions: list[PositionValuation]
    warnings: list[str] = field(default_factory=list)

    @property
    def valued(self) -> list[PositionValuation]:
        """Positions whose base-currency value is known."""
        return [p for p in self.positions if p.value is not None]

    @property
    def contributing(self) -> list[PositionValuation]:
        """Positions whose value and cost basis are both known."""
        return [p for p in self.positions if p.has_complete_data]

    @property
    def position_count(self) -> int:
        """Number of open positions, whether or not they could be valued."""
        return len(self.positions)

    @property
    def has_complete_data(self) -> bool:
        return all(p.has_complete_data for p in self.positions)

    @property
    def total_value(self) -> Decimal:
        return sum((p.value for p in self.valued), ZERO)

    @property
    def total_cost(self) -> Decimal:
        return sum((p.cost_basis for p in self.contributing), ZERO)

    @property
    def total_profit_loss(self) -> Decimal:
        """P&L summed over contributing positions."""
        return sum((p.profit_loss for p in self.contributing), ZERO)

    @property
    def total_return_percentage(self) -> Decimal:
        """Total P&L as a percentage of total cost; 0 when cost is 0."""
        total_cost = self.total_cost
        if total_cost == ZERO:
            return ZERO
        return self.total_profit_loss / total_cost * HUNDRED


# =============================================================================
# ALLOCATION
# =============================================================================

class AllocationDimension(str, enum.Enum):
    """What an allocation breakdown groups positions by."""
    ASSET_CLASS = "asset_class"
    CURRENCY = "currency"


@dataclass(frozen=True)
class AllocationBucket:
    """
    One group of an allocation breakdown.

    Attributes:
        key: Group key (asset class value or currency code)
        value: Summed base-currency value of the group (full precision)
        percentage: Share of total value, rounded to 2 decimals
        count: Number of positions in the group
    """

    key: str
    value: Decimal
    percentage: Decimal
    count: int


# =============================================================================
# TIMELINE
# =============================================================================

@dataclass(frozen=True)
class TimelinePoint:
    """
    Total portfolio value on one calendar day.

    Positions without a price or FX rate on that day are left out of
    the sum; the point carries no "incomplete" marker.
    """

    date: date
    value: Decimal
