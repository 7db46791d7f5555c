# backend/portfolio_analytics/schemas/analytics.py
"""
Pydantic schemas for the analytics summary.

These schemas define the output format of PortfolioAnalyticsService:
- Overview totals in base currency
- Allocation by asset class and by currency
- Top / worst / largest position lists
- Diversity metric
- Period performance (week, month, quarter, year, ytd)
- Value timeline points

Design decisions:
- Values are Decimal, already rounded to 2 decimals (quantity excepted)
- JSON mode serializes Decimal as STRINGS to preserve precision
- Period results with a zero start value carry only period/change/
  change_percentage; dump with exclude_none=True for that wire shape
"""

from datetime import date
from decimal import Decimal

from pydantic import BaseModel, ConfigDict, Field


# =============================================================================
# OVERVIEW
# =============================================================================

class OverviewResponse(BaseModel):
    """
    Portfolio totals.

    total_value covers every valued position; cost and P&L cover only
    positions whose cost basis is also known.
    """

    model_config = ConfigDict(from_attributes=True)

    total_value: Decimal = Field(..., description="Sum of position values in base currency")
    total_cost: Decimal = Field(..., description="Sum of position cost bases in base currency")
    total_profit_loss: Decimal = Field(..., description="Summed P&L of positions with a known cost basis")
    total_return_percentage: Decimal = Field(
        ...,
        description="total_profit_loss / total_cost × 100 (0 when cost is 0)"
    )
    base_currency: str = Field(..., description="Currency of all amounts")
    position_count: int = Field(..., description="Number of open positions")


# =============================================================================
# ALLOCATION
# =============================================================================

class AllocationEntry(BaseModel):
    """One group of an allocation breakdown."""

    model_config = ConfigDict(from_attributes=True)

    value: Decimal
    percentage: Decimal = Field(..., description="Share of total value (0-100)")
    count: int = Field(..., description="Positions in this group")


class AllocationResponse(BaseModel):
    """Allocation by asset class and by asset currency."""

    by_asset_class: dict[str, AllocationEntry] = Field(default_factory=dict)
    by_currency: dict[str, AllocationEntry] = Field(default_factory=dict)


# =============================================================================
# PERFORMERS
# =============================================================================

class PerformerEntry(BaseModel):
    """A position as listed in top / worst / largest rankings."""

    id: int = Field(..., description="Position ID")
    asset_symbol: str
    asset_name: str
    asset_class: str
    quantity: Decimal
    current_value: Decimal
    total_cost: Decimal | None = Field(None, description="None when the cost basis is unavailable")
    profit_loss: Decimal | None = None
    profit_loss_percentage: Decimal | None = None
    portfolio_weight: Decimal = Field(..., description="Share of total portfolio value (0-100)")


class PerformanceListsResponse(BaseModel):
    top_performers: list[PerformerEntry] = Field(default_factory=list)
    worst_performers: list[PerformerEntry] = Field(default_factory=list)
    largest_positions: list[PerformerEntry] = Field(default_factory=list)


# =============================================================================
# METRICS & PERIODS
# =============================================================================

class MetricsResponse(BaseModel):
    diversity_score: Decimal = Field(..., description="0 (concentrated) to 100 (diversified)")


class PeriodPerformanceResponse(BaseModel):
    """
    Change in value over one period.

    start_date / end_date / start_value / end_value are None when the
    value at the period start is 0.
    """

    model_config = ConfigDict(from_attributes=True)

    period: str
    change: Decimal
    change_percentage: Decimal
    start_date: date | None = None
    end_date: date | None = None
    start_value: Decimal | None = None
    end_value: Decimal | None = None


class PeriodsResponse(BaseModel):
    week: PeriodPerformanceResponse
    month: PeriodPerformanceResponse
    quarter: PeriodPerformanceResponse
    year: PeriodPerformanceResponse
    ytd: PeriodPerformanceResponse


# =============================================================================
# TIMELINE
# =============================================================================

class TimelinePointResponse(BaseModel):
    """Portfolio value on one day."""

    model_config = ConfigDict(from_attributes=True)

    date: date
    value: Decimal


# =============================================================================
# SUMMARY
# =============================================================================

class AnalyticsSummary(BaseModel):
    """
    Complete analytics summary for one portfolio.

    Wire form:
        summary.model_dump(mode="json", exclude_none=True)
    """

    overview: OverviewResponse
    allocation: AllocationResponse
    performance: PerformanceListsResponse
    metrics: MetricsResponse
    periods: PeriodsResponse
