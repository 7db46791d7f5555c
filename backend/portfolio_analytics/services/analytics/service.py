# backend/portfolio_analytics/services/analytics/service.py
"""
Portfolio Analytics Service orchestrator.

This is the main entry point of the engine. It:
1. Resolves a single as-of date ("today") once, at construction
2. Wires the calculators together around that date
3. Values the portfolio once per report and reuses the result
4. Rounds figures to 2 decimals and builds the Pydantic response

Architecture:
    PortfolioAnalyticsService
        ├── uses → CurrencyConverter     (RateStore)
        ├── uses → PositionValuator      (PriceStore + converter)
        ├── uses → PortfolioAggregator   (totals, allocation, rankings)
        ├── uses → DiversityScorer       (HHI over asset-class allocation)
        ├── uses → TimelineBuilder       (day-by-day values)
        └── uses → PerformanceCalculator (week/month/quarter/year/ytd)

No hidden caching: every call recomputes from the stores. Construct a new
service (or pass a different `today`) to value as of another date.

Usage:
    from portfolio_analytics.services.analytics import PortfolioAnalyticsService

    with PortfolioAnalyticsService.connect() as service:
        portfolio = service.load_portfolio(portfolio_id=1)

        summary = service.summary(portfolio)
        payload = summary.model_dump(mode="json", exclude_none=True)

        points = service.timeline(portfolio, days=90)

    # Or, with a Session owned by the caller:
    service = PortfolioAnalyticsService.from_session(db)
"""

from __future__ import annotations

import logging
import threading
from collections.abc import Iterator
from contextlib import contextmanager
from datetime import date
from decimal import Decimal, ROUND_HALF_UP

from sqlalchemy import Engine
from sqlalchemy.orm import Session

from portfolio_analytics.config import settings
from portfolio_analytics.database import session_scope
from portfolio_analytics.schemas.analytics import (
    AllocationEntry,
    AllocationResponse,
    AnalyticsSummary,
    MetricsResponse,
    OverviewResponse,
    PerformanceListsResponse,
    PerformerEntry,
    PeriodPerformanceResponse,
    PeriodsResponse,
    TimelinePointResponse,
)
from portfolio_analytics.services.analytics.diversity import DiversityScorer
from portfolio_analytics.services.analytics.performance import PerformanceCalculator
from portfolio_analytics.services.analytics.types import Period, PeriodPerformance
from portfolio_analytics.services.constants import (
    CURRENCY_PRECISION,
    DISPLAY_PERCENTAGE_PRECISION,
)
from portfolio_analytics.services.currency_converter import CurrencyConverter
from portfolio_analytics.services.portfolio_repository import SqlPortfolioRepository
from portfolio_analytics.services.protocols import PriceStore, RateStore
from portfolio_analytics.services.stores import SqlPriceStore, SqlRateStore
from portfolio_analytics.services.valuation.aggregator import PortfolioAggregator
from portfolio_analytics.services.valuation.calculators import PositionValuator
from portfolio_analytics.services.valuation.timeline import TimelineBuilder
from portfolio_analytics.services.valuation.types import (
    AllocationBucket,
    AllocationDimension,
    PortfolioSnapshot,
    PortfolioValuation,
    PositionValuation,
)
from portfolio_analytics.utils.context import correlation_scope

logger = logging.getLogger(__name__)


def _money(value: Decimal) -> Decimal:
    return value.quantize(CURRENCY_PRECISION, rounding=ROUND_HALF_UP)


def _percent(value: Decimal) -> Decimal:
    return value.quantize(DISPLAY_PERCENTAGE_PRECISION, rounding=ROUND_HALF_UP)


def _optional(rounder, value: Decimal | None) -> Decimal | None:
    return None if value is None else rounder(value)


class PortfolioAnalyticsService:
    """
    Main orchestrator for portfolio valuation and analytics.

    Attributes:
        today: The as-of date shared by every calculator
        converter: CurrencyConverter bound to today
        valuator: PositionValuator
        aggregator: PortfolioAggregator
        diversity: DiversityScorer
        timeline_builder: TimelineBuilder
        performance: PerformanceCalculator
    """

    def __init__(
            self,
            price_store: PriceStore,
            rate_store: RateStore,
            today: date | None = None,
            ranking_limit: int | None = None,
            repository: SqlPortfolioRepository | None = None,
    ) -> None:
        """
        Initialize the service.

        Args:
            price_store: Source of close prices
            rate_store: Source of FX rates
            today: As-of date. Defaults to date.today(), read once here.
            ranking_limit: Entries per ranking list (default from settings)
            repository: Optional repository used by load_portfolio()
        """
        self.today = today or date.today()
        self._ranking_limit = (
            settings.default_ranking_limit if ranking_limit is None else ranking_limit
        )
        self._repository = repository

        self.converter = CurrencyConverter(
            rate_store,
            today=self.today,
            fallback_days=settings.fx_today_fallback_days,
        )
        self.valuator = PositionValuator(price_store, self.converter)
        self.aggregator = PortfolioAggregator(self.valuator, today=self.today)
        self.diversity = DiversityScorer()
        self.timeline_builder = TimelineBuilder(
            self.valuator,
            today=self.today,
            max_days=settings.max_timeline_days,
        )
        self.performance = PerformanceCalculator(self.timeline_builder, today=self.today)

        logger.info(f"PortfolioAnalyticsService initialized (today={self.today})")

    @classmethod
    def from_session(cls, db: Session, today: date | None = None) -> PortfolioAnalyticsService:
        """Build a service reading prices, rates and portfolios from the database."""
        return cls(
            SqlPriceStore(db),
            SqlRateStore(db),
            today=today,
            repository=SqlPortfolioRepository(db),
        )

    @classmethod
    @contextmanager
    def connect(
            cls,
            today: date | None = None,
            engine: Engine | None = None,
    ) -> Iterator[PortfolioAnalyticsService]:
        """
        Service bound to a fresh session for the duration of the block.

        Args:
            today: As-of date (defaults to date.today())
            engine: Engine to read from; defaults to the configured database
        """
        with session_scope(engine) as db:
            yield cls.from_session(db, today=today)

    def load_portfolio(self, portfolio_id: int) -> PortfolioSnapshot:
        """
        Load a portfolio snapshot through the configured repository.

        Raises:
            PortfolioNotFoundError: If the portfolio doesn't exist
            RuntimeError: If the service was built without a repository
        """
        if self._repository is None:
            raise RuntimeError("No portfolio repository configured; use from_session()")
        return self._repository.get_snapshot(portfolio_id)

    # =========================================================================
    # PUBLIC API
    # =========================================================================

    def summary(
            self,
            portfolio: PortfolioSnapshot,
            cancel_event: threading.Event | None = None,
    ) -> AnalyticsSummary:
        """
        Complete analytics summary: overview, allocation, rankings,
        diversity and period performance.

        Args:
            portfolio: Portfolio snapshot
            cancel_event: Set it to abort the period computations

        Returns:
            AnalyticsSummary

        Raises:
            ComputationCancelledError: If cancel_event is set
        """
        with correlation_scope() as correlation_id:
            logger.info(
                f"Computing analytics summary for portfolio {portfolio.id} "
                f"as of {self.today} (correlation_id={correlation_id})"
            )

            valuation = self.aggregator.valuate(portfolio)
            allocation = self._build_allocation(valuation)
            by_asset_class = self.aggregator.allocation_by(
                valuation, AllocationDimension.ASSET_CLASS
            )

            periods = self.performance.calculate_all(portfolio, cancel_event=cancel_event)

            summary = AnalyticsSummary(
                overview=self._build_overview(valuation),
                allocation=allocation,
                performance=self._build_performers(valuation),
                metrics=MetricsResponse(
                    diversity_score=self.diversity.score(by_asset_class),
                ),
                periods=PeriodsResponse(
                    **{
                        code: self._build_period(result)
                        for code, result in periods.items()
                    }
                ),
            )

            logger.info(
                f"Analytics summary for portfolio {portfolio.id}: "
                f"value={summary.overview.total_value} {valuation.base_currency}, "
                f"positions={valuation.position_count}"
            )
            return summary

    def overview(self, portfolio: PortfolioSnapshot) -> OverviewResponse:
        return self._build_overview(self.aggregator.valuate(portfolio))

    def allocation(self, portfolio: PortfolioSnapshot) -> AllocationResponse:
        return self._build_allocation(self.aggregator.valuate(portfolio))

    def performers(
            self,
            portfolio: PortfolioSnapshot,
            limit: int | None = None,
    ) -> PerformanceListsResponse:
        return self._build_performers(self.aggregator.valuate(portfolio), limit)

    def diversity_score(self, portfolio: PortfolioSnapshot) -> Decimal:
        valuation = self.aggregator.valuate(portfolio)
        return self.diversity.score(
            self.aggregator.allocation_by(valuation, AllocationDimension.ASSET_CLASS)
        )

    def period_performance(
            self,
            portfolio: PortfolioSnapshot,
            period: Period | str,
            cancel_event: threading.Event | None = None,
    ) -> PeriodPerformanceResponse:
        """Performance over one period; unrecognized codes give a zero-length period."""
        result = self.performance.calculate(portfolio, period, cancel_event=cancel_event)
        return self._build_period(result)

    def timeline(
            self,
            portfolio: PortfolioSnapshot,
            days: int | None = None,
            cancel_event: threading.Event | None = None,
            timeout_seconds: float | None = None,
    ) -> list[TimelinePointResponse]:
        """
        Daily values over [today - days, today], values rounded to 2 decimals.

        Raises:
            InvalidDateRangeError: If days is negative or too large
            ComputationCancelledError: If cancelled or timed out
        """
        if days is None:
            days = settings.default_timeline_days

        points = self.timeline_builder.last_days(
            portfolio,
            days=days,
            cancel_event=cancel_event,
            timeout_seconds=timeout_seconds,
        )
        return [
            TimelinePointResponse(date=point.date, value=_money(point.value))
            for point in points
        ]

    # =========================================================================
    # RESPONSE BUILDERS
    # =========================================================================

    @staticmethod
    def _build_overview(valuation: PortfolioValuation) -> OverviewResponse:
        return OverviewResponse(
            total_value=_money(valuation.total_value),
            total_cost=_money(valuation.total_cost),
            total_profit_loss=_money(valuation.total_profit_loss),
            total_return_percentage=_percent(valuation.total_return_percentage),
            base_currency=valuation.base_currency,
            position_count=valuation.position_count,
        )

    def _build_allocation(self, valuation: PortfolioValuation) -> AllocationResponse:
        return AllocationResponse(
            by_asset_class=self._allocation_entries(
                self.aggregator.allocation_by(valuation, AllocationDimension.ASSET_CLASS)
            ),
            by_currency=self._allocation_entries(
                self.aggregator.allocation_by(valuation, AllocationDimension.CURRENCY)
            ),
        )

    @staticmethod
    def _allocation_entries(
            buckets: dict[str, AllocationBucket],
    ) -> dict[str, AllocationEntry]:
        return {
            key: AllocationEntry(
                value=_money(bucket.value),
                percentage=bucket.percentage,
                count=bucket.count,
            )
            for key, bucket in buckets.items()
        }

    def _build_performers(
            self,
            valuation: PortfolioValuation,
            limit: int | None = None,
    ) -> PerformanceListsResponse:
        if limit is None:
            limit = self._ranking_limit
        total_value = valuation.total_value

        def entries(positions: list[PositionValuation]) -> list[PerformerEntry]:
            return [self._performer_entry(p, total_value) for p in positions]

        return PerformanceListsResponse(
            top_performers=entries(self.aggregator.top_performers(valuation, limit)),
            worst_performers=entries(self.aggregator.worst_performers(valuation, limit)),
            largest_positions=entries(self.aggregator.largest_positions(valuation, limit)),
        )

    @staticmethod
    def _performer_entry(position: PositionValuation, total_value: Decimal) -> PerformerEntry:
        return PerformerEntry(
            id=position.position_id,
            asset_symbol=position.asset.symbol,
            asset_name=position.asset.name,
            asset_class=position.asset.asset_class.value,
            quantity=position.quantity,
            current_value=_money(position.value),
            total_cost=_optional(_money, position.cost_basis),
            profit_loss=_optional(_money, position.profit_loss),
            profit_loss_percentage=_optional(_percent, position.profit_loss_percentage),
            portfolio_weight=_percent(position.weight_in(total_value)),
        )

    @staticmethod
    def _build_period(result: PeriodPerformance) -> PeriodPerformanceResponse:
        return PeriodPerformanceResponse(
            period=result.period,
            change=result.change,
            change_percentage=result.change_percentage,
            start_date=result.start_date,
            end_date=result.end_date,
            start_value=_money(result.start_value) if result.start_value is not None else None,
            end_value=_money(result.end_value) if result.end_value is not None else None,
        )
