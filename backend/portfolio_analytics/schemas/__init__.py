# backend/portfolio_analytics/schemas/__init__.py
"""
Pydantic schemas for engine output.

- analytics: Analytics summary (overview, allocation, rankings, metrics,
  periods) and value timeline points

Usage:
    from portfolio_analytics.schemas import AnalyticsSummary
"""

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

__all__ = [
    "AllocationEntry",
    "AllocationResponse",
    "AnalyticsSummary",
    "MetricsResponse",
    "OverviewResponse",
    "PerformanceListsResponse",
    "PerformerEntry",
    "PeriodPerformanceResponse",
    "PeriodsResponse",
    "TimelinePointResponse",
]
