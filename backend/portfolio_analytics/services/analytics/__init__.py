# backend/portfolio_analytics/services/analytics/__init__.py
"""
Analytics Package.

This package derives metrics from portfolio valuations:
- Diversity score (HHI over asset-class allocation)
- Period performance (week, month, quarter, year, ytd)
- The analytics summary orchestrator

Architecture:
    analytics/
    ├── __init__.py              # This file - package exports
    ├── types.py                 # Period enum, PeriodPerformance
    ├── diversity.py             # DiversityScorer
    ├── performance.py           # PerformanceCalculator
    └── service.py               # PortfolioAnalyticsService (orchestrator)

Usage:
    from portfolio_analytics.services.analytics import PortfolioAnalyticsService

    service = PortfolioAnalyticsService.from_session(db)
    summary = service.summary(service.load_portfolio(1))
    print(summary.metrics.diversity_score)
"""

from portfolio_analytics.services.analytics.types import Period, PeriodPerformance
from portfolio_analytics.services.analytics.diversity import DiversityScorer
from portfolio_analytics.services.analytics.performance import PerformanceCalculator
from portfolio_analytics.services.analytics.service import PortfolioAnalyticsService

__all__ = [
    "DiversityScorer",
    "Period",
    "PeriodPerformance",
    "PerformanceCalculator",
    "PortfolioAnalyticsService",
]
