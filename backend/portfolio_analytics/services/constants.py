# backend/portfolio_analytics/services/constants.py
"""
Centralized constants for the analytics engine services.

Usage:
    from portfolio_analytics.services.constants import (
        CURRENCY_PRECISION,
        MAX_HHI,
    )
"""

from decimal import Decimal


# =============================================================================
# DECIMAL PRECISION CONSTANTS
# =============================================================================

# Currency amounts: 2 decimal places (e.g., 1234.56)
# Applied only when results are presented, never to intermediate sums
CURRENCY_PRECISION: Decimal = Decimal("0.01")

# Display percentage: 2 decimal places (e.g., 12.34%)
DISPLAY_PERCENTAGE_PRECISION: Decimal = Decimal("0.01")

# Type-safe zero for Decimal comparisons
ZERO: Decimal = Decimal("0")

ONE: Decimal = Decimal("1")

HUNDRED: Decimal = Decimal("100")


# =============================================================================
# FX SETTINGS
# =============================================================================

# Days to look back for a direct FX rate when valuing as of today
# (markets may be closed). Never applied to historical dates.
FX_TODAY_FALLBACK_DAYS: int = 1


# =============================================================================
# CONCENTRATION (HHI)
# =============================================================================

# HHI of a portfolio held entirely in one group (100^2)
MAX_HHI: Decimal = Decimal("10000")

# Upper bound of the diversity score
MAX_DIVERSITY_SCORE: Decimal = Decimal("100")


# =============================================================================
# REPORT DEFAULTS
# =============================================================================

# Entries in the top/worst/largest position lists
DEFAULT_RANKING_LIMIT: int = 5

# Days covered by the default value timeline
DEFAULT_TIMELINE_DAYS: int = 30

# Longest accepted timeline range (about 20 years of calendar days)
MAX_TIMELINE_DAYS: int = 365 * 20 + 5
