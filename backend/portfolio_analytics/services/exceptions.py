# backend/portfolio_analytics/services/exceptions.py
"""
Service layer exceptions.

These exceptions represent domain-specific errors and contain NO transport
knowledge. Callers (an HTTP layer, a CLI) map them to their own responses.

Missing market data is normally NOT an exception inside the engine: the
converter and valuator return None and the aggregate narrows. The
*Unavailable errors exist for callers that prefer raising APIs
(CurrencyConverter.get_rate) or want to escalate to a fetch job.

Exception Hierarchy:
    ServiceError (base)
    ├── ValidationError
    │   ├── InvalidDateRangeError
    │   └── InvalidPositionError
    ├── NotFoundError
    │   └── PortfolioNotFoundError
    ├── MarketDataError
    │   ├── RateUnavailableError
    │   └── PriceUnavailableError
    └── ComputationCancelledError
"""

from datetime import date


class ServiceError(Exception):
    """
    Base exception for all service layer errors.

    Attributes:
        message: Human-readable error description
    """

    def __init__(self, message: str) -> None:
        self.message = message
        super().__init__(self.message)

    def __str__(self) -> str:
        return self.message


# =============================================================================
# VALIDATION ERRORS
# =============================================================================


class ValidationError(ServiceError):
    """
    Raised when input violates an engine precondition.

    These are fatal: the computation aborts instead of degrading.

    Attributes:
        field: The field that failed validation (optional)
    """

    def __init__(self, message: str, field: str | None = None) -> None:
        self.field = field
        super().__init__(message)


class InvalidDateRangeError(ValidationError):
    """Raised for malformed dates or a range whose start is after its end."""

    def __init__(self, message: str) -> None:
        super().__init__(message, field="date")


class InvalidPositionError(ValidationError):
    """
    Raised when a position has a non-positive quantity or average cost.

    Attributes:
        position_id: ID of the offending position
    """

    def __init__(self, position_id: int, field: str, value: object) -> None:
        self.position_id = position_id
        self.value = value
        super().__init__(
            f"Position {position_id} has invalid {field}: {value} (must be > 0)",
            field=field,
        )


# =============================================================================
# NOT FOUND ERRORS
# =============================================================================


class NotFoundError(ServiceError):
    """
    Base exception for resource not found errors.

    Attributes:
        resource_type: Type of resource (e.g., "Portfolio")
        resource_id: Identifier of the resource
    """

    def __init__(
            self,
            message: str,
            resource_type: str | None = None,
            resource_id: int | str | None = None,
    ) -> None:
        self.resource_type = resource_type
        self.resource_id = resource_id
        super().__init__(message)


class PortfolioNotFoundError(NotFoundError):
    """Raised when a portfolio cannot be found."""

    def __init__(self, portfolio_id: int) -> None:
        self.portfolio_id = portfolio_id
        super().__init__(
            f"Portfolio {portfolio_id} not found",
            resource_type="Portfolio",
            resource_id=portfolio_id,
        )


# =============================================================================
# MARKET DATA ERRORS
# =============================================================================


class MarketDataError(ServiceError):
    """Base exception for missing price or FX data."""
    pass


class RateUnavailableError(MarketDataError):
    """
    Raised when no direct, inverse or same-day fallback FX rate exists.

    Attributes:
        from_currency: Currency converted from
        to_currency: Currency converted to
        rate_date: Date the rate was requested for
    """

    def __init__(self, from_currency: str, to_currency: str, rate_date: date) -> None:
        self.from_currency = from_currency
        self.to_currency = to_currency
        self.rate_date = rate_date
        super().__init__(
            f"FX rate not available for {from_currency}/{to_currency} on {rate_date}"
        )


class PriceUnavailableError(MarketDataError):
    """
    Raised when an asset has no price bar at or before a date.

    Attributes:
        asset_id: Asset that has no price
        price_date: Date the price was requested for
    """

    def __init__(self, asset_id: int, price_date: date) -> None:
        self.asset_id = asset_id
        self.price_date = price_date
        super().__init__(
            f"No price available for asset {asset_id} on or before {price_date}"
        )


# =============================================================================
# CANCELLATION
# =============================================================================


class ComputationCancelledError(ServiceError):
    """
    Raised when a timeline or period computation is cancelled or times out.

    Partial results are discarded; they are never returned as complete.

    Attributes:
        completed_points: Number of points computed before cancellation
    """

    def __init__(self, reason: str, completed_points: int = 0) -> None:
        self.reason = reason
        self.completed_points = completed_points
        super().__init__(
            f"Computation cancelled ({reason}) after {completed_points} points"
        )
