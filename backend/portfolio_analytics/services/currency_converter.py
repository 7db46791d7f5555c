# backend/portfolio_analytics/services/currency_converter.py
"""
Currency converter for valuation in a portfolio's base currency.

=============================================================================
FX RATE CONVENTION
=============================================================================

    rate = "1 from_currency = X to_currency"

Example:
    from_currency = "USD"
    to_currency = "TRY"
    rate = 30

    Meaning: 1 USD = 30 TRY
    Converting USD → TRY:  TRY_amount = USD_amount × rate

=============================================================================
LOOKUP ORDER
=============================================================================

    1. Identity: from == to → 1 (no lookup)
    2. Direct:   exact (from, to, date) row
    3. Inverse:  exact (to, from, date) row → 1 / rate
    4. Window:   ONLY when date == today, the most recent direct rate in
                 [today - fallback_days, today] (markets closed today)
    5. Otherwise unavailable (None)

Historical dates never use the window fallback; a historical gap is
reported as unavailable so callers can exclude the contribution or
escalate to a fetch job.

Design Principles:
- No network I/O: the converter only reads the RateStore
- "Unavailable" is a None result, not exception-driven control flow
- get_rate() raises RateUnavailableError for callers that prefer exceptions
- Financial Precision: Uses Decimal for all rates
- "today" is injected at construction, never read from the clock here

Usage:
    converter = CurrencyConverter(rate_store, today=date(2024, 6, 14))

    rate = converter.get_rate_or_none("USD", "TRY", date(2024, 6, 14))
    amount_try = converter.convert(Decimal("100"), "USD", "TRY", date(2024, 6, 14))
"""

import enum
import logging
from dataclasses import dataclass
from datetime import date
from decimal import Decimal
from typing import Iterable

from portfolio_analytics.services.constants import FX_TODAY_FALLBACK_DAYS, ONE, ZERO
from portfolio_analytics.services.exceptions import RateUnavailableError
from portfolio_analytics.services.protocols import RateStore

logger = logging.getLogger(__name__)


# =============================================================================
# RESULT DATA CLASSES
# =============================================================================

class RateSource(str, enum.Enum):
    """How a rate was resolved."""
    IDENTITY = "identity"
    DIRECT = "direct"
    INVERSE = "inverse"
    WINDOW_FALLBACK = "window_fallback"


@dataclass(frozen=True)
class FXRateResult:
    """Result of an FX rate lookup."""

    from_currency: str
    to_currency: str
    date: date
    rate: Decimal
    source: RateSource

    @property
    def is_exact_match(self) -> bool:
        """False if the rate came from an earlier date."""
        return self.source is not RateSource.WINDOW_FALLBACK


@dataclass(frozen=True)
class ConversionRequest:
    """One amount to convert in a batch_convert call."""

    amount: Decimal
    from_currency: str
    to_currency: str
    on: date


# =============================================================================
# CURRENCY CONVERTER
# =============================================================================

class CurrencyConverter:
    """
    Resolves FX rates and converts amounts between currencies.

    Attributes:
        _rate_store: Source of stored rates
        _today: The as-of date; only this date may use the window fallback
        _fallback_days: Size of the window fallback, in days

    Example:
        converter = CurrencyConverter(InMemoryRateStore(...), today=date(2024, 6, 14))
        converter.convert(Decimal("1200"), "USD", "TRY", date(2024, 6, 14))
        # Decimal("36000")
    """

    def __init__(
            self,
            rate_store: RateStore,
            today: date,
            fallback_days: int = FX_TODAY_FALLBACK_DAYS,
    ) -> None:
        self._rate_store = rate_store
        self._today = today
        self._fallback_days = fallback_days

    @property
    def today(self) -> date:
        return self._today

    # =========================================================================
    # RATE LOOKUP
    # =========================================================================

    def resolve(
            self,
            from_currency: str,
            to_currency: str,
            on: date,
    ) -> FXRateResult | None:
        """
        Resolve a rate and report how it was found.

        Args:
            from_currency: Currency to convert from (e.g., "USD")
            to_currency: Currency to convert to (e.g., "TRY")
            on: Date the rate applies to

        Returns:
            FXRateResult, or None if no rate is available
        """
        source_code = from_currency.upper().strip()
        target_code = to_currency.upper().strip()

        if source_code == target_code:
            return FXRateResult(source_code, target_code, on, ONE, RateSource.IDENTITY)

        rate = self._rate_store.exact(source_code, target_code, on)
        if rate is not None:
            return FXRateResult(source_code, target_code, on, rate, RateSource.DIRECT)

        inverse = self._rate_store.exact(target_code, source_code, on)
        if inverse is not None and inverse != ZERO:
            return FXRateResult(
                source_code, target_code, on, ONE / inverse, RateSource.INVERSE
            )

        if on == self._today:
            rate = self._rate_store.within_window(
                source_code, target_code, on, self._fallback_days
            )
            if rate is not None:
                logger.debug(
                    f"Using window fallback rate for {source_code}/{target_code} on {on}"
                )
                return FXRateResult(
                    source_code, target_code, on, rate, RateSource.WINDOW_FALLBACK
                )

        logger.debug(f"FX rate unavailable: {source_code}/{target_code} on {on}")
        return None

    def get_rate_or_none(
            self,
            from_currency: str,
            to_currency: str,
            on: date,
    ) -> Decimal | None:
        """Rate for 1 from_currency in to_currency, or None if unavailable."""
        result = self.resolve(from_currency, to_currency, on)
        return result.rate if result is not None else None

    def get_rate(self, from_currency: str, to_currency: str, on: date) -> Decimal:
        """
        Same as get_rate_or_none() but raises instead of returning None.

        Raises:
            RateUnavailableError: If no rate is available
        """
        rate = self.get_rate_or_none(from_currency, to_currency, on)
        if rate is None:
            raise RateUnavailableError(
                from_currency.upper().strip(), to_currency.upper().strip(), on
            )
        return rate

    def available_rates(self, on: date) -> dict[str, Decimal]:
        """All stored direct rates on a date, keyed "FROM/TO"."""
        return {
            f"{from_currency}/{to_currency}": rate
            for (from_currency, to_currency), rate in self._rate_store.rates_on(on).items()
        }

    # =========================================================================
    # CONVERSION
    # =========================================================================

    def convert(
            self,
            amount: Decimal,
            from_currency: str,
            to_currency: str,
            on: date,
    ) -> Decimal | None:
        """
        Convert an amount between currencies at a date.

        Returns the amount unchanged when the currencies match or the amount
        is zero (no lookup happens). Returns None if the rate is unavailable.
        """
        if from_currency.upper().strip() == to_currency.upper().strip():
            return amount
        if amount == ZERO:
            return amount

        rate = self.get_rate_or_none(from_currency, to_currency, on)
        if rate is None:
            return None
        return amount * rate

    def batch_convert(self, requests: Iterable[ConversionRequest]) -> list[Decimal | None]:
        """Convert each request in order; unavailable conversions are None."""
        return [
            self.convert(request.amount, request.from_currency, request.to_currency, request.on)
            for request in requests
        ]
