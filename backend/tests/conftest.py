# backend/tests/conftest.py
"""
Pytest configuration and fixtures.

This module provides shared fixtures for all tests:
- Database session fixtures (in-memory SQLite)
- Database factories (users, portfolios, assets, positions, prices, rates)
- Snapshot factories for pure unit tests with in-memory stores
"""

import os

# Set required environment variables BEFORE importing engine modules
os.environ.setdefault("ENVIRONMENT", "test")

from datetime import date
from decimal import Decimal
from typing import Iterator

import pytest
from sqlalchemy.orm import Session

from portfolio_analytics.database import create_db_engine, init_schema, session_scope
from portfolio_analytics.models import (
    Base,
    Asset,
    AssetClass,
    CurrencyRate,
    Exchange,
    Portfolio,
    Position,
    PositionStatus,
    PriceHistory,
    User,
)
from portfolio_analytics.services.valuation.types import (
    AssetSnapshot,
    PortfolioSnapshot,
    PositionSnapshot,
    PriceBar,
)


# Fixed as-of date used across tests (a Friday)
TODAY = date(2024, 6, 14)


# =============================================================================
# DATABASE FIXTURES
# =============================================================================

@pytest.fixture(scope="function")
def db_engine():
    """Create an in-memory SQLite database engine for testing."""
    engine = create_db_engine("sqlite:///:memory:")
    init_schema(engine)
    yield engine
    Base.metadata.drop_all(engine)


@pytest.fixture(scope="function")
def db(db_engine) -> Iterator[Session]:
    """Create a database session for testing."""
    with session_scope(db_engine) as session:
        yield session


# =============================================================================
# DATABASE FACTORIES
# =============================================================================

def create_user(db: Session, email: str = "test@example.com") -> User:
    """Factory function for creating User entities in the database."""
    user = User(email=email, first_name="Test", last_name="User")
    db.add(user)
    db.commit()
    db.refresh(user)
    return user


def create_portfolio(
        db: Session,
        user: User,
        name: str = "Test Portfolio",
        base_currency: str = "USD",
) -> Portfolio:
    """Factory function for creating Portfolio entities in the database."""
    portfolio = Portfolio(user_id=user.id, name=name, base_currency=base_currency)
    db.add(portfolio)
    db.commit()
    db.refresh(portfolio)
    return portfolio


def create_asset(
        db: Session,
        symbol: str = "AAPL",
        name: str = "Apple Inc.",
        asset_class: AssetClass = AssetClass.STOCK,
        exchange: Exchange = Exchange.NASDAQ,
        currency: str = "USD",
) -> Asset:
    """Factory function for creating Asset entities in the database."""
    asset = Asset(
        symbol=symbol,
        name=name,
        asset_class=asset_class,
        exchange=exchange,
        currency=currency,
    )
    db.add(asset)
    db.commit()
    db.refresh(asset)
    return asset


def create_position(
        db: Session,
        portfolio: Portfolio,
        asset: Asset,
        quantity: Decimal = Decimal("10"),
        average_cost: Decimal = Decimal("100"),
        purchase_currency: str = "USD",
        purchase_date: date = date(2024, 1, 2),
        status: PositionStatus = PositionStatus.OPEN,
) -> Position:
    """Factory function for creating Position entities in the database."""
    position = Position(
        portfolio_id=portfolio.id,
        asset_id=asset.id,
        quantity=quantity,
        average_cost=average_cost,
        purchase_currency=purchase_currency,
        purchase_date=purchase_date,
        status=status,
    )
    db.add(position)
    db.commit()
    db.refresh(position)
    return position


def create_price(
        db: Session,
        asset: Asset,
        price_date: date,
        close: Decimal,
        currency: str | None = None,
) -> PriceHistory:
    """Factory function for creating PriceHistory rows in the database."""
    price = PriceHistory(
        asset_id=asset.id,
        date=price_date,
        close=close,
        currency=currency or asset.currency,
    )
    db.add(price)
    db.commit()
    return price


def create_rate(
        db: Session,
        from_currency: str,
        to_currency: str,
        rate_date: date,
        rate: Decimal,
) -> CurrencyRate:
    """Factory function for creating CurrencyRate rows in the database."""
    currency_rate = CurrencyRate(
        from_currency=from_currency,
        to_currency=to_currency,
        date=rate_date,
        rate=rate,
    )
    db.add(currency_rate)
    db.commit()
    return currency_rate


# =============================================================================
# SNAPSHOT FACTORIES
# =============================================================================

def make_asset(
        asset_id: int = 1,
        symbol: str = "AAPL",
        asset_class: AssetClass = AssetClass.STOCK,
        currency: str = "USD",
        name: str | None = None,
) -> AssetSnapshot:
    """Build an AssetSnapshot without a database."""
    return AssetSnapshot(
        id=asset_id,
        symbol=symbol,
        name=name or f"{symbol} name",
        asset_class=asset_class,
        currency=currency,
    )


def make_position(
        position_id: int = 1,
        asset: AssetSnapshot | None = None,
        quantity: str = "10",
        average_cost: str = "100",
        purchase_currency: str = "USD",
        status: PositionStatus = PositionStatus.OPEN,
) -> PositionSnapshot:
    """Build a PositionSnapshot without a database."""
    return PositionSnapshot(
        id=position_id,
        asset=asset or make_asset(),
        quantity=Decimal(quantity),
        average_cost=Decimal(average_cost),
        purchase_currency=purchase_currency,
        purchase_date=date(2024, 1, 2),
        status=status,
    )


def make_portfolio(
        *positions: PositionSnapshot,
        base_currency: str = "USD",
        portfolio_id: int = 1,
) -> PortfolioSnapshot:
    """Build a PortfolioSnapshot without a database."""
    return PortfolioSnapshot(
        id=portfolio_id,
        base_currency=base_currency,
        positions=tuple(positions),
        name="Snapshot Portfolio",
    )


def make_bar(asset: AssetSnapshot, bar_date: date, close: str) -> PriceBar:
    """Build a PriceBar in the asset's currency."""
    return PriceBar(
        asset_id=asset.id,
        date=bar_date,
        close=Decimal(close),
        currency=asset.currency,
    )


# =============================================================================
# FIXTURE EXPORTS (for convenience imports in tests)
# =============================================================================

@pytest.fixture
def today() -> date:
    """Provide the fixed as-of date."""
    return TODAY


@pytest.fixture
def sample_user(db: Session) -> User:
    """Provide a sample User for tests."""
    return create_user(db)


@pytest.fixture
def sample_portfolio(db: Session, sample_user: User) -> Portfolio:
    """Provide a sample Portfolio for tests."""
    return create_portfolio(db, sample_user)
