# backend/portfolio_analytics/services/portfolio_repository.py
"""
Repository that loads a portfolio as an in-memory snapshot.

The engine computes over plain dataclasses, never over live ORM objects,
so grouping and ordering (including tie-breaks) are decided in Python
rather than by database iteration order.

Usage:
    repository = SqlPortfolioRepository(db)
    snapshot = repository.get_snapshot(portfolio_id=1)
"""

import logging

from sqlalchemy import select
from sqlalchemy.orm import Session, joinedload

from portfolio_analytics.models import Portfolio, Position
from portfolio_analytics.services.constants import ZERO
from portfolio_analytics.services.exceptions import (
    InvalidPositionError,
    PortfolioNotFoundError,
)
from portfolio_analytics.services.valuation.types import (
    AssetSnapshot,
    PortfolioSnapshot,
    PositionSnapshot,
)

logger = logging.getLogger(__name__)


class SqlPortfolioRepository:
    """Reads portfolios and their positions through a SQLAlchemy Session."""

    def __init__(self, db: Session) -> None:
        self._db = db

    def get_snapshot(self, portfolio_id: int) -> PortfolioSnapshot:
        """
        Load a portfolio with all positions (open and closed).

        Args:
            portfolio_id: Portfolio to load

        Returns:
            PortfolioSnapshot with positions ordered by ID

        Raises:
            PortfolioNotFoundError: If the portfolio doesn't exist
            InvalidPositionError: If a position has quantity or average
                cost <= 0
        """
        portfolio = self._db.get(Portfolio, portfolio_id)
        if portfolio is None:
            raise PortfolioNotFoundError(portfolio_id)

        query = (
            select(Position)
            .options(joinedload(Position.asset))
            .where(Position.portfolio_id == portfolio_id)
            .order_by(Position.id)
        )
        positions = tuple(
            self._to_snapshot(position)
            for position in self._db.scalars(query)
        )

        logger.debug(
            f"Loaded portfolio {portfolio_id} with {len(positions)} positions"
        )

        return PortfolioSnapshot(
            id=portfolio.id,
            base_currency=portfolio.base_currency.upper(),
            positions=positions,
            name=portfolio.name,
        )

    @staticmethod
    def _to_snapshot(position: Position) -> PositionSnapshot:
        if position.quantity is None or position.quantity <= ZERO:
            raise InvalidPositionError(position.id, "quantity", position.quantity)
        if position.average_cost is None or position.average_cost <= ZERO:
            raise InvalidPositionError(position.id, "average_cost", position.average_cost)

        asset = position.asset
        return PositionSnapshot(
            id=position.id,
            asset=AssetSnapshot(
                id=asset.id,
                symbol=asset.symbol,
                name=asset.name,
                asset_class=asset.asset_class,
                currency=asset.currency.upper(),
                exchange=asset.exchange,
            ),
            quantity=position.quantity,
            average_cost=position.average_cost,
            purchase_currency=position.purchase_currency.upper(),
            purchase_date=position.purchase_date,
            status=position.status,
        )
