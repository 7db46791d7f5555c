# backend/tests/services/test_portfolio_repository.py
"""
Tests for SqlPortfolioRepository.
"""

from decimal import Decimal

import pytest

from portfolio_analytics.models import AssetClass, Exchange, PositionStatus
from portfolio_analytics.services.exceptions import (
    InvalidPositionError,
    PortfolioNotFoundError,
)
from portfolio_analytics.services.portfolio_repository import SqlPortfolioRepository
from tests.conftest import create_asset, create_portfolio, create_position


class TestGetSnapshot:

    def test_loads_positions_in_id_order(self, db, sample_user):
        portfolio = create_portfolio(db, sample_user, base_currency="try")
        gold = create_asset(
            db, symbol="XAU", name="Gold", asset_class=AssetClass.PRECIOUS_METAL,
            exchange=Exchange.TWELVE_DATA,
        )
        stock = create_asset(db, symbol="THYAO", name="Turkish Airlines", exchange=Exchange.BIST, currency="TRY")
        first = create_position(db, portfolio, gold, quantity=Decimal("2.5"))
        second = create_position(
            db, portfolio, stock, purchase_currency="TRY", status=PositionStatus.CLOSED,
        )

        snapshot = SqlPortfolioRepository(db).get_snapshot(portfolio.id)

        assert snapshot.id == portfolio.id
        assert snapshot.base_currency == "TRY"
        assert snapshot.name == "Test Portfolio"
        assert [p.id for p in snapshot.positions] == [first.id, second.id]

        gold_position = snapshot.positions[0]
        assert gold_position.asset.symbol == "XAU"
        assert gold_position.asset.asset_class == AssetClass.PRECIOUS_METAL
        assert gold_position.asset.exchange == Exchange.TWELVE_DATA
        assert gold_position.quantity == Decimal("2.5")
        assert gold_position.average_cost == Decimal("100")

        assert [p.id for p in snapshot.open_positions] == [first.id]

    def test_missing_portfolio_raises(self, db):
        with pytest.raises(PortfolioNotFoundError) as exc_info:
            SqlPortfolioRepository(db).get_snapshot(404)

        assert exc_info.value.resource_type == "Portfolio"
        assert "404" in str(exc_info.value)

    def test_portfolio_without_positions(self, db, sample_portfolio):
        snapshot = SqlPortfolioRepository(db).get_snapshot(sample_portfolio.id)

        assert snapshot.positions == ()

    @pytest.mark.parametrize("field,quantity,average_cost", [
        ("quantity", Decimal("0"), Decimal("100")),
        ("quantity", Decimal("-1"), Decimal("100")),
        ("average_cost", Decimal("10"), Decimal("0")),
    ])
    def test_invalid_position_aborts(self, db, sample_portfolio, field, quantity, average_cost):
        asset = create_asset(db)
        create_position(db, sample_portfolio, asset, quantity=quantity, average_cost=average_cost)

        with pytest.raises(InvalidPositionError) as exc_info:
            SqlPortfolioRepository(db).get_snapshot(sample_portfolio.id)

        assert exc_info.value.field == field
