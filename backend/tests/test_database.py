# backend/tests/test_database.py
"""
Tests for engine construction and session scopes.
"""

from decimal import Decimal

import pytest
from sqlalchemy import select
from sqlalchemy.orm import Session
from sqlalchemy.pool import StaticPool

from portfolio_analytics.database import (
    check_database_health,
    create_db_engine,
    get_engine,
    init_schema,
    session_scope,
)
from portfolio_analytics.models import User
from portfolio_analytics.services.analytics.service import PortfolioAnalyticsService
from tests.conftest import TODAY, create_asset, create_portfolio, create_position, create_price, create_user


class TestEngine:

    def test_sqlite_url_uses_static_pool(self):
        engine = create_db_engine("sqlite:///:memory:")

        assert isinstance(engine.pool, StaticPool)

    def test_default_engine_comes_from_settings(self):
        # Test environment defaults DATABASE_URL to in-memory SQLite
        assert get_engine().dialect.name == "sqlite"
        assert get_engine() is get_engine()

    def test_health_check(self, db_engine):
        assert check_database_health(db_engine) == {"status": "healthy", "database": "sqlite"}

    def test_init_schema_is_idempotent(self, db_engine):
        init_schema(db_engine)

        with session_scope(db_engine) as db:
            assert db.scalars(select(User)).all() == []


class TestSessionScope:

    def test_yields_session_bound_to_engine(self, db_engine):
        with session_scope(db_engine) as db:
            assert isinstance(db, Session)
            assert db.get_bind() is db_engine

    def test_rolls_back_uncommitted_work_on_error(self, db_engine):
        with pytest.raises(RuntimeError):
            with session_scope(db_engine) as db:
                db.add(User(email="rollback@example.com"))
                db.flush()
                raise RuntimeError("boom")

        with session_scope(db_engine) as db:
            assert db.scalars(select(User)).all() == []

    def test_committed_data_visible_to_next_scope(self, db_engine):
        with session_scope(db_engine) as db:
            create_user(db, email="kept@example.com")

        with session_scope(db_engine) as db:
            assert [u.email for u in db.scalars(select(User))] == ["kept@example.com"]


class TestServiceConnect:

    def test_connect_reads_through_engine(self, db_engine):
        with session_scope(db_engine) as db:
            portfolio = create_portfolio(db, create_user(db))
            asset = create_asset(db)
            create_price(db, asset, TODAY, Decimal("120"))
            create_position(db, portfolio, asset)
            portfolio_id = portfolio.id

        with PortfolioAnalyticsService.connect(today=TODAY, engine=db_engine) as service:
            overview = service.overview(service.load_portfolio(portfolio_id))

        assert overview.total_value == Decimal("1200.00")
        assert service.today == TODAY
