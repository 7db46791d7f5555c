# backend/tests/test_config.py
"""
Tests for environment-based settings validation.
"""

import pytest
from pydantic import ValidationError

from portfolio_analytics.config import Settings


class TestSettings:

    def test_test_environment_defaults_to_sqlite(self):
        settings = Settings(environment="test", database_url=None)

        assert settings.database_url == "sqlite:///:memory:"
        assert settings.is_sqlite
        assert settings.is_test

    def test_valuation_defaults(self):
        settings = Settings(environment="test")

        assert settings.fx_today_fallback_days == 1
        assert settings.default_ranking_limit == 5
        assert settings.default_timeline_days == 30

    def test_development_requires_database_url(self):
        with pytest.raises(ValidationError, match="DATABASE_URL is required"):
            Settings(environment="development", database_url=None)

    def test_production_requires_postgres(self):
        with pytest.raises(ValidationError, match="requires PostgreSQL"):
            Settings(environment="production", database_url="mysql://db/analytics")

    def test_production_with_postgres(self):
        settings = Settings(environment="production", database_url="postgresql://u:p@db/analytics")

        assert settings.is_production
        assert not settings.is_sqlite

    def test_development_sqlite_warns(self):
        with pytest.warns(UserWarning, match="SQLite"):
            Settings(environment="development", database_url="sqlite:///dev.db")

    def test_ranking_limit_bounds(self):
        with pytest.raises(ValidationError):
            Settings(environment="test", default_ranking_limit=0)
