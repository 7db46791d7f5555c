# backend/portfolio_analytics/database.py
"""
Database engine and session scopes for the SQL-backed stores.

The analytics engine only reads. Everything here exists so the SQL price
store, rate store and portfolio repository get a Session whose lifetime is
bounded by one unit of work:

    with session_scope() as db:
        service = PortfolioAnalyticsService.from_session(db)
        ...

Engine Selection:
- sqlite:// URLs: StaticPool, so an in-memory database survives across
  sessions of the same engine (tests, local snapshots)
- Anything else: QueuePool sized from DB_POOL_* settings

The default engine is built lazily from settings on first use, so importing
this module never opens a connection.
"""

import logging
from collections.abc import Iterator
from contextlib import contextmanager
from functools import lru_cache

from sqlalchemy import Engine, create_engine, text
from sqlalchemy.orm import Session, sessionmaker
from sqlalchemy.pool import QueuePool, StaticPool

from .config import settings
from .models import Base

logger = logging.getLogger(__name__)


# =============================================================================
# ENGINE
# =============================================================================

def _is_sqlite_url(url: str) -> bool:
    return url.lower().startswith("sqlite")


def create_db_engine(database_url: str | None = None) -> Engine:
    """
    Build an engine for a URL, falling back to settings.database_url.

    Args:
        database_url: Connection string; None uses the configured one

    Returns:
        Engine with a pool suited to the backend
    """
    url = database_url or settings.database_url
    if url is None:
        raise ValueError("No database URL configured")

    if _is_sqlite_url(url):
        logger.debug(f"Creating SQLite engine for {url}")
        return create_engine(
            url,
            poolclass=StaticPool,
            connect_args={"check_same_thread": False},
            echo=settings.debug,
        )

    logger.info(
        f"Creating pooled engine: size={settings.db_pool_size}, "
        f"max_overflow={settings.db_pool_max_overflow}, "
        f"recycle={settings.db_pool_recycle}s"
    )
    return create_engine(
        url,
        poolclass=QueuePool,
        pool_size=settings.db_pool_size,
        max_overflow=settings.db_pool_max_overflow,
        pool_recycle=settings.db_pool_recycle,
        pool_pre_ping=settings.db_pool_pre_ping,
        echo=settings.debug,
    )


@lru_cache(maxsize=1)
def get_engine() -> Engine:
    """Process-wide engine built from settings on first call."""
    return create_db_engine()


def init_schema(engine: Engine | None = None) -> None:
    """Create any missing tables (idempotent)."""
    Base.metadata.create_all(engine or get_engine())


# =============================================================================
# SESSIONS
# =============================================================================

@contextmanager
def session_scope(engine: Engine | None = None) -> Iterator[Session]:
    """
    Session bound to one unit of work.

    Rolls back if the block raises and always closes the session. Nothing
    is committed: the analytics engine never writes.

    Args:
        engine: Engine to bind; defaults to get_engine()
    """
    factory = sessionmaker(bind=engine or get_engine(), autoflush=False)
    session = factory()
    try:
        yield session
    except Exception:
        session.rollback()
        raise
    finally:
        session.close()


def check_database_health(engine: Engine | None = None) -> dict:
    """
    Check database connectivity.

    Returns:
        {"status": "healthy", "database": <dialect>} or
        {"status": "unhealthy", "error": <message>}
    """
    engine = engine or get_engine()
    try:
        with engine.connect() as conn:
            conn.execute(text("SELECT 1"))
        return {"status": "healthy", "database": engine.dialect.name}
    except Exception as e:
        logger.error(f"Database health check failed: {e}")
        return {"status": "unhealthy", "error": str(e)}
