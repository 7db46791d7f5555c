# backend/portfolio_analytics/models.py
import enum
from datetime import date, datetime, timedelta, timezone
from decimal import Decimal

from sqlalchemy import String, Text, Date, DateTime, ForeignKey, Enum, Numeric, UniqueConstraint, BigInteger, Index
from sqlalchemy.orm import DeclarativeBase, Mapped, mapped_column, relationship


class Base(DeclarativeBase):
    """Base class for all SQLAlchemy models."""
    pass


# Enums help enforce data integrity at the database level
class AssetClass(str, enum.Enum):
    STOCK = "stock"
    PRECIOUS_METAL = "precious_metal"
    FOREX = "forex"
    CRYPTOCURRENCY = "cryptocurrency"
    ETF = "etf"
    BOND = "bond"

    @property
    def display_name(self) -> str:
        """Human-readable asset class name (e.g. "Precious Metal")."""
        return _ASSET_CLASS_DISPLAY_NAMES[self]


# One entry per AssetClass member
_ASSET_CLASS_DISPLAY_NAMES: dict[AssetClass, str] = {
    AssetClass.STOCK: "Stock",
    AssetClass.PRECIOUS_METAL: "Precious Metal",
    AssetClass.FOREX: "Forex",
    AssetClass.CRYPTOCURRENCY: "Cryptocurrency",
    AssetClass.ETF: "Etf",
    AssetClass.BOND: "Bond",
}


class Exchange(str, enum.Enum):
    """Exchange or data source an asset is listed on."""
    BIST = "bist"                # Borsa Istanbul
    TWELVE_DATA = "twelve_data"  # Commodities / forex feed
    BINANCE = "binance"          # Crypto exchange
    NYSE = "nyse"
    NASDAQ = "nasdaq"


class PositionStatus(str, enum.Enum):
    """Only OPEN positions contribute to analytics."""
    OPEN = "open"
    CLOSED = "closed"


def is_price_stale(latest_price_date: date | None, today: date) -> bool:
    """True if there is no price, or the latest one is older than a day."""
    if latest_price_date is None:
        return True
    return latest_price_date < today - timedelta(days=1)


class User(Base):
    __tablename__ = "users"

    id: Mapped[int] = mapped_column(primary_key=True, index=True)
    email: Mapped[str] = mapped_column(String, unique=True, index=True)
    first_name: Mapped[str | None] = mapped_column(String)
    last_name: Mapped[str | None] = mapped_column(String)
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), default=lambda: datetime.now(timezone.utc))

    # Relationship: One User has Many Portfolios
    portfolios: Mapped[list["Portfolio"]] = relationship(back_populates="owner")


class Portfolio(Base):
    __tablename__ = "portfolios"

    id: Mapped[int] = mapped_column(primary_key=True, index=True)
    user_id: Mapped[int] = mapped_column(ForeignKey("users.id"), index=True)
    name: Mapped[str] = mapped_column(String)
    description: Mapped[str | None] = mapped_column(Text)
    base_currency: Mapped[str] = mapped_column(String(3), default="TRY")
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), default=lambda: datetime.now(timezone.utc))
    updated_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), default=lambda: datetime.now(timezone.utc), onupdate=lambda: datetime.now(timezone.utc))

    owner: Mapped["User"] = relationship(back_populates="portfolios")
    positions: Mapped[list["Position"]] = relationship(
        back_populates="portfolio",
        cascade="all, delete-orphan",
        order_by="Position.id",
    )


class Asset(Base):
    """
    Global table of assets shared by all portfolios.

    An asset is uniquely identified by the combination of symbol AND exchange.
    Example: a BIST stock and a NASDAQ stock may share a symbol.
    """
    __tablename__ = "assets"
    __table_args__ = (
        UniqueConstraint('symbol', 'exchange', name='uq_symbol_exchange'),
    )

    id: Mapped[int] = mapped_column(primary_key=True, index=True)
    symbol: Mapped[str] = mapped_column(String, index=True)  # e.g. "AAPL", "XAU", "USD/TRY"
    name: Mapped[str] = mapped_column(String)
    asset_class: Mapped[AssetClass] = mapped_column(Enum(AssetClass), index=True)
    exchange: Mapped[Exchange] = mapped_column(Enum(Exchange), default=Exchange.BIST, index=True)
    currency: Mapped[str] = mapped_column(String(3), default="USD")  # Critical for valuation
    description: Mapped[str | None] = mapped_column(Text)
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), default=lambda: datetime.now(timezone.utc))

    prices: Mapped[list["PriceHistory"]] = relationship(back_populates="asset", cascade="all, delete-orphan")
    positions: Mapped[list["Position"]] = relationship(back_populates="asset")


class Position(Base):
    """
    A held quantity of one asset within one portfolio.

    Valuation is always derived from current PriceHistory/CurrencyRate data
    and is never cached on the row.
    """
    __tablename__ = "positions"
    __table_args__ = (
        Index('ix_position_portfolio_asset', 'portfolio_id', 'asset_id'),
    )

    id: Mapped[int] = mapped_column(primary_key=True, index=True)
    portfolio_id: Mapped[int] = mapped_column(ForeignKey("portfolios.id"), index=True)
    asset_id: Mapped[int] = mapped_column(ForeignKey("assets.id"), index=True)
    purchase_date: Mapped[date] = mapped_column(Date, index=True)

    # Numeric(18, 8) supports crypto quantities (8 decimal places)
    quantity: Mapped[Decimal] = mapped_column(Numeric(18, 8))
    average_cost: Mapped[Decimal] = mapped_column(Numeric(18, 4))
    purchase_currency: Mapped[str] = mapped_column(String(3), default="TRY")
    status: Mapped[PositionStatus] = mapped_column(Enum(PositionStatus), default=PositionStatus.OPEN, index=True)
    notes: Mapped[str | None] = mapped_column(Text)

    portfolio: Mapped["Portfolio"] = relationship(back_populates="positions")
    asset: Mapped["Asset"] = relationship(back_populates="positions")


class PriceHistory(Base):
    """
    Daily price bar for one asset (OHLCV format).

    Written by external market-data fetch jobs; the engine only reads
    the close price.
    """
    __tablename__ = "price_histories"
    __table_args__ = (
        UniqueConstraint('asset_id', 'date', name='uq_price_asset_date'),
    )

    id: Mapped[int] = mapped_column(primary_key=True, index=True)
    asset_id: Mapped[int] = mapped_column(ForeignKey("assets.id"), index=True)
    date: Mapped[date] = mapped_column(Date, index=True)

    open: Mapped[Decimal | None] = mapped_column(Numeric(18, 4), nullable=True)
    high: Mapped[Decimal | None] = mapped_column(Numeric(18, 4), nullable=True)
    low: Mapped[Decimal | None] = mapped_column(Numeric(18, 4), nullable=True)
    close: Mapped[Decimal] = mapped_column(Numeric(18, 4))  # Required - valuation price
    volume: Mapped[int | None] = mapped_column(BigInteger, nullable=True)
    currency: Mapped[str] = mapped_column(String(3), default="USD")

    asset: Mapped["Asset"] = relationship(back_populates="prices")


class CurrencyRate(Base):
    """
    Historical exchange rates between currency pairs.

    Convention: rate represents "1 from_currency = X to_currency"
    Example: from=USD, to=TRY, rate=30 means 1 USD = 30 TRY
    """
    __tablename__ = "currency_rates"
    __table_args__ = (
        UniqueConstraint('from_currency', 'to_currency', 'date',
                         name='uq_currency_rate_pair_date'),
    )

    id: Mapped[int] = mapped_column(primary_key=True, index=True)
    from_currency: Mapped[str] = mapped_column(String(3), index=True)
    to_currency: Mapped[str] = mapped_column(String(3), index=True)
    date: Mapped[date] = mapped_column(Date, index=True)
    rate: Mapped[Decimal] = mapped_column(Numeric(18, 8))
