"""
Core data models for stockwatch.

This module defines the data structures used throughout stockwatch for
representing cache records, remote requests and the normalized market data
handed to callers.
"""

from dataclasses import dataclass, field
from enum import Enum
from typing import Any


class Endpoint(Enum):
    """Logical remote operations that the cache keys on."""

    SYMBOL_SEARCH = "SYMBOL_SEARCH"
    COMPANY_OVERVIEW = "COMPANY_OVERVIEW"
    TOP_GAINERS_LOSERS = "TOP_GAINERS_LOSERS"
    INTRADAY_DATA = "TIME_SERIES_INTRADAY"
    DAILY_DATA = "TIME_SERIES_DAILY"

    def __str__(self) -> str:
        return self.value


class ChartRange(Enum):
    """Chart ranges served from the daily series."""

    ONE_WEEK = "1W"
    ONE_MONTH = "1M"
    THREE_MONTHS = "3M"
    ONE_YEAR = "1Y"

    def __str__(self) -> str:
        return self.value

    @property
    def days(self) -> int:
        """Return the number of trading days in this range."""
        days = {
            ChartRange.ONE_WEEK: 7,
            ChartRange.ONE_MONTH: 22,  # ~22 trading days in a month
            ChartRange.THREE_MONTHS: 66,
            ChartRange.ONE_YEAR: 252,
        }
        return days[self]

    @property
    def is_long(self) -> bool:
        """Return True if chart labels should use month/year resolution."""
        return self in (ChartRange.THREE_MONTHS, ChartRange.ONE_YEAR)


def _to_float(value: Any) -> float | None:
    try:
        return float(value)
    except (TypeError, ValueError):
        return None


@dataclass
class CacheEntry:
    """A cached payload as persisted in the store."""

    data: Any
    created_at: float | None
    ttl: float | None
    endpoint: str
    params: dict[str, Any] = field(default_factory=dict)

    @property
    def expires_at(self) -> float | None:
        """Return the instant after which this entry is stale."""
        if self.created_at is None or self.ttl is None:
            return None
        return self.created_at + self.ttl

    def is_fresh(self, now: float) -> bool:
        """Return True if the entry has not outlived its TTL at ``now``."""
        if self.created_at is None or self.ttl is None or self.ttl <= 0:
            return False
        return now < self.created_at + self.ttl

    def to_dict(self) -> dict:
        """Convert to dictionary for storage."""
        return {
            "data": self.data,
            "created_at": self.created_at,
            "ttl": self.ttl,
            "endpoint": self.endpoint,
            "params": self.params,
        }

    @classmethod
    def from_dict(cls, data: dict) -> "CacheEntry":
        """Create from a stored dictionary.

        Raises:
            TypeError: If ``data`` is not a mapping.
        """
        if not isinstance(data, dict):
            raise TypeError(f"Expected a JSON object, got {type(data).__name__}")

        params = data.get("params")
        return cls(
            data=data.get("data"),
            created_at=_to_float(data.get("created_at")),
            ttl=_to_float(data.get("ttl")),
            endpoint=str(data.get("endpoint", "")),
            params=params if isinstance(params, dict) else {},
        )


@dataclass
class IndexEntry:
    """Lightweight catalog record for one live cache entry."""

    cache_key: str
    endpoint: str
    params: dict[str, Any]
    created_at: float

    def to_dict(self) -> dict:
        """Convert to dictionary for storage."""
        return {
            "cache_key": self.cache_key,
            "endpoint": self.endpoint,
            "params": self.params,
            "created_at": self.created_at,
        }

    @classmethod
    def from_dict(cls, data: dict) -> "IndexEntry":
        """Create from a stored dictionary.

        Raises:
            KeyError, TypeError, ValueError: If the record is malformed.
        """
        params = data.get("params")
        return cls(
            cache_key=str(data["cache_key"]),
            endpoint=str(data.get("endpoint", "")),
            params=params if isinstance(params, dict) else {},
            created_at=float(data["created_at"]),
        )


@dataclass
class CacheStats:
    """Snapshot of the cache index."""

    total_entries: int
    max_size: int
    endpoints: dict[str, int] = field(default_factory=dict)

    @property
    def usage_percent(self) -> int:
        """Return how full the cache is, as a rounded percentage."""
        if self.max_size <= 0:
            return 0
        return round(self.total_entries / self.max_size * 100)

    def to_dict(self) -> dict:
        """Convert to dictionary for display or JSON output."""
        return {
            "total_entries": self.total_entries,
            "max_size": self.max_size,
            "usage_percent": self.usage_percent,
            "endpoints": dict(self.endpoints),
        }


@dataclass(frozen=True)
class RequestDescriptor:
    """A single remote call: API function name plus flat parameters."""

    function: str
    params: dict[str, str] = field(default_factory=dict)

    def query(self) -> dict[str, str]:
        """Return the query parameters including the function name."""
        return {"function": self.function, **self.params}


@dataclass
class StockRecord:
    """A gainer or loser as shown in the movers lists."""

    id: int
    ticker: str | None
    price: str | None = None
    change_amount: str | None = None
    change_percentage: str | None = None
    volume: str | None = None
    color: str | None = None  # Presentational only

    def to_dict(self) -> dict:
        """Convert to dictionary for caching."""
        return {
            "id": self.id,
            "ticker": self.ticker,
            "price": self.price,
            "change_amount": self.change_amount,
            "change_percentage": self.change_percentage,
            "volume": self.volume,
            "color": self.color,
        }

    @classmethod
    def from_dict(cls, data: dict) -> "StockRecord":
        """Create from dictionary (cache retrieval)."""
        return cls(
            id=int(data.get("id", 0)),
            ticker=data.get("ticker"),
            price=data.get("price"),
            change_amount=data.get("change_amount"),
            change_percentage=data.get("change_percentage"),
            volume=data.get("volume"),
            color=data.get("color"),
        )


@dataclass
class MarketMovers:
    """Top gainers and losers of the trading day."""

    top_gainers: list[StockRecord] = field(default_factory=list)
    top_losers: list[StockRecord] = field(default_factory=list)

    def to_dict(self) -> dict:
        """Convert to dictionary for caching."""
        return {
            "top_gainers": [s.to_dict() for s in self.top_gainers],
            "top_losers": [s.to_dict() for s in self.top_losers],
        }

    @classmethod
    def from_dict(cls, data: dict) -> "MarketMovers":
        """Create from dictionary (cache retrieval)."""
        return cls(
            top_gainers=[StockRecord.from_dict(s) for s in data.get("top_gainers", [])],
            top_losers=[StockRecord.from_dict(s) for s in data.get("top_losers", [])],
        )


@dataclass
class ChartPoint:
    """One point of a price chart."""

    x: str  # Axis label
    y: float  # Closing price
    timestamp: str  # Source key from the time series

    def to_dict(self) -> dict:
        """Convert to dictionary for caching."""
        return {"x": self.x, "y": self.y, "timestamp": self.timestamp}

    @classmethod
    def from_dict(cls, data: dict) -> "ChartPoint":
        """Create from dictionary (cache retrieval)."""
        return cls(
            x=str(data.get("x", "")),
            y=_to_float(data.get("y")) or 0.0,
            timestamp=str(data.get("timestamp", "")),
        )


@dataclass
class SymbolMatch:
    """A symbol search hit."""

    symbol: str
    name: str | None = None
    type: str | None = None
    region: str | None = None
    currency: str | None = None
    match_score: float | None = None

    def to_dict(self) -> dict:
        """Convert to dictionary for caching."""
        return {
            "symbol": self.symbol,
            "name": self.name,
            "type": self.type,
            "region": self.region,
            "currency": self.currency,
            "match_score": self.match_score,
        }

    @classmethod
    def from_dict(cls, data: dict) -> "SymbolMatch":
        """Create from dictionary (cache retrieval)."""
        return cls(
            symbol=str(data.get("symbol", "")),
            name=data.get("name"),
            type=data.get("type"),
            region=data.get("region"),
            currency=data.get("currency"),
            match_score=_to_float(data.get("match_score")),
        )


@dataclass
class CompanyOverview:
    """Company fundamentals for the details view.

    Numeric fields are kept as the API's strings; the API reports missing
    values as "None" or "-" and callers format them for display.
    """

    symbol: str
    name: str | None = None
    exchange: str | None = None
    description: str | None = None
    industry: str | None = None
    sector: str | None = None
    market_capitalization: str | None = None
    pe_ratio: str | None = None
    beta: str | None = None
    dividend_yield: str | None = None
    profit_margin: str | None = None
    eps: str | None = None
    week_52_high: str | None = None
    week_52_low: str | None = None

    @property
    def is_empty(self) -> bool:
        """Return True if the API knew nothing about the symbol."""
        return self.name is None and self.exchange is None

    def to_dict(self) -> dict:
        """Convert to dictionary for caching."""
        return {
            "symbol": self.symbol,
            "name": self.name,
            "exchange": self.exchange,
            "description": self.description,
            "industry": self.industry,
            "sector": self.sector,
            "market_capitalization": self.market_capitalization,
            "pe_ratio": self.pe_ratio,
            "beta": self.beta,
            "dividend_yield": self.dividend_yield,
            "profit_margin": self.profit_margin,
            "eps": self.eps,
            "week_52_high": self.week_52_high,
            "week_52_low": self.week_52_low,
        }

    @classmethod
    def from_dict(cls, data: dict) -> "CompanyOverview":
        """Create from dictionary (cache retrieval)."""
        return cls(
            symbol=str(data.get("symbol", "")),
            name=data.get("name"),
            exchange=data.get("exchange"),
            description=data.get("description"),
            industry=data.get("industry"),
            sector=data.get("sector"),
            market_capitalization=data.get("market_capitalization"),
            pe_ratio=data.get("pe_ratio"),
            beta=data.get("beta"),
            dividend_yield=data.get("dividend_yield"),
            profit_margin=data.get("profit_margin"),
            eps=data.get("eps"),
            week_52_high=data.get("week_52_high"),
            week_52_low=data.get("week_52_low"),
        )
