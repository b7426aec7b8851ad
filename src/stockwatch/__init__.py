"""
stockwatch

A cache-first client for stock market data. Sits between callers and a
rate-limited market-data API, serving fresh cached responses, falling back
to stale ones when the API fails, and keeping the cache bounded.

Quick Start:
    >>> import asyncio
    >>> from stockwatch import top_movers
    >>> movers = asyncio.run(top_movers())
    >>> print(movers.top_gainers[0].ticker)

    # Or with explicit wiring:
    >>> from stockwatch import ExpiringCache, MemoryStore, StockDataService
    >>> cache = ExpiringCache(MemoryStore())
"""

__version__ = "0.1.0"

# High-level API (recommended for most users)
from stockwatch.api import (
    company_overview,
    daily_chart,
    open_service,
    top_movers,
    top_movers_sync,
)

# Components (for advanced usage)
from stockwatch.cache import ExpiringCache, KeyValueStore, MemoryStore, SQLiteStore
from stockwatch.collectors import AlphaVantageClient
from stockwatch.config import CacheConfig, Settings, load_settings

# Exceptions
from stockwatch.core.exceptions import (
    ApiError,
    CacheError,
    ConfigError,
    NetworkError,
    PayloadError,
    RateLimitError,
    StockWatchError,
    ValidationError,
)

# Data models
from stockwatch.core.models import (
    CacheStats,
    ChartPoint,
    ChartRange,
    CompanyOverview,
    Endpoint,
    MarketMovers,
    RequestDescriptor,
    StockRecord,
    SymbolMatch,
)
from stockwatch.services import AppLifecycle, StockDataService

__all__ = [
    # Version
    "__version__",
    # High-level API
    "open_service",
    "top_movers",
    "top_movers_sync",
    "company_overview",
    "daily_chart",
    # Models
    "CacheStats",
    "ChartPoint",
    "ChartRange",
    "CompanyOverview",
    "Endpoint",
    "MarketMovers",
    "RequestDescriptor",
    "StockRecord",
    "SymbolMatch",
    # Components
    "AlphaVantageClient",
    "AppLifecycle",
    "CacheConfig",
    "ExpiringCache",
    "KeyValueStore",
    "MemoryStore",
    "SQLiteStore",
    "Settings",
    "StockDataService",
    "load_settings",
    # Exceptions
    "StockWatchError",
    "ApiError",
    "CacheError",
    "ConfigError",
    "NetworkError",
    "PayloadError",
    "RateLimitError",
    "ValidationError",
]
