"""
Core module for stockwatch.

Contains data models, response transforms, validation and exceptions.
"""

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
from stockwatch.core.models import (
    CacheEntry,
    CacheStats,
    ChartPoint,
    ChartRange,
    CompanyOverview,
    Endpoint,
    IndexEntry,
    MarketMovers,
    RequestDescriptor,
    StockRecord,
    SymbolMatch,
)

__all__ = [
    # Models
    "CacheEntry",
    "CacheStats",
    "ChartPoint",
    "ChartRange",
    "CompanyOverview",
    "Endpoint",
    "IndexEntry",
    "MarketMovers",
    "RequestDescriptor",
    "StockRecord",
    "SymbolMatch",
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
