"""
Pytest fixtures and configuration for stockwatch tests.

Provides in-memory stores, a controllable clock and mock API responses.
"""

from datetime import date, timedelta
from typing import Any, Optional
from unittest.mock import AsyncMock, MagicMock

import pytest

from stockwatch.cache.expiring import ExpiringCache
from stockwatch.cache.store import MemoryStore
from stockwatch.config import CacheConfig
from stockwatch.core.exceptions import CacheError
from stockwatch.services.data_service import StockDataService

# =============================================================================
# Test Doubles
# =============================================================================


class FakeClock:
    """Clock that only moves when told to."""

    def __init__(self, start: float = 1_700_000_000.0):
        self.now = start

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += seconds


class FlakyStore(MemoryStore):
    """MemoryStore whose operations can be made to fail."""

    def __init__(self) -> None:
        super().__init__()
        self.fail_get = False
        self.fail_set = False
        self.fail_remove = False
        self.fail_set_keys: set[str] = set()

    def get_item(self, key: str) -> Optional[str]:
        if self.fail_get:
            raise CacheError("get", "disk on fire")
        return super().get_item(key)

    def set_item(self, key: str, value: str) -> None:
        if self.fail_set or key in self.fail_set_keys:
            raise CacheError("set", "disk full")
        super().set_item(key, value)

    def remove_item(self, key: str) -> None:
        if self.fail_remove:
            raise CacheError("remove", "read-only")
        super().remove_item(key)


# =============================================================================
# Cache Fixtures
# =============================================================================


@pytest.fixture
def clock() -> FakeClock:
    """Create a controllable clock."""
    return FakeClock()


@pytest.fixture
def store() -> FlakyStore:
    """Create an in-memory store that can simulate failures."""
    return FlakyStore()


@pytest.fixture
def cache_config() -> CacheConfig:
    """Create the default cache configuration."""
    return CacheConfig()


@pytest.fixture
def cache(store: FlakyStore, cache_config: CacheConfig, clock: FakeClock) -> ExpiringCache:
    """Create an expiring cache over the in-memory store."""
    return ExpiringCache(store, cache_config, clock=clock)


# =============================================================================
# Mock API Response Fixtures
# =============================================================================


@pytest.fixture
def mock_movers_response() -> dict[str, Any]:
    """Create a mock TOP_GAINERS_LOSERS response."""
    return {
        "metadata": "Top gainers, losers, and most actively traded US tickers",
        "last_updated": "2024-01-05 16:15:59 US/Eastern",
        "top_gainers": [
            {
                "ticker": "ABCD",
                "price": "1.23",
                "change_amount": "0.61",
                "change_percentage": "98.39%",
                "volume": "1234567",
            },
            {
                "ticker": "WXYZ",
                "price": "10.5",
                "change_amount": "3.5",
                "change_percentage": "50.0%",
                "volume": "98765",
            },
        ],
        "top_losers": [
            {
                "ticker": "DOWN",
                "price": "0.45",
                "change_amount": "-0.55",
                "change_percentage": "-55.0%",
                "volume": "4567890",
            },
        ],
        "most_actively_traded": [],
    }


@pytest.fixture
def mock_overview_response() -> dict[str, Any]:
    """Create a mock OVERVIEW response."""
    return {
        "Symbol": "IBM",
        "Name": "International Business Machines",
        "Exchange": "NYSE",
        "Description": "IBM is an American multinational technology company.",
        "Industry": "COMPUTER & OFFICE EQUIPMENT",
        "Sector": "TECHNOLOGY",
        "MarketCapitalization": "150000000000",
        "PERatio": "22.1",
        "Beta": "0.72",
        "DividendYield": "0.0421",
        "ProfitMargin": "0.125",
        "EPS": "7.1",
        "52WeekHigh": "170.0",
        "52WeekLow": "120.5",
    }


@pytest.fixture
def mock_search_response() -> dict[str, Any]:
    """Create a mock SYMBOL_SEARCH response."""
    return {
        "bestMatches": [
            {
                "1. symbol": "TSCO",
                "2. name": "Tractor Supply Company",
                "3. type": "Equity",
                "4. region": "United States",
                "8. currency": "USD",
                "9. matchScore": "0.8889",
            },
            {
                "1. symbol": "TSCO.LON",
                "2. name": "Tesco PLC",
                "3. type": "Equity",
                "4. region": "United Kingdom",
                "8. currency": "GBX",
                "9. matchScore": "0.7273",
            },
        ]
    }


def _bar(close: float) -> dict[str, str]:
    return {
        "1. open": f"{close - 1:.4f}",
        "2. high": f"{close + 1:.4f}",
        "3. low": f"{close - 2:.4f}",
        "4. close": f"{close:.4f}",
        "5. volume": "1000",
    }


@pytest.fixture
def mock_intraday_response() -> dict[str, Any]:
    """Create a mock 5-minute series with 100 bars, newest first."""
    series = {}
    for i in range(100):
        hour, minute = divmod(4 * 60 + i * 5, 60)
        series[f"2024-01-05 {hour:02d}:{minute:02d}:00"] = _bar(100.0 + i)
    ordered = dict(sorted(series.items(), reverse=True))
    return {
        "Meta Data": {"2. Symbol": "IBM", "4. Interval": "5min"},
        "Time Series (5min)": ordered,
    }


@pytest.fixture
def mock_daily_response() -> dict[str, Any]:
    """Create a mock daily series with 300 consecutive days, newest first."""
    start = date(2023, 3, 12)
    series = {}
    for i in range(300):
        series[(start + timedelta(days=i)).isoformat()] = _bar(50.0 + i)
    ordered = dict(sorted(series.items(), reverse=True))
    return {
        "Meta Data": {"2. Symbol": "IBM"},
        "Time Series (Daily)": ordered,
    }


# =============================================================================
# Mock Client Fixtures
# =============================================================================


@pytest.fixture
def mock_client(mock_movers_response: dict) -> MagicMock:
    """Create a mock remote client."""
    client = MagicMock()
    client.invoke = AsyncMock(return_value=mock_movers_response)
    return client


@pytest.fixture
def service(cache: ExpiringCache, mock_client: MagicMock) -> StockDataService:
    """Create a data service over the in-memory cache and mock client."""
    return StockDataService(cache, mock_client)
