"""
Cache-first market data service.

Every operation follows the same policy:

1. Return a fresh cached value if there is one; no network call is made.
2. Otherwise call the remote client, normalize the response, cache it and
   return it. Failing to cache does not fail the call.
3. If the remote call fails, fall back to the cached value even if it has
   expired. With nothing cached, the original error propagates unchanged.

Refresh variants drop the cached entry first and always go to the network.
"""

import logging
from dataclasses import dataclass
from typing import Any, Callable, Dict, List, Protocol, Union

from stockwatch.cache.expiring import ExpiringCache
from stockwatch.core.exceptions import CacheError
from stockwatch.core.models import (
    CacheStats,
    ChartPoint,
    ChartRange,
    CompanyOverview,
    Endpoint,
    MarketMovers,
    RequestDescriptor,
    SymbolMatch,
)
from stockwatch.core.transforms import (
    transform_company_overview,
    transform_daily_data,
    transform_intraday_data,
    transform_symbol_search,
    transform_top_gainers_losers,
)
from stockwatch.core.validation import parse_chart_range, validate_keywords, validate_symbol

logger = logging.getLogger(__name__)


class RemoteClient(Protocol):
    """Anything that can perform a market-data request."""

    async def invoke(self, request: RequestDescriptor) -> Any:
        """Perform the request, raising on failure."""
        ...


@dataclass
class _Call:
    """Everything needed to serve one operation through the cache."""

    endpoint: Endpoint
    params: Dict[str, str]
    request: RequestDescriptor
    # Raw response -> JSON-serializable value that gets cached
    transform: Callable[[Any], Any]
    # Cached value -> model handed to the caller
    decode: Callable[[Any], Any]


def _points(data: Any) -> List[ChartPoint]:
    return [ChartPoint.from_dict(p) for p in data]


class StockDataService:
    """
    Market data access with caching and stale-on-error fallback.

    Usage:
        cache = ExpiringCache(SQLiteStore())
        async with AlphaVantageClient(api_key) as client:
            service = StockDataService(cache, client)

            # First call: cache miss, fetches from the API
            movers = await service.get_top_gainers_losers()

            # Second call within 5 minutes: cache hit
            movers = await service.get_top_gainers_losers()
    """

    INTRADAY_INTERVAL = "5min"

    def __init__(self, cache: ExpiringCache, client: RemoteClient) -> None:
        """
        Initialize the service.

        Args:
            cache: Expiring cache shared by all operations
            client: Remote client used on cache misses
        """
        self.cache = cache
        self.client = client

        # Per-endpoint request outcome counters
        self._hits: Dict[str, int] = {}
        self._misses: Dict[str, int] = {}
        self._stale: Dict[str, int] = {}

    # ------------------------------------------------------------------
    # Data operations
    # ------------------------------------------------------------------

    async def search_symbols(self, keywords: str) -> List[SymbolMatch]:
        """Search for symbols/companies matching ``keywords``."""
        return await self._run(self._symbol_search_call(keywords))

    async def get_company_overview(self, symbol: str) -> CompanyOverview:
        """Get company fundamentals for ``symbol``."""
        return await self._run(self._company_overview_call(symbol))

    async def get_top_gainers_losers(self) -> MarketMovers:
        """Get the day's top gainers and losers."""
        return await self._run(self._top_gainers_losers_call())

    async def get_intraday_data(self, symbol: str) -> List[ChartPoint]:
        """Get the 1D chart (5-minute closes) for ``symbol``."""
        return await self._run(self._intraday_call(symbol))

    async def get_daily_data(
        self,
        symbol: str,
        chart_range: Union[ChartRange, str] = ChartRange.ONE_MONTH,
    ) -> List[ChartPoint]:
        """Get a daily-close chart for ``symbol`` over ``chart_range``."""
        return await self._run(self._daily_call(symbol, chart_range))

    # ------------------------------------------------------------------
    # Forced refresh
    # ------------------------------------------------------------------

    async def refresh_symbol_search(self, keywords: str) -> List[SymbolMatch]:
        """Search again, bypassing the cache."""
        return await self._refresh(self._symbol_search_call(keywords))

    async def refresh_company_overview(self, symbol: str) -> CompanyOverview:
        """Fetch company fundamentals, bypassing the cache."""
        return await self._refresh(self._company_overview_call(symbol))

    async def refresh_top_gainers_losers(self) -> MarketMovers:
        """Fetch gainers/losers, bypassing and clearing the endpoint cache."""
        call = self._top_gainers_losers_call()
        try:
            self.cache.clear_endpoint(call.endpoint)
        except CacheError as e:
            logger.warning("Could not clear %s before refresh: %s", call.endpoint, e)
        return await self._run(call, use_cache=False)

    async def refresh_intraday_data(self, symbol: str) -> List[ChartPoint]:
        """Fetch the 1D chart, bypassing the cache."""
        return await self._refresh(self._intraday_call(symbol))

    async def refresh_daily_data(
        self,
        symbol: str,
        chart_range: Union[ChartRange, str] = ChartRange.ONE_MONTH,
    ) -> List[ChartPoint]:
        """Fetch a daily chart, bypassing the cache."""
        return await self._refresh(self._daily_call(symbol, chart_range))

    # ------------------------------------------------------------------
    # Cache maintenance
    # ------------------------------------------------------------------

    def get_cache_stats(self) -> CacheStats:
        """Get cache statistics."""
        return self.cache.stats()

    def clean_expired_cache(self) -> int:
        """Remove expired cache entries.

        Returns:
            Number of entries removed.
        """
        removed = self.cache.remove_expired()
        logger.info("Cleaned %d expired cache entries", removed)
        return removed

    def clear_all_cache(self) -> int:
        """Clear all cached API data."""
        return self.cache.clear_all()

    def clear_endpoint_cache(self, endpoint: Union[Endpoint, str]) -> int:
        """Clear cached data for one endpoint."""
        return self.cache.clear_endpoint(endpoint)

    def request_stats(self) -> Dict[str, Dict[str, int]]:
        """
        Get per-endpoint request outcomes since the service was created.

        Returns:
            Mapping of endpoint to hits (served from cache), misses (went
            to the network) and stale (served expired data after an error)
        """
        endpoints = set(self._hits) | set(self._misses) | set(self._stale)
        return {
            endpoint: {
                "hits": self._hits.get(endpoint, 0),
                "misses": self._misses.get(endpoint, 0),
                "stale": self._stale.get(endpoint, 0),
            }
            for endpoint in sorted(endpoints)
        }

    # ------------------------------------------------------------------
    # Operation definitions
    # ------------------------------------------------------------------

    def _symbol_search_call(self, keywords: str) -> _Call:
        keywords = validate_keywords(keywords)
        return _Call(
            endpoint=Endpoint.SYMBOL_SEARCH,
            params={"keywords": keywords},
            request=RequestDescriptor("SYMBOL_SEARCH", {"keywords": keywords}),
            transform=lambda raw: [m.to_dict() for m in transform_symbol_search(raw)],
            decode=lambda data: [SymbolMatch.from_dict(m) for m in data],
        )

    def _company_overview_call(self, symbol: str) -> _Call:
        symbol = validate_symbol(symbol)
        return _Call(
            endpoint=Endpoint.COMPANY_OVERVIEW,
            params={"symbol": symbol},
            request=RequestDescriptor("OVERVIEW", {"symbol": symbol}),
            transform=lambda raw: transform_company_overview(raw, symbol).to_dict(),
            decode=CompanyOverview.from_dict,
        )

    def _top_gainers_losers_call(self) -> _Call:
        return _Call(
            endpoint=Endpoint.TOP_GAINERS_LOSERS,
            params={},
            request=RequestDescriptor("TOP_GAINERS_LOSERS"),
            transform=lambda raw: transform_top_gainers_losers(raw).to_dict(),
            decode=MarketMovers.from_dict,
        )

    def _intraday_call(self, symbol: str) -> _Call:
        symbol = validate_symbol(symbol)
        params = {"symbol": symbol, "interval": self.INTRADAY_INTERVAL}
        return _Call(
            endpoint=Endpoint.INTRADAY_DATA,
            params=params,
            request=RequestDescriptor("TIME_SERIES_INTRADAY", dict(params)),
            transform=lambda raw: [p.to_dict() for p in transform_intraday_data(raw)],
            decode=_points,
        )

    def _daily_call(self, symbol: str, chart_range: Union[ChartRange, str]) -> _Call:
        symbol = validate_symbol(symbol)
        chart_range = parse_chart_range(chart_range)
        return _Call(
            endpoint=Endpoint.DAILY_DATA,
            params={"symbol": symbol, "range": chart_range.value},
            request=RequestDescriptor(
                "TIME_SERIES_DAILY",
                {"symbol": symbol, "outputsize": "full"},
            ),
            transform=lambda raw: [
                p.to_dict() for p in transform_daily_data(raw, chart_range)
            ],
            decode=_points,
        )

    # ------------------------------------------------------------------
    # Policy
    # ------------------------------------------------------------------

    async def _refresh(self, call: _Call) -> Any:
        try:
            self.cache.remove(call.endpoint, call.params)
        except CacheError as e:
            logger.warning("Could not drop cached %s before refresh: %s", call.endpoint, e)
        return await self._run(call, use_cache=False)

    async def _run(self, call: _Call, use_cache: bool = True) -> Any:
        endpoint = call.endpoint.value

        if use_cache:
            # Keep an expired record around as the fallback for step 3
            cached = self._decode_cached(
                call, self.cache.get(call.endpoint, call.params, remove_stale=False)
            )
            if cached is not None:
                self._record(self._hits, endpoint)
                return cached

        self._record(self._misses, endpoint)
        logger.info("Fetching %s from API: %s", endpoint, call.params)

        try:
            raw = await self.client.invoke(call.request)
        except Exception as e:
            stale = self._decode_cached(
                call, self.cache.get_stale_value(call.endpoint, call.params)
            )
            if stale is None:
                logger.error("Error fetching %s: %s", endpoint, e)
                raise
            self._record(self._stale, endpoint)
            logger.warning("Returning stale cache data for %s: %s", endpoint, e)
            return stale

        data = call.transform(raw)

        try:
            self.cache.set(call.endpoint, call.params, data)
        except CacheError as e:
            logger.warning("Could not cache %s response: %s", endpoint, e)

        return call.decode(data)

    @staticmethod
    def _decode_cached(call: _Call, data: Any) -> Any:
        """Turn a cached value into models; a wrong-shaped value is a miss."""
        if data is None:
            return None
        try:
            return call.decode(data)
        except (AttributeError, KeyError, TypeError, ValueError) as e:
            logger.warning("Ignoring undecodable cached %s data: %s", call.endpoint.value, e)
            return None

    @staticmethod
    def _record(counter: Dict[str, int], endpoint: str) -> None:
        counter[endpoint] = counter.get(endpoint, 0) + 1
