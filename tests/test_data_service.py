"""
Tests for the cache-first data service.
"""

from unittest.mock import AsyncMock

import pytest

from stockwatch.core.exceptions import CacheError, NetworkError, RateLimitError, ValidationError
from stockwatch.core.models import (
    ChartPoint,
    ChartRange,
    CompanyOverview,
    Endpoint,
    MarketMovers,
    RequestDescriptor,
)


@pytest.mark.asyncio
class TestCacheFirst:
    """Tests for the hit/miss path."""

    async def test_miss_then_hit(self, service, mock_client):
        """Test the second identical call is served from the cache."""
        first = await service.get_top_gainers_losers()
        second = await service.get_top_gainers_losers()

        mock_client.invoke.assert_awaited_once_with(RequestDescriptor("TOP_GAINERS_LOSERS"))
        assert isinstance(first, MarketMovers)
        assert first == second
        assert [s.id for s in second.top_gainers] == [1, 2]
        assert [s.id for s in second.top_losers] == [100]

    async def test_colors_stable_across_hits(self, service):
        """Test cached records keep the colour assigned on the first fetch."""
        first = await service.get_top_gainers_losers()
        second = await service.get_top_gainers_losers()
        assert [s.color for s in first.top_gainers] == [s.color for s in second.top_gainers]

    async def test_expired_entry_refetched(self, service, mock_client, clock):
        """Test an expired entry leads to a new remote call."""
        await service.get_top_gainers_losers()
        clock.advance(301)
        await service.get_top_gainers_losers()
        assert mock_client.invoke.await_count == 2

    async def test_cache_write_failure_still_returns(self, service, store, mock_client):
        """Test fresh data is returned even when caching it fails."""
        store.fail_set = True

        result = await service.get_top_gainers_losers()

        assert result.top_gainers[0].ticker == "ABCD"
        await service.get_top_gainers_losers()
        assert mock_client.invoke.await_count == 2

    async def test_request_stats(self, service):
        """Test per-endpoint outcome counters."""
        await service.get_top_gainers_losers()
        await service.get_top_gainers_losers()

        assert service.request_stats() == {
            "TOP_GAINERS_LOSERS": {"hits": 1, "misses": 1, "stale": 0}
        }


@pytest.mark.asyncio
class TestStaleFallback:
    """Tests for the failure path."""

    async def test_expired_data_served_on_error(self, service, mock_client, clock):
        """Test an expired entry is returned when the API fails."""
        first = await service.get_top_gainers_losers()
        clock.advance(301)
        mock_client.invoke.side_effect = NetworkError("https://www.alphavantage.co/query")

        result = await service.get_top_gainers_losers()

        assert result == first
        assert service.request_stats()["TOP_GAINERS_LOSERS"]["stale"] == 1

    async def test_error_propagates_without_stale_data(self, service, mock_client):
        """Test the original exception reaches the caller unchanged."""
        error = RateLimitError("Alpha Vantage", details="Thank you for using Alpha Vantage!")
        mock_client.invoke.side_effect = error

        with pytest.raises(RateLimitError) as exc_info:
            await service.get_top_gainers_losers()

        assert exc_info.value is error

    async def test_non_library_errors_also_fall_back(self, service, mock_client, clock):
        """Test any remote exception triggers the fallback."""
        await service.get_top_gainers_losers()
        clock.advance(301)
        mock_client.invoke.side_effect = RuntimeError("socket closed")

        result = await service.get_top_gainers_losers()
        assert result.top_losers[0].ticker == "DOWN"

    async def test_fallback_is_per_key(self, service, mock_client, mock_overview_response, clock):
        """Test one symbol's cached data is never served for another."""
        mock_client.invoke.return_value = mock_overview_response
        await service.get_company_overview("IBM")
        clock.advance(3601)
        mock_client.invoke.side_effect = NetworkError("url")

        with pytest.raises(NetworkError):
            await service.get_company_overview("AAPL")
        assert (await service.get_company_overview("IBM")).name.startswith("International")


@pytest.mark.asyncio
class TestRefresh:
    """Tests for forced refresh."""

    async def test_refresh_bypasses_fresh_entry(self, service, mock_client):
        """Test refresh always goes to the network."""
        await service.get_top_gainers_losers()
        await service.refresh_top_gainers_losers()
        assert mock_client.invoke.await_count == 2

        await service.get_top_gainers_losers()
        assert mock_client.invoke.await_count == 2

    async def test_refresh_symbol(self, service, mock_client, mock_overview_response):
        """Test refreshing one symbol."""
        mock_client.invoke.return_value = mock_overview_response
        await service.get_company_overview("ibm")
        result = await service.refresh_company_overview("IBM")

        assert mock_client.invoke.await_count == 2
        assert isinstance(result, CompanyOverview)

    async def test_refresh_when_invalidation_fails(self, service, store, mock_client):
        """Test refresh still fetches if the cached entry cannot be dropped."""
        await service.get_top_gainers_losers()
        store.fail_remove = True

        await service.refresh_top_gainers_losers()
        await service.refresh_intraday_data("IBM")
        assert mock_client.invoke.await_count == 3

    async def test_refresh_has_no_stale_fallback(self, service, mock_client):
        """Test refresh drops the entry, so a failure propagates."""
        await service.get_top_gainers_losers()
        mock_client.invoke.side_effect = NetworkError("url")

        with pytest.raises(NetworkError):
            await service.refresh_top_gainers_losers()


@pytest.mark.asyncio
class TestOperations:
    """Tests for the individual operations."""

    async def test_search_symbols(self, service, mock_client, mock_search_response):
        """Test symbol search request and result."""
        mock_client.invoke.return_value = mock_search_response

        matches = await service.search_symbols(" tesco ")

        mock_client.invoke.assert_awaited_once_with(
            RequestDescriptor("SYMBOL_SEARCH", {"keywords": "tesco"})
        )
        assert [m.symbol for m in matches] == ["TSCO", "TSCO.LON"]
        assert service.cache.get(Endpoint.SYMBOL_SEARCH, {"keywords": "tesco"}) is not None

    async def test_company_overview(self, service, mock_client, mock_overview_response):
        """Test overview request uses the OVERVIEW function."""
        mock_client.invoke.return_value = mock_overview_response

        overview = await service.get_company_overview("ibm")

        mock_client.invoke.assert_awaited_once_with(
            RequestDescriptor("OVERVIEW", {"symbol": "IBM"})
        )
        assert overview.sector == "TECHNOLOGY"

    async def test_intraday(self, service, mock_client, mock_intraday_response):
        """Test intraday request parameters and points."""
        mock_client.invoke.return_value = mock_intraday_response

        points = await service.get_intraday_data("IBM")

        mock_client.invoke.assert_awaited_once_with(
            RequestDescriptor("TIME_SERIES_INTRADAY", {"symbol": "IBM", "interval": "5min"})
        )
        assert len(points) == 78
        assert all(isinstance(p, ChartPoint) for p in points)

    async def test_daily_ranges_cached_separately(self, service, mock_client, mock_daily_response):
        """Test each range has its own entry but shares the request."""
        mock_client.invoke.return_value = mock_daily_response

        week = await service.get_daily_data("IBM", "1W")
        year = await service.get_daily_data("IBM", ChartRange.ONE_YEAR)

        assert len(week) == 7
        assert len(year) == 252
        assert mock_client.invoke.await_count == 2
        for call in mock_client.invoke.await_args_list:
            assert call.args[0] == RequestDescriptor(
                "TIME_SERIES_DAILY", {"symbol": "IBM", "outputsize": "full"}
            )

    async def test_daily_default_range(self, service, mock_client, mock_daily_response):
        """Test the default range is one month."""
        mock_client.invoke.return_value = mock_daily_response
        assert len(await service.get_daily_data("IBM")) == 22

    async def test_invalid_input_never_reaches_network(self, service, mock_client):
        """Test validation errors are raised before any fetch."""
        with pytest.raises(ValidationError):
            await service.search_symbols("")
        with pytest.raises(ValidationError):
            await service.get_company_overview("IBM; DROP")
        with pytest.raises(ValidationError):
            await service.get_daily_data("IBM", "5Y")
        with pytest.raises(ValidationError):
            await service.get_company_overview(123)

        mock_client.invoke.assert_not_awaited()


@pytest.mark.asyncio
class TestWrongShapedCache:
    """Tests for cached values that decode as JSON but not as models."""

    async def test_bad_hit_refetched(self, service, cache, mock_client, mock_daily_response):
        """Test a wrong-shaped fresh entry is a miss and gets replaced."""
        cache.set(Endpoint.DAILY_DATA, {"symbol": "IBM", "range": "1M"}, 5)
        mock_client.invoke.return_value = mock_daily_response

        points = await service.get_daily_data("IBM", "1M")

        assert len(points) == 22
        mock_client.invoke.assert_awaited_once()

        assert len(await service.get_daily_data("IBM", "1M")) == 22
        mock_client.invoke.assert_awaited_once()

    async def test_bad_stale_value_is_absent(self, service, cache, mock_client, clock):
        """Test a wrong-shaped expired entry does not mask the remote error."""
        cache.set(Endpoint.TOP_GAINERS_LOSERS, {}, ["not", "movers"])
        clock.advance(301)
        error = NetworkError("https://www.alphavantage.co/query")
        mock_client.invoke.side_effect = error

        with pytest.raises(NetworkError) as exc_info:
            await service.get_top_gainers_losers()

        assert exc_info.value is error

    async def test_bad_points_are_miss(self, service, cache, mock_client, mock_intraday_response):
        """Test a list of non-objects is not served as chart points."""
        cache.set(Endpoint.INTRADAY_DATA, {"symbol": "IBM", "interval": "5min"}, ["09:30"])
        mock_client.invoke.return_value = mock_intraday_response

        assert len(await service.get_intraday_data("IBM")) == 78
        assert service.request_stats()["TIME_SERIES_INTRADAY"]["hits"] == 0


class TestMaintenance:
    """Tests for cache maintenance through the service."""

    @pytest.mark.asyncio
    async def test_endpoint_isolation(self, service, mock_client, mock_overview_response):
        """Test clearing one endpoint keeps the others cached."""
        await service.get_top_gainers_losers()
        mock_client.invoke.return_value = mock_overview_response
        await service.get_company_overview("IBM")
        await service.get_company_overview("MSFT")

        assert service.clear_endpoint_cache(Endpoint.COMPANY_OVERVIEW) == 2
        assert service.get_cache_stats().endpoints == {"TOP_GAINERS_LOSERS": 1}
        assert service.cache.get(Endpoint.TOP_GAINERS_LOSERS, {}) is not None

    def test_clean_expired_cache(self, service, cache, clock):
        """Test the sweep through the service."""
        cache.set(Endpoint.TOP_GAINERS_LOSERS, {}, {"top_gainers": [], "top_losers": []})
        clock.advance(301)
        assert service.clean_expired_cache() == 1

    def test_clear_all_cache(self, service, cache):
        """Test clearing all data through the service."""
        cache.set("X", {}, 1)
        assert service.clear_all_cache() == 1
        assert service.get_cache_stats().total_entries == 0

    def test_maintenance_errors_propagate(self, service, store, cache):
        """Test store failures surface from maintenance operations."""
        cache.set("X", {}, 1)
        store.fail_remove = True
        with pytest.raises(CacheError):
            service.clear_all_cache()


@pytest.mark.asyncio
async def test_service_accepts_any_remote_client(cache, mock_movers_response):
    """Test the service only needs an object with an async invoke."""
    from stockwatch.services.data_service import StockDataService

    class StaticClient:
        invoke = AsyncMock(return_value=mock_movers_response)

    service = StockDataService(cache, StaticClient())
    movers = await service.get_top_gainers_losers()
    assert movers.top_gainers[0].ticker == "ABCD"
