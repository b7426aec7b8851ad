"""
High-level programmatic API for stockwatch.

This module wires the SQLite-backed cache, the Alpha Vantage client and the
data service together. For more control, use the underlying classes
directly.

Example:
    import asyncio
    from stockwatch import open_service

    async def main():
        async with open_service() as service:
            movers = await service.get_top_gainers_losers()
            for stock in movers.top_gainers[:5]:
                print(stock.ticker, stock.change_percentage)

    asyncio.run(main())
"""

import asyncio
from contextlib import asynccontextmanager
from typing import AsyncIterator, Optional

from stockwatch.cache.expiring import ExpiringCache
from stockwatch.cache.store import SQLiteStore
from stockwatch.collectors.alphavantage import AlphaVantageClient
from stockwatch.config import Settings, load_settings
from stockwatch.core.models import ChartPoint, ChartRange, CompanyOverview, MarketMovers
from stockwatch.services.data_service import StockDataService


def build_cache(settings: Settings) -> ExpiringCache:
    """Create the persistent cache described by ``settings``."""
    return ExpiringCache(SQLiteStore(settings.cache_path), settings.cache)


@asynccontextmanager
async def open_service(settings: Optional[Settings] = None) -> AsyncIterator[StockDataService]:
    """Yield a ready StockDataService and close its HTTP session on exit.

    Args:
        settings: Settings to use. Loaded from file/environment if omitted.
    """
    if settings is None:
        settings = load_settings()

    cache = build_cache(settings)
    async with AlphaVantageClient(
        api_key=settings.api_key,
        timeout=settings.timeout,
        base_url=settings.base_url,
    ) as client:
        yield StockDataService(cache, client)


async def top_movers(settings: Optional[Settings] = None) -> MarketMovers:
    """Get today's top gainers and losers.

    Example:
        >>> import asyncio
        >>> from stockwatch import top_movers
        >>> movers = asyncio.run(top_movers())
        >>> print(movers.top_gainers[0].ticker)
    """
    async with open_service(settings) as service:
        return await service.get_top_gainers_losers()


async def company_overview(symbol: str, settings: Optional[Settings] = None) -> CompanyOverview:
    """Get company fundamentals for ``symbol``."""
    async with open_service(settings) as service:
        return await service.get_company_overview(symbol)


async def daily_chart(
    symbol: str,
    chart_range: "ChartRange | str" = ChartRange.ONE_MONTH,
    settings: Optional[Settings] = None,
) -> list[ChartPoint]:
    """Get daily closes for ``symbol`` over ``chart_range``."""
    async with open_service(settings) as service:
        return await service.get_daily_data(symbol, chart_range)


def top_movers_sync(settings: Optional[Settings] = None) -> MarketMovers:
    """Synchronous wrapper for top_movers().

    For use in non-async contexts. Runs a new event loop.
    """
    return asyncio.run(top_movers(settings))
