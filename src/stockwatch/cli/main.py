"""
Main CLI entry point for stockwatch.

Provides commands for market movers, symbol search, company details and
charts, plus managing the local cache.
"""

import asyncio
import logging
import sys
from pathlib import Path
from typing import Any, Awaitable, Callable, Optional

import click

from stockwatch import __version__
from stockwatch.api import build_cache, open_service
from stockwatch.cli.output import (
    print_cache_stats,
    print_chart,
    print_error,
    print_info,
    print_matches,
    print_movers,
    print_overview,
    print_success,
    print_warning,
)
from stockwatch.collectors.alphavantage import AlphaVantageClient
from stockwatch.config import Settings, load_settings
from stockwatch.core.models import ChartRange, Endpoint
from stockwatch.logging_setup import setup_logging
from stockwatch.services.data_service import StockDataService
from stockwatch.services.lifecycle import AppLifecycle

INTRADAY_RANGE = "1D"


def run_service(settings: Settings, action: Callable[[StockDataService], Awaitable[Any]]) -> Any:
    """Open the service and run ``action``.

    Expired entries are left in place so a failed API call can still fall
    back to them; ``stockwatch cache --cleanup`` removes them.
    """

    async def _run() -> Any:
        async with open_service(settings) as service:
            AppLifecycle(service).log_cache_stats()
            return await action(service)

    return asyncio.run(_run())


@click.group()
@click.version_option(version=__version__, prog_name="stockwatch")
@click.option(
    "--api-key",
    envvar="ALPHAVANTAGE_API_KEY",
    help="Alpha Vantage API key (defaults to the demo key).",
)
@click.option(
    "--config",
    "config_path",
    type=click.Path(exists=True, dir_okay=False, path_type=Path),
    help="Config file (default: ~/.stockwatch/config.toml).",
)
@click.option("--verbose", "-v", is_flag=True, help="Show debug logging.")
@click.option(
    "--log-file",
    type=click.Path(dir_okay=False, path_type=Path),
    help="Also write logs to this file.",
)
@click.pass_context
def cli(
    ctx: click.Context,
    api_key: Optional[str],
    config_path: Optional[Path],
    verbose: bool,
    log_file: Optional[Path],
) -> None:
    """stockwatch - Market data with a local cache.

    Responses are cached per endpoint and served from the cache until they
    expire. If the API is unreachable or throttled, the last cached data is
    shown instead.
    """
    setup_logging(logging.DEBUG if verbose else logging.WARNING, log_file)

    try:
        settings = load_settings(config_path)
    except Exception as e:
        print_error(str(e))
        sys.exit(1)

    if api_key:
        settings.api_key = api_key

    ctx.ensure_object(dict)
    ctx.obj["settings"] = settings


def _warn_demo_key(settings: Settings) -> None:
    if settings.api_key == AlphaVantageClient.DEMO_KEY:
        print_warning("Using the demo API key; symbol lookups are served for IBM only.")


@cli.command()
@click.option("--refresh", is_flag=True, help="Bypass the cache.")
@click.option("--limit", "-n", type=click.IntRange(min=1), default=10, help="Rows per table.")
@click.pass_context
def movers(ctx: click.Context, refresh: bool, limit: int) -> None:
    """Show today's top gainers and losers.

    \b
    Examples:
        stockwatch movers            # Cached for 5 minutes
        stockwatch movers --refresh  # Force a fresh API call
    """
    settings = ctx.obj["settings"]

    async def action(service: StockDataService):
        if refresh:
            return await service.refresh_top_gainers_losers()
        return await service.get_top_gainers_losers()

    try:
        result = run_service(settings, action)
    except Exception as e:
        print_error(f"Could not load movers: {e}")
        sys.exit(1)

    print_movers(result, limit)


@cli.command()
@click.argument("keywords")
@click.option("--refresh", is_flag=True, help="Bypass the cache.")
@click.pass_context
def search(ctx: click.Context, keywords: str, refresh: bool) -> None:
    """Search for symbols and companies.

    \b
    Examples:
        stockwatch search microsoft
        stockwatch search "tesla motors"
    """
    settings = ctx.obj["settings"]

    async def action(service: StockDataService):
        if refresh:
            return await service.refresh_symbol_search(keywords)
        return await service.search_symbols(keywords)

    try:
        matches = run_service(settings, action)
    except Exception as e:
        print_error(f"Search failed: {e}")
        sys.exit(1)

    print_matches(keywords, matches)


@cli.command()
@click.argument("symbol")
@click.option("--refresh", is_flag=True, help="Bypass the cache.")
@click.pass_context
def overview(ctx: click.Context, symbol: str, refresh: bool) -> None:
    """Show company details for SYMBOL."""
    settings = ctx.obj["settings"]
    _warn_demo_key(settings)

    async def action(service: StockDataService):
        if refresh:
            return await service.refresh_company_overview(symbol)
        return await service.get_company_overview(symbol)

    try:
        result = run_service(settings, action)
    except Exception as e:
        print_error(f"Could not load {symbol}: {e}")
        sys.exit(1)

    print_overview(result)


@cli.command()
@click.argument("symbol")
@click.option(
    "--range", "-r", "chart_range",
    type=click.Choice([INTRADAY_RANGE] + [r.value for r in ChartRange], case_sensitive=False),
    default=ChartRange.ONE_MONTH.value,
    help="Chart range (1D uses 5-minute intraday data).",
)
@click.option("--refresh", is_flag=True, help="Bypass the cache.")
@click.pass_context
def chart(ctx: click.Context, symbol: str, chart_range: str, refresh: bool) -> None:
    """Show closing prices for SYMBOL.

    \b
    Examples:
        stockwatch chart AAPL          # Last month, daily closes
        stockwatch chart AAPL -r 1D    # Today, 5-minute closes
        stockwatch chart AAPL -r 1Y
    """
    settings = ctx.obj["settings"]
    _warn_demo_key(settings)
    chart_range = chart_range.upper()

    async def action(service: StockDataService):
        if chart_range == INTRADAY_RANGE:
            if refresh:
                return await service.refresh_intraday_data(symbol)
            return await service.get_intraday_data(symbol)
        if refresh:
            return await service.refresh_daily_data(symbol, chart_range)
        return await service.get_daily_data(symbol, chart_range)

    try:
        points = run_service(settings, action)
    except Exception as e:
        print_error(f"Could not load chart for {symbol}: {e}")
        sys.exit(1)

    print_chart(symbol.upper(), chart_range, points)


@cli.command()
@click.option("--stats", is_flag=True, help="Show cache statistics.")
@click.option("--cleanup", is_flag=True, help="Remove expired entries.")
@click.option("--clear", is_flag=True, help="Clear all cached data.")
@click.option(
    "--clear-endpoint",
    type=click.Choice([e.value for e in Endpoint]),
    help="Clear cached data for one endpoint.",
)
@click.pass_context
def cache(
    ctx: click.Context,
    stats: bool,
    cleanup: bool,
    clear: bool,
    clear_endpoint: Optional[str],
) -> None:
    """Manage the local cache.

    stockwatch caches API responses to stay within the API's rate limits.
    Use this command to view or manage the cache.

    \b
    Cache TTLs:
      - Top gainers/losers: 5 minutes
      - Company overview: 1 hour
      - Symbol search: 30 minutes
      - Chart data: 15 minutes

    \b
    Examples:
        stockwatch cache --stats
        stockwatch cache --cleanup
        stockwatch cache --clear-endpoint COMPANY_OVERVIEW
    """
    settings: Settings = ctx.obj["settings"]

    try:
        cache_layer = build_cache(settings)

        if clear:
            count = cache_layer.clear_all()
            print_success(f"Cache cleared. Removed {count} entries.")
        elif cleanup:
            count = cache_layer.remove_expired()
            print_success(f"Cleanup complete. Removed {count} expired entries.")
        elif clear_endpoint:
            count = cache_layer.clear_endpoint(clear_endpoint)
            print_success(f"Removed {count} entries for {clear_endpoint}.")
        elif stats:
            print_info(f"Database: {settings.cache_path}")
            print_cache_stats(
                cache_layer.stats(),
                settings.cache.ttls,
                settings.cache.default_ttl,
            )
        else:
            # Show help if no option specified
            click.echo(ctx.get_help())

    except Exception as e:
        print_error(f"Cache operation failed: {e}")
        sys.exit(1)


if __name__ == "__main__":
    cli()
