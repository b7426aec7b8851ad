"""
Rich terminal output helpers for CLI.

Provides functions for printing movers, search results, company details,
charts and cache statistics using the Rich library.
"""

from rich import box
from rich.console import Console
from rich.panel import Panel
from rich.table import Table
from rich.text import Text

from stockwatch.core.models import (
    CacheStats,
    ChartPoint,
    CompanyOverview,
    MarketMovers,
    StockRecord,
    SymbolMatch,
)

# Console instance for all output
console = Console()

# Values the API uses for "no data"
_MISSING = {None, "", "None", "-"}


def get_change_style(change: str | None) -> str:
    """Get Rich style string for a price change such as "-1.25%"."""
    if change in _MISSING:
        return "dim"
    return "red" if str(change).lstrip().startswith("-") else "green"


def format_large_number(value: str | None) -> str:
    """Format a raw number as 1.2T / 3.4B / 5.6M."""
    if value in _MISSING:
        return "N/A"
    try:
        number = float(value)
    except (TypeError, ValueError):
        return str(value)

    for threshold, suffix in ((1e12, "T"), (1e9, "B"), (1e6, "M"), (1e3, "K")):
        if abs(number) >= threshold:
            return f"{number / threshold:.2f}{suffix}"
    return f"{number:,.0f}"


def format_ratio(value: str | None) -> str:
    if value in _MISSING:
        return "N/A"
    try:
        return f"{float(value):.2f}"
    except (TypeError, ValueError):
        return str(value)


def format_percentage(value: str | None) -> str:
    """Format a ratio such as "0.0421" as "4.21%"."""
    if value in _MISSING:
        return "N/A"
    try:
        return f"{float(value) * 100:.2f}%"
    except (TypeError, ValueError):
        return str(value)


def _movers_table(title: str, stocks: list[StockRecord], limit: int) -> Table:
    table = Table(
        title=title,
        box=box.ROUNDED,
        show_header=True,
        header_style="bold cyan",
    )

    table.add_column("Ticker", style="cyan", no_wrap=True)
    table.add_column("Price", justify="right")
    table.add_column("Change", justify="right")
    table.add_column("Change %", justify="right")
    table.add_column("Volume", justify="right", style="dim")

    for stock in stocks[:limit]:
        style = get_change_style(stock.change_amount)
        table.add_row(
            Text(stock.ticker or "?", style=stock.color or "cyan"),
            stock.price or "-",
            Text(stock.change_amount or "-", style=style),
            Text(stock.change_percentage or "-", style=style),
            format_large_number(stock.volume),
        )

    return table


def print_movers(movers: MarketMovers, limit: int = 10) -> None:
    """Print gainers and losers tables.

    Args:
        movers: Normalized gainers/losers.
        limit: Maximum rows per table.
    """
    console.print()
    console.print(_movers_table("Top Gainers", movers.top_gainers, limit))
    console.print()
    console.print(_movers_table("Top Losers", movers.top_losers, limit))


def print_matches(keywords: str, matches: list[SymbolMatch]) -> None:
    """Print symbol search results."""
    if not matches:
        print_info(f"No symbols match '{keywords}'.")
        return

    table = Table(
        title=f"Matches for '{keywords}'",
        box=box.ROUNDED,
        show_header=True,
        header_style="bold cyan",
    )

    table.add_column("Symbol", style="cyan", no_wrap=True)
    table.add_column("Name")
    table.add_column("Type", style="dim")
    table.add_column("Region", style="dim")
    table.add_column("Currency", style="dim")
    table.add_column("Score", justify="right")

    for match in matches:
        table.add_row(
            match.symbol,
            match.name or "-",
            match.type or "-",
            match.region or "-",
            match.currency or "-",
            f"{match.match_score:.2f}" if match.match_score is not None else "-",
        )

    console.print()
    console.print(table)


def print_overview(overview: CompanyOverview) -> None:
    """Print company details."""
    if overview.is_empty:
        print_info(f"No company data available for {overview.symbol}.")
        return

    title = f"[bold]{overview.symbol}[/]"
    if overview.name:
        title += f" {overview.name}"

    console.print()
    console.print(Panel(title, subtitle=overview.exchange or ""))

    console.print(f"\n[bold cyan]About {overview.symbol}[/]")
    console.print(f"  {overview.description or 'No description available for this company.'}")
    if overview.industry:
        console.print(f"  [dim]Industry:[/] {overview.industry}")
    if overview.sector:
        console.print(f"  [dim]Sector:[/] {overview.sector}")

    console.print("\n[bold cyan]Key Statistics[/]")
    console.print(f"  Market Cap: {format_large_number(overview.market_capitalization)}")
    console.print(f"  P/E Ratio: {format_ratio(overview.pe_ratio)}")
    console.print(f"  Beta: {format_ratio(overview.beta)}")
    console.print(f"  Dividend Yield: {format_percentage(overview.dividend_yield)}")
    console.print(f"  Profit Margin: {format_percentage(overview.profit_margin)}")
    console.print(f"  EPS: {format_ratio(overview.eps)}")
    if overview.week_52_low not in _MISSING and overview.week_52_high not in _MISSING:
        console.print(f"  52 Week Range: {overview.week_52_low} - {overview.week_52_high}")
    console.print()


def print_chart(symbol: str, chart_range: str, points: list[ChartPoint]) -> None:
    """Print a chart series as a table with a change summary."""
    if not points:
        print_info(f"No chart data available for {symbol}.")
        return

    table = Table(
        title=f"{symbol} ({chart_range})",
        box=box.SIMPLE,
        show_header=True,
        header_style="bold cyan",
    )
    table.add_column("Time", style="dim")
    table.add_column("Close", justify="right")

    for point in points:
        table.add_row(point.x, f"{point.y:.2f}")

    first, last = points[0].y, points[-1].y
    change = last - first
    change_pct = (change / first * 100) if first else 0.0
    style = "green" if change >= 0 else "red"

    console.print()
    console.print(table)
    console.print(
        f"[bold]{chart_range} change:[/] [{style}]{change:+.2f} ({change_pct:+.2f}%)[/]"
    )


def print_cache_stats(stats: CacheStats, ttls: dict[str, float], default_ttl: float) -> None:
    """Print cache usage by endpoint."""
    console.print("\n[bold cyan]Cache Statistics[/]")
    console.print(f"  Entries: {stats.total_entries} / {stats.max_size} ({stats.usage_percent}%)")

    if stats.endpoints:
        console.print("\n  Entries by endpoint:")
        for endpoint, count in sorted(stats.endpoints.items()):
            minutes = ttls.get(endpoint, default_ttl) / 60
            console.print(f"    {endpoint}: {count} [dim]({minutes:g} min TTL)[/]")

    console.print("\n  To refresh all data, use: stockwatch cache --clear")


def print_error(message: str) -> None:
    """Print an error message."""
    console.print(f"[bold red]Error:[/] {message}")


def print_success(message: str) -> None:
    """Print a success message."""
    console.print(f"[bold green]Success:[/] {message}")


def print_warning(message: str) -> None:
    """Print a warning message."""
    console.print(f"[bold yellow]Warning:[/] {message}")


def print_info(message: str) -> None:
    """Print an info message."""
    console.print(f"[cyan]Info:[/] {message}")
