"""
Normalization of raw market-data responses.

Every function here is pure apart from the presentational colour pick and
tolerates absent or malformed fields: a missing section yields an empty
result, a missing value yields ``None`` (or ``0.0`` for prices).
"""

import logging
import random
from datetime import datetime
from typing import Any

from stockwatch.core.models import (
    ChartPoint,
    ChartRange,
    CompanyOverview,
    MarketMovers,
    StockRecord,
    SymbolMatch,
)

logger = logging.getLogger(__name__)

INTRADAY_SERIES_KEY = "Time Series (5min)"
DAILY_SERIES_KEY = "Time Series (Daily)"
CLOSE_FIELD = "4. close"

# 6.5 trading hours at 5-minute granularity
INTRADAY_POINTS = 78

DEFAULT_RANGE_DAYS = 22

GAINER_ID_START = 1
LOSER_ID_START = 100

STOCK_COLORS = (
    "#007AFF", "#34c759", "#ff3b30", "#ff9500",
    "#5856d6", "#af52de", "#ff2d92", "#64d2ff",
    "#5ac8fa", "#30b0c7", "#32d74b", "#ffcc02",
)


def random_color() -> str:
    """Pick a colour tag for a stock icon."""
    return random.choice(STOCK_COLORS)


def _text(value: Any) -> str | None:
    if value is None:
        return None
    return str(value)


def _close_price(values: Any) -> float:
    if not isinstance(values, dict):
        return 0.0
    try:
        return float(values.get(CLOSE_FIELD))
    except (TypeError, ValueError):
        return 0.0


def _series(raw: Any, key: str) -> dict[str, Any] | None:
    if not isinstance(raw, dict):
        return None
    series = raw.get(key)
    return series if isinstance(series, dict) else None


def transform_stock(raw: Any, stock_id: int, color: str | None = None) -> StockRecord:
    """Map one raw gainer/loser entry to a StockRecord."""
    if not isinstance(raw, dict):
        raw = {}
    return StockRecord(
        id=stock_id,
        ticker=_text(raw.get("ticker")),
        price=_text(raw.get("price")),
        change_amount=_text(raw.get("change_amount")),
        change_percentage=_text(raw.get("change_percentage")),
        volume=_text(raw.get("volume")),
        color=color or random_color(),
    )


def transform_top_gainers_losers(raw: Any) -> MarketMovers:
    """Normalize a TOP_GAINERS_LOSERS response.

    Gainers are numbered from 1 and losers from 100, both in input order.
    """
    if not isinstance(raw, dict):
        raw = {}

    gainers = raw.get("top_gainers")
    losers = raw.get("top_losers")
    if not isinstance(gainers, list):
        gainers = []
    if not isinstance(losers, list):
        losers = []

    return MarketMovers(
        top_gainers=[
            transform_stock(stock, index + GAINER_ID_START)
            for index, stock in enumerate(gainers)
        ],
        top_losers=[
            transform_stock(stock, index + LOSER_ID_START)
            for index, stock in enumerate(losers)
        ],
    )


def transform_intraday_data(raw: Any) -> list[ChartPoint]:
    """Convert a 5-minute intraday series into chart points.

    Returns the most recent 78 points in ascending time order, labelled with
    the time of day.
    """
    series = _series(raw, INTRADAY_SERIES_KEY)
    if series is None:
        logger.warning("No intraday time series data found")
        return []

    # "YYYY-MM-DD HH:MM:SS" keys sort chronologically as strings
    entries = sorted(series.items())[-INTRADAY_POINTS:]

    points = []
    for timestamp, values in entries:
        _, _, time_of_day = timestamp.partition(" ")
        points.append(
            ChartPoint(
                x=time_of_day or timestamp,
                y=_close_price(values),
                timestamp=timestamp,
            )
        )
    return points


def range_days(chart_range: "ChartRange | str") -> int:
    """Return the number of trailing trading days for a range."""
    try:
        return ChartRange(str(chart_range)).days
    except ValueError:
        return DEFAULT_RANGE_DAYS


def format_date_for_chart(date_string: str, chart_range: "ChartRange | str") -> str:
    """Format a ``YYYY-MM-DD`` date as an axis label.

    Short ranges show month/day; 3M and 1Y show month/two-digit year.
    """
    try:
        date = datetime.strptime(date_string, "%Y-%m-%d")
    except (TypeError, ValueError):
        return str(date_string)

    try:
        is_long = ChartRange(str(chart_range)).is_long
    except ValueError:
        is_long = False

    if is_long:
        return f"{date.month}/{date.strftime('%y')}"
    return f"{date.month}/{date.day}"


def transform_daily_data(raw: Any, chart_range: "ChartRange | str") -> list[ChartPoint]:
    """Convert a daily series into chart points for ``chart_range``."""
    series = _series(raw, DAILY_SERIES_KEY)
    if series is None:
        logger.warning("No daily time series data found")
        return []

    entries = sorted(series.items())[-range_days(chart_range):]

    return [
        ChartPoint(
            x=format_date_for_chart(date, chart_range),
            y=_close_price(values),
            timestamp=date,
        )
        for date, values in entries
    ]


def transform_symbol_search(raw: Any) -> list[SymbolMatch]:
    """Normalize a SYMBOL_SEARCH response."""
    if not isinstance(raw, dict):
        return []

    matches = raw.get("bestMatches")
    if not isinstance(matches, list):
        return []

    results = []
    for match in matches:
        if not isinstance(match, dict) or not match.get("1. symbol"):
            continue

        try:
            score = float(match.get("9. matchScore"))
        except (TypeError, ValueError):
            score = None

        results.append(
            SymbolMatch(
                symbol=str(match["1. symbol"]),
                name=_text(match.get("2. name")),
                type=_text(match.get("3. type")),
                region=_text(match.get("4. region")),
                currency=_text(match.get("8. currency")),
                match_score=score,
            )
        )
    return results


def transform_company_overview(raw: Any, symbol: str) -> CompanyOverview:
    """Normalize an OVERVIEW response; unknown symbols give an empty overview."""
    if not isinstance(raw, dict):
        raw = {}

    return CompanyOverview(
        symbol=_text(raw.get("Symbol")) or symbol,
        name=_text(raw.get("Name")),
        exchange=_text(raw.get("Exchange")),
        description=_text(raw.get("Description")),
        industry=_text(raw.get("Industry")),
        sector=_text(raw.get("Sector")),
        market_capitalization=_text(raw.get("MarketCapitalization")),
        pe_ratio=_text(raw.get("PERatio")),
        beta=_text(raw.get("Beta")),
        dividend_yield=_text(raw.get("DividendYield")),
        profit_margin=_text(raw.get("ProfitMargin")),
        eps=_text(raw.get("EPS")),
        week_52_high=_text(raw.get("52WeekHigh")),
        week_52_low=_text(raw.get("52WeekLow")),
    )
