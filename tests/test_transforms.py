"""
Tests for response normalization.
"""

from stockwatch.core.models import ChartRange
from stockwatch.core.transforms import (
    INTRADAY_POINTS,
    STOCK_COLORS,
    format_date_for_chart,
    range_days,
    transform_company_overview,
    transform_daily_data,
    transform_intraday_data,
    transform_stock,
    transform_symbol_search,
    transform_top_gainers_losers,
)


class TestTopGainersLosers:
    """Tests for transform_top_gainers_losers."""

    def test_ids_and_order(self, mock_movers_response):
        """Test gainers are numbered from 1 and losers from 100 in input order."""
        movers = transform_top_gainers_losers(mock_movers_response)

        assert [s.id for s in movers.top_gainers] == [1, 2]
        assert [s.ticker for s in movers.top_gainers] == ["ABCD", "WXYZ"]
        assert [s.id for s in movers.top_losers] == [100]
        assert movers.top_losers[0].change_amount == "-0.55"

    def test_colors_from_palette(self, mock_movers_response):
        """Test every record gets a palette colour."""
        movers = transform_top_gainers_losers(mock_movers_response)
        for stock in movers.top_gainers + movers.top_losers:
            assert stock.color in STOCK_COLORS

    def test_missing_sections(self):
        """Test absent or malformed sections become empty lists."""
        movers = transform_top_gainers_losers({"top_gainers": "oops"})
        assert movers.top_gainers == []
        assert movers.top_losers == []

        assert transform_top_gainers_losers(None).top_gainers == []

    def test_explicit_color(self):
        """Test a supplied colour is kept."""
        stock = transform_stock({"ticker": "X", "price": 1.5}, 7, color="#000000")
        assert stock.color == "#000000"
        assert stock.price == "1.5"
        assert stock.volume is None


class TestIntradayData:
    """Tests for transform_intraday_data."""

    def test_keeps_most_recent_points_ascending(self, mock_intraday_response):
        """Test the last 78 bars are returned oldest first."""
        points = transform_intraday_data(mock_intraday_response)

        assert len(points) == INTRADAY_POINTS
        timestamps = [p.timestamp for p in points]
        assert timestamps == sorted(timestamps)
        # 100 bars, so the first 22 are dropped
        assert points[0].y == 122.0
        assert points[-1].y == 199.0

    def test_labels_are_time_of_day(self, mock_intraday_response):
        """Test x labels drop the date."""
        points = transform_intraday_data(mock_intraday_response)
        assert points[-1].timestamp == "2024-01-05 12:15:00"
        assert points[-1].x == "12:15:00"

    def test_missing_close_is_zero(self):
        """Test a bar without a close price."""
        raw = {"Time Series (5min)": {"2024-01-05 09:30:00": {"1. open": "1"}}}
        points = transform_intraday_data(raw)
        assert points[0].y == 0.0

    def test_missing_series(self):
        """Test a response without the series."""
        assert transform_intraday_data({"Meta Data": {}}) == []
        assert transform_intraday_data("nope") == []


class TestDailyData:
    """Tests for transform_daily_data."""

    def test_window_per_range(self, mock_daily_response):
        """Test the trailing window length for each range."""
        for chart_range in ChartRange:
            points = transform_daily_data(mock_daily_response, chart_range)
            assert len(points) == chart_range.days

    def test_ascending_and_most_recent(self, mock_daily_response):
        """Test points end at the latest date."""
        points = transform_daily_data(mock_daily_response, ChartRange.ONE_WEEK)
        dates = [p.timestamp for p in points]
        assert dates == sorted(dates)
        assert points[-1].y == 349.0

    def test_short_range_labels(self, mock_daily_response):
        """Test 1W/1M labels are month/day."""
        points = transform_daily_data(mock_daily_response, "1M")
        last = points[-1]
        month, day = last.timestamp.split("-")[1:]
        assert last.x == f"{int(month)}/{int(day)}"

    def test_long_range_labels(self, mock_daily_response):
        """Test 3M/1Y labels are month/two-digit year."""
        points = transform_daily_data(mock_daily_response, ChartRange.ONE_YEAR)
        year, month, _ = points[-1].timestamp.split("-")
        assert points[-1].x == f"{int(month)}/{year[2:]}"

    def test_unknown_range_uses_default(self, mock_daily_response):
        """Test an unrecognized range falls back to a month of points."""
        assert len(transform_daily_data(mock_daily_response, "5Y")) == 22
        assert range_days("5Y") == 22

    def test_missing_series(self):
        """Test a response without the series."""
        assert transform_daily_data({}, ChartRange.ONE_MONTH) == []


class TestFormatDateForChart:
    """Tests for format_date_for_chart."""

    def test_formats(self):
        """Test label formats."""
        assert format_date_for_chart("2024-01-05", ChartRange.ONE_WEEK) == "1/5"
        assert format_date_for_chart("2024-11-25", "1M") == "11/25"
        assert format_date_for_chart("2024-01-05", ChartRange.THREE_MONTHS) == "1/24"
        assert format_date_for_chart("2009-12-31", "1Y") == "12/09"

    def test_unparseable_date(self):
        """Test invalid dates are returned as-is."""
        assert format_date_for_chart("not-a-date", "1M") == "not-a-date"


class TestSymbolSearch:
    """Tests for transform_symbol_search."""

    def test_matches(self, mock_search_response):
        """Test match fields are mapped."""
        matches = transform_symbol_search(mock_search_response)

        assert [m.symbol for m in matches] == ["TSCO", "TSCO.LON"]
        assert matches[1].name == "Tesco PLC"
        assert matches[1].currency == "GBX"
        assert matches[0].match_score == 0.8889

    def test_skips_entries_without_symbol(self):
        """Test malformed matches are dropped."""
        raw = {"bestMatches": [{"2. name": "Nameless"}, "junk", {"1. symbol": "OK"}]}
        matches = transform_symbol_search(raw)
        assert [m.symbol for m in matches] == ["OK"]
        assert matches[0].match_score is None

    def test_missing_matches(self):
        """Test responses without bestMatches."""
        assert transform_symbol_search({}) == []
        assert transform_symbol_search([]) == []


class TestCompanyOverview:
    """Tests for transform_company_overview."""

    def test_fields(self, mock_overview_response):
        """Test fundamentals are mapped."""
        overview = transform_company_overview(mock_overview_response, "IBM")

        assert overview.name == "International Business Machines"
        assert overview.sector == "TECHNOLOGY"
        assert overview.pe_ratio == "22.1"
        assert overview.week_52_high == "170.0"
        assert not overview.is_empty

    def test_unknown_symbol(self):
        """Test an empty response keeps the requested symbol."""
        overview = transform_company_overview({}, "ZZZZ")
        assert overview.symbol == "ZZZZ"
        assert overview.is_empty
