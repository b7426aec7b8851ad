"""
Alpha Vantage API client.

Every Alpha Vantage call is ``GET /query?function=...&apikey=...`` with a
flat parameter list, so one ``invoke`` covers symbol search, company
overview, top gainers/losers and the time series.

The free tier allows a handful of calls per minute and answers throttled
requests with HTTP 200 and a "Note"/"Information" body; those are raised
as RateLimitError like a real 429.
"""

import logging
import os
from typing import Any, Optional

import aiohttp

from stockwatch.collectors.base import Collector
from stockwatch.core.exceptions import ApiError, PayloadError, RateLimitError
from stockwatch.core.models import RequestDescriptor

logger = logging.getLogger(__name__)


class AlphaVantageClient(Collector):
    """Async client for the Alpha Vantage query API."""

    BASE_URL = "https://www.alphavantage.co"
    SERVICE_NAME = "Alpha Vantage"

    # The demo key only serves IBM
    DEMO_KEY = "demo"
    DEMO_SYMBOL = "IBM"

    THROTTLE_KEYS = ("Note", "Information")

    def __init__(
        self,
        api_key: Optional[str] = None,
        session: Optional[aiohttp.ClientSession] = None,
        timeout: int = 5,
        base_url: Optional[str] = None,
    ):
        """Initialize the Alpha Vantage client.

        Args:
            api_key: API key. Falls back to ALPHAVANTAGE_API_KEY, then "demo".
            session: Optional aiohttp session.
            timeout: Request timeout in seconds.
            base_url: Override for the API host.
        """
        super().__init__(session, timeout)
        self.api_key = api_key or os.environ.get("ALPHAVANTAGE_API_KEY") or self.DEMO_KEY
        self.base_url = (base_url or self.BASE_URL).rstrip("/")

    def request_url(self, request: RequestDescriptor) -> str:
        """Every Alpha Vantage function is served from ``/query``."""
        return f"{self.base_url}/query"

    def build_params(self, request: RequestDescriptor) -> dict[str, str]:
        """Add the API key; the demo key is only valid for IBM."""
        params = {**super().build_params(request), "apikey": self.api_key}
        if self.api_key == self.DEMO_KEY and "symbol" in params:
            params["symbol"] = self.DEMO_SYMBOL
        return params

    def _check_payload(self, request: RequestDescriptor, data: Any) -> dict[str, Any]:
        """Turn in-band error bodies into exceptions."""
        if not isinstance(data, dict):
            raise PayloadError(
                request.function,
                f"Expected a JSON object, got {type(data).__name__}",
            )

        if "Error Message" in data:
            raise ApiError(request.function, str(data["Error Message"]))

        notices = [data[key] for key in self.THROTTLE_KEYS if key in data]
        if notices and len(data) == len(notices):
            logger.warning("%s throttled %s: %s", self.SERVICE_NAME, request.function, notices[0])
            raise RateLimitError(self.SERVICE_NAME, details=str(notices[0]))

        return data
