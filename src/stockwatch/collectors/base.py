"""
Base class for remote market-data clients.

A client turns a RequestDescriptor into one HTTP GET with a flat query
string and hands back the decoded JSON body. Transport, status and
decoding failures are raised through the stockwatch exception hierarchy so
that the data service can fall back to cached data.
"""

import asyncio
import logging
from abc import ABC, abstractmethod
from typing import Any

import aiohttp

from stockwatch import __version__
from stockwatch.core.exceptions import NetworkError, PayloadError, RateLimitError
from stockwatch.core.models import RequestDescriptor
from stockwatch.core.validation import MAX_RESPONSE_SIZE, validate_response_size

logger = logging.getLogger(__name__)


class Collector(ABC):
    """Query-string API client.

    Subclasses say where a request goes (``request_url``), may add
    parameters such as credentials (``build_params``) and inspect the
    decoded body for in-band errors (``_check_payload``).
    """

    SERVICE_NAME = "market data API"

    # Full daily series run to a few MB
    MAX_RESPONSE_SIZE = MAX_RESPONSE_SIZE

    def __init__(
        self,
        session: aiohttp.ClientSession | None = None,
        timeout: int = 5,
    ):
        """Initialize the client.

        Args:
            session: Optional aiohttp session, left open on close. One is
                     created (and owned) on first use otherwise.
            timeout: Total request timeout in seconds.
        """
        self._session = session
        self._owns_session = session is None
        self.timeout = aiohttp.ClientTimeout(total=timeout)

    @property
    def session(self) -> aiohttp.ClientSession:
        if self._session is None:
            self._session = aiohttp.ClientSession(timeout=self.timeout)
            self._owns_session = True
        return self._session

    async def close(self) -> None:
        if self._owns_session and self._session is not None:
            await self._session.close()
            self._session = None

    async def __aenter__(self) -> "Collector":
        return self

    async def __aexit__(self, exc_type: Any, exc_val: Any, exc_tb: Any) -> None:
        await self.close()

    @abstractmethod
    def request_url(self, request: RequestDescriptor) -> str:
        """Return the URL that serves ``request``."""

    def build_params(self, request: RequestDescriptor) -> dict[str, str]:
        """Return the query string for ``request``."""
        return request.query()

    async def invoke(self, request: RequestDescriptor) -> Any:
        """Perform one remote call.

        Args:
            request: API function name and flat parameters.

        Returns:
            The decoded response body, after ``_check_payload``.

        Raises:
            RateLimitError: On HTTP 429.
            NetworkError: On transport failures, timeouts and non-2xx status.
            PayloadError: If the body is not valid JSON.
            ValidationError: If the response is too large.
        """
        url = self.request_url(request)
        logger.debug("Requesting %s: %s", request.function, request.params)

        try:
            async with self.session.get(
                url,
                params=self.build_params(request),
                headers=self._build_headers(),
                timeout=self.timeout,
            ) as resp:
                if resp.status == 429:
                    raise RateLimitError(self.SERVICE_NAME)
                if not 200 <= resp.status < 300:
                    raise NetworkError(url, resp.status)

                self._check_response_size(resp)

                try:
                    data = await resp.json(content_type=None)
                except ValueError as e:
                    raise PayloadError(request.function, str(e))

        except aiohttp.ClientError as e:
            raise NetworkError(url, details=str(e))
        except asyncio.TimeoutError:
            raise NetworkError(url, details=f"Timed out after {self.timeout.total} seconds")

        return self._check_payload(request, data)

    def _check_payload(self, request: RequestDescriptor, data: Any) -> Any:
        """Raise for error bodies the API returns with a 2xx status."""
        return data

    def _build_headers(self) -> dict[str, str]:
        return {
            "User-Agent": f"stockwatch/{__version__}",
            "Accept": "application/json",
        }

    def _check_response_size(self, response: aiohttp.ClientResponse) -> None:
        """Reject responses whose Content-Length exceeds MAX_RESPONSE_SIZE.

        Raises:
            ValidationError: If the response is too large.
        """
        content_length = response.headers.get("Content-Length")
        if content_length is None:
            return
        try:
            size = int(content_length)
        except ValueError:
            logger.debug("Ignoring bad Content-Length header: %r", content_length)
            return
        validate_response_size(size, self.MAX_RESPONSE_SIZE)
