"""
Remote clients for fetching market data.

This module provides the async client the data service calls on a cache miss.
"""

from stockwatch.collectors.alphavantage import AlphaVantageClient
from stockwatch.collectors.base import Collector

__all__ = [
    "Collector",
    "AlphaVantageClient",
]
