"""
Services built on top of the cache and the remote client.
"""

from stockwatch.services.data_service import RemoteClient, StockDataService
from stockwatch.services.lifecycle import AppLifecycle

__all__ = [
    "AppLifecycle",
    "RemoteClient",
    "StockDataService",
]
