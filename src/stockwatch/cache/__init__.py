"""
Cache module for storing API responses.

Provides an expiring key/value cache with a size bound, the index that
catalogs its entries, and the stores it persists to.
"""

from stockwatch.cache.expiring import ExpiringCache, make_cache_key
from stockwatch.cache.index import CacheIndex
from stockwatch.cache.store import KeyValueStore, MemoryStore, SQLiteStore

__all__ = [
    "ExpiringCache",
    "make_cache_key",
    "CacheIndex",
    "KeyValueStore",
    "MemoryStore",
    "SQLiteStore",
]
