"""
Expiring cache for API responses.

Maps an (endpoint, params) pair to a JSON payload with a per-endpoint TTL,
keeps the index in step with the store and bounds the number of entries by
evicting the oldest ones.
"""

import json
import logging
import time
from typing import Any, Callable, Mapping, Optional, Union

from stockwatch.cache.index import CacheIndex
from stockwatch.cache.store import KeyValueStore
from stockwatch.config import CacheConfig
from stockwatch.core.exceptions import CacheError
from stockwatch.core.models import CacheEntry, CacheStats, Endpoint, IndexEntry

logger = logging.getLogger(__name__)

EndpointLike = Union[Endpoint, str]


def make_cache_key(prefix: str, endpoint: str, params: Optional[Mapping[str, Any]] = None) -> str:
    """Build a cache key that does not depend on parameter order.

    Args:
        prefix: Namespace prefix shared by all cache records.
        endpoint: Logical endpoint identifier.
        params: Request parameters.

    Returns:
        ``{prefix}{endpoint}_{name:value|name:value...}`` with names sorted.
    """
    params = params or {}
    param_string = "|".join(f"{name}:{params[name]}" for name in sorted(params))
    return f"{prefix}{endpoint}_{param_string}"


class ExpiringCache:
    """Key/value cache with per-endpoint TTL and a size bound.

    Reads fail open: any store or decode error is a miss. Writes raise
    CacheError. Stale entries are removed lazily by ``get`` and in bulk by
    ``remove_expired``, but stay readable through ``get_stale_value`` until
    then.
    """

    def __init__(
        self,
        store: KeyValueStore,
        config: Optional[CacheConfig] = None,
        clock: Callable[[], float] = time.time,
    ):
        """Initialize the cache.

        Args:
            store: Backing key/value store.
            config: Cache configuration (prefix, size bound, TTLs).
            clock: Returns the current time in epoch seconds.
        """
        self.store = store
        self.config = config or CacheConfig()
        self.index = CacheIndex(store, self.config.index_key)
        self._clock = clock

    @property
    def max_size(self) -> int:
        return self.config.max_size

    def make_key(self, endpoint: EndpointLike, params: Optional[Mapping[str, Any]] = None) -> str:
        """Return the store key for ``endpoint`` and ``params``."""
        return make_cache_key(self.config.prefix, str(endpoint), params)

    def ttl_for(self, endpoint: EndpointLike) -> float:
        """Return the TTL in seconds for ``endpoint``."""
        return self.config.ttl_for(str(endpoint))

    def get(
        self,
        endpoint: EndpointLike,
        params: Optional[Mapping[str, Any]] = None,
        remove_stale: bool = True,
    ) -> Optional[Any]:
        """Get a fresh cached value.

        Stale or undecodable records are removed on the way out unless
        ``remove_stale`` is False, in which case they stay available to
        ``get_stale_value``.

        Returns:
            The cached data, or None if absent, stale or unreadable.
        """
        key = self.make_key(endpoint, params)

        raw = self._read(key)
        if raw is None:
            logger.debug("Cache MISS for %s: %s", endpoint, params)
            return None

        entry = self._decode(key, raw)
        if entry is not None and entry.is_fresh(self._clock()):
            logger.debug("Cache HIT for %s: %s", endpoint, params)
            return entry.data

        logger.debug("Cache EXPIRED for %s: %s", endpoint, params)
        if not remove_stale:
            return None
        try:
            self._remove_key(key)
        except CacheError as e:
            logger.warning("Error removing expired cache entry %s: %s", key, e)
        return None

    def set(
        self,
        endpoint: EndpointLike,
        params: Optional[Mapping[str, Any]],
        data: Any,
    ) -> None:
        """Store ``data`` with the endpoint's TTL and enforce the size bound.

        Raises:
            CacheError: If the data cannot be encoded or a write fails. The
                index never keeps a record whose store write failed.
        """
        endpoint = str(endpoint)
        params = dict(params or {})
        key = self.make_key(endpoint, params)
        ttl = self.ttl_for(endpoint)
        now = self._clock()

        entry = CacheEntry(data=data, created_at=now, ttl=ttl, endpoint=endpoint, params=params)
        try:
            payload = json.dumps(entry.to_dict())
        except (TypeError, ValueError) as e:
            raise CacheError("encode", str(e))

        self.store.set_item(key, payload)

        try:
            self.index.upsert(IndexEntry(cache_key=key, endpoint=endpoint, params=params, created_at=now))
        except CacheError:
            try:
                self.store.remove_item(key)
            except CacheError as e:
                logger.warning("Could not roll back cache write for %s: %s", key, e)
            raise

        logger.debug("Cache SET for %s: %s (%.0f seconds)", endpoint, params, ttl)

        self._evict()

    def remove(self, endpoint: EndpointLike, params: Optional[Mapping[str, Any]] = None) -> None:
        """Remove one entry; removing an absent entry is a no-op.

        Raises:
            CacheError: If the store fails.
        """
        self._remove_key(self.make_key(endpoint, params))
        logger.debug("Cache REMOVED for %s: %s", endpoint, params)

    def get_stale_value(
        self,
        endpoint: EndpointLike,
        params: Optional[Mapping[str, Any]] = None,
    ) -> Optional[Any]:
        """Get a cached value whether or not it has expired.

        Used as a fallback when the remote call fails. Never deletes and
        never touches the index.
        """
        key = self.make_key(endpoint, params)
        raw = self._read(key)
        if raw is None:
            return None
        entry = self._decode(key, raw)
        return entry.data if entry is not None else None

    def remove_expired(self) -> int:
        """Sweep the index and remove every stale entry.

        Index entries whose store record has disappeared are pruned without
        being counted.

        Returns:
            Number of stale entries removed.
        """
        entries = self.index.load()
        if not entries:
            return 0

        now = self._clock()
        kept: list[IndexEntry] = []
        removed = 0

        for item in entries:
            try:
                raw = self.store.get_item(item.cache_key)
            except CacheError as e:
                logger.warning("Error reading %s during sweep: %s", item.cache_key, e)
                kept.append(item)
                continue

            if raw is None:
                logger.debug("Pruning index entry without record: %s", item.cache_key)
                continue

            entry = self._decode(item.cache_key, raw)
            if entry is not None and entry.is_fresh(now):
                kept.append(item)
                continue

            self.store.remove_item(item.cache_key)
            removed += 1

        self.index.save(kept)

        if removed:
            logger.info("Removed %d expired cache entries", removed)

        return removed

    def clear_endpoint(self, endpoint: EndpointLike) -> int:
        """Remove every entry for ``endpoint``.

        Returns:
            Number of entries removed.
        """
        endpoint = str(endpoint)
        entries = self.index.load()
        doomed = [e for e in entries if e.endpoint == endpoint]

        for item in doomed:
            self.store.remove_item(item.cache_key)

        if doomed:
            self.index.save([e for e in entries if e.endpoint != endpoint])

        logger.info("Cleared %d cache entries for %s", len(doomed), endpoint)
        return len(doomed)

    def clear_all(self) -> int:
        """Remove every tracked entry and the index itself.

        Returns:
            Number of entries removed.
        """
        entries = self.index.load()

        for item in entries:
            self.store.remove_item(item.cache_key)

        self.index.clear()

        logger.info("Cleared all cache data (%d entries)", len(entries))
        return len(entries)

    def stats(self) -> CacheStats:
        """Summarize the index. Does not read any cache record."""
        entries = self.index.load()
        endpoints: dict[str, int] = {}
        for item in entries:
            endpoints[item.endpoint] = endpoints.get(item.endpoint, 0) + 1

        return CacheStats(
            total_entries=len(entries),
            max_size=self.config.max_size,
            endpoints=endpoints,
        )

    def _read(self, key: str) -> Optional[str]:
        try:
            return self.store.get_item(key)
        except CacheError as e:
            logger.warning("Error reading from cache: %s", e)
            return None

    def _decode(self, key: str, raw: str) -> Optional[CacheEntry]:
        try:
            return CacheEntry.from_dict(json.loads(raw))
        except (json.JSONDecodeError, TypeError) as e:
            logger.warning("Undecodable cache record %s: %s", key, e)
            return None

    def _remove_key(self, key: str) -> None:
        self.store.remove_item(key)
        self.index.discard(key)

    def _evict(self) -> int:
        """Drop the oldest entries until at most ``max_size`` remain."""
        entries = self.index.load()
        overflow = len(entries) - self.config.max_size
        if overflow <= 0:
            return 0

        # sorted() is stable: equal timestamps keep index order
        ordered = sorted(entries, key=lambda e: e.created_at)
        doomed, survivors = ordered[:overflow], ordered[overflow:]

        for item in doomed:
            self.store.remove_item(item.cache_key)

        self.index.save(survivors)

        logger.info("Cache cleanup: removed %d old entries", overflow)
        return overflow
