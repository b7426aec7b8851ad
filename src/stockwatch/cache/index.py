"""
Catalog of live cache entries.

The whole index is a single JSON array kept in the store under its own
key. It is the only source used to enumerate, count or evict entries; the
store's key space is never scanned.
"""

import json
import logging

from stockwatch.cache.store import KeyValueStore
from stockwatch.core.exceptions import CacheError
from stockwatch.core.models import IndexEntry

logger = logging.getLogger(__name__)


class CacheIndex:
    """Ordered list of IndexEntry records persisted in a KeyValueStore."""

    def __init__(self, store: KeyValueStore, index_key: str):
        self.store = store
        self.index_key = index_key

    def load(self) -> list[IndexEntry]:
        """Read the index.

        A missing, unreadable or undecodable index is treated as empty.
        Malformed elements are skipped.
        """
        try:
            raw = self.store.get_item(self.index_key)
        except CacheError as e:
            logger.warning("Error reading cache index: %s", e)
            return []

        if not raw:
            return []

        try:
            items = json.loads(raw)
        except json.JSONDecodeError as e:
            logger.warning("Cache index is corrupt, ignoring it: %s", e)
            return []

        if not isinstance(items, list):
            logger.warning("Cache index is not a list, ignoring it")
            return []

        entries = []
        for item in items:
            try:
                entries.append(IndexEntry.from_dict(item))
            except (AttributeError, KeyError, TypeError, ValueError):
                logger.debug("Skipping malformed index entry: %r", item)
        return entries

    def save(self, entries: list[IndexEntry]) -> None:
        """Replace the stored index with ``entries``.

        Raises:
            CacheError: If the write fails.
        """
        try:
            payload = json.dumps([entry.to_dict() for entry in entries])
        except (TypeError, ValueError) as e:
            raise CacheError("index encode", str(e))
        self.store.set_item(self.index_key, payload)

    def upsert(self, entry: IndexEntry) -> None:
        """Add ``entry``, replacing any record with the same key."""
        entries = [e for e in self.load() if e.cache_key != entry.cache_key]
        entries.append(entry)
        self.save(entries)

    def discard(self, cache_key: str) -> bool:
        """Remove the record for ``cache_key``.

        Returns:
            True if a record was removed.
        """
        entries = self.load()
        remaining = [e for e in entries if e.cache_key != cache_key]
        if len(remaining) == len(entries):
            return False
        self.save(remaining)
        return True

    def clear(self) -> None:
        """Remove the index record."""
        self.store.remove_item(self.index_key)

    def __len__(self) -> int:
        return len(self.load())
