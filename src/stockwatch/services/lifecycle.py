"""
Cache maintenance hooks for app lifecycle transitions.

None of these raise: a failed sweep is logged and the app carries on.
"""

import logging

from stockwatch.core.exceptions import StockWatchError
from stockwatch.services.data_service import StockDataService

logger = logging.getLogger(__name__)


class AppLifecycle:
    """Runs cache maintenance on startup and background/foreground changes."""

    def __init__(self, service: StockDataService):
        self.service = service

    def initialize(self) -> None:
        """Sweep expired entries and log cache statistics on startup."""
        logger.debug("Initializing app services...")
        removed = self.cleanup_cache()
        if removed:
            logger.info("Startup cleanup: removed %d expired cache entries", removed)
        self.log_cache_stats()

    def cleanup_cache(self) -> int:
        """Remove expired entries.

        Returns:
            Number of entries removed, 0 if the sweep failed.
        """
        try:
            return self.service.clean_expired_cache()
        except StockWatchError as e:
            logger.error("Error during cache cleanup: %s", e)
            return 0

    def log_cache_stats(self) -> None:
        stats = self.service.get_cache_stats()
        logger.info(
            "Cache statistics: %d/%d entries (%d%%), endpoints=%s",
            stats.total_entries,
            stats.max_size,
            stats.usage_percent,
            stats.endpoints,
        )

    def handle_background(self) -> None:
        self.cleanup_cache()
        logger.debug("Background cache cleanup completed")

    def handle_foreground(self) -> None:
        self.cleanup_cache()
        logger.debug("Foreground cache cleanup completed")

    def reset_all_data(self) -> int:
        """Drop every cached entry.

        Returns:
            Number of entries removed, 0 if the reset failed.
        """
        try:
            removed = self.service.clear_all_cache()
        except StockWatchError as e:
            logger.error("Error resetting app data: %s", e)
            return 0
        logger.info("All app data reset")
        return removed
