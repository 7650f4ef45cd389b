"""Delete operations for the key-value cache and snapshot tables."""

from __future__ import annotations

import logging

from steamvault.services.sqlite_cache.operations.base import BaseOperation
from steamvault.shared.constants import CacheTables

logger = logging.getLogger(__name__)


class UpdateOperations(BaseOperation):
    """Delete operations for cache management."""

    def delete(self, key: str) -> bool:
        """Delete one cache entry.

        Returns:
            True if deleted, False if not found
        """
        self._validate_connection()

        cursor = self.conn.execute(
            f"DELETE FROM {CacheTables.SCALAR_CACHE} WHERE key = ?",  # noqa: S608
            (key,),
        )
        deleted = cursor.rowcount > 0
        if deleted:
            logger.debug("Cache deleted: key=%s", self._key_for_log(key))
        return deleted

    def clear(self) -> int:
        """Delete every cache entry, snapshot and item row.

        Callers run this inside a transaction.

        Returns:
            Number of cache entries removed
        """
        self._validate_connection()

        cursor = self.conn.execute(f"DELETE FROM {CacheTables.SCALAR_CACHE}")  # noqa: S608
        cleared_count = cursor.rowcount
        self.conn.execute(f"DELETE FROM {CacheTables.ITEMS}")  # noqa: S608
        self.conn.execute(f"DELETE FROM {CacheTables.SNAPSHOTS}")  # noqa: S608

        logger.info("Cleared all cache entries (%d)", cleared_count)
        return cleared_count
