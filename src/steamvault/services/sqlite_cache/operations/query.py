"""Query operations for the key-value cache."""

from __future__ import annotations

import json
import logging
from typing import Any

from steamvault.services.cache_models import CacheEntry
from steamvault.services.sqlite_cache.operations.base import BaseOperation
from steamvault.shared.constants import CacheTables

logger = logging.getLogger(__name__)


def _deserialize_value(value_json: str, key: str) -> tuple[bool, Any]:
    """Decode a stored value; ``(False, None)`` for corrupt rows."""
    try:
        return True, json.loads(value_json)
    except json.JSONDecodeError as e:
        logger.warning("Failed to deserialize cache value for key %s: %s", key, e)
        return False, None


class QueryOperations(BaseOperation):
    """Read operations for cache entries."""

    def get(self, key: str, ttl_ms: int | None = None) -> CacheEntry | None:
        """Retrieve an entry.

        Staleness is evaluated here, at read time; stale rows stay in the
        table until overwritten or cleared.

        Args:
            key: Cache key
            ttl_ms: Staleness threshold in milliseconds (None: never stale)

        Returns:
            The entry if present and fresh, None otherwise (Miss)
        """
        self._validate_connection()

        cursor = self.conn.execute(
            f"SELECT key, value, last_updated FROM {CacheTables.SCALAR_CACHE} WHERE key = ?",  # noqa: S608
            (key,),
        )
        row = cursor.fetchone()
        if row is None:
            logger.debug("Cache miss: key=%s", self._key_for_log(key))
            return None

        key_db, value_json, last_updated = row
        ok, value = _deserialize_value(value_json, self._key_for_log(key))
        if not ok:
            return None

        entry = CacheEntry(key=key_db, value=value, last_updated=int(last_updated))
        if entry.is_stale(self._now_ms(), ttl_ms):
            logger.debug("Cache entry stale for key: %s", self._key_for_log(key))
            return None

        logger.debug("Cache hit: key=%s", self._key_for_log(key))
        return entry

    def count(self) -> int:
        cursor = self.conn.execute(f"SELECT COUNT(*) FROM {CacheTables.SCALAR_CACHE}")  # noqa: S608
        return int(cursor.fetchone()[0])

    def count_stale(self, ttl_ms: int | None) -> int:
        """Number of rows that a read would currently treat as a Miss."""
        if ttl_ms is None:
            return 0
        cursor = self.conn.execute(
            f"SELECT COUNT(*) FROM {CacheTables.SCALAR_CACHE} WHERE ? - last_updated > ?",  # noqa: S608
            (self._now_ms(), ttl_ms),
        )
        return int(cursor.fetchone()[0])
