"""Insert operations for the key-value cache."""

from __future__ import annotations

import json
import logging
from typing import Any

from steamvault.services.cache_models import CacheEntry
from steamvault.services.sqlite_cache.operations.base import BaseOperation
from steamvault.shared.constants import CacheTables

logger = logging.getLogger(__name__)


class InsertOperations(BaseOperation):
    """Write operations for cache entries."""

    def upsert(self, key: str, value: Any) -> CacheEntry:
        """Insert or overwrite an entry and refresh its timestamp.

        A single ``INSERT ... ON CONFLICT DO UPDATE`` statement, so
        concurrent writers never leave a partially written row.

        Args:
            key: Cache key
            value: JSON-serializable value

        Returns:
            The stored entry

        Raises:
            TypeError, ValueError: If ``value`` is not JSON-serializable
        """
        self._validate_connection()

        try:
            value_json = json.dumps(value, ensure_ascii=False)
        except (TypeError, ValueError):
            logger.exception("Failed to serialize cache value for key %s", self._key_for_log(key))
            raise

        now = self._now_ms()
        upsert_sql = f"""
        INSERT INTO {CacheTables.SCALAR_CACHE} (key, value, last_updated)
        VALUES (?, ?, ?)
        ON CONFLICT(key) DO UPDATE SET
            value = excluded.value,
            last_updated = excluded.last_updated
        """  # noqa: S608
        self.conn.execute(upsert_sql, (key, value_json, now))

        logger.debug(
            "Cache upserted: key=%s, size=%d bytes",
            self._key_for_log(key),
            len(value_json.encode("utf-8")),
        )
        return CacheEntry(key=key, value=value, last_updated=now)
