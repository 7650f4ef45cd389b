"""
Cache Configuration Constants

Table names, sentinels and defaults for the persistent cache and
snapshot store.
"""

from typing import ClassVar


class CacheTables:
    """SQLite table names."""

    SCALAR_CACHE = "scalar_cache"
    SNAPSHOTS = "inventory_snapshots"
    ITEMS = "inventory_items"
    SCHEMA_VERSION = "schema_version"


class CacheDefaults:
    """Cache defaults."""

    DB_FILENAME = "steamvault_cache.db"
    # Ten minutes; inventories and prices go stale at read time after this
    TTL_MS = 600_000
    PRICE_KEY_PREFIX = "price:"
    SNAPSHOT_KEY_PREFIX = "inventory:"
    KEY_LOG_MAX_LENGTH = 50


class NormalizationDefaults:
    """Normalizer sentinels."""

    UNKNOWN = "unknown"


class LeaderboardConfig:
    """Leaderboard query options."""

    DEFAULT_LIMIT = 10
    MAX_LIMIT = 100
    ORDER_COLUMNS: ClassVar[dict[str, str]] = {
        "item_count": "item_count",
        "fetched_at": "fetched_at",
    }
