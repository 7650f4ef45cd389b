"""Cache configuration model.

This module contains the cache configuration model for the persistent
key-value cache and snapshot store.
"""

from __future__ import annotations

from pathlib import Path

from pydantic import BaseModel, Field

from steamvault.shared.constants import CacheDefaults


class CacheSettings(BaseModel):
    """Cache configuration.

    ``ttl_ms`` is evaluated lazily at read time, so a cached inventory is
    refetched once it is older than the TTL. ``None`` disables expiry.
    """

    db_path: Path = Field(
        default=Path("data") / CacheDefaults.DB_FILENAME,
        description="SQLite database file",
    )
    ttl_ms: int | None = Field(
        default=CacheDefaults.TTL_MS,
        gt=0,
        description="Read-time staleness threshold in milliseconds",
    )
    cache_snapshots: bool = Field(
        default=True,
        description="Serve whole inventory snapshots from cache before fetching",
    )


__all__ = ["CacheSettings"]
