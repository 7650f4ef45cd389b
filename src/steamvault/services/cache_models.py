"""Cache domain models."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any


@dataclass(frozen=True)
class CacheEntry:
    """One persisted key-value record.

    Attributes:
        key: Cache key (e.g. ``price:AK-47 | Redline``)
        value: Deserialized JSON value
        last_updated: Epoch milliseconds of the last write

    Example:
        >>> entry = CacheEntry(key="price:crate", value=1.25, last_updated=0)
        >>> entry.is_stale(now_ms=600_001, ttl_ms=600_000)
        True
    """

    key: str
    value: Any
    last_updated: int

    def age_ms(self, now_ms: int) -> int:
        return now_ms - self.last_updated

    def is_stale(self, now_ms: int, ttl_ms: int | None) -> bool:
        """Stale once strictly older than ``ttl_ms``; never stale without a TTL."""
        if ttl_ms is None:
            return False
        return self.age_ms(now_ms) > ttl_ms

    def to_dict(self) -> dict[str, Any]:
        return {
            "key": self.key,
            "value": self.value,
            "last_updated": self.last_updated,
        }
