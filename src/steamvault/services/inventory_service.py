"""Inventory service: the boundary operations.

Composes the resilient fetcher, the normalizer and the SQLite store into
the operations an outer HTTP or CLI layer exposes. Every operation
returns plain dicts/lists ready for JSON encoding and raises the
structured errors that ``error_response`` maps to status codes.
"""

from __future__ import annotations

import asyncio
import logging
import math
import time
from typing import TYPE_CHECKING, Any

from steamvault.services.sqlite_cache_db import SQLiteCacheDB, system_clock_ms
from steamvault.services.upstream.inventory_client import InventoryFetcher, validate_account_id
from steamvault.services.upstream.inventory_models import InventoryDocument, InventorySnapshot
from steamvault.services.upstream.normalizer import normalize
from steamvault.shared.constants import CacheDefaults, LeaderboardConfig
from steamvault.shared.errors import (
    ErrorCode,
    ErrorContext,
    InvalidInputError,
    StoreError,
    create_validation_error,
)
from steamvault.shared.logging import log_operation_error, log_operation_success

if TYPE_CHECKING:
    from steamvault.config.models.settings import Settings
    from steamvault.services.cache_models import CacheEntry
    from steamvault.services.sqlite_cache.operations.base import Clock
    from steamvault.services.upstream.cancellation import CancellationToken

logger = logging.getLogger(__name__)

CACHE_SOURCE = "cache"


def snapshot_key(account_id: str) -> str:
    return f"{CacheDefaults.SNAPSHOT_KEY_PREFIX}{account_id}"


def price_key(item_name: str) -> str:
    return f"{CacheDefaults.PRICE_KEY_PREFIX}{item_name}"


def _cached_response(entry: CacheEntry | None) -> dict[str, Any]:
    if entry is None:
        return {"cached": False}
    return {"cached": True, "value": entry.value, "last_updated": entry.last_updated}


class InventoryService:
    """Cache-aside inventory access plus price cache and snapshot queries.

    Args:
        fetcher: Resilient upstream fetcher
        store: SQLite cache and snapshot store
        cache_snapshots: Serve inventories from the cache before fetching
        clock: Epoch-milliseconds clock for snapshot timestamps
    """

    def __init__(
        self,
        fetcher: InventoryFetcher,
        store: SQLiteCacheDB,
        *,
        cache_snapshots: bool = True,
        clock: Clock | None = None,
    ) -> None:
        self.fetcher = fetcher
        self.store = store
        self.cache_snapshots = cache_snapshots
        self.clock: Clock = clock or store.clock or system_clock_ms

    @classmethod
    def from_settings(cls, settings: Settings) -> InventoryService:
        return cls(
            InventoryFetcher(settings.upstream),
            SQLiteCacheDB.from_settings(settings),
            cache_snapshots=settings.cache.cache_snapshots,
        )

    async def close(self) -> None:
        await self.fetcher.close()
        self.store.close()

    async def __aenter__(self) -> InventoryService:
        return self

    async def __aexit__(self, exc_type: object, exc_val: object, exc_tb: object) -> None:
        await self.close()

    async def fetch_inventory(
        self,
        account_id: str,
        *,
        normalized: bool = False,
        use_cache: bool = True,
        cancel_token: CancellationToken | None = None,
    ) -> dict[str, Any]:
        """Return an account's inventory, from cache when possible.

        On a cache miss the inventory is fetched upstream, normalized and
        written back to the snapshot store and the key-value cache in one
        transaction.
        A failed write-back is logged and does not fail the fetch.

        Args:
            account_id: 17-digit account identifier
            normalized: Return ``{account_id, item_count, items, source}``
                instead of the raw upstream document
            use_cache: Consult the cache before fetching
            cancel_token: Optional token the caller may cancel

        Raises:
            InvalidIdentifierError: Malformed identifier, before any I/O
            AllStrategiesExhaustedError: Every upstream route failed
            FetchCancelledError: The token was cancelled
        """
        account_id = validate_account_id(account_id)

        # SQLite calls block, so they run in a worker thread
        document: InventoryDocument | None = None
        if use_cache and self.cache_snapshots:
            document = await asyncio.to_thread(self._read_cached_document, account_id)

        if document is None:
            document = await self.fetcher.fetch(account_id, cancel_token=cancel_token)
            await asyncio.to_thread(self._persist, account_id, document)

        if not normalized:
            return document.raw

        items = normalize(document, account_id)
        return {
            "account_id": account_id,
            "item_count": len(items),
            "items": [item.to_dict() for item in items],
            "source": document.source,
        }

    def _read_cached_document(self, account_id: str) -> InventoryDocument | None:
        entry = self.store.get(snapshot_key(account_id))
        if entry is None:
            return None
        try:
            return InventoryDocument.from_raw(entry.value, source=CACHE_SOURCE)
        except (TypeError, ValueError) as e:
            logger.warning("Ignoring unreadable cached inventory for %s: %s", account_id, e)
            return None

    def _persist(self, account_id: str, document: InventoryDocument) -> int:
        items = normalize(document, account_id)
        snapshot = InventorySnapshot(
            account_id=account_id,
            fetched_at=int(self.clock()),
            item_count=len(items),
            raw_document=document.raw,
        )
        start = time.perf_counter()
        try:
            self.store.save_snapshot(snapshot, items, cache_key=snapshot_key(account_id))
        except StoreError as e:
            log_operation_error(logger, e, operation="persist_snapshot", level=logging.WARNING)
            return len(items)

        log_operation_success(
            logger,
            "persist_snapshot",
            (time.perf_counter() - start) * 1000,
            result_info={"item_count": len(items)},
            context={"account_id": account_id},
        )
        return len(items)

    def read_cached(self, key: str) -> dict[str, Any]:
        """Raw cache read: ``{cached: true, value, last_updated}`` or ``{cached: false}``."""
        if not isinstance(key, str) or not key:
            raise create_validation_error(
                "Cache key must be a non-empty string",
                field="key",
                operation="read_cached",
            )
        return _cached_response(self.store.get(key))

    def save_snapshot(self, key: str, document: Any) -> dict[str, Any]:
        """Store a caller-supplied inventory document for account ``key``.

        Raises:
            InvalidIdentifierError: ``key`` is not an account identifier
            InvalidInputError: ``document`` is not an inventory document
        """
        account_id = validate_account_id(key)
        try:
            parsed = InventoryDocument.from_raw(document, source="import")
        except (TypeError, ValueError) as e:
            raise InvalidInputError(
                ErrorCode.INVALID_DOCUMENT,
                f"Malformed inventory document: {e}",
                ErrorContext(operation="save_snapshot", additional_data={"account_id": account_id}),
                e,
            ) from e

        items = normalize(parsed, account_id)
        snapshot = InventorySnapshot(
            account_id=account_id,
            fetched_at=int(self.clock()),
            item_count=len(items),
            raw_document=parsed.raw,
        )
        self.store.save_snapshot(snapshot, items, cache_key=snapshot_key(account_id))
        return {"success": True, "item_count": len(items)}

    def get_price(self, item_name: str) -> dict[str, Any]:
        _check_item_name(item_name, "get_price")
        return _cached_response(self.store.get(price_key(item_name)))

    def set_price(self, item_name: str, price: Any) -> dict[str, Any]:
        """Cache a market price for ``item_name``.

        Raises:
            InvalidInputError: Blank name, or price not a finite non-negative number
        """
        _check_item_name(item_name, "set_price")
        if (
            isinstance(price, bool)
            or not isinstance(price, (int, float))
            or not math.isfinite(price)
            or price < 0
        ):
            raise create_validation_error(
                f"Price must be a finite non-negative number, got {price!r}",
                field="price",
                operation="set_price",
            )
        self.store.put(price_key(item_name), price)
        return {"success": True}

    def clear_cache(self, credential: str | None) -> dict[str, Any]:
        """Privileged clear of every cache entry and snapshot.

        Raises:
            UnauthorizedError: Wrong or missing credential
        """
        cleared = self.store.clear_all(credential)
        logger.info("Cache cleared by operator request (%d entries)", cleared)
        return {"success": True, "cleared": cleared}

    def leaderboard(
        self,
        limit: int = LeaderboardConfig.DEFAULT_LIMIT,
        order_by: str = "item_count",
    ) -> list[dict[str, Any]]:
        return self.store.leaderboard(limit=limit, order_by=order_by)

    def search_items(
        self,
        query: str,
        limit: int = LeaderboardConfig.DEFAULT_LIMIT,
    ) -> list[dict[str, Any]]:
        return self.store.search(query, limit=limit)


def _check_item_name(item_name: Any, operation: str) -> None:
    if not isinstance(item_name, str) or not item_name.strip():
        raise create_validation_error(
            "Item name must be a non-empty string",
            field="item_name",
            operation=operation,
        )
