"""SQLite cache database facade.

Cache-aside key-value store plus the latest-only inventory snapshot store,
both in one SQLite file. Operations are delegated to modular operation
classes; this facade owns the connection, the write lock, the clock and
the translation of driver errors into StoreError.
"""

from __future__ import annotations

import hmac
import logging
import sqlite3
import threading
import time
from collections.abc import Generator
from contextlib import contextmanager
from pathlib import Path
from typing import TYPE_CHECKING, Any

from steamvault.services.cache_models import CacheEntry
from steamvault.services.sqlite_cache.migration.manager import MigrationManager
from steamvault.services.sqlite_cache.operations.base import Clock
from steamvault.services.sqlite_cache.operations.insert import InsertOperations
from steamvault.services.sqlite_cache.operations.query import QueryOperations
from steamvault.services.sqlite_cache.operations.snapshots import SnapshotOperations
from steamvault.services.sqlite_cache.operations.update import UpdateOperations
from steamvault.services.sqlite_cache.transaction.manager import TransactionManager
from steamvault.shared.constants import LeaderboardConfig
from steamvault.shared.errors import (
    ErrorCode,
    ErrorContext,
    UnauthorizedError,
    create_store_error,
    create_validation_error,
)
from steamvault.shared.logging import log_operation_error, log_operation_success

if TYPE_CHECKING:
    from steamvault.config.models.settings import Settings
    from steamvault.services.upstream.inventory_models import (
        InventorySnapshot,
        NormalizedItem,
    )

logger = logging.getLogger(__name__)


def system_clock_ms() -> int:
    """Current wall-clock time in epoch milliseconds."""
    return int(time.time() * 1000)


class SQLiteCacheDB:
    """SQLite-backed cache-aside store and snapshot store.

    Uses WAL mode so readers do not block the writer. A single connection
    is shared behind a lock; every write is one atomic statement or one
    explicit transaction, so concurrent writers never interleave and the
    last writer wins.

    Attributes:
        db_path: Path to SQLite database file
        ttl_ms: Read-time staleness threshold (None: entries never go stale)
        conn: SQLite database connection

    Example:
        >>> store = SQLiteCacheDB(Path("cache.db"), ttl_ms=600_000, secret_token="s3cret")
        >>> store.put("price:Crate", 0.42)
        >>> store.get("price:Crate").value
        0.42
        >>> store.close()
    """

    def __init__(
        self,
        db_path: Path | str,
        *,
        ttl_ms: int | None = None,
        secret_token: str = "",
        clock: Clock | None = None,
    ) -> None:
        """Initialize the store.

        Args:
            db_path: SQLite file path, or ``":memory:"``
            ttl_ms: Staleness threshold in milliseconds
            secret_token: Credential required by ``clear_all``; empty disables clearing
            clock: Returns epoch milliseconds; injectable for tests

        Raises:
            StoreError: If the database cannot be opened or the schema created
        """
        self.db_path = Path(db_path) if str(db_path) != ":memory:" else None
        self.ttl_ms = ttl_ms
        self._secret_token = secret_token
        self.clock: Clock = clock or system_clock_ms
        self.conn: sqlite3.Connection | None = None
        self._lock = threading.Lock()
        self._initialize_db(str(db_path))

    @classmethod
    def from_settings(cls, settings: Settings, clock: Clock | None = None) -> SQLiteCacheDB:
        return cls(
            settings.cache.db_path,
            ttl_ms=settings.cache.ttl_ms,
            secret_token=settings.security.secret_token,
            clock=clock,
        )

    def _initialize_db(self, target: str) -> None:
        context = ErrorContext(
            operation="initialize_db",
            additional_data={"db_path": target},
        )
        start = time.perf_counter()

        try:
            if self.db_path is not None:
                self.db_path.parent.mkdir(parents=True, exist_ok=True)

            self.conn = sqlite3.connect(
                target,
                check_same_thread=False,
                isolation_level=None,  # autocommit; explicit transactions via TransactionManager
            )
            self.conn.execute("PRAGMA journal_mode=WAL")
            self.conn.execute("PRAGMA synchronous=NORMAL")
            self.conn.execute("PRAGMA foreign_keys=ON")

            MigrationManager(self.conn).create_tables()

            self._query_ops = QueryOperations(self.conn, self.clock)
            self._insert_ops = InsertOperations(self.conn, self.clock)
            self._update_ops = UpdateOperations(self.conn, self.clock)
            self._snapshot_ops = SnapshotOperations(self.conn, self.clock)
            self._transactions = TransactionManager(self.conn)
        except (sqlite3.Error, OSError) as e:
            error = create_store_error(
                f"Failed to initialize SQLite store: {e!s}",
                operation="initialize_db",
                original_error=e,
            )
            log_operation_error(logger, error, additional_context=context.additional_data)
            raise error from e

        log_operation_success(
            logger=logger,
            operation="initialize_db",
            duration_ms=(time.perf_counter() - start) * 1000,
            context=context.additional_data,
        )

    @contextmanager
    def _guard(
        self,
        operation: str,
        code: ErrorCode = ErrorCode.STORE_ERROR,
    ) -> Generator[None, None, None]:
        """Serialize access and surface driver failures as StoreError."""
        if self.conn is None:
            raise create_store_error(
                "Database connection is closed",
                operation=operation,
                code=code,
            )
        with self._lock:
            try:
                yield
            except sqlite3.Error as e:
                error = create_store_error(
                    f"SQLite {operation} failed: {e!s}",
                    operation=operation,
                    original_error=e,
                    code=code,
                )
                log_operation_error(logger, error)
                raise error from e

    # Key-value cache

    def get(self, key: str) -> CacheEntry | None:
        """Return the entry for ``key``, or None when absent or stale.

        Raises:
            StoreError: If the read fails
        """
        with self._guard("cache_get", ErrorCode.CACHE_READ_FAILED):
            return self._query_ops.get(key, self.ttl_ms)

    def put(self, key: str, value: Any) -> CacheEntry:
        """Upsert ``value`` under ``key`` with a fresh timestamp.

        Raises:
            InvalidInputError: If ``value`` is not JSON-serializable
            StoreError: If the write fails
        """
        with self._guard("cache_put", ErrorCode.CACHE_WRITE_FAILED):
            try:
                return self._insert_ops.upsert(key, value)
            except (TypeError, ValueError) as e:
                raise create_validation_error(
                    f"Cache value for {key!r} is not JSON-serializable",
                    field="value",
                    operation="cache_put",
                    original_error=e,
                ) from e

    def delete(self, key: str) -> bool:
        with self._guard("cache_delete", ErrorCode.CACHE_WRITE_FAILED):
            return self._update_ops.delete(key)

    def clear_all(self, credential: str | None) -> int:
        """Delete every cache entry and every snapshot.

        Args:
            credential: Must equal the configured secret token

        Returns:
            Number of cache entries removed

        Raises:
            UnauthorizedError: On a missing or wrong credential, or when no
                secret token is configured
            StoreError: If the delete fails
        """
        if not self._secret_token or not credential or not hmac.compare_digest(
            credential.encode("utf-8"),
            self._secret_token.encode("utf-8"),
        ):
            error = UnauthorizedError(
                ErrorCode.UNAUTHORIZED,
                "Credential rejected for cache clear",
                ErrorContext(operation="clear_cache"),
            )
            log_operation_error(logger, error, level=logging.WARNING)
            raise error

        with self._guard("clear_cache", ErrorCode.CACHE_WRITE_FAILED):
            with self._transactions.transaction():
                return self._update_ops.clear()

    def stats(self) -> dict[str, Any]:
        """Entry counts for operator diagnostics."""
        with self._guard("cache_stats", ErrorCode.CACHE_READ_FAILED):
            total = self._query_ops.count()
            stale = self._query_ops.count_stale(self.ttl_ms)
        return {
            "db_path": str(self.db_path) if self.db_path else ":memory:",
            "total_entries": total,
            "stale_entries": stale,
            "fresh_entries": total - stale,
            "ttl_ms": self.ttl_ms,
        }

    # Snapshots

    def save_snapshot(
        self,
        snapshot: InventorySnapshot,
        items: list[NormalizedItem],
        *,
        cache_key: str | None = None,
    ) -> None:
        """Persist a snapshot and its items in one transaction.

        Args:
            snapshot: Snapshot row to replace the account's previous one
            items: Normalized items belonging to the snapshot
            cache_key: When given, the raw document is also cached under
                this key in the same transaction, so the snapshot and its
                cache entry are written together or not at all

        Raises:
            InvalidInputError: If the raw document is not JSON-serializable
            StoreError: If the write fails; nothing is committed
        """
        with self._guard("save_snapshot", ErrorCode.CACHE_WRITE_FAILED):
            with self._transactions.transaction():
                self._snapshot_ops.save(snapshot, items)
                if cache_key is None:
                    return
                try:
                    self._insert_ops.upsert(cache_key, snapshot.raw_document)
                except (TypeError, ValueError) as e:
                    raise create_validation_error(
                        f"Cache value for {cache_key!r} is not JSON-serializable",
                        field="value",
                        operation="save_snapshot",
                        original_error=e,
                    ) from e

    def get_snapshot(self, account_id: str) -> InventorySnapshot | None:
        with self._guard("get_snapshot", ErrorCode.CACHE_READ_FAILED):
            return self._snapshot_ops.get(account_id)

    def get_items(self, account_id: str) -> list[NormalizedItem]:
        with self._guard("get_items", ErrorCode.CACHE_READ_FAILED):
            return self._snapshot_ops.items(account_id)

    def leaderboard(
        self,
        limit: int = LeaderboardConfig.DEFAULT_LIMIT,
        order_by: str = "item_count",
    ) -> list[dict[str, Any]]:
        """Snapshot summaries ordered descending by ``order_by``.

        Raises:
            InvalidInputError: Unknown order column or limit out of range
        """
        column = LeaderboardConfig.ORDER_COLUMNS.get(order_by)
        if column is None:
            raise create_validation_error(
                f"order_by must be one of {sorted(LeaderboardConfig.ORDER_COLUMNS)}, got {order_by!r}",
                field="order_by",
                operation="leaderboard",
            )
        _check_limit(limit, "leaderboard")

        with self._guard("leaderboard", ErrorCode.CACHE_READ_FAILED):
            return self._snapshot_ops.leaderboard(limit, column)

    def search(self, query: str, limit: int = LeaderboardConfig.DEFAULT_LIMIT) -> list[dict[str, Any]]:
        """Accounts holding items whose name contains ``query``.

        Raises:
            InvalidInputError: Blank query or limit out of range
        """
        if not isinstance(query, str) or not query.strip():
            raise create_validation_error(
                "Search query must be a non-empty string",
                field="query",
                operation="search_items",
            )
        _check_limit(limit, "search_items")

        with self._guard("search_items", ErrorCode.CACHE_READ_FAILED):
            return self._snapshot_ops.search(query.strip(), limit)

    def close(self) -> None:
        """Close database connection."""
        with self._lock:
            if self.conn:
                self.conn.close()
                self.conn = None
                logger.debug("Closed SQLite store connection: %s", self.db_path)

    def __enter__(self) -> SQLiteCacheDB:
        return self

    def __exit__(self, exc_type: object, exc_val: object, exc_tb: object) -> None:
        self.close()


def _check_limit(limit: int, operation: str) -> None:
    if isinstance(limit, bool) or not isinstance(limit, int) or not 1 <= limit <= LeaderboardConfig.MAX_LIMIT:
        raise create_validation_error(
            f"limit must be an integer between 1 and {LeaderboardConfig.MAX_LIMIT}, got {limit!r}",
            field="limit",
            operation=operation,
        )


__all__ = ["SQLiteCacheDB", "system_clock_ms"]
