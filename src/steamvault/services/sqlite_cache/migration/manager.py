"""Migration manager for the SQLite store.

This module creates and versions the database schema.
"""

from __future__ import annotations

import logging
import sqlite3

from steamvault.shared.constants import CacheTables

logger = logging.getLogger(__name__)

SCHEMA_VERSION = 1


class MigrationManager:
    """Database schema migration manager."""

    def __init__(self, conn: sqlite3.Connection) -> None:
        """Initialize migration manager.

        Args:
            conn: SQLite database connection
        """
        self.conn = conn
        self._current_version = self._get_current_version()

    def get_current_version(self) -> int:
        return self._current_version

    def _get_current_version(self) -> int:
        """Read the schema version (0 for a fresh database)."""
        cursor = self.conn.execute(
            "SELECT name FROM sqlite_master WHERE type='table' AND name=?",
            (CacheTables.SCHEMA_VERSION,),
        )
        if cursor.fetchone() is None:
            return 0

        cursor = self.conn.execute(f"SELECT MAX(version) FROM {CacheTables.SCHEMA_VERSION}")  # noqa: S608
        row = cursor.fetchone()
        return row[0] if row and row[0] is not None else 0

    def create_tables(self) -> None:
        """Create database schema (v1). Idempotent."""
        schema_sql = f"""
        CREATE TABLE IF NOT EXISTS {CacheTables.SCALAR_CACHE} (
            key TEXT PRIMARY KEY,
            value TEXT NOT NULL,
            -- Epoch milliseconds
            last_updated INTEGER NOT NULL,
            CHECK (length(key) > 0)
        );

        CREATE TABLE IF NOT EXISTS {CacheTables.SNAPSHOTS} (
            account_id TEXT PRIMARY KEY,
            fetched_at INTEGER NOT NULL,
            item_count INTEGER NOT NULL,
            raw_document TEXT NOT NULL
        );

        CREATE TABLE IF NOT EXISTS {CacheTables.ITEMS} (
            account_id TEXT NOT NULL
                REFERENCES {CacheTables.SNAPSHOTS}(account_id) ON DELETE CASCADE,
            position INTEGER NOT NULL,
            asset_id TEXT NOT NULL,
            class_id TEXT NOT NULL,
            instance_id TEXT NOT NULL,
            amount INTEGER NOT NULL,
            market_name TEXT NOT NULL,
            display_name TEXT NOT NULL,
            type TEXT NOT NULL,
            icon_ref TEXT NOT NULL,
            PRIMARY KEY (account_id, position)
        );

        CREATE INDEX IF NOT EXISTS idx_items_market_name ON {CacheTables.ITEMS}(market_name);
        CREATE INDEX IF NOT EXISTS idx_snapshots_item_count ON {CacheTables.SNAPSHOTS}(item_count);

        CREATE TABLE IF NOT EXISTS {CacheTables.SCHEMA_VERSION} (
            version INTEGER PRIMARY KEY,
            applied_at TIMESTAMP DEFAULT CURRENT_TIMESTAMP NOT NULL
        );
        """

        self.conn.executescript(schema_sql)

        if self._current_version < SCHEMA_VERSION:
            self.conn.execute(
                f"INSERT OR REPLACE INTO {CacheTables.SCHEMA_VERSION} (version) VALUES (?)",  # noqa: S608
                (SCHEMA_VERSION,),
            )
            logger.info("Created database schema (v%d)", SCHEMA_VERSION)
        self._current_version = SCHEMA_VERSION
