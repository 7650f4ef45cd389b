"""Tests for TransactionManager."""

from __future__ import annotations

import sqlite3
from collections.abc import Generator

import pytest

from steamvault.services.sqlite_cache.migration.manager import SCHEMA_VERSION, MigrationManager
from steamvault.services.sqlite_cache.transaction.manager import TransactionManager
from steamvault.shared.constants import CacheTables


@pytest.fixture
def conn() -> Generator[sqlite3.Connection, None, None]:
    connection = sqlite3.connect(":memory:", isolation_level=None)
    MigrationManager(connection).create_tables()
    yield connection
    connection.close()


def _count(conn: sqlite3.Connection) -> int:
    return conn.execute(f"SELECT COUNT(*) FROM {CacheTables.SCALAR_CACHE}").fetchone()[0]


class TestTransactionManager:
    def test_commit_on_success(self, conn: sqlite3.Connection) -> None:
        with TransactionManager(conn).transaction():
            conn.execute(f"INSERT INTO {CacheTables.SCALAR_CACHE} VALUES ('k', '1', 0)")

        assert _count(conn) == 1
        assert not conn.in_transaction

    def test_rollback_on_error(self, conn: sqlite3.Connection) -> None:
        # Given
        manager = TransactionManager(conn)

        # When
        with pytest.raises(RuntimeError), manager.transaction():
            conn.execute(f"INSERT INTO {CacheTables.SCALAR_CACHE} VALUES ('k', '1', 0)")
            raise RuntimeError("abort")

        # Then
        assert _count(conn) == 0
        assert not conn.in_transaction


class TestMigrationManager:
    def test_fresh_database_is_versioned(self, conn: sqlite3.Connection) -> None:
        assert MigrationManager(conn).get_current_version() == SCHEMA_VERSION

    def test_create_tables_is_idempotent(self, conn: sqlite3.Connection) -> None:
        MigrationManager(conn).create_tables()

        versions = conn.execute(f"SELECT COUNT(*) FROM {CacheTables.SCHEMA_VERSION}").fetchone()[0]
        assert versions == 1
