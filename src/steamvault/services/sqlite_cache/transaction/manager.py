"""Transaction manager for the SQLite store.

The connection runs in autocommit mode; multi-statement writes such as a
snapshot save are wrapped in an explicit transaction here.
"""

from __future__ import annotations

import logging
from collections.abc import Generator
from contextlib import contextmanager
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    import sqlite3

logger = logging.getLogger(__name__)


class TransactionManager:
    """Explicit BEGIN/COMMIT/ROLLBACK around a block of statements."""

    def __init__(self, conn: sqlite3.Connection) -> None:
        self.conn = conn

    def begin(self) -> None:
        self.conn.execute("BEGIN IMMEDIATE")

    def commit(self) -> None:
        self.conn.execute("COMMIT")

    def rollback(self) -> None:
        self.conn.execute("ROLLBACK")

    @contextmanager
    def transaction(self) -> Generator[None, None, None]:
        """Commit on success, roll back on any exception.

        Example:
            >>> with transaction_manager.transaction():
            ...     conn.execute("DELETE FROM inventory_items WHERE account_id = ?", (aid,))
            ...     conn.executemany("INSERT INTO inventory_items ...", rows)
        """
        self.begin()
        try:
            yield
        except BaseException:
            logger.debug("Rolling back transaction")
            self.rollback()
            raise
        self.commit()
