"""Base operation class for SQLite store operations."""

from __future__ import annotations

import logging
from collections.abc import Callable
from typing import TYPE_CHECKING

from steamvault.shared.constants import CacheDefaults

if TYPE_CHECKING:
    import sqlite3

logger = logging.getLogger(__name__)

Clock = Callable[[], int]


class BaseOperation:
    """Shared connection and clock access for store operations."""

    def __init__(self, conn: sqlite3.Connection, clock: Clock) -> None:
        """Initialize base operation.

        Args:
            conn: SQLite database connection
            clock: Returns the current time in epoch milliseconds
        """
        self.conn = conn
        self.clock = clock

    def _now_ms(self) -> int:
        return int(self.clock())

    @staticmethod
    def _key_for_log(key: str) -> str:
        return key[: CacheDefaults.KEY_LOG_MAX_LENGTH]

    def _validate_connection(self) -> None:
        """Raise RuntimeError if the connection was closed."""
        if self.conn is None:
            raise RuntimeError("Database connection not initialized")
