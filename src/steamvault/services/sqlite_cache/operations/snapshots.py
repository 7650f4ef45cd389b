"""Snapshot operations: persisted inventories and their normalized items."""

from __future__ import annotations

import json
import logging
from typing import Any

from steamvault.services.sqlite_cache.operations.base import BaseOperation
from steamvault.services.upstream.inventory_models import InventorySnapshot, NormalizedItem
from steamvault.shared.constants import CacheTables

logger = logging.getLogger(__name__)

_ITEM_COLUMNS = (
    "account_id",
    "position",
    "asset_id",
    "class_id",
    "instance_id",
    "amount",
    "market_name",
    "display_name",
    "type",
    "icon_ref",
)


def _escape_like(query: str) -> str:
    return query.replace("\\", "\\\\").replace("%", "\\%").replace("_", "\\_")


class SnapshotOperations(BaseOperation):
    """Latest-only snapshot storage keyed by account id."""

    def save(self, snapshot: InventorySnapshot, items: list[NormalizedItem]) -> None:
        """Upsert the snapshot row and replace the account's item rows.

        Callers run this inside a transaction so readers never observe a
        snapshot without its items.
        """
        self._validate_connection()

        self.conn.execute(
            f"""
            INSERT INTO {CacheTables.SNAPSHOTS} (account_id, fetched_at, item_count, raw_document)
            VALUES (?, ?, ?, ?)
            ON CONFLICT(account_id) DO UPDATE SET
                fetched_at = excluded.fetched_at,
                item_count = excluded.item_count,
                raw_document = excluded.raw_document
            """,  # noqa: S608
            (
                snapshot.account_id,
                snapshot.fetched_at,
                snapshot.item_count,
                json.dumps(snapshot.raw_document, ensure_ascii=False),
            ),
        )
        self.conn.execute(
            f"DELETE FROM {CacheTables.ITEMS} WHERE account_id = ?",  # noqa: S608
            (snapshot.account_id,),
        )

        placeholders = ", ".join("?" for _ in _ITEM_COLUMNS)
        self.conn.executemany(
            f"INSERT INTO {CacheTables.ITEMS} ({', '.join(_ITEM_COLUMNS)}) VALUES ({placeholders})",  # noqa: S608
            [
                (
                    snapshot.account_id,
                    position,
                    item.asset_id,
                    item.class_id,
                    item.instance_id,
                    item.amount,
                    item.market_name,
                    item.display_name,
                    item.type,
                    item.icon_ref,
                )
                for position, item in enumerate(items)
            ],
        )
        logger.debug(
            "Snapshot saved: account=%s, items=%d",
            snapshot.account_id,
            snapshot.item_count,
        )

    def get(self, account_id: str) -> InventorySnapshot | None:
        self._validate_connection()

        cursor = self.conn.execute(
            f"SELECT account_id, fetched_at, item_count, raw_document "  # noqa: S608
            f"FROM {CacheTables.SNAPSHOTS} WHERE account_id = ?",
            (account_id,),
        )
        row = cursor.fetchone()
        if row is None:
            return None

        account_db, fetched_at, item_count, raw_json = row
        try:
            raw_document = json.loads(raw_json)
        except json.JSONDecodeError as e:
            logger.warning("Failed to deserialize snapshot for account %s: %s", account_id, e)
            return None

        return InventorySnapshot(
            account_id=account_db,
            fetched_at=int(fetched_at),
            item_count=int(item_count),
            raw_document=raw_document,
        )

    def items(self, account_id: str) -> list[NormalizedItem]:
        self._validate_connection()

        cursor = self.conn.execute(
            f"SELECT {', '.join(_ITEM_COLUMNS)} FROM {CacheTables.ITEMS} "  # noqa: S608
            "WHERE account_id = ? ORDER BY position",
            (account_id,),
        )
        return [
            NormalizedItem(
                snapshot_id=row[0],
                asset_id=row[2],
                class_id=row[3],
                instance_id=row[4],
                amount=int(row[5]),
                market_name=row[6],
                display_name=row[7],
                type=row[8],
                icon_ref=row[9],
            )
            for row in cursor.fetchall()
        ]

    def leaderboard(self, limit: int, order_column: str) -> list[dict[str, Any]]:
        """Snapshot summaries ordered by ``order_column`` descending.

        ``order_column`` must already be whitelisted by the caller.
        """
        self._validate_connection()

        cursor = self.conn.execute(
            f"SELECT account_id, item_count, fetched_at FROM {CacheTables.SNAPSHOTS} "  # noqa: S608
            f"ORDER BY {order_column} DESC, account_id ASC LIMIT ?",
            (limit,),
        )
        return [
            {"account_id": row[0], "item_count": row[1], "fetched_at": row[2]}
            for row in cursor.fetchall()
        ]

    def search(self, query: str, limit: int) -> list[dict[str, Any]]:
        """Accounts holding an item whose market or display name contains ``query``.

        Matching is case-insensitive. Each summary carries the number of
        matching items as ``matches``.
        """
        self._validate_connection()

        pattern = f"%{_escape_like(query.lower())}%"
        cursor = self.conn.execute(
            f"""
            SELECT s.account_id, s.item_count, s.fetched_at, COUNT(*) AS matches
            FROM {CacheTables.ITEMS} AS i
            JOIN {CacheTables.SNAPSHOTS} AS s ON s.account_id = i.account_id
            WHERE lower(i.market_name) LIKE ? ESCAPE '\\'
               OR lower(i.display_name) LIKE ? ESCAPE '\\'
            GROUP BY s.account_id
            ORDER BY matches DESC, s.account_id ASC
            LIMIT ?
            """,  # noqa: S608
            (pattern, pattern, limit),
        )
        return [
            {
                "account_id": row[0],
                "item_count": row[1],
                "fetched_at": row[2],
                "matches": row[3],
            }
            for row in cursor.fetchall()
        ]
