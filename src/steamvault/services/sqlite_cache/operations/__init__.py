"""SQLite store operations."""

from .base import BaseOperation
from .insert import InsertOperations
from .query import QueryOperations
from .snapshots import SnapshotOperations
from .update import UpdateOperations

__all__ = [
    "BaseOperation",
    "InsertOperations",
    "QueryOperations",
    "SnapshotOperations",
    "UpdateOperations",
]
