"""Schema migration for the SQLite store."""

from .manager import MigrationManager

__all__ = ["MigrationManager"]
