"""SQLite store internals with modular operations.

Query, insert, update and snapshot operations, schema migration and
transaction management used by ``steamvault.services.sqlite_cache_db``.
"""

from steamvault.services.sqlite_cache.migration.manager import MigrationManager
from steamvault.services.sqlite_cache.transaction.manager import TransactionManager

__all__ = ["MigrationManager", "TransactionManager"]
