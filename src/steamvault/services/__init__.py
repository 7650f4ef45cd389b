"""SteamVault services: upstream fetching, persistence and boundary operations."""

from steamvault.services.cache_models import CacheEntry
from steamvault.services.inventory_service import InventoryService
from steamvault.services.sqlite_cache_db import SQLiteCacheDB

__all__ = [
    "CacheEntry",
    "InventoryService",
    "SQLiteCacheDB",
]
