"""SteamVault: resilient Steam inventory fetching with a SQLite cache-aside store."""

__version__ = "1.0.0"
