"""SteamVault Configuration Module

Unified access to configuration models and settings loading.
"""

from __future__ import annotations

from .loader import get_config, load_settings, reload_config
from .models import (
    CacheSettings,
    LoggingSettings,
    SecuritySettings,
    Settings,
    StrategySettings,
    UpstreamSettings,
)

__all__ = [
    "CacheSettings",
    "LoggingSettings",
    "SecuritySettings",
    "Settings",
    "StrategySettings",
    "UpstreamSettings",
    "get_config",
    "load_settings",
    "reload_config",
]
