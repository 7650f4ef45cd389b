"""Configuration domain models."""

from .app_settings import LoggingSettings, SecuritySettings
from .cache_settings import CacheSettings
from .settings import Settings
from .upstream_settings import StrategySettings, UpstreamSettings

__all__ = [
    "CacheSettings",
    "LoggingSettings",
    "SecuritySettings",
    "Settings",
    "StrategySettings",
    "UpstreamSettings",
]
