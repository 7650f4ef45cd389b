"""
SteamVault Constants Module

Centralized constants so magic values live in one place.
"""

from .cache import CacheDefaults, CacheTables, LeaderboardConfig, NormalizationDefaults
from .cli import CLICommands, CLIDefaults, CLIHelp
from .http_codes import HTTPHeaders, HTTPStatusCodes
from .upstream import (
    FailureReasons,
    ResponseMarkers,
    SteamInventoryConfig,
    StrategyKinds,
    UpstreamDefaults,
)

__all__ = [
    "CLICommands",
    "CLIDefaults",
    "CLIHelp",
    "CacheDefaults",
    "CacheTables",
    "FailureReasons",
    "HTTPHeaders",
    "HTTPStatusCodes",
    "LeaderboardConfig",
    "NormalizationDefaults",
    "ResponseMarkers",
    "SteamInventoryConfig",
    "StrategyKinds",
    "UpstreamDefaults",
]
