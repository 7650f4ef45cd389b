"""
Pytest configuration and shared fixtures for SteamVault tests.
"""

from __future__ import annotations

import json
import logging
from collections.abc import Generator
from pathlib import Path
from typing import Any

import pytest

from steamvault.config.models.upstream_settings import StrategySettings, UpstreamSettings
from steamvault.services.sqlite_cache_db import SQLiteCacheDB
from steamvault.services.upstream.inventory_client import InventoryFetcher

ACCOUNT_ID = "76561198000000000"
OTHER_ACCOUNT_ID = "76561198000000001"
SECRET = "s3cret-token"  # pragma: allowlist secret
TTL_MS = 600_000


class FakeClock:
    """Settable epoch-milliseconds clock."""

    def __init__(self, now: int = 0) -> None:
        self.now = now

    def __call__(self) -> int:
        return self.now

    def advance(self, ms: int) -> None:
        self.now += ms


class SleepRecorder:
    """Backoff sleep that records delays instead of waiting."""

    def __init__(self) -> None:
        self.delays: list[float] = []

    async def __call__(self, delay: float) -> None:
        self.delays.append(delay)


def make_inventory(*names: str) -> dict[str, Any]:
    """Build an upstream-shaped inventory with one asset per name."""
    assets = []
    descriptions = []
    for index, name in enumerate(names, start=1):
        assets.append(
            {
                "appid": 304930,
                "contextid": "2",
                "assetid": str(1000 + index),
                "classid": str(index),
                "instanceid": "0",
                "amount": "1",
            }
        )
        descriptions.append(
            {
                "classid": str(index),
                "instanceid": "0",
                "market_hash_name": name,
                "name": name,
                "type": "Rare Hat",
                "icon_url": f"icon-{index}",
            }
        )
    return {
        "assets": assets,
        "descriptions": descriptions,
        "total_inventory_count": len(assets),
        "success": 1,
    }


@pytest.fixture
def sample_inventory() -> dict[str, Any]:
    return make_inventory("Festive Hat", "Golden Crate")


@pytest.fixture
def sample_inventory_body(sample_inventory: dict[str, Any]) -> str:
    return json.dumps(sample_inventory)


@pytest.fixture
def upstream_settings() -> UpstreamSettings:
    """Three strategies, no real delays."""
    return UpstreamSettings(
        strategies=[
            StrategySettings(label="direct", kind="direct", url_template="{target}"),
            StrategySettings(label="relay-a", url_template="https://relay-a.test/raw?url={target_encoded}"),
            StrategySettings(label="relay-b", url_template="https://relay-b.test/?{target_encoded}"),
        ],
        timeout=1.0,
        retry_attempts=3,
        retry_delay=0.5,
        retry_max_delay=8.0,
    )


@pytest.fixture
def sleep_recorder() -> SleepRecorder:
    return SleepRecorder()


@pytest.fixture
def fetcher(upstream_settings: UpstreamSettings, sleep_recorder: SleepRecorder) -> InventoryFetcher:
    return InventoryFetcher(upstream_settings, sleep=sleep_recorder)


@pytest.fixture
def clock() -> FakeClock:
    return FakeClock()


@pytest.fixture
def store(tmp_path: Path, clock: FakeClock) -> Generator[SQLiteCacheDB, None, None]:
    cache = SQLiteCacheDB(
        tmp_path / "cache.db",
        ttl_ms=TTL_MS,
        secret_token=SECRET,
        clock=clock,
    )
    yield cache
    cache.close()


@pytest.fixture(autouse=True)
def _restore_package_logger() -> Generator[None, None, None]:
    """Undo handler and propagation changes made by setup_structured_logger."""
    logger = logging.getLogger("steamvault")
    handlers = list(logger.handlers)
    level = logger.level
    propagate = logger.propagate
    yield
    logger.handlers[:] = handlers
    logger.setLevel(level)
    logger.propagate = propagate
