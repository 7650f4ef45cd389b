"""InventoryFetcher against a local aiohttp server.

These tests go through the real session, timeout and status handling
instead of patching ``_request``.
"""

from __future__ import annotations

import asyncio
import json
from collections import Counter
from collections.abc import AsyncGenerator

import pytest
import pytest_asyncio
from aiohttp import web
from aiohttp.test_utils import TestServer

from conftest import ACCOUNT_ID, SleepRecorder, make_inventory
from steamvault.config.models.upstream_settings import StrategySettings, UpstreamSettings
from steamvault.services.upstream.inventory_client import InventoryFetcher
from steamvault.shared.errors import AllStrategiesExhaustedError

HITS = web.AppKey("hits", Counter)


async def busy(request: web.Request) -> web.Response:
    request.app[HITS]["busy"] += 1
    return web.Response(status=503, text="try later")


async def slow(request: web.Request) -> web.Response:
    request.app[HITS]["slow"] += 1
    await asyncio.sleep(1.0)
    return web.Response(text="too late")


async def inventory(request: web.Request) -> web.Response:
    request.app[HITS]["ok"] += 1
    assert request.match_info["account_id"] == ACCOUNT_ID
    return web.Response(text=json.dumps(make_inventory("Festive Hat")), content_type="application/json")


@pytest_asyncio.fixture
async def server() -> AsyncGenerator[TestServer, None]:
    app = web.Application()
    app[HITS] = Counter()
    app.router.add_get("/busy/{account_id}", busy)
    app.router.add_get("/slow/{account_id}", slow)
    app.router.add_get("/ok/{account_id}", inventory)

    test_server = TestServer(app)
    await test_server.start_server()
    yield test_server
    await test_server.close()


def local_settings(server: TestServer, *routes: str, timeout: float, retry_attempts: int) -> UpstreamSettings:
    base = str(server.make_url("")).rstrip("/")
    return UpstreamSettings(
        strategies=[
            StrategySettings(label=route, url_template=f"{base}/{route}/{{account_id}}") for route in routes
        ],
        timeout=timeout,
        retry_attempts=retry_attempts,
        retry_delay=0.5,
        retry_max_delay=8.0,
    )


class TestLocalServer:
    @pytest.mark.asyncio
    async def test_503_is_retried_then_next_strategy_used(self, server: TestServer) -> None:
        # Given
        sleeps = SleepRecorder()
        settings = local_settings(server, "busy", "ok", timeout=5.0, retry_attempts=2)

        # When
        async with InventoryFetcher(settings, sleep=sleeps) as fetcher:
            document = await fetcher.fetch(ACCOUNT_ID)

        # Then
        assert document.source == "ok"
        assert document.raw == make_inventory("Festive Hat")
        assert server.app[HITS]["busy"] == 2
        assert server.app[HITS]["ok"] == 1
        assert sleeps.delays == [0.5]

    @pytest.mark.asyncio
    async def test_slow_response_times_out(self, server: TestServer) -> None:
        # Given
        settings = local_settings(server, "slow", timeout=0.05, retry_attempts=1)

        # When
        async with InventoryFetcher(settings, sleep=SleepRecorder()) as fetcher:
            with pytest.raises(AllStrategiesExhaustedError) as exc_info:
                await fetcher.fetch(ACCOUNT_ID)

        # Then
        assert exc_info.value.reasons == ["slow: timeout"]
