"""Tests for the transport strategy list."""

from __future__ import annotations

from urllib.parse import quote

import pytest

from steamvault.config.models.upstream_settings import StrategySettings, UpstreamSettings
from steamvault.services.upstream.transport_strategies import (
    DirectStrategy,
    RelayStrategy,
    TransportStrategyList,
)
from steamvault.shared.errors import ApplicationError

ACCOUNT = "76561198000000000"
TARGET = f"https://steamcommunity.com/inventory/{ACCOUNT}/304930/2?l=english&count=5000"


class TestTargetUrl:
    def test_default_target(self) -> None:
        strategies = TransportStrategyList.from_settings(UpstreamSettings())

        assert strategies.target_url(ACCOUNT) == TARGET

    def test_custom_app_and_context(self) -> None:
        settings = UpstreamSettings(base_url="https://example.test/", app_id=730, context_id=6, count=100)

        url = TransportStrategyList.from_settings(settings).target_url(ACCOUNT)

        assert url == f"https://example.test/inventory/{ACCOUNT}/730/6?l=english&count=100"


class TestResolve:
    def test_default_strategies_in_declared_order(self) -> None:
        # When
        resolved = TransportStrategyList.from_settings(UpstreamSettings()).resolve(ACCOUNT)

        # Then
        assert [r.label for r in resolved] == ["direct", "allorigins-raw", "corsproxy", "allorigins-get"]
        assert resolved[0].url == TARGET
        assert resolved[0].kind == "direct"
        assert resolved[1].url == f"https://api.allorigins.win/raw?url={quote(TARGET, safe='')}"
        assert resolved[3].envelope_field == "contents"

    def test_account_id_placeholder(self) -> None:
        strategies = TransportStrategyList(
            [RelayStrategy("mirror", "https://mirror.test/inv/{account_id}")],
        )

        assert strategies.resolve(ACCOUNT)[0].url == f"https://mirror.test/inv/{ACCOUNT}"

    def test_from_settings_builds_strategy_types(self, upstream_settings: UpstreamSettings) -> None:
        strategies = list(TransportStrategyList.from_settings(upstream_settings))

        assert isinstance(strategies[0], DirectStrategy)
        assert all(isinstance(s, RelayStrategy) for s in strategies[1:])


class TestValidation:
    def test_duplicate_labels_rejected(self) -> None:
        with pytest.raises(ApplicationError):
            TransportStrategyList(
                [DirectStrategy("same", "{target}"), RelayStrategy("same", "https://r/{target_encoded}")]
            )

    def test_unknown_placeholder_is_config_error(self) -> None:
        settings = UpstreamSettings(
            strategies=[StrategySettings(label="broken", url_template="https://r/{nonsense}")],
        )
        strategies = TransportStrategyList.from_settings(settings)

        with pytest.raises(ApplicationError, match="broken"):
            strategies.resolve(ACCOUNT)

    def test_empty_list_resolves_to_nothing(self) -> None:
        strategies = TransportStrategyList([])

        assert strategies.resolve(ACCOUNT) == []
        assert len(strategies) == 0
