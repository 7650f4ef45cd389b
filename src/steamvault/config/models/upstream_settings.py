"""Upstream configuration models.

This module contains configuration models for the Steam inventory
upstream: the ordered transport strategy list plus timeout, retry and
rate-limit behavior of the resilient fetcher.
"""

from __future__ import annotations

from pydantic import BaseModel, Field, field_validator

from steamvault.shared.constants import (
    SteamInventoryConfig,
    StrategyKinds,
    UpstreamDefaults,
)


class StrategySettings(BaseModel):
    """One named way of reaching the upstream inventory resource.

    ``url_template`` is formatted with ``target`` (the direct inventory
    URL), ``target_encoded`` (the same URL percent-encoded for relays) and
    ``account_id``.
    """

    label: str = Field(min_length=1, description="Name used in diagnostics")
    kind: str = Field(default=StrategyKinds.RELAY, description="direct or relay")
    url_template: str = Field(min_length=1, description="Candidate URL template")
    envelope_field: str | None = Field(
        default=None,
        description="JSON field a relay wraps the upstream body in",
    )
    enabled: bool = Field(default=True)

    @field_validator("kind")
    @classmethod
    def _check_kind(cls, value: str) -> str:
        if value not in (StrategyKinds.DIRECT, StrategyKinds.RELAY):
            msg = f"kind must be '{StrategyKinds.DIRECT}' or '{StrategyKinds.RELAY}', got {value!r}"
            raise ValueError(msg)
        return value


def _default_strategies() -> list[StrategySettings]:
    return [
        StrategySettings(
            label="direct",
            kind=StrategyKinds.DIRECT,
            url_template="{target}",
        ),
        StrategySettings(
            label="allorigins-raw",
            url_template="https://api.allorigins.win/raw?url={target_encoded}",
        ),
        StrategySettings(
            label="corsproxy",
            url_template="https://corsproxy.io/?url={target_encoded}",
        ),
        StrategySettings(
            label="allorigins-get",
            url_template="https://api.allorigins.win/get?url={target_encoded}",
            envelope_field="contents",
        ),
    ]


class UpstreamSettings(BaseModel):
    """Resilient fetcher configuration.

    Strategies are tried in declared order, most trusted first. Operators
    add, remove or reorder relays here without touching fetch logic.
    """

    base_url: str = Field(default=SteamInventoryConfig.BASE_URL)
    app_id: int = Field(default=SteamInventoryConfig.DEFAULT_APP_ID, gt=0)
    context_id: int = Field(default=SteamInventoryConfig.DEFAULT_CONTEXT_ID, gt=0)
    language: str = Field(default=SteamInventoryConfig.DEFAULT_LANGUAGE)
    count: int = Field(default=SteamInventoryConfig.DEFAULT_COUNT, gt=0)

    strategies: list[StrategySettings] = Field(default_factory=_default_strategies)

    timeout: float = Field(
        default=UpstreamDefaults.TIMEOUT_SECONDS,
        gt=0,
        description="Per-attempt timeout in seconds",
    )
    retry_attempts: int = Field(
        default=UpstreamDefaults.RETRY_ATTEMPTS,
        ge=1,
        description="Total attempts per strategy on transient failures",
    )
    retry_delay: float = Field(
        default=UpstreamDefaults.RETRY_DELAY,
        ge=0,
        description="Base backoff delay in seconds, doubled each attempt",
    )
    retry_max_delay: float = Field(
        default=UpstreamDefaults.RETRY_MAX_DELAY,
        ge=0,
        description="Backoff ceiling in seconds",
    )
    max_requests: float = Field(
        default=UpstreamDefaults.MAX_REQUESTS,
        gt=0,
        description="Outbound requests allowed per time_period",
    )
    time_period: float = Field(
        default=UpstreamDefaults.TIME_PERIOD_SECONDS,
        gt=0,
        description="Rate limit window in seconds",
    )
    headers: dict[str, str] = Field(
        default_factory=lambda: dict(UpstreamDefaults.BROWSER_HEADERS),
    )

    def enabled_strategies(self) -> list[StrategySettings]:
        """Strategies in declared order, skipping disabled ones."""
        return [strategy for strategy in self.strategies if strategy.enabled]


__all__ = [
    "StrategySettings",
    "UpstreamSettings",
]
