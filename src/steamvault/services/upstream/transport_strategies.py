"""Transport Strategy Pattern Implementation.

This module implements the Strategy pattern for reaching the upstream
inventory resource, supporting a direct call and any number of relay or
proxy intermediaries behind a common interface.

Design:
- TransportStrategy (ABC): named way of building a candidate URL
- DirectStrategy: calls the upstream inventory URL itself
- RelayStrategy: wraps the upstream URL in a relay URL template
- TransportStrategyList: ordered, configured sequence of strategies

The fetcher iterates the list without knowing which kinds it contains, so
operators reorder or add relays in configuration only.
"""

from __future__ import annotations

import logging
from abc import ABC, abstractmethod
from collections.abc import Iterator
from dataclasses import dataclass
from urllib.parse import quote

from steamvault.config.models.upstream_settings import StrategySettings, UpstreamSettings
from steamvault.shared.constants import SteamInventoryConfig, StrategyKinds
from steamvault.shared.errors import create_config_error

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ResolvedStrategy:
    """A strategy bound to one account: the concrete URL to request."""

    label: str
    url: str
    kind: str
    envelope_field: str | None = None


class TransportStrategy(ABC):
    """Abstract base class for transport strategies.

    Subclasses must implement:
        - kind: "direct" or "relay"
        - build_url(): produce the candidate URL for one account
    """

    def __init__(
        self,
        label: str,
        url_template: str,
        envelope_field: str | None = None,
    ) -> None:
        self.label = label
        self.url_template = url_template
        self.envelope_field = envelope_field

    @property
    @abstractmethod
    def kind(self) -> str:
        """The strategy kind."""
        ...

    @abstractmethod
    def build_url(self, account_id: str, target: str) -> str:
        """Build the candidate URL.

        Args:
            account_id: Validated account identifier
            target: Direct upstream inventory URL for the account

        Returns:
            URL to request for this strategy
        """
        ...

    def resolve(self, account_id: str, target: str) -> ResolvedStrategy:
        return ResolvedStrategy(
            label=self.label,
            url=self.build_url(account_id, target),
            kind=self.kind,
            envelope_field=self.envelope_field,
        )

    def _format(self, account_id: str, target: str) -> str:
        try:
            return self.url_template.format(
                target=target,
                target_encoded=quote(target, safe=""),
                account_id=account_id,
            )
        except (KeyError, IndexError, ValueError) as e:
            raise create_config_error(
                f"Invalid url_template for strategy '{self.label}': {e}",
                config_key="upstream.strategies",
                operation="resolve_strategy",
                original_error=e,
            ) from e

    def __repr__(self) -> str:
        return f"{type(self).__name__}(label={self.label!r})"


class DirectStrategy(TransportStrategy):
    """Request the upstream endpoint without an intermediary."""

    @property
    def kind(self) -> str:
        return StrategyKinds.DIRECT

    def build_url(self, account_id: str, target: str) -> str:
        return self._format(account_id, target)


class RelayStrategy(TransportStrategy):
    """Request the upstream endpoint through a relay/proxy URL."""

    @property
    def kind(self) -> str:
        return StrategyKinds.RELAY

    def build_url(self, account_id: str, target: str) -> str:
        url = self._format(account_id, target)
        if url == target:
            logger.warning("Relay strategy '%s' resolves to the direct URL", self.label)
        return url


_STRATEGY_TYPES: dict[str, type[TransportStrategy]] = {
    StrategyKinds.DIRECT: DirectStrategy,
    StrategyKinds.RELAY: RelayStrategy,
}


def strategy_from_settings(settings: StrategySettings) -> TransportStrategy:
    """Instantiate the strategy class for one configured entry."""
    strategy_type = _STRATEGY_TYPES[settings.kind]
    return strategy_type(
        label=settings.label,
        url_template=settings.url_template,
        envelope_field=settings.envelope_field,
    )


class TransportStrategyList:
    """Ordered sequence of transport strategies for one logical resource.

    Args:
        strategies: Strategies in priority order (most trusted first)
        base_url: Upstream origin, e.g. https://steamcommunity.com
        app_id: Upstream application id
        context_id: Upstream inventory context id
        language: Description language requested from upstream
        count: Maximum number of assets requested
    """

    def __init__(
        self,
        strategies: list[TransportStrategy],
        base_url: str = SteamInventoryConfig.BASE_URL,
        app_id: int = SteamInventoryConfig.DEFAULT_APP_ID,
        context_id: int = SteamInventoryConfig.DEFAULT_CONTEXT_ID,
        language: str = SteamInventoryConfig.DEFAULT_LANGUAGE,
        count: int = SteamInventoryConfig.DEFAULT_COUNT,
    ) -> None:
        labels = [strategy.label for strategy in strategies]
        if len(set(labels)) != len(labels):
            raise create_config_error(
                f"Strategy labels must be unique, got {labels}",
                config_key="upstream.strategies",
                operation="build_strategy_list",
            )

        self._strategies = list(strategies)
        self.base_url = base_url.rstrip("/")
        self.app_id = app_id
        self.context_id = context_id
        self.language = language
        self.count = count

    @classmethod
    def from_settings(cls, settings: UpstreamSettings) -> TransportStrategyList:
        return cls(
            strategies=[strategy_from_settings(s) for s in settings.enabled_strategies()],
            base_url=settings.base_url,
            app_id=settings.app_id,
            context_id=settings.context_id,
            language=settings.language,
            count=settings.count,
        )

    def target_url(self, account_id: str) -> str:
        """Direct upstream inventory URL for ``account_id``."""
        path = SteamInventoryConfig.INVENTORY_PATH.format(
            account_id=account_id,
            app_id=self.app_id,
            context_id=self.context_id,
        )
        return f"{self.base_url}{path}?l={self.language}&count={self.count}"

    def resolve(self, account_id: str) -> list[ResolvedStrategy]:
        """Bind every strategy to ``account_id`` in declared order."""
        target = self.target_url(account_id)
        return [strategy.resolve(account_id, target) for strategy in self._strategies]

    @property
    def labels(self) -> list[str]:
        return [strategy.label for strategy in self._strategies]

    def __iter__(self) -> Iterator[TransportStrategy]:
        return iter(self._strategies)

    def __len__(self) -> int:
        return len(self._strategies)
