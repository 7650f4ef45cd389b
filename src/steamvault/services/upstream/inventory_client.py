"""Resilient inventory fetcher.

This module retrieves one account's inventory through an ordered list of
transport strategies. Each strategy gets its own retry budget for
transient failures; a strategy whose final response is unusable is
abandoned and the next one is tried. Only one aggregated error ever
reaches the caller.
"""

from __future__ import annotations

import asyncio
import logging
import re
import time
from collections.abc import Awaitable, Callable

import aiohttp
from aiolimiter import AsyncLimiter
from tenacity import (
    AsyncRetrying,
    before_sleep_log,
    retry_if_exception_type,
    stop_after_attempt,
    wait_exponential,
)

from steamvault.config.models.upstream_settings import UpstreamSettings
from steamvault.services.upstream.cancellation import CancellationToken
from steamvault.services.upstream.inventory_models import InventoryDocument
from steamvault.services.upstream.response_validator import ResponseValidator
from steamvault.services.upstream.transport_strategies import (
    ResolvedStrategy,
    TransportStrategyList,
)
from steamvault.shared.constants import FailureReasons, SteamInventoryConfig, UpstreamDefaults
from steamvault.shared.errors import (
    AllStrategiesExhaustedError,
    ErrorCode,
    ErrorContext,
    InvalidIdentifierError,
    InventoryNotFoundError,
    StrategyExhaustedError,
    TransientUpstreamError,
)
from steamvault.shared.logging import (
    log_api_call,
    log_operation_error,
    log_operation_start,
    log_operation_success,
)

logger = logging.getLogger(__name__)

_ACCOUNT_ID_RE = re.compile(SteamInventoryConfig.ACCOUNT_ID_PATTERN)

SleepFunc = Callable[[float], Awaitable[None]]


def validate_account_id(account_id: object) -> str:
    """Return ``account_id`` if it is exactly 17 ASCII digits.

    Raises:
        InvalidIdentifierError: For any other value
    """
    if not isinstance(account_id, str) or _ACCOUNT_ID_RE.fullmatch(account_id) is None:
        raise InvalidIdentifierError(str(account_id))
    return account_id


class InventoryFetcher:
    """Fetches inventory documents through fallback transport strategies.

    Args:
        settings: Upstream configuration (strategies, timeout, retries, rate limit)
        validator: Response classifier
        session: Optional pre-built aiohttp session; the fetcher closes only
            sessions it created itself
        sleep: Optional backoff sleep, used instead of the cancellation-aware
            default (tests inject a recorder here)
    """

    def __init__(
        self,
        settings: UpstreamSettings | None = None,
        *,
        validator: ResponseValidator | None = None,
        session: aiohttp.ClientSession | None = None,
        sleep: SleepFunc | None = None,
    ) -> None:
        if settings is None:
            from steamvault.config import get_config

            settings = get_config().upstream

        self.settings = settings
        self.strategies = TransportStrategyList.from_settings(settings)
        self.validator = validator or ResponseValidator()

        self._session = session
        self._owns_session = session is None
        self._sleep = sleep
        self._rate_limiter = AsyncLimiter(settings.max_requests, settings.time_period)
        self._timeout = aiohttp.ClientTimeout(total=settings.timeout)

    async def _get_session(self) -> aiohttp.ClientSession:
        if self._session is None or self._session.closed:
            self._session = aiohttp.ClientSession(headers=dict(self.settings.headers))
            self._owns_session = True
            logger.debug("Inventory fetcher session created")
        return self._session

    async def close(self) -> None:
        """Close the HTTP session if this fetcher created it."""
        if self._session is not None and self._owns_session and not self._session.closed:
            await self._session.close()
        self._session = None

    async def __aenter__(self) -> InventoryFetcher:
        return self

    async def __aexit__(self, exc_type: object, exc_val: object, exc_tb: object) -> None:
        await self.close()

    async def fetch(
        self,
        account_id: str,
        cancel_token: CancellationToken | None = None,
    ) -> InventoryDocument:
        """Fetch the inventory document for ``account_id``.

        Args:
            account_id: 17-digit account identifier
            cancel_token: Optional token the caller may cancel

        Returns:
            InventoryDocument tagged with the label of the strategy that produced it

        Raises:
            InvalidIdentifierError: Malformed identifier, before any network I/O
            InventoryNotFoundError: Every strategy returned a document without assets
            AllStrategiesExhaustedError: Every strategy failed
            FetchCancelledError: The token was cancelled
        """
        account_id = validate_account_id(account_id)
        context = {"account_id": account_id, "strategies": len(self.strategies)}
        log_operation_start(logger, "fetch_inventory", context)
        start = time.perf_counter()

        failures: list[StrategyExhaustedError] = []
        for strategy in self.strategies.resolve(account_id):
            if cancel_token is not None:
                cancel_token.raise_if_cancelled()

            try:
                document = await self._fetch_with_strategy(strategy, cancel_token)
            except StrategyExhaustedError as e:
                log_operation_error(logger, e, operation="fetch_inventory", level=logging.WARNING)
                failures.append(e)
                continue

            log_operation_success(
                logger,
                "fetch_inventory",
                (time.perf_counter() - start) * 1000,
                result_info={"source": strategy.label, "assets": len(document.assets)},
                context=context,
            )
            return document

        error = self._exhausted(account_id, failures)
        log_operation_error(logger, error, operation="fetch_inventory")
        raise error

    def _exhausted(
        self,
        account_id: str,
        failures: list[StrategyExhaustedError],
    ) -> AllStrategiesExhaustedError:
        context = ErrorContext(
            operation="fetch_inventory",
            additional_data={"account_id": account_id, "attempted": len(failures)},
        )
        if failures and all(f.reason == FailureReasons.UNEXPECTED_SHAPE for f in failures):
            return InventoryNotFoundError(failures, context)
        return AllStrategiesExhaustedError(failures, context)

    async def _fetch_with_strategy(
        self,
        strategy: ResolvedStrategy,
        cancel_token: CancellationToken | None,
    ) -> InventoryDocument:
        """Run one strategy to a verdict.

        Raises:
            StrategyExhaustedError: On soft or hard failure of this strategy
        """
        context = ErrorContext(
            operation="fetch_strategy",
            additional_data={"strategy": strategy.label},
        )
        retrying = AsyncRetrying(
            stop=stop_after_attempt(self.settings.retry_attempts),
            wait=wait_exponential(
                multiplier=self.settings.retry_delay,
                max=self.settings.retry_max_delay,
            ),
            retry=retry_if_exception_type(TransientUpstreamError),
            before_sleep=before_sleep_log(logger, logging.DEBUG),
            sleep=lambda delay: self._backoff(delay, cancel_token),
            reraise=True,
        )

        try:
            status, body = await retrying(self._attempt, strategy, cancel_token)
        except TransientUpstreamError as e:
            if e.status is None:
                raise StrategyExhaustedError(strategy.label, e.message, context, e) from e
            # Retryable status persisted past the budget
            status, body = e.status, e.body

        result = self.validator.validate(
            status,
            body,
            envelope_field=strategy.envelope_field,
            source=strategy.label,
        )
        if result.is_success and result.document is not None:
            return result.document

        raise StrategyExhaustedError(strategy.label, result.reason or "unknown", context)

    async def _backoff(self, delay: float, cancel_token: CancellationToken | None) -> None:
        if self._sleep is not None:
            await self._sleep(delay)
            if cancel_token is not None:
                cancel_token.raise_if_cancelled("backoff")
        elif cancel_token is not None:
            await cancel_token.sleep(delay)
        else:
            await asyncio.sleep(delay)

    async def _attempt(
        self,
        strategy: ResolvedStrategy,
        cancel_token: CancellationToken | None,
    ) -> tuple[int, str]:
        if cancel_token is not None:
            return await cancel_token.run(self._attempt_once(strategy))
        return await self._attempt_once(strategy)

    async def _attempt_once(self, strategy: ResolvedStrategy) -> tuple[int, str]:
        """Issue one request and classify transport-level failures.

        Raises:
            TransientUpstreamError: Timeout, connection error or retryable status
        """
        context = ErrorContext(
            operation="upstream_request",
            additional_data={"strategy": strategy.label},
        )
        start = time.perf_counter()
        try:
            status, body = await self._request(strategy.url)
        except asyncio.TimeoutError as e:
            log_api_call(logger, strategy.label, context={"error": FailureReasons.TIMEOUT})
            raise TransientUpstreamError(
                ErrorCode.UPSTREAM_TIMEOUT,
                FailureReasons.TIMEOUT,
                context,
                e,
            ) from e
        except aiohttp.ClientError as e:
            log_api_call(logger, strategy.label, context={"error": type(e).__name__})
            raise TransientUpstreamError(
                ErrorCode.UPSTREAM_CONNECTION_ERROR,
                FailureReasons.CONNECTION_ERROR,
                context,
                e,
            ) from e

        log_api_call(
            logger,
            strategy.label,
            status_code=status,
            duration_ms=(time.perf_counter() - start) * 1000,
        )

        if status in UpstreamDefaults.RETRYABLE_STATUSES:
            raise TransientUpstreamError(
                ErrorCode.UPSTREAM_TRANSIENT,
                FailureReasons.HTTP_STATUS.format(status=status),
                context,
                status=status,
                body=body,
            )
        return status, body

    async def _request(self, url: str) -> tuple[int, str]:
        """GET ``url`` and return (status, body text)."""
        session = await self._get_session()
        async with self._rate_limiter:
            async with session.get(url, timeout=self._timeout) as response:
                body = await response.text(errors="replace")
                return response.status, body
