"""Cooperative cancellation for in-flight fetches.

A caller (for example an HTTP handler whose client disconnected) holds a
CancellationToken and calls ``cancel()``. The fetcher races each attempt
against the token and uses it for backoff sleeps, so a cancelled fetch
stops within one scheduling step instead of finishing its retry budget.
"""

from __future__ import annotations

import asyncio
import contextlib
from collections.abc import Awaitable
from typing import TypeVar

from steamvault.shared.errors import ErrorCode, ErrorContext, FetchCancelledError

T = TypeVar("T")


class CancellationToken:
    """Wraps an ``asyncio.Event`` that signals cancellation."""

    def __init__(self) -> None:
        self._event = asyncio.Event()

    def cancel(self) -> None:
        self._event.set()

    @property
    def cancelled(self) -> bool:
        return self._event.is_set()

    async def wait(self) -> None:
        """Block until the token is cancelled."""
        await self._event.wait()

    def raise_if_cancelled(self, operation: str = "fetch_inventory") -> None:
        if self.cancelled:
            raise FetchCancelledError(
                ErrorCode.OPERATION_CANCELLED,
                "Fetch cancelled by caller",
                ErrorContext(operation=operation),
            )

    async def sleep(self, delay: float) -> None:
        """Sleep for ``delay`` seconds unless cancelled first.

        Raises:
            FetchCancelledError: If the token is cancelled before or during the sleep
        """
        self.raise_if_cancelled("backoff")
        try:
            await asyncio.wait_for(self._event.wait(), timeout=delay)
        except asyncio.TimeoutError:
            return
        self.raise_if_cancelled("backoff")

    async def run(self, awaitable: Awaitable[T]) -> T:
        """Await ``awaitable`` unless the token is cancelled first.

        The losing attempt is cancelled and awaited so no request outlives
        the fetch that started it.

        Raises:
            FetchCancelledError: If the token wins the race
        """
        self.raise_if_cancelled()
        task = asyncio.ensure_future(awaitable)
        waiter = asyncio.ensure_future(self._event.wait())
        try:
            await asyncio.wait({task, waiter}, return_when=asyncio.FIRST_COMPLETED)
        finally:
            waiter.cancel()
            if not task.done():
                task.cancel()
                with contextlib.suppress(asyncio.CancelledError):
                    await task

        if task.cancelled():
            self.raise_if_cancelled()
            raise FetchCancelledError(
                ErrorCode.OPERATION_CANCELLED,
                "Upstream attempt was cancelled",
                ErrorContext(operation="fetch_inventory"),
            )
        return task.result()
