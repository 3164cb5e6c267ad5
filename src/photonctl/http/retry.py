"""Backoff schedule for transient control plane failures."""

from __future__ import annotations

import asyncio
import random
from collections.abc import Awaitable, Callable

import httpx

from photonctl.config.models import RetryConfig

RETRYABLE_EXCEPTIONS: tuple[type[httpx.HTTPError], ...] = (
    httpx.ConnectError,
    httpx.ConnectTimeout,
    httpx.ReadTimeout,
    httpx.RemoteProtocolError,
)


def retry_after_seconds(response: httpx.Response) -> float | None:
    """Seconds from a numeric ``Retry-After`` header, if the server sent one."""

    raw = response.headers.get("Retry-After")
    if not raw:
        return None
    try:
        return max(0.0, float(raw))
    except ValueError:
        return None


class RetryPolicy:
    def __init__(
        self,
        config: RetryConfig,
        *,
        sleep: Callable[[float], Awaitable[None]] = asyncio.sleep,
    ) -> None:
        self.config = config
        self._sleep = sleep

    @property
    def attempts(self) -> int:
        return max(1, self.config.max_attempts)

    def delay_for_attempt(self, attempt: int, *, retry_after: float | None = None) -> float:
        if retry_after is not None:
            return min(retry_after, self.config.max_delay)

        delay = min(self.config.base_delay * (2 ** max(0, attempt - 1)), self.config.max_delay)
        if self.config.jitter > 0:
            spread = delay * self.config.jitter
            delay = max(0.0, delay + random.uniform(-spread, spread))
        return delay

    def should_retry_status(self, status_code: int) -> bool:
        return status_code in self.config.retry_statuses

    def should_retry_exception(self, exc: Exception) -> bool:
        return isinstance(exc, RETRYABLE_EXCEPTIONS)

    async def wait(self, attempt: int, *, response: httpx.Response | None = None) -> None:
        retry_after = retry_after_seconds(response) if response is not None else None
        await self._sleep(self.delay_for_attempt(attempt, retry_after=retry_after))
