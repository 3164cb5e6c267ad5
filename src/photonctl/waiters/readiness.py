"""Blocking waits on an entity reaching its ready state."""

from __future__ import annotations

import asyncio
import logging
import time
from collections.abc import Awaitable, Callable
from typing import Generic, TypeVar

from rich.console import Console

from photonctl.constants import (
    ENTITY_POLL_INTERVAL_SECONDS,
    ENTITY_RETRY_BUDGET,
    ENTITY_TIMEOUT_SECONDS,
)
from photonctl.errors import EntityError, FetchRetriesExhaustedError, PhotonError, WaitTimeoutError
from photonctl.models.clusters import EntityState
from photonctl.waiters.progress import Clock, EntityProgress, Progress, running
from photonctl.waiters.tasks import Sleep

logger = logging.getLogger(__name__)

EntityT = TypeVar("EntityT")


class ReadinessWaiter(Generic[EntityT]):
    """Poll an entity until its ``state`` is ``READY``.

    Ends with the entity on ``READY``, or raises :class:`EntityError` on
    ``ERROR``, :class:`FetchRetriesExhaustedError` once more than
    ``retry_budget`` consecutive fetches fail, and :class:`WaitTimeoutError`
    when ``timeout`` seconds pass without either state.
    """

    def __init__(
        self,
        fetch: Callable[[str], Awaitable[EntityT]],
        *,
        kind: str = "Entity",
        poll_interval: float = ENTITY_POLL_INTERVAL_SECONDS,
        timeout: float = ENTITY_TIMEOUT_SECONDS,
        retry_budget: int = ENTITY_RETRY_BUDGET,
        progress: Progress | None = None,
        clock: Clock = time.monotonic,
        sleep: Sleep = asyncio.sleep,
    ) -> None:
        if poll_interval <= 0:
            raise ValueError("poll_interval must be positive")
        if timeout <= 0:
            raise ValueError("timeout must be positive")
        if retry_budget < 0:
            raise ValueError("retry_budget cannot be negative")
        self._fetch = fetch
        self.kind = kind
        self.poll_interval = poll_interval
        self.timeout = timeout
        self.retry_budget = retry_budget
        self._progress = progress
        self._clock = clock
        self._sleep = sleep

    async def wait(self, entity_id: str) -> EntityT:
        if not entity_id:
            raise ValueError("entity_id is required")

        start = self._clock()
        failures = 0
        async with running(self._progress):
            while True:
                try:
                    entity = await self._fetch(entity_id)
                except PhotonError as exc:
                    failures += 1
                    if failures > self.retry_budget:
                        raise FetchRetriesExhaustedError(self.kind, entity_id, failures) from exc
                    logger.warning(
                        "fetching %s %s failed (%d/%d): %s",
                        self.kind,
                        entity_id,
                        failures,
                        self.retry_budget,
                        exc,
                    )
                else:
                    failures = 0
                    if self._progress is not None:
                        self._progress.update(entity)

                    state = EntityState.parse(getattr(entity, "state", None))
                    if state is EntityState.READY:
                        logger.debug("%s %s is READY", self.kind, entity_id)
                        return entity
                    if state is EntityState.ERROR:
                        raise EntityError(self.kind, entity_id)

                if self._clock() - start >= self.timeout:
                    raise WaitTimeoutError(f"{self.kind} {entity_id} to enter READY state", self.timeout)

                await self._sleep(self.poll_interval)


async def wait_for_entity_ready(
    fetch: Callable[[str], Awaitable[EntityT]],
    entity_id: str,
    *,
    kind: str = "Entity",
    interactive: bool = False,
    console: Console | None = None,
    poll_interval: float = ENTITY_POLL_INTERVAL_SECONDS,
    timeout: float = ENTITY_TIMEOUT_SECONDS,
    retry_budget: int = ENTITY_RETRY_BUDGET,
    clock: Clock = time.monotonic,
    sleep: Sleep = asyncio.sleep,
) -> EntityT:
    progress = EntityProgress(kind, entity_id, console=console, clock=clock) if interactive else None
    waiter = ReadinessWaiter(
        fetch,
        kind=kind,
        poll_interval=poll_interval,
        timeout=timeout,
        retry_budget=retry_budget,
        progress=progress,
        clock=clock,
        sleep=sleep,
    )
    return await waiter.wait(entity_id)
