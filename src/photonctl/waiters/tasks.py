"""Blocking waits on server-side tasks."""

from __future__ import annotations

import asyncio
import logging
import time
from collections.abc import Awaitable, Callable

from rich.console import Console

from photonctl.constants import TASK_POLL_INTERVAL_SECONDS
from photonctl.errors import TaskError, WaitTimeoutError
from photonctl.models.tasks import Task, TaskState
from photonctl.waiters.progress import Clock, Progress, TaskProgress, running

logger = logging.getLogger(__name__)

FetchTask = Callable[[str], Awaitable[Task]]
Sleep = Callable[[float], Awaitable[None]]


class TaskWaiter:
    """Poll a task until it is ``COMPLETED`` or ``ERROR``.

    A failing fetch is not retried here: the error propagates on the first
    failure. ``timeout=None`` waits for as long as the server takes.
    """

    def __init__(
        self,
        fetch_task: FetchTask,
        *,
        poll_interval: float = TASK_POLL_INTERVAL_SECONDS,
        timeout: float | None = None,
        progress: Progress | None = None,
        clock: Clock = time.monotonic,
        sleep: Sleep = asyncio.sleep,
    ) -> None:
        if poll_interval <= 0:
            raise ValueError("poll_interval must be positive")
        if timeout is not None and timeout <= 0:
            raise ValueError("timeout must be positive or None")
        self._fetch_task = fetch_task
        self.poll_interval = poll_interval
        self.timeout = timeout
        self._progress = progress
        self._clock = clock
        self._sleep = sleep

    async def wait(self, task_id: str) -> Task:
        if not task_id:
            raise ValueError("task_id is required")

        start = self._clock()
        last_state: TaskState | None = None
        async with running(self._progress):
            while True:
                task = await self._fetch_task(task_id)
                if self._progress is not None:
                    self._progress.update(task)

                if task.state is not last_state:
                    logger.debug("task %s (%s) is %s", task_id, task.operation, task.state)
                    last_state = task.state

                if task.state is TaskState.COMPLETED:
                    return task
                if task.state is TaskState.ERROR:
                    raise TaskError(task)

                if self.timeout is not None and self._clock() - start >= self.timeout:
                    raise WaitTimeoutError(f"task {task_id} to complete", self.timeout)

                await self._sleep(self.poll_interval)


async def wait_for_task(
    fetch_task: FetchTask,
    task_id: str,
    *,
    interactive: bool = False,
    console: Console | None = None,
    poll_interval: float = TASK_POLL_INTERVAL_SECONDS,
    timeout: float | None = None,
    clock: Clock = time.monotonic,
    sleep: Sleep = asyncio.sleep,
) -> Task:
    """Wait for ``task_id`` to finish and return the completed task.

    Progress is only rendered when ``interactive`` is true, so machine-readable
    callers see nothing but their own final output.
    """

    progress = TaskProgress(console=console, clock=clock) if interactive else None
    waiter = TaskWaiter(
        fetch_task,
        poll_interval=poll_interval,
        timeout=timeout,
        progress=progress,
        clock=clock,
        sleep=sleep,
    )
    return await waiter.wait(task_id)


async def wait_for_task_completion(
    fetch_task: FetchTask,
    task_id: str,
    *,
    interactive: bool = False,
    console: Console | None = None,
    poll_interval: float = TASK_POLL_INTERVAL_SECONDS,
    timeout: float | None = None,
    clock: Clock = time.monotonic,
    sleep: Sleep = asyncio.sleep,
) -> str:
    """Wait for ``task_id`` and return the id of the entity it acted upon."""

    task = await wait_for_task(
        fetch_task,
        task_id,
        interactive=interactive,
        console=console,
        poll_interval=poll_interval,
        timeout=timeout,
        clock=clock,
        sleep=sleep,
    )
    return task.entity.id
