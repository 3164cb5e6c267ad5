"""Live progress rendering for interactive waits.

Each wait runs its indicator as a separate asyncio task and stops it through
an ``asyncio.Event`` owned by that wait. :func:`running` sets the event and
awaits the task before control returns to the waiter, so no progress text can
be written after (or interleaved with) the caller's final output.
"""

from __future__ import annotations

import asyncio
import logging
import time
from abc import ABC, abstractmethod
from collections.abc import AsyncIterator, Callable
from contextlib import asynccontextmanager
from typing import Any, Protocol

from rich.console import Console
from rich.live import Live
from rich.text import Text

from photonctl.constants import PROGRESS_REFRESH_SECONDS
from photonctl.models.clusters import EntityState
from photonctl.models.tasks import Task

logger = logging.getLogger(__name__)

Clock = Callable[[], float]


class Progress(Protocol):
    def update(self, snapshot: Any) -> None: ...

    async def run(self, stop: asyncio.Event) -> None: ...


def format_elapsed(seconds: float) -> str:
    elapsed = max(0, int(seconds))
    return f"{elapsed // 3600:2d}h{(elapsed // 60) % 60:2d}m{elapsed % 60:2d}s"


def progress_bar(cursor: int, length: int) -> str:
    cursor = max(0, min(cursor, length))
    return "=" * cursor + " " * (length - cursor)


class ProgressIndicator(ABC):
    """Transient single-line status renderer; subclasses decide what the line says."""

    def __init__(
        self,
        *,
        console: Console | None = None,
        refresh_interval: float = PROGRESS_REFRESH_SECONDS,
        clock: Clock = time.monotonic,
    ) -> None:
        self.console = console or Console()
        self.refresh_interval = refresh_interval
        self._clock = clock

    @abstractmethod
    def update(self, snapshot: Any) -> None: ...

    @abstractmethod
    def render(self, elapsed: float) -> str | None: ...

    async def run(self, stop: asyncio.Event) -> None:
        start = self._clock()
        # transient=True erases the line on exit.
        with Live(console=self.console, transient=True, auto_refresh=False) as live:
            while not stop.is_set():
                line = self.render(self._clock() - start)
                if line is not None:
                    live.update(Text(line), refresh=True)
                try:
                    await asyncio.wait_for(stop.wait(), timeout=self.refresh_interval)
                except TimeoutError:
                    continue


class TaskProgress(ProgressIndicator):
    """Renders the latest task snapshot.

    Example line::

         0h 0m 3s [= ] CREATE_CLUSTER : CREATE_VMS | Step 1/1
    """

    def __init__(self, **kwargs: Any) -> None:
        super().__init__(**kwargs)
        self.task: Task | None = None

    def update(self, snapshot: Any) -> None:
        self.task = snapshot

    def render(self, elapsed: float) -> str | None:
        task = self.task
        if task is None:
            return None

        total = len(task.steps) + 1
        cursor = 0
        status = task.state.value
        started = task.started_step()
        if started is not None:
            cursor = started.sequence + 1
            status = f"{started.operation or task.operation} | Step {started.sequence + 1}/{len(task.steps)}"
        elif task.state.is_terminal:
            cursor = total

        operation = task.operation or "TASK"
        return f"{format_elapsed(elapsed)} [{progress_bar(cursor, total)}] {operation} : {status}"


class EntityProgress(ProgressIndicator):
    def __init__(self, kind: str, entity_id: str, **kwargs: Any) -> None:
        super().__init__(**kwargs)
        self.kind = kind
        self.entity_id = entity_id
        self.state: EntityState | None = None

    def update(self, snapshot: Any) -> None:
        self.state = EntityState.parse(getattr(snapshot, "state", None))

    def render(self, elapsed: float) -> str | None:
        state = self.state.value if self.state is not None else "WAITING"
        return f"{format_elapsed(elapsed)} {self.kind} {self.entity_id} : {state}"


@asynccontextmanager
async def running(progress: Progress | None) -> AsyncIterator[None]:
    """Run ``progress`` alongside the body and stop it, fully, on exit."""

    if progress is None:
        yield
        return

    stop = asyncio.Event()
    renderer = asyncio.create_task(progress.run(stop))
    try:
        yield
    finally:
        stop.set()
        try:
            await renderer
        except Exception as exc:
            # Never let a broken indicator replace the outcome of the wait.
            logger.warning("progress indicator failed: %s", exc)
