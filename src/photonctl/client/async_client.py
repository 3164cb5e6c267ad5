from __future__ import annotations

import asyncio
import time
from collections.abc import Awaitable, Callable, Mapping
from contextlib import asynccontextmanager
from pathlib import Path
from typing import Any

import httpx
from rich.console import Console

from photonctl.config import ConfigInput, PhotonConfig, RetryConfig, WaitConfig, load_config
from photonctl.errors import ConfigError
from photonctl.http import PhotonTransport
from photonctl.http.transport import RequestParams
from photonctl.models.clusters import Cluster
from photonctl.models.tasks import Task
from photonctl.services import ClustersService, TasksService
from photonctl.settings import RuntimeSettings
from photonctl.waiters import wait_for_entity_ready, wait_for_task as wait_for_task_result


def _secret_to_str(value: object) -> str | None:
    if value is None:
        return None
    getter = getattr(value, "get_secret_value", None)
    if callable(getter):
        secret = getter()
        return str(secret) if secret else None
    raw = str(value)
    return raw if raw else None


class AsyncPhotonClient:
    """Async control plane client.

    Example:
        >>> import asyncio
        >>> from photonctl.client import AsyncPhotonClient
        >>> async def demo() -> None:
        ...     async with AsyncPhotonClient(target="https://photon.example:9000") as client:
        ...         task = await client.clusters.delete("cluster-1")
        ...         await client.wait_for_task(task.id)
        >>> asyncio.run(demo())
    """

    def __init__(
        self,
        config: ConfigInput | None = None,
        *,
        config_path: str | Path | None = None,
        target: str | None = None,
        token: str | None = None,
        ignore_certificate: bool | None = None,
        request_timeout_seconds: float | None = None,
        retries: RetryConfig | None = None,
        waits: WaitConfig | None = None,
        console: Console | None = None,
        clock: Callable[[], float] = time.monotonic,
        sleep: Callable[[float], Awaitable[None]] = asyncio.sleep,
        http_client: httpx.AsyncClient | None = None,
    ) -> None:
        self._runtime = RuntimeSettings()
        resolved = load_config(config, config_path=config_path)
        self._resolved_config = resolved
        self.config: PhotonConfig = resolved.data

        self.target = target or self._runtime.target or self.config.cloud_target
        if not self.target and http_client is None:
            raise ConfigError("no control plane endpoint configured; set 'cloudTarget' or PHOTON_TARGET")

        self.token = token or _secret_to_str(self._runtime.token) or _secret_to_str(self.config.token)
        self.ignore_certificate = (
            ignore_certificate
            if ignore_certificate is not None
            else (
                self._runtime.ignore_certificate
                if self._runtime.ignore_certificate is not None
                else self.config.ignore_certificate
            )
        )
        self.request_timeout_seconds = (
            request_timeout_seconds
            if request_timeout_seconds is not None
            else (
                self._runtime.request_timeout_seconds
                if self._runtime.request_timeout_seconds is not None
                else self.config.request_timeout_seconds
            )
        )
        self.waits = waits or self.config.waits
        self.console = console
        self._clock = clock
        self._sleep = sleep

        self._transport = PhotonTransport(
            base_url=self.target or "",
            timeout=self.request_timeout_seconds,
            verify_tls=not self.ignore_certificate,
            retry_config=retries or self.config.retry,
            token=self.token,
            http_client=http_client,
            sleep=sleep,
        )

        self._tasks: TasksService | None = None
        self._clusters: ClustersService | None = None

    @property
    def source(self) -> str:
        return self._resolved_config.source

    @property
    def project_id(self) -> str | None:
        if self._runtime.project:
            return self._runtime.project
        if self.config.project is not None:
            return self.config.project.id
        return None

    @property
    def tasks(self) -> TasksService:
        if self._tasks is None:
            self._tasks = TasksService(self)
        return self._tasks

    @property
    def clusters(self) -> ClustersService:
        if self._clusters is None:
            self._clusters = ClustersService(self)
        return self._clusters

    async def __aenter__(self) -> AsyncPhotonClient:
        return self

    async def __aexit__(self, exc_type: object, exc: object, tb: object) -> None:
        await self.aclose()

    async def aclose(self) -> None:
        await self._transport.aclose()

    async def _request_json(
        self,
        method: str,
        path: str,
        *,
        params: RequestParams | None = None,
        json_data: Mapping[str, Any] | None = None,
    ) -> Any:
        return await self._transport.request_json(method, path, params=params, json_data=json_data)

    async def wait_for_task(self, task_id: str, *, interactive: bool = False) -> Task:
        """Block until ``task_id`` completes, using the configured poll interval and deadline."""

        return await wait_for_task_result(
            self.tasks.get,
            task_id,
            interactive=interactive,
            console=self.console,
            poll_interval=self.waits.task_poll_interval,
            timeout=self.waits.task_timeout,
            clock=self._clock,
            sleep=self._sleep,
        )

    async def wait_for_cluster_ready(self, cluster_id: str, *, interactive: bool = False) -> Cluster:
        """Block until the cluster reports ``READY``."""

        return await wait_for_entity_ready(
            self.clusters.get,
            cluster_id,
            kind="Cluster",
            interactive=interactive,
            console=self.console,
            poll_interval=self.waits.entity_poll_interval,
            timeout=self.waits.entity_timeout_seconds,
            retry_budget=self.waits.entity_retry_budget,
            clock=self._clock,
            sleep=self._sleep,
        )


@asynccontextmanager
async def connect(*args: Any, **kwargs: Any):
    client = AsyncPhotonClient(*args, **kwargs)
    try:
        yield client
    finally:
        await client.aclose()
