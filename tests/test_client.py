from __future__ import annotations

import asyncio
import io
import json

import httpx
import pytest
from rich.console import Console

from photonctl.client import AsyncPhotonClient
from photonctl.config import RetryConfig, WaitConfig
from photonctl.errors import APIError, ConfigError, FetchRetriesExhaustedError, RequestError, TaskError
from photonctl.models.clusters import ClusterCreateSpec, EntityState
from photonctl.models.tasks import TaskState

BASE_URL = "https://photon.example:9000"


async def _no_sleep(_seconds: float) -> None:
    return None


def _client(http_client: httpx.AsyncClient, **kwargs: object) -> AsyncPhotonClient:
    kwargs.setdefault("retries", RetryConfig(max_attempts=3, base_delay=0.0, max_delay=0.0, jitter=0.0))
    return AsyncPhotonClient(
        config={"cloudTarget": BASE_URL, "token": "secret-token", "project": {"name": "p", "id": "p1"}},
        sleep=_no_sleep,
        http_client=http_client,
        **kwargs,
    )


@pytest.fixture(autouse=True)
def _clean_env(monkeypatch: pytest.MonkeyPatch) -> None:
    for name in ("PHOTON_TARGET", "PHOTON_CLOUD_TARGET", "PHOTON_TOKEN", "PHOTON_ACCESS_TOKEN", "PHOTON_PROJECT"):
        monkeypatch.delenv(name, raising=False)


@pytest.mark.asyncio
async def test_get_task_sends_bearer_token_and_parses_states() -> None:
    def handler(request: httpx.Request) -> httpx.Response:
        assert request.url.path == "/tasks/t1"
        assert request.headers.get("Authorization") == "Bearer secret-token"
        return httpx.Response(
            200,
            json={
                "id": "t1",
                "operation": "CREATE_CLUSTER",
                "state": "started",
                "entity": {"id": "c1", "kind": "cluster"},
                "steps": [{"sequence": 0, "operation": "CREATE_VMS", "state": "Started", "errors": None}],
            },
        )

    async with httpx.AsyncClient(base_url=BASE_URL, transport=httpx.MockTransport(handler)) as http_client:
        client = _client(http_client)
        task = await client.tasks.get("t1")

    assert task.state is TaskState.STARTED
    assert task.entity.id == "c1"
    assert task.steps[0].state is TaskState.STARTED
    assert task.steps[0].errors == []


@pytest.mark.asyncio
async def test_request_retries_on_5xx() -> None:
    seen = {"count": 0}

    def handler(request: httpx.Request) -> httpx.Response:
        seen["count"] += 1
        if seen["count"] == 1:
            return httpx.Response(503, json={"message": "unavailable"})
        return httpx.Response(200, json={"id": "c1", "state": "READY"})

    async with httpx.AsyncClient(base_url=BASE_URL, transport=httpx.MockTransport(handler)) as http_client:
        client = _client(http_client)
        cluster = await client.clusters.get("c1")

    assert cluster.state is EntityState.READY
    assert seen["count"] == 2


@pytest.mark.asyncio
async def test_client_error_raises_api_error_with_code() -> None:
    def handler(request: httpx.Request) -> httpx.Response:
        return httpx.Response(404, json={"code": "TaskNotFound", "message": "Task t9 not found"})

    async with httpx.AsyncClient(base_url=BASE_URL, transport=httpx.MockTransport(handler)) as http_client:
        client = _client(http_client)
        with pytest.raises(APIError) as excinfo:
            await client.tasks.get("t9")

    assert excinfo.value.status_code == 404
    assert excinfo.value.code == "TaskNotFound"
    assert "Task t9 not found" in str(excinfo.value)


@pytest.mark.asyncio
async def test_task_list_drops_empty_filters() -> None:
    seen: dict[str, str] = {}

    def handler(request: httpx.Request) -> httpx.Response:
        seen.update(dict(request.url.params))
        return httpx.Response(200, json={"items": [{"id": "t1", "state": "QUEUED"}]})

    async with httpx.AsyncClient(base_url=BASE_URL, transport=httpx.MockTransport(handler)) as http_client:
        client = _client(http_client)
        response = await client.tasks.list(entity_id="c1", state="queued")

    assert seen == {"entityId": "c1", "state": "QUEUED"}
    assert [task.id for task in response.items] == ["t1"]


@pytest.mark.asyncio
async def test_resize_and_create_post_expected_payloads() -> None:
    bodies: list[tuple[str, dict[str, object]]] = []

    def handler(request: httpx.Request) -> httpx.Response:
        bodies.append((request.url.path, json.loads(request.content)))
        return httpx.Response(200, json={"id": "t1", "state": "QUEUED", "entity": {"id": "c1", "kind": "cluster"}})

    async with httpx.AsyncClient(base_url=BASE_URL, transport=httpx.MockTransport(handler)) as http_client:
        client = _client(http_client)
        await client.clusters.resize("c1", 5)
        await client.clusters.create(
            "p1",
            ClusterCreateSpec(name="k8s", worker_count=2, network_id="net-1", batch_size=1),
        )
        with pytest.raises(ValueError):
            await client.clusters.resize("c1", 0)

    assert bodies[0] == ("/clusters/c1/resize", {"newWorkerCount": 5})
    path, payload = bodies[1]
    assert path == "/projects/p1/clusters"
    assert payload["workerCount"] == 2
    assert payload["subnetId"] == "net-1"
    assert payload["workerBatchExpansionSize"] == 1
    assert len(bodies) == 2


@pytest.mark.asyncio
async def test_wait_for_task_polls_until_completed() -> None:
    states = iter(["QUEUED", "STARTED", "COMPLETED"])
    sleeps: list[float] = []

    async def record_sleep(seconds: float) -> None:
        sleeps.append(seconds)

    def handler(request: httpx.Request) -> httpx.Response:
        return httpx.Response(
            200,
            json={"id": "t1", "operation": "RESIZE_CLUSTER", "state": next(states), "entity": {"id": "c1"}},
        )

    async with httpx.AsyncClient(base_url=BASE_URL, transport=httpx.MockTransport(handler)) as http_client:
        client = AsyncPhotonClient(
            config={"cloudTarget": BASE_URL, "waits": {"taskPollInterval": 0.25}},
            sleep=record_sleep,
            http_client=http_client,
        )
        task = await client.wait_for_task("t1")

    assert task.state is TaskState.COMPLETED
    assert sleeps == [0.25, 0.25]


@pytest.mark.asyncio
async def test_wait_for_task_raises_task_error() -> None:
    def handler(request: httpx.Request) -> httpx.Response:
        return httpx.Response(
            200,
            json={
                "id": "t1",
                "operation": "DELETE_CLUSTER",
                "state": "ERROR",
                "steps": [{"sequence": 0, "state": "ERROR", "errors": [{"code": "InvalidState", "message": "busy"}]}],
            },
        )

    async with httpx.AsyncClient(base_url=BASE_URL, transport=httpx.MockTransport(handler)) as http_client:
        client = _client(http_client)
        with pytest.raises(TaskError, match="InvalidState: busy"):
            await client.wait_for_task("t1")


@pytest.mark.asyncio
async def test_wait_for_cluster_ready_tolerates_failed_fetches() -> None:
    responses = iter(
        [
            httpx.Response(200, json={"id": "c1", "state": "CREATING"}),
            httpx.Response(500, json={"message": "db hiccup"}),
            httpx.Response(200, json={"id": "c1", "state": "READY", "workerCount": 3}),
        ]
    )

    def handler(request: httpx.Request) -> httpx.Response:
        assert request.url.path == "/clusters/c1"
        return next(responses)

    async with httpx.AsyncClient(base_url=BASE_URL, transport=httpx.MockTransport(handler)) as http_client:
        client = _client(
            http_client,
            retries=RetryConfig(max_attempts=1),
            waits=WaitConfig(entity_poll_interval=0.1, entity_retry_budget=1),
        )
        cluster = await client.wait_for_cluster_ready("c1")

    assert cluster.state is EntityState.READY
    assert cluster.workerCount == 3


def test_missing_target_raises_config_error() -> None:
    with pytest.raises(ConfigError, match="cloudTarget"):
        AsyncPhotonClient(config={})


def test_runtime_env_overrides_config(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("PHOTON_TARGET", "https://env.example")
    monkeypatch.setenv("PHOTON_PROJECT", "env-project")

    client = AsyncPhotonClient(config={"cloudTarget": BASE_URL, "project": {"id": "p1"}})

    assert client.target == "https://env.example"
    assert client.project_id == "env-project"
    assert client.source == "runtime-dict"


@pytest.mark.asyncio
async def test_rate_limit_honours_retry_after() -> None:
    responses = iter(
        [
            httpx.Response(429, headers={"Retry-After": "1.5"}, json={"message": "slow down"}),
            httpx.Response(200, json={"id": "t1", "state": "QUEUED"}),
        ]
    )
    sleeps: list[float] = []

    async def record_sleep(seconds: float) -> None:
        sleeps.append(seconds)

    def handler(request: httpx.Request) -> httpx.Response:
        return next(responses)

    async with httpx.AsyncClient(base_url=BASE_URL, transport=httpx.MockTransport(handler)) as http_client:
        client = AsyncPhotonClient(
            config={"cloudTarget": BASE_URL},
            retries=RetryConfig(max_attempts=2, max_delay=5.0),
            sleep=record_sleep,
            http_client=http_client,
        )
        task = await client.tasks.get("t1")

    assert task.state is TaskState.QUEUED
    assert sleeps == [1.5]


@pytest.mark.asyncio
async def test_malformed_payload_raises_request_error() -> None:
    def handler(request: httpx.Request) -> httpx.Response:
        return httpx.Response(200, json={"state": "QUEUED"})

    async with httpx.AsyncClient(base_url=BASE_URL, transport=httpx.MockTransport(handler)) as http_client:
        client = _client(http_client)
        with pytest.raises(RequestError, match="unexpected Task payload") as excinfo:
            await client.tasks.get("t1")

    assert excinfo.value.__cause__ is not None


@pytest.mark.asyncio
async def test_malformed_cluster_payloads_count_against_retry_budget() -> None:
    seen = {"count": 0}

    def handler(request: httpx.Request) -> httpx.Response:
        seen["count"] += 1
        return httpx.Response(200, json={"state": "CREATING"})

    async with httpx.AsyncClient(base_url=BASE_URL, transport=httpx.MockTransport(handler)) as http_client:
        client = _client(http_client, waits=WaitConfig(entity_retry_budget=3))
        with pytest.raises(FetchRetriesExhaustedError) as excinfo:
            await client.wait_for_cluster_ready("c1")

    assert isinstance(excinfo.value.__cause__, RequestError)
    assert seen["count"] == 4


@pytest.mark.asyncio
async def test_interactive_client_wait_renders_through_configured_console() -> None:
    states = iter(["STARTED", "COMPLETED"])
    buffer = io.StringIO()

    async def yield_sleep(_seconds: float) -> None:
        await asyncio.sleep(0)

    def handler(request: httpx.Request) -> httpx.Response:
        return httpx.Response(200, json={"id": "t1", "operation": "RESIZE_CLUSTER", "state": next(states)})

    async with httpx.AsyncClient(base_url=BASE_URL, transport=httpx.MockTransport(handler)) as http_client:
        client = AsyncPhotonClient(
            config={"cloudTarget": BASE_URL},
            console=Console(file=buffer, force_terminal=True, width=120),
            sleep=yield_sleep,
            http_client=http_client,
        )
        task = await client.wait_for_task("t1", interactive=True)

    assert task.state is TaskState.COMPLETED
    assert "RESIZE_CLUSTER : STARTED" in buffer.getvalue()
