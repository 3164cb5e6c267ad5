from __future__ import annotations

import asyncio
import logging
import sys
from collections.abc import Coroutine
from pathlib import Path
from typing import Annotated, Any, TypeVar

import typer
from click.core import ParameterSource

from photonctl import __version__
from photonctl.client import AsyncPhotonClient
from photonctl.errors import ConfigError, PhotonError
from photonctl.models import ClusterCreateSpec
from photonctl.models.clusters import Cluster
from photonctl.models.tasks import Task
from photonctl.utils.output import OutputFormat, emit, emit_script

logger = logging.getLogger(__name__)

app = typer.Typer(no_args_is_help=True, add_completion=False, help="Photon control plane CLI")
tasks_app = typer.Typer(no_args_is_help=True, help="Task APIs")
clusters_app = typer.Typer(no_args_is_help=True, help="Cluster APIs")

app.add_typer(tasks_app, name="task")
app.add_typer(clusters_app, name="cluster")


class CLIState:
    def __init__(
        self,
        *,
        config_file: Path | None,
        output: OutputFormat,
        output_explicit: bool,
        non_interactive: bool,
    ) -> None:
        self.config_file = config_file
        self.output = output
        self.output_explicit = output_explicit
        self.non_interactive = non_interactive

    @property
    def formatted(self) -> bool:
        """True when the caller asked for structured json/yaml output."""

        return self.output_explicit and self.output != "table"

    @property
    def interactive(self) -> bool:
        return not self.non_interactive and not self.formatted


T = TypeVar("T")


def _run(awaitable: Coroutine[Any, Any, T]) -> T:
    return asyncio.run(awaitable)


def _state(ctx: typer.Context) -> CLIState:
    obj = ctx.obj
    if not isinstance(obj, CLIState):
        raise typer.BadParameter("CLI context was not initialized")
    return obj


def _version_callback(value: bool) -> None:
    if value:
        typer.echo(f"photonctl {__version__}")
        raise typer.Exit()


def _configure_logging(verbosity: int) -> None:
    level = logging.WARNING
    if verbosity == 1:
        level = logging.INFO
    elif verbosity > 1:
        level = logging.DEBUG
    logging.basicConfig(level=level, format="%(levelname)s %(name)s: %(message)s", stream=sys.stderr)


def _confirmed(state: CLIState) -> bool:
    if state.non_interactive:
        return True
    return typer.confirm("Are you sure?", default=False)


@app.callback()
def main(
    ctx: typer.Context,
    config_file: Annotated[
        Path | None,
        typer.Option("--config-file", "-c", help="Path to the CLI config file"),
    ] = None,
    output: Annotated[OutputFormat, typer.Option("--output", "-o", help="Output format")] = "table",
    non_interactive: Annotated[
        bool,
        typer.Option("--non-interactive", "-n", help="Script-friendly output; never prompt or animate"),
    ] = False,
    verbose: Annotated[int, typer.Option("--verbose", "-v", count=True, help="Increase log verbosity")] = 0,
    version: Annotated[
        bool | None,
        typer.Option("--version", callback=_version_callback, is_eager=True, help="Show version"),
    ] = None,
) -> None:
    _ = version
    _configure_logging(verbose)
    source = ctx.get_parameter_source("output")
    output_explicit = source is not None and source is not ParameterSource.DEFAULT
    ctx.obj = CLIState(
        config_file=config_file,
        output=output,
        output_explicit=output_explicit,
        non_interactive=non_interactive,
    )


def _make_client(state: CLIState) -> AsyncPhotonClient:
    return AsyncPhotonClient(config_path=state.config_file)


async def _wait_on_task(client: AsyncPhotonClient, task_id: str, state: CLIState) -> Task:
    task = await client.wait_for_task(task_id, interactive=state.interactive)
    if state.non_interactive:
        if not state.formatted:
            typer.echo(task.entity.id)
    elif not state.formatted:
        typer.echo(f"{task.operation} completed for '{task.entity.kind}' entity {task.entity.id}")
    return task


async def _wait_for_cluster(client: AsyncPhotonClient, cluster_id: str, state: CLIState) -> Cluster:
    cluster = await client.wait_for_cluster_ready(cluster_id, interactive=state.interactive)
    if state.formatted:
        emit(cluster, output=state.output)
    else:
        typer.echo(f"Cluster {cluster.id} is ready")
    return cluster


def _task_row(task: Task) -> list[Any]:
    duration = task.endTime - task.startedTime if task.endTime > task.startedTime else 0
    return [task.id, task.state, task.operation, task.startedTime, duration]


def _cluster_row(cluster: Cluster) -> list[Any]:
    return [cluster.id, cluster.name, cluster.type, cluster.state, cluster.workerCount]


@tasks_app.command("show")
def task_show(ctx: typer.Context, task_id: Annotated[str, typer.Argument(help="Task id")]) -> None:
    state = _state(ctx)

    async def run() -> Task:
        async with _make_client(state) as client:
            return await client.tasks.get(task_id)

    task = _run(run())
    if state.non_interactive:
        rows: list[list[Any]] = [
            [
                task.id,
                task.state,
                task.entity.id,
                task.entity.kind,
                task.operation,
                task.startedTime,
                task.endTime,
                task.resourceProperties,
            ]
        ]
        for step in sorted(task.steps, key=lambda item: item.sequence):
            codes = ",".join(error.code or "" for error in step.errors)
            rows.append([step.sequence, step.operation, step.state, step.startedTime, step.endTime, codes])
        emit_script(rows)
        return
    emit(task, output=state.output)


@tasks_app.command("list")
def task_list(
    ctx: typer.Context,
    entity_id: Annotated[str | None, typer.Option("--entity-id", "-e", help="Filter by entity id")] = None,
    entity_kind: Annotated[
        str | None,
        typer.Option("--entity-kind", "-k", help="Filter by entity kind (tenant, project, vm, ...)"),
    ] = None,
    task_state: Annotated[str | None, typer.Option("--state", "-s", help="Filter by task state")] = None,
) -> None:
    state = _state(ctx)

    async def run() -> list[Task]:
        async with _make_client(state) as client:
            response = await client.tasks.list(entity_id=entity_id, entity_kind=entity_kind, state=task_state)
            return response.items

    tasks = _run(run())
    if state.non_interactive:
        emit_script(_task_row(task) for task in tasks)
        return
    emit(tasks, output=state.output)


@tasks_app.command("monitor")
def task_monitor(ctx: typer.Context, task_id: Annotated[str, typer.Argument(help="Task id")]) -> None:
    state = _state(ctx)

    async def run() -> Task:
        async with _make_client(state) as client:
            return await client.wait_for_task(task_id, interactive=state.interactive)

    task = _run(run())
    if state.non_interactive:
        emit_script([[task.id, task.state, task.entity.id, task.entity.kind]])
    elif state.formatted:
        emit(task, output=state.output)
    else:
        typer.echo(f"Task:   {task.id}")
        typer.echo(f"Entity: {task.entity.kind} {task.entity.id}")
        typer.echo(f"State:  {task.state}")


@clusters_app.command("show")
def cluster_show(ctx: typer.Context, cluster_id: Annotated[str, typer.Argument(help="Cluster id")]) -> None:
    state = _state(ctx)

    async def run() -> Cluster:
        async with _make_client(state) as client:
            return await client.clusters.get(cluster_id)

    cluster = _run(run())
    if state.non_interactive:
        emit_script([_cluster_row(cluster)])
        return
    emit(cluster, output=state.output)


@clusters_app.command("list")
def cluster_list(
    ctx: typer.Context,
    project: Annotated[str | None, typer.Option("--project", "-p", help="Project id")] = None,
) -> None:
    state = _state(ctx)

    async def run() -> list[Cluster]:
        async with _make_client(state) as client:
            project_id = project or client.project_id
            if not project_id:
                raise ConfigError("set a project with --project or in the config file")
            response = await client.clusters.list(project_id)
            return response.items

    clusters = _run(run())
    if state.non_interactive:
        emit_script(_cluster_row(cluster) for cluster in clusters)
        return
    emit(clusters, output=state.output)


@clusters_app.command("create")
def cluster_create(
    ctx: typer.Context,
    name: Annotated[str, typer.Option("--name", help="Cluster name")],
    project: Annotated[str | None, typer.Option("--project", "-p", help="Project id")] = None,
    cluster_type: Annotated[str, typer.Option("--type", "-k", help="Cluster type")] = "KUBERNETES",
    worker_count: Annotated[int, typer.Option("--worker-count", "-c", min=1, help="Worker count")] = 1,
    vm_flavor: Annotated[str | None, typer.Option("--vm-flavor", help="VM flavor")] = None,
    disk_flavor: Annotated[str | None, typer.Option("--disk-flavor", help="Disk flavor")] = None,
    network_id: Annotated[str | None, typer.Option("--network-id", help="Subnet id")] = None,
    image_id: Annotated[str | None, typer.Option("--image-id", help="Image id")] = None,
    batch_size: Annotated[
        int | None,
        typer.Option("--batch-size", min=1, help="Worker batch expansion size"),
    ] = None,
    wait_for_ready: Annotated[
        bool,
        typer.Option("--wait-for-ready", help="Wait until the cluster is READY"),
    ] = False,
) -> None:
    state = _state(ctx)
    spec = ClusterCreateSpec(
        name=name,
        type=cluster_type,
        worker_count=worker_count,
        vm_flavor=vm_flavor,
        disk_flavor=disk_flavor,
        network_id=network_id,
        image_id=image_id,
        batch_size=batch_size,
    )

    if state.interactive:
        typer.echo(f"\nCreating cluster: {spec.name} ({spec.type.upper()})")
        typer.echo(f"  Worker count: {spec.worker_count}")
    if not _confirmed(state):
        typer.echo("Cancelled")
        return

    async def run() -> None:
        async with _make_client(state) as client:
            project_id = project or client.project_id
            if not project_id:
                raise ConfigError("set a project with --project or in the config file")
            task = await client.clusters.create(project_id, spec)
            completed = await _wait_on_task(client, task.id, state)
            cluster_id = completed.entity.id or task.entity.id
            if wait_for_ready:
                if not state.formatted:
                    typer.echo(f"Waiting for cluster {cluster_id} to become ready")
                await _wait_for_cluster(client, cluster_id, state)
            elif state.interactive:
                typer.echo("Note: the cluster has been created with minimal resources. You can use the cluster now.")
                typer.echo("A background task is running to gradually expand the cluster to its target capacity.")
                typer.echo(f"You can run 'cluster show {cluster_id}' to see the state of the cluster.")

    _run(run())


@clusters_app.command("resize")
def cluster_resize(
    ctx: typer.Context,
    cluster_id: Annotated[str, typer.Argument(help="Cluster id")],
    worker_count: Annotated[int, typer.Argument(help="New worker count")],
    wait_for_ready: Annotated[
        bool,
        typer.Option("--wait-for-ready", help="Wait until the cluster is READY"),
    ] = False,
) -> None:
    state = _state(ctx)
    if not cluster_id or worker_count <= 0:
        raise typer.BadParameter("provide a valid cluster id and a positive worker count")

    if state.interactive:
        typer.echo(f"\nResizing cluster {cluster_id} to worker count {worker_count}")
    if not _confirmed(state):
        typer.echo("Cancelled")
        return

    async def run() -> None:
        async with _make_client(state) as client:
            task = await client.clusters.resize(cluster_id, worker_count)
            await _wait_on_task(client, task.id, state)
            if wait_for_ready:
                await _wait_for_cluster(client, cluster_id, state)
            elif state.interactive:
                typer.echo("Note: A background task is running to gradually resize the cluster to its target capacity.")
                typer.echo(f"You may continue to use the cluster. You can run 'cluster show {cluster_id}'")
                typer.echo("to see the state of the cluster. While the resize is in progress the state is RESIZING;")
                typer.echo("once the cluster is resized the state will show as READY.")

    _run(run())


@clusters_app.command("delete")
def cluster_delete(ctx: typer.Context, cluster_id: Annotated[str, typer.Argument(help="Cluster id")]) -> None:
    state = _state(ctx)
    if state.interactive:
        typer.echo(f"\nDeleting cluster {cluster_id}")
    if not _confirmed(state):
        typer.echo("Cancelled")
        return

    async def run() -> None:
        async with _make_client(state) as client:
            task = await client.clusters.delete(cluster_id)
            await _wait_on_task(client, task.id, state)

    _run(run())


@clusters_app.command("trigger-maintenance")
def cluster_trigger_maintenance(
    ctx: typer.Context,
    cluster_id: Annotated[str, typer.Argument(help="Cluster id")],
) -> None:
    state = _state(ctx)
    if state.interactive:
        typer.echo(f"Maintenance triggered for cluster {cluster_id}")

    async def run() -> None:
        async with _make_client(state) as client:
            task = await client.clusters.trigger_maintenance(cluster_id)
            await _wait_on_task(client, task.id, state)

    _run(run())


def run() -> None:
    try:
        app()
    except PhotonError as exc:
        logger.debug("command failed", exc_info=exc)
        typer.echo(f"error: {exc}", err=True)
        raise SystemExit(1) from exc


if __name__ == "__main__":
    run()
