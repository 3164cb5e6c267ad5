"""Rendering of command results for humans and scripts."""

from __future__ import annotations

import json
from collections.abc import Iterable, Sequence
from dataclasses import asdict, is_dataclass
from enum import Enum
from typing import Any, Literal

import typer
import yaml
from pydantic import BaseModel
from rich.console import Console
from rich.table import Table

OutputFormat = Literal["json", "yaml", "table"]


def to_plain_data(value: Any) -> Any:
    """Reduce models, dataclasses and enums to JSON-compatible builtins."""

    if isinstance(value, BaseModel):
        return value.model_dump(mode="json", by_alias=True)
    if is_dataclass(value) and not isinstance(value, type):
        return to_plain_data(asdict(value))
    if isinstance(value, Enum):
        return to_plain_data(value.value)
    if isinstance(value, dict):
        return {str(key): to_plain_data(item) for key, item in value.items()}
    if isinstance(value, (list, tuple)):
        return [to_plain_data(item) for item in value]
    return value


def emit(value: Any, *, output: OutputFormat = "table", console: Console | None = None) -> None:
    """Render a command result as json, yaml, or a rich table."""

    plain = to_plain_data(value)
    if output == "json":
        typer.echo(json.dumps(plain, indent=2))
        return
    if output == "yaml":
        typer.echo(yaml.safe_dump(plain, sort_keys=False).rstrip("\n"))
        return

    console = console or Console()
    table = Table(show_header=True, header_style="bold")
    if isinstance(plain, list) and plain and all(isinstance(item, dict) for item in plain):
        columns: list[str] = []
        for row in plain:
            columns.extend(str(key) for key in row if str(key) not in columns)
        for column in columns:
            table.add_column(column)
        for row in plain:
            table.add_row(*[_cell(row.get(column)) for column in columns])
    elif isinstance(plain, dict):
        table.add_column("key")
        table.add_column("value")
        for key, item in plain.items():
            table.add_row(str(key), _cell(item))
    else:
        console.print(_cell(plain))
        return
    console.print(table)


def emit_script(rows: Iterable[Sequence[Any]]) -> None:
    """Print tab-separated rows for scripting; ``None`` renders as ``-``."""

    for row in rows:
        typer.echo("\t".join(_cell(item, empty="-") for item in row))


def _cell(value: Any, *, empty: str = "") -> str:
    if value is None:
        return empty
    if isinstance(value, (dict, list)):
        return json.dumps(value, separators=(",", ":"))
    return str(value)
