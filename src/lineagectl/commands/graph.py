"""Command group: validate, lay out and summarize a lineage."""

from __future__ import annotations

from pathlib import Path
from typing import TYPE_CHECKING

import click

from lineagectl.commands._base import LineageGroup
from lineagectl.services.graph import GraphService

if TYPE_CHECKING:
    from lineagectl.commands._context import AppContext

RECORDS = click.Path(dir_okay=False, path_type=Path)

_GRAPH_EXAMPLES = """\
  lineagectl graph check devices.json
  lineagectl graph layout devices.json --direction LR
  lineagectl --json graph metrics devices.json"""


@click.group(cls=LineageGroup, examples=_GRAPH_EXAMPLES)
def graph() -> None:
    """Validate, lay out and summarize a predicate lineage."""


@graph.command(
    examples="""\
  lineagectl graph check devices.json
  lineagectl -v graph check devices.json"""
)
@click.argument("records", type=RECORDS)
@click.pass_obj
def check(app: AppContext, records: Path) -> None:
    """Validate records: unique ids, known predicates, no cycles."""
    app.emit(GraphService(app.config).check(records))


@graph.command(
    examples="""\
  lineagectl graph layout devices.json
  lineagectl graph layout devices.json --direction LR
  lineagectl --json graph layout devices.json"""
)
@click.argument("records", type=RECORDS)
@click.option(
    "--direction",
    type=click.Choice(["TB", "BT", "LR", "RL"]),
    default=None,
    help="Rank direction (default from config).",
)
@click.pass_obj
def layout(app: AppContext, records: Path, direction: str | None) -> None:
    """Compute hierarchical node positions."""
    app.emit(GraphService(app.config).layout(records, direction=direction))  # type: ignore[arg-type]


@graph.command(
    examples="""\
  lineagectl graph metrics devices.json
  lineagectl -v graph metrics devices.json"""
)
@click.argument("records", type=RECORDS)
@click.pass_obj
def metrics(app: AppContext, records: Path) -> None:
    """Count devices, predicate links, roots and generations."""
    app.emit(GraphService(app.config).metrics(records))
