"""Render the filtered, laid-out view a UI would draw."""

from __future__ import annotations

from pathlib import Path
from typing import TYPE_CHECKING

import click

from lineagectl.commands._base import LineageCommand
from lineagectl.services.view import ViewService

if TYPE_CHECKING:
    from lineagectl.commands._context import AppContext


@click.command(
    cls=LineageCommand,
    examples="""\
  lineagectl view devices.json
  lineagectl view devices.json --query k92 --select K921156
  lineagectl --json view devices.json --query cardio""",
)
@click.argument("records", type=click.Path(dir_okay=False, path_type=Path))
@click.option("--query", "-Q", default="", help="Search text; only matching devices are shown.")
@click.option("--select", "selected_id", default=None, help="Device id to mark as selected.")
@click.pass_obj
def view(app: AppContext, records: Path, query: str, selected_id: str | None) -> None:
    """Show the visible subgraph snapshot for a query and selection."""
    app.emit(ViewService(app.config).view(records, query=query, selected_id=selected_id))
