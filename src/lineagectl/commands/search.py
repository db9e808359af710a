"""Search devices by id, name or attribute."""

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
  lineagectl search devices.json k86
  lineagectl search devices.json "balloon catheter"
  lineagectl -q search devices.json medtronic""",
)
@click.argument("records", type=click.Path(dir_okay=False, path_type=Path))
@click.argument("query")
@click.pass_obj
def search(app: AppContext, records: Path, query: str) -> None:
    """Case-insensitive substring search over searchable fields."""
    app.emit(ViewService(app.config).search(records, query))
