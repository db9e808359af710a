"""Subcommand modules for lineagectl.

register_commands() uses deferred imports to keep ``lineagectl --help`` fast.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

if TYPE_CHECKING:
    import click


def register_commands(cli: click.Group) -> None:
    """Register the ``graph`` group and the standalone commands."""
    from lineagectl.commands.graph import graph

    cli.add_command(graph)

    from lineagectl.commands.search import search
    from lineagectl.commands.view import view

    cli.add_command(search)
    cli.add_command(view)
