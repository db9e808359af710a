"""``lineagectl`` entry point: global output flags and the command tree."""

from __future__ import annotations

import click

from lineagectl import __version__
from lineagectl.commands import register_commands
from lineagectl.commands._base import LineageGroup
from lineagectl.commands._context import AppContext
from lineagectl.config.settings import LineageSettings

_ROOT_EXAMPLES = """\
  lineagectl graph check devices.json
  lineagectl --json view devices.json --query k92 --select K921156
  lineagectl -c review.toml graph layout devices.json --direction LR"""

_RECORDS_EPILOG = """\
RECORDS is a JSON array of {id, displayName, predicateIds, attributes}
objects (or FDA 510(k) entries with kNumber, deviceName, predicateDevices),
optionally wrapped as {"records": [...]} or {"devices": [...]}."""


@click.group(
    cls=LineageGroup,
    invoke_without_command=True,
    examples=_ROOT_EXAMPLES,
    epilog=_RECORDS_EPILOG,
    context_settings={"help_option_names": ["-h", "--help"]},
)
@click.version_option(version=__version__, prog_name="lineagectl")
@click.option("--json", "json_output", is_flag=True, help="Print results as JSON.")
@click.option("-q", "--quiet", is_flag=True, help="Print device ids only.")
@click.option("-v", "--verbose", is_flag=True, help="Extra detail and debug logging.")
@click.option("--log-json", is_flag=True, help="Write logs to stderr as JSON lines.")
@click.option(
    "-c",
    "--config",
    "config_path",
    type=click.Path(dir_okay=False),
    default=None,
    help="Use this TOML file instead of discovering lineagectl.toml.",
)
@click.pass_context
def cli(ctx: click.Context, config_path: str | None, **flags: bool) -> None:
    """lineagectl: lay out and explore device predicate lineages."""
    ctx.obj = AppContext(LineageSettings.from_cli(config_path=config_path, **flags))
    if ctx.invoked_subcommand is None:
        click.echo(ctx.get_help())


register_commands(cli)
