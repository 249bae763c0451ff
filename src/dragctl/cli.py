"""Root CLI group for dragctl.

Global flags are collected into :class:`DragSettings` once, here, and
reach every subcommand through the shared :class:`AppContext`.
"""

from __future__ import annotations

from typing import Any

import click

from dragctl import __version__
from dragctl.commands import register_commands
from dragctl.commands._context import AppContext
from dragctl.config.settings import DragSettings


@click.group(
    invoke_without_command=True,
    context_settings={"help_option_names": ["-h", "--help"]},
)
@click.version_option(version=__version__, prog_name="dragctl")
@click.option("--json", "json_output", is_flag=True, help="Print results as JSON.")
@click.option("-q", "--quiet", is_flag=True, help="One line per board or verdict.")
@click.option("-v", "--verbose", is_flag=True, help="Debug logs and timing spans.")
@click.option("--log-json", is_flag=True, help="Write logs to stderr as JSON lines.")
@click.option("--no-plugins", is_flag=True, help="Skip plugin discovery.")
@click.option(
    "-c",
    "--config",
    "config_path",
    type=click.Path(dir_okay=False),
    default=None,
    help="Use this config file instead of searching for dragctl.toml.",
)
@click.pass_context
def cli(ctx: click.Context, config_path: str | None, **flags: Any) -> None:
    """dragctl: preview and replay multi-item drags across boards."""
    ctx.obj = AppContext(DragSettings.from_cli(config_path=config_path, **flags))
    if ctx.invoked_subcommand is None:
        click.echo(ctx.get_help())


register_commands(cli)
