"""Subcommand modules for dragctl.

Provides register_commands() which uses deferred imports to keep
``dragctl --help`` fast.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

if TYPE_CHECKING:
    import click


def register_commands(cli: click.Group) -> None:
    """Register all standalone commands on the root CLI group."""
    from dragctl.commands.preview import preview
    from dragctl.commands.replay import replay
    from dragctl.commands.show import show

    cli.add_command(show)
    cli.add_command(preview)
    cli.add_command(replay)
