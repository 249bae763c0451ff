"""Command: render the starting boards."""

from __future__ import annotations

from pathlib import Path
from typing import TYPE_CHECKING

import click

from dragctl.commands._base import DragCommand

if TYPE_CHECKING:
    from dragctl.commands._context import AppContext


@click.command(
    cls=DragCommand,
    examples=(
        "dragctl show",
        "dragctl show --boards boards.json",
        "dragctl --json show",
        "dragctl -q show",
    ),
)
@click.option(
    "--boards",
    "boards_path",
    type=click.Path(path_type=Path),
    default=None,
    help="JSON file with the boards to start from.",
)
@click.pass_obj
def show(app: AppContext, boards_path: Path | None) -> None:
    """Show the boards, selection, and status bar."""
    app.emit(app.service.show(boards_path=boards_path))
