"""Command: replay a scripted sequence of drag events."""

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
        "dragctl replay session.json",
        "dragctl replay session.json --boards boards.json",
        "dragctl --json replay session.json",
        "dragctl -v replay session.json",
    ),
)
@click.argument("script", type=click.Path(path_type=Path))
@click.option(
    "--boards",
    "boards_path",
    type=click.Path(path_type=Path),
    default=None,
    help="JSON boards file, used when the script has no boards.",
)
@click.pass_obj
def replay(app: AppContext, script: Path, boards_path: Path | None) -> None:
    """Replay SCRIPT (JSON drag events) and show the resulting boards."""
    app.emit(app.service.replay(script, boards_path=boards_path))
