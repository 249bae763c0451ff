"""Command: validate a hypothetical move without committing it."""

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
        "dragctl preview A-item-1 --to B --index 0",
        "dragctl preview A-item-1 B-item-3 --to C --index 2",
        "dragctl preview B-item-2 --to B --index 0 --from B",
        "dragctl -q preview A-item-2 --to A --index 4",
    ),
)
@click.argument("item_ids", nargs=-1, required=True)
@click.option("--to", "destination", required=True, help="Destination board id.")
@click.option(
    "--index",
    type=click.IntRange(min=0),
    default=0,
    show_default=True,
    help="Drop slot on the destination board.",
)
@click.option("--from", "source", default=None, help="Board the drag starts from.")
@click.option(
    "--boards",
    "boards_path",
    type=click.Path(path_type=Path),
    default=None,
    help="JSON file with the boards to start from.",
)
@click.pass_obj
def preview(
    app: AppContext,
    item_ids: tuple[str, ...],
    destination: str,
    index: int,
    source: str | None,
    boards_path: Path | None,
) -> None:
    """Preview moving ITEM_IDS (in order) to a board slot."""
    app.emit(
        app.service.preview(
            list(item_ids),
            destination,
            index,
            source_board_id=source,
            boards_path=boards_path,
        )
    )
