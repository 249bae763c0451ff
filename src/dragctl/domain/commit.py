"""Movement commit — relocate a validated batch across boards.

Callers MUST validate first; this module only moves items.
"""

from __future__ import annotations

from collections.abc import Sequence

from dragctl.domain.models import Board
from dragctl.domain.placement import find_board, project_batch, resolve_items


def commit_move(
    boards: Sequence[Board],
    item_ids: Sequence[str],
    destination_board_id: str,
    destination_index: int,
) -> tuple[Board, ...]:
    """Return a new board tuple with *item_ids* moved to the destination.

    Every contributing board loses its moving items and the destination
    takes the batch projection, which keeps *item_ids* order no matter how
    many boards the items came from. Unchanged boards are reused as-is.

    INVARIANT: each item appears on exactly one board afterwards.
    """
    destination = find_board(boards, destination_board_id)
    if destination is None:
        return tuple(boards)
    moving_ids = {item.id for item in resolve_items(boards, item_ids)}
    if not moving_ids:
        return tuple(boards)

    projected = project_batch(boards, destination, item_ids, destination_index)
    result: list[Board] = []
    for board in boards:
        if board.id == destination.id:
            result.append(board.with_items(projected))
        elif any(item.id in moving_ids for item in board.items):
            result.append(board.with_items(i for i in board.items if i.id not in moving_ids))
        else:
            result.append(board)
    return tuple(result)
