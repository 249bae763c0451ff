"""Placement projection — hypothetical destination arrangements.

Pure functions, no side effects. The same projection feeds live drag
feedback and the committed move, so what the user sees while dragging is
exactly what lands on drop.

Index basis: a destination index is a slot in the destination list *after*
the moving items have been taken out of it. This matches how drag providers
report drop positions within a single list. Callers holding an index into
the untouched list convert it with :func:`to_post_removal_index`.
"""

from __future__ import annotations

from collections.abc import Iterable, Sequence

from dragctl.domain.models import Board, Item


def find_board(boards: Iterable[Board], board_id: str) -> Board | None:
    for board in boards:
        if board.id == board_id:
            return board
    return None


def boards_holding(boards: Iterable[Board], item_ids: Iterable[str]) -> list[Board]:
    """Return boards (in board order) that hold at least one of *item_ids*."""
    wanted = set(item_ids)
    return [board for board in boards if any(item.id in wanted for item in board.items)]


def resolve_items(boards: Iterable[Board], item_ids: Sequence[str]) -> list[Item]:
    """Resolve *item_ids* to items, keeping the order of *item_ids*.

    Unknown and repeated ids are skipped.
    """
    by_id: dict[str, Item] = {}
    for board in boards:
        for item in board.items:
            by_id.setdefault(item.id, item)
    resolved: list[Item] = []
    seen: set[str] = set()
    for item_id in item_ids:
        item = by_id.get(item_id)
        if item is None or item_id in seen:
            continue
        seen.add(item_id)
        resolved.append(item)
    return resolved


def previous_item(items: Sequence[Item], index: int) -> Item | None:
    return items[index - 1] if 0 < index <= len(items) else None


def next_item(items: Sequence[Item], index: int) -> Item | None:
    return items[index + 1] if 0 <= index < len(items) - 1 else None


def to_post_removal_index(items: Sequence[Item], moving_ids: Iterable[str], index: int) -> int:
    """Convert a pre-removal insertion index to the post-removal basis.

    Moving the index backward by the number of moving items sitting before
    it keeps a same-board reorder from landing one slot too far.
    """
    moving = set(moving_ids)
    removed_before = sum(1 for item in items[:index] if item.id in moving)
    return index - removed_before


def project_batch(
    boards: Iterable[Board],
    destination: Board,
    item_ids: Sequence[str],
    destination_index: int,
) -> tuple[Item, ...]:
    """Project *destination* after moving *item_ids* (from any board) to *destination_index*.

    Moving items are resolved across *boards* in *item_ids* order, removed
    from a working copy of the destination (a no-op for items living
    elsewhere), then spliced in at the clamped index.
    """
    moving = resolve_items([*boards, destination], item_ids)
    moving_ids = {item.id for item in moving}
    working = [item for item in destination.items if item.id not in moving_ids]
    index = max(0, min(destination_index, len(working)))
    working[index:index] = moving
    return tuple(working)


def project(
    source: Board,
    destination: Board,
    item_ids: Sequence[str],
    destination_index: int,
) -> tuple[Item, ...]:
    """Project *destination* after moving *source*'s share of *item_ids*.

    When *source* and *destination* are the same board the moving items are
    first taken out so the index lands on the intended slot.
    """
    return project_batch([source], destination, item_ids, destination_index)
