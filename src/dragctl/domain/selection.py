"""Selection tracking — ordered set of selected item ids.

Pure functions over tuples. Insertion order is meaningful: it is the order
in which a multi-item batch is reinserted at the destination, and the
1-based badge number shown next to each selected item.
"""

from __future__ import annotations

from collections.abc import Iterable
from enum import StrEnum
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from dragctl.domain.models import Board

Selection = tuple[str, ...]


class SeedMode(StrEnum):
    """How a drag start seeds the selection."""

    IF_EMPTY = "if_empty"
    REPLACE = "replace"


def toggle(selection: Selection, item_id: str) -> Selection:
    """Remove *item_id* if selected, else append it to the end."""
    if item_id in selection:
        return tuple(sid for sid in selection if sid != item_id)
    return (*selection, item_id)


def seed_if_empty(selection: Selection, item_id: str) -> Selection:
    """Select just *item_id* when nothing is selected yet."""
    if not selection:
        return (item_id,)
    return selection


def seed_or_replace(selection: Selection, item_id: str) -> Selection:
    """Keep the selection if it holds *item_id*, else select only *item_id*."""
    if item_id in selection:
        return selection
    return (item_id,)


def seed(selection: Selection, item_id: str, mode: SeedMode = SeedMode.IF_EMPTY) -> Selection:
    if mode is SeedMode.REPLACE:
        return seed_or_replace(selection, item_id)
    return seed_if_empty(selection, item_id)


def clear() -> Selection:
    return ()


def prune(selection: Iterable[str], boards: Iterable[Board]) -> Selection:
    """Drop ids that no longer resolve to an item, and duplicates."""
    known = {item.id for board in boards for item in board.items}
    kept: list[str] = []
    for item_id in selection:
        if item_id in known and item_id not in kept:
            kept.append(item_id)
    return tuple(kept)


def order_of(selection: Selection, item_id: str) -> int | None:
    """Return the 1-based selection badge for *item_id*, or None."""
    try:
        return selection.index(item_id) + 1
    except ValueError:
        return None
