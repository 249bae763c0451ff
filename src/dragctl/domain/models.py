"""Board, Item, and Location value types.

All models are frozen. A board's ``items`` tuple defines display order and
the adjacency used by placement rules. Boards are replaced wholesale on a
committed move, never edited in place.

INVARIANT: Item ids are disjoint across every board of a snapshot.
"""

from __future__ import annotations

from collections.abc import Iterable
from typing import Any

from pydantic import BaseModel, Field


class Item(BaseModel):
    """An atomic draggable unit."""

    model_config = {"frozen": True}

    id: str
    content: Any = ""
    is_even: bool = False


class Board(BaseModel):
    """An ordered, named collection of items."""

    model_config = {"frozen": True}

    id: str
    name: str = ""
    items: tuple[Item, ...] = ()

    @property
    def item_ids(self) -> tuple[str, ...]:
        return tuple(item.id for item in self.items)

    def index_of(self, item_id: str) -> int | None:
        """Return the position of *item_id* on this board, or None."""
        for index, item in enumerate(self.items):
            if item.id == item_id:
                return index
        return None

    def with_items(self, items: Iterable[Item]) -> Board:
        return self.model_copy(update={"items": tuple(items)})


class Location(BaseModel):
    """A slot on a board, as reported by a drag provider."""

    model_config = {"frozen": True}

    board_id: str
    index: int = Field(default=0, ge=0)


def check_disjoint(boards: Iterable[Board]) -> None:
    """Raise ``ValueError`` if board ids or item ids are not unique.

    Called when a caller hands boards to the state machine. Event handling
    never raises; this guards construction only.
    """
    board_ids: set[str] = set()
    owners: dict[str, str] = {}
    for board in boards:
        if board.id in board_ids:
            msg = f"Duplicate board id: {board.id}"
            raise ValueError(msg)
        board_ids.add(board.id)
        for item in board.items:
            if item.id in owners:
                msg = f"Item {item.id} appears on both {owners[item.id]} and {board.id}"
                raise ValueError(msg)
            owners[item.id] = board.id
