"""Seed boards used when the caller does not supply any."""

from __future__ import annotations

from collections.abc import Iterable

from dragctl.domain.models import Board, Item

DEFAULT_BOARD_NAMES: tuple[str, ...] = ("A", "B", "C")
DEFAULT_ITEMS_PER_BOARD = 10


def generate_items(prefix: str, count: int) -> tuple[Item, ...]:
    """Return *count* items numbered from 1; even numbers carry ``is_even``."""
    return tuple(
        Item(id=f"{prefix}-item-{n}", content=f"{prefix} item {n}", is_even=n % 2 == 0)
        for n in range(1, count + 1)
    )


def seed_boards(
    names: Iterable[str] = DEFAULT_BOARD_NAMES,
    items_per_board: int = DEFAULT_ITEMS_PER_BOARD,
) -> tuple[Board, ...]:
    """One board per name (board id = name), each with generated items."""
    return tuple(
        Board(id=name, name=name, items=generate_items(name, items_per_board)) for name in names
    )
