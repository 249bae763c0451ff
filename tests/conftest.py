"""Shared pytest fixtures and test helpers for dragctl tests."""

from __future__ import annotations

from pathlib import Path

import pytest
from click.testing import CliRunner

from dragctl.domain.models import Board, Item, Location
from dragctl.domain.rules import ValidationRule, default_rules
from dragctl.services.machine import DragStateMachine


@pytest.fixture
def cli_runner() -> CliRunner:
    """Provide a Click CLI test runner."""
    return CliRunner()


@pytest.fixture
def _isolated_project(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
    """Change CWD to an empty temp dir so no stray dragctl.toml is discovered.

    Use via ``@pytest.mark.usefixtures("_isolated_project")`` on command
    test classes.
    """
    monkeypatch.delenv("DRAGCTL_CONFIG", raising=False)
    monkeypatch.chdir(tmp_path)


# ---------------------------------------------------------------------------
# Shared test helpers
# ---------------------------------------------------------------------------


def item(item_id: str, *, even: bool = False) -> Item:
    return Item(id=item_id, content=item_id, is_even=even)


def board(board_id: str, *items: Item) -> Board:
    return Board(id=board_id, name=board_id, items=items)


def loc(board_id: str, index: int = 0) -> Location:
    return Location(board_id=board_id, index=index)


def ids(b: Board) -> list[str]:
    return [i.id for i in b.items]


def board_ids(machine: DragStateMachine, board_id: str) -> list[str]:
    for b in machine.boards:
        if b.id == board_id:
            return ids(b)
    raise AssertionError(f"no board {board_id}")


def make_machine(
    *boards: Board,
    forbidden: list[tuple[str, str]] | None = None,
    parity: bool = True,
    rule: ValidationRule | None = None,
    **kwargs: object,
) -> DragStateMachine:
    """Machine over *boards* with the default rule pipeline."""
    if rule is None:
        rule = default_rules(forbidden or [], parity=parity)
    return DragStateMachine(boards, rule=rule, **kwargs)  # type: ignore[arg-type]


def drag(
    machine: DragStateMachine,
    draggable_id: str,
    source: Location,
    destination: Location | None,
) -> None:
    """Run a full start/update/end drag through *machine*."""
    machine.on_drag_start(draggable_id)
    machine.on_drag_update(source, destination, draggable_id)
    machine.on_drag_end(source, destination, draggable_id)
