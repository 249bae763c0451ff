"""Tests for placement projection."""

from dragctl.domain.placement import (
    boards_holding,
    find_board,
    next_item,
    previous_item,
    project,
    project_batch,
    resolve_items,
    to_post_removal_index,
)
from tests.conftest import board, item


def _ids(items) -> list[str]:  # type: ignore[no-untyped-def]
    return [i.id for i in items]


A = board("A", item("a1"), item("a2"), item("a3"))
B = board("B", item("b1"), item("b2"))


class TestLookups:
    def test_find_board(self) -> None:
        assert find_board([A, B], "B") is B
        assert find_board([A, B], "Z") is None

    def test_boards_holding_keeps_board_order(self) -> None:
        assert boards_holding([A, B], ["b1", "a2"]) == [A, B]
        assert boards_holding([A, B], ["zz"]) == []

    def test_resolve_items_keeps_id_order(self) -> None:
        assert _ids(resolve_items([A, B], ["b2", "a1", "zz", "b2"])) == ["b2", "a1"]


class TestNeighbours:
    def test_previous_item(self) -> None:
        assert previous_item(A.items, 0) is None
        assert previous_item(A.items, 1).id == "a1"  # type: ignore[union-attr]
        assert previous_item(A.items, 3).id == "a3"  # type: ignore[union-attr]

    def test_next_item(self) -> None:
        assert next_item(A.items, 0).id == "a2"  # type: ignore[union-attr]
        assert next_item(A.items, 2) is None


class TestProject:
    def test_cross_board_insert(self) -> None:
        assert _ids(project(A, B, ["a1"], 1)) == ["b1", "a1", "b2"]

    def test_index_clamped_to_end(self) -> None:
        assert _ids(project(A, B, ["a1"], 99)) == ["b1", "b2", "a1"]

    def test_same_board_reorder_uses_post_removal_index(self) -> None:
        assert _ids(project(A, A, ["a1"], 2)) == ["a2", "a3", "a1"]
        assert _ids(project(A, A, ["a3"], 0)) == ["a3", "a1", "a2"]

    def test_batch_preserves_selection_order(self) -> None:
        assert _ids(project(A, B, ["a3", "a1"], 0)) == ["a3", "a1", "b1", "b2"]

    def test_multi_source_batch(self) -> None:
        C = board("C", item("c1"))
        projected = project_batch([A, B, C], C, ["b2", "a1"], 1)
        assert _ids(projected) == ["c1", "b2", "a1"]

    def test_unknown_ids_ignored(self) -> None:
        assert _ids(project(A, B, ["zz"], 0)) == ["b1", "b2"]

    def test_does_not_mutate_inputs(self) -> None:
        project(A, B, ["a1"], 0)
        assert A.item_ids == ("a1", "a2", "a3")
        assert B.item_ids == ("b1", "b2")


class TestToPostRemovalIndex:
    def test_subtracts_moving_items_before_index(self) -> None:
        assert to_post_removal_index(A.items, ["a1"], 3) == 2

    def test_ignores_moving_items_after_index(self) -> None:
        assert to_post_removal_index(A.items, ["a3"], 1) == 1

    def test_foreign_items(self) -> None:
        assert to_post_removal_index(A.items, ["b1"], 2) == 2
