"""Tests for drag phases and the published snapshot."""

from dragctl.domain.state import DndState, DragFeedback, DragPhase
from tests.conftest import board, item


class TestDragPhase:
    def test_values(self) -> None:
        assert DragPhase.IDLE == "idle"
        assert DragPhase.DRAGGING == "dragging"


class TestDragFeedback:
    def test_defaults_idle(self) -> None:
        fb = DragFeedback()
        assert fb.phase == DragPhase.IDLE
        assert fb.invalid_item_ids == ()
        assert fb.error_message == ""

    def test_cleared_keeps_drag_flag(self) -> None:
        fb = DragFeedback(is_dragging=True, invalid_item_ids=("x",), error_message="bad")
        cleared = fb.cleared()
        assert cleared.is_dragging is True
        assert cleared.phase == DragPhase.DRAGGING
        assert cleared.invalid_item_ids == ()
        assert cleared.error_message == ""


class TestDndState:
    def test_properties_delegate(self) -> None:
        state = DndState(
            boards=(board("A", item("a1")),),
            selection=("a1",),
            feedback=DragFeedback(is_dragging=True, invalid_item_ids=("a1",), error_message="e"),
        )
        assert state.selected_item_ids == ("a1",)
        assert state.invalid_item_ids == ("a1",)
        assert state.error_message == "e"
        assert state.is_dragging is True
        assert state.phase == DragPhase.DRAGGING

    def test_item_ids(self) -> None:
        state = DndState(boards=(board("A", item("a1")), board("B", item("b1"))))
        assert state.item_ids() == {"a1", "b1"}

    def test_to_dict(self) -> None:
        state = DndState(boards=(board("A", item("a1", even=True)),), selection=("a1",))
        d = state.to_dict()
        assert d == {
            "boards": [
                {
                    "id": "A",
                    "name": "A",
                    "items": [{"id": "a1", "content": "a1", "is_even": True}],
                }
            ],
            "selected_item_ids": ["a1"],
            "invalid_item_ids": [],
            "error_message": "",
            "is_dragging": False,
        }
