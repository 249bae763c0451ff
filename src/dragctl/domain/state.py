"""Drag phases and the published state snapshot.

The snapshot keeps two slices apart:
- Committed state: boards and selection. Boards change only on an allowed
  drag end.
- Transient feedback: drag flag, invalid items, error message. Overwritten
  freely by start/update/end.
"""

from __future__ import annotations

from enum import StrEnum

from pydantic import BaseModel, Field

from dragctl.domain.models import Board


class DragPhase(StrEnum):
    """Drag state machine phases."""

    IDLE = "idle"
    DRAGGING = "dragging"


class DragFeedback(BaseModel):
    """Transient live feedback for the drag in progress."""

    model_config = {"frozen": True}

    is_dragging: bool = False
    invalid_item_ids: tuple[str, ...] = ()
    error_message: str = ""

    @property
    def phase(self) -> DragPhase:
        return DragPhase.DRAGGING if self.is_dragging else DragPhase.IDLE

    def cleared(self) -> DragFeedback:
        """Same drag flag, no invalid items, no error."""
        return DragFeedback(is_dragging=self.is_dragging)


class DndState(BaseModel):
    """Immutable snapshot published to the rendering layer."""

    model_config = {"frozen": True}

    boards: tuple[Board, ...] = ()
    selection: tuple[str, ...] = ()
    feedback: DragFeedback = Field(default_factory=DragFeedback)

    @property
    def selected_item_ids(self) -> tuple[str, ...]:
        return self.selection

    @property
    def invalid_item_ids(self) -> tuple[str, ...]:
        return self.feedback.invalid_item_ids

    @property
    def error_message(self) -> str:
        return self.feedback.error_message

    @property
    def is_dragging(self) -> bool:
        return self.feedback.is_dragging

    @property
    def phase(self) -> DragPhase:
        return self.feedback.phase

    def item_ids(self) -> set[str]:
        return {item.id for board in self.boards for item in board.items}

    def to_dict(self) -> dict[str, object]:
        """Plain-data view for JSON output and plugin payloads."""
        return {
            "boards": [
                {
                    "id": board.id,
                    "name": board.name,
                    "items": [item.model_dump(mode="json") for item in board.items],
                }
                for board in self.boards
            ],
            "selected_item_ids": list(self.selection),
            "invalid_item_ids": list(self.feedback.invalid_item_ids),
            "error_message": self.feedback.error_message,
            "is_dragging": self.feedback.is_dragging,
        }
