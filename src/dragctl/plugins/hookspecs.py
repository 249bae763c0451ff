"""Pluggy hook specifications for dragctl lifecycle events and rule extensions.

Four lifecycle events are dispatched synchronously after the state machine
has published its new snapshot. One setup-time hook lets plugins contribute
extra validation rules, evaluated after the built-in ones.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

import pluggy

if TYPE_CHECKING:
    from dragctl.domain.rules import ValidationRule

hookspec = pluggy.HookspecMarker("dragctl")


class DragctlHookSpec:
    """Hook specifications for the dragctl plugin system."""

    @hookspec
    def post_drag_start(self, draggable_id: str, selected_item_ids: list[str]) -> None:
        """Called after a drag starts and the selection is seeded."""

    @hookspec
    def post_drag_update(
        self,
        draggable_id: str,
        destination_board_id: str | None,
        invalid_item_ids: list[str],
        error_message: str,
    ) -> None:
        """Called after live feedback is recomputed.

        *destination_board_id* is None when the pointer left every board and
        the feedback was cleared.
        """

    @hookspec
    def post_drag_end(
        self,
        draggable_id: str,
        committed: bool,
        item_ids: list[str],
        destination_board_id: str | None,
        destination_index: int | None,
    ) -> None:
        """Called after a drag ends, whether the move was committed or not."""

    @hookspec
    def post_selection_change(self, selected_item_ids: list[str]) -> None:
        """Called whenever the selection changes."""

    @hookspec
    def register_validation_rules(self) -> list[ValidationRule] | None:
        """Return extra validation rules appended to the built-in pipeline."""
