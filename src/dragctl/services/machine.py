"""DragStateMachine — the drag lifecycle orchestrator.

Consumes drag provider events (start/update/end), item clicks and the
Escape signal, and owns the single authoritative :class:`DndState`
snapshot. Every handler finishes by publishing a complete new snapshot
and returning it.

INVARIANT: Boards change only on an allowed drag end. Validation and
projection read the committed snapshot and never write to it.
INVARIANT: Handlers never raise. Unknown ids are no-ops; rejected moves
are reported through feedback, then abandoned.
"""

from __future__ import annotations

import logging
from collections.abc import Callable, Iterable, Sequence
from typing import TYPE_CHECKING, Any

from dragctl.domain import selection as sel
from dragctl.domain.commit import commit_move
from dragctl.domain.events import DragEnd, DragStart, DragUpdate, EscapePressed, ItemClick
from dragctl.domain.models import Board, Location, check_disjoint
from dragctl.domain.placement import find_board
from dragctl.domain.rules import (
    Move,
    RuleContext,
    RuleSet,
    ValidationResult,
    ValidationRule,
    destination_exists,
    rule_failed,
)
from dragctl.domain.state import DndState, DragFeedback, DragPhase

if TYPE_CHECKING:
    from dragctl.domain.events import DragEvent
    from dragctl.plugins.event_bus import EventBus

logger = logging.getLogger(__name__)

StateListener = Callable[[DndState], None]


class DragStateMachine:
    """Selection, live validation, and commit for multi-item drags.

    Parameters:
        boards: Initial board set. Board and item ids must be unique.
        rule: Injectable validation policy. Defaults to a pipeline that only
            checks the destination exists.
        clear_selection_on_escape: Whether :meth:`on_escape` clears the
            selection.
        seed_mode: How a drag start seeds the selection.
        event_bus: Optional plugin bus notified after each transition.

    Usage::

        machine = DragStateMachine(seed_boards(), rule=default_rules([("A", "C")]))
        src, dst = Location(board_id="A", index=0), Location(board_id="B", index=0)
        machine.on_drag_start("A-item-1")
        machine.on_drag_update(src, dst, "A-item-1")
        state = machine.on_drag_end(src, dst, "A-item-1")
    """

    def __init__(
        self,
        boards: Iterable[Board],
        *,
        rule: ValidationRule | None = None,
        clear_selection_on_escape: bool = True,
        seed_mode: sel.SeedMode = sel.SeedMode.IF_EMPTY,
        event_bus: EventBus | None = None,
    ) -> None:
        initial = tuple(boards)
        check_disjoint(initial)
        self._state = DndState(boards=initial)
        self._rule: ValidationRule = rule if rule is not None else RuleSet([destination_exists])
        self._clear_on_escape = clear_selection_on_escape
        self._seed_mode = seed_mode
        self._event_bus = event_bus
        self._listeners: list[StateListener] = []

    # ------------------------------------------------------------------
    # Published state
    # ------------------------------------------------------------------

    @property
    def state(self) -> DndState:
        return self._state

    @property
    def boards(self) -> tuple[Board, ...]:
        return self._state.boards

    @property
    def selected_item_ids(self) -> tuple[str, ...]:
        return self._state.selection

    @property
    def invalid_item_ids(self) -> tuple[str, ...]:
        return self._state.invalid_item_ids

    @property
    def error_message(self) -> str:
        return self._state.error_message

    @property
    def is_dragging(self) -> bool:
        return self._state.is_dragging

    @property
    def phase(self) -> DragPhase:
        return self._state.phase

    def subscribe(self, listener: StateListener) -> Callable[[], None]:
        """Call *listener* with every new snapshot. Returns an unsubscribe function."""
        self._listeners.append(listener)

        def unsubscribe() -> None:
            if listener in self._listeners:
                self._listeners.remove(listener)

        return unsubscribe

    def status_text(self) -> str:
        """The status bar line for the current snapshot."""
        state = self._state
        if state.is_dragging:
            count = len(state.selection) or 1
            noun = "item" if count == 1 else "items"
            text = f"Moving {count} {noun}"
            if state.error_message:
                text += f"\nError: {state.error_message}"
            return text
        if state.selection:
            return "Press ESC to clear the selection"
        return ""

    # ------------------------------------------------------------------
    # Validation
    # ------------------------------------------------------------------

    def moving_item_ids(self, draggable_id: str) -> tuple[str, ...]:
        """The batch a drag of *draggable_id* would move right now."""
        return self._state.selection or (draggable_id,)

    def validate(
        self, source: Location, destination: Location, item_ids: Sequence[str]
    ) -> ValidationResult:
        """Run the validation policy against the committed snapshot.

        A policy that raises rejects the move with every moving item invalid.
        """
        ctx = RuleContext(boards=self._state.boards, selection=self._state.selection)
        move = Move(source=source, destination=destination, item_ids=tuple(item_ids))
        try:
            return self._rule(ctx)(move)
        except Exception:
            logger.warning("Validation policy raised; rejecting move", exc_info=True)
            return rule_failed(move.item_ids)

    # ------------------------------------------------------------------
    # Inbound events
    # ------------------------------------------------------------------

    def on_drag_start(self, draggable_id: str) -> DndState:
        if draggable_id not in self._state.item_ids():
            logger.debug("drag_start ignored: unknown item %s", draggable_id)
            return self._state
        selection = sel.seed(self._state.selection, draggable_id, self._seed_mode)
        seeded = selection != self._state.selection
        self._publish(
            self._state.model_copy(
                update={"selection": selection, "feedback": DragFeedback(is_dragging=True)}
            )
        )
        logger.debug("drag_start %s moving=%s", draggable_id, list(selection))
        self._notify(
            "post_drag_start",
            draggable_id=draggable_id,
            selected_item_ids=list(selection),
        )
        if seeded:
            self._notify("post_selection_change", selected_item_ids=list(selection))
        return self._state

    def on_drag_update(
        self, source: Location, destination: Location | None, draggable_id: str
    ) -> DndState:
        if destination is None:
            self._set_feedback(self._state.feedback.cleared())
            self._notify(
                "post_drag_update",
                draggable_id=draggable_id,
                destination_board_id=None,
                invalid_item_ids=[],
                error_message="",
            )
            return self._state

        result = self.validate(source, destination, self.moving_item_ids(draggable_id))
        self._set_feedback(
            DragFeedback(
                is_dragging=self._state.is_dragging,
                invalid_item_ids=result.invalid_item_ids,
                error_message=result.error_message,
            )
        )
        self._notify(
            "post_drag_update",
            draggable_id=draggable_id,
            destination_board_id=destination.board_id,
            invalid_item_ids=list(result.invalid_item_ids),
            error_message=result.error_message,
        )
        return self._state

    def on_drag_end(
        self, source: Location, destination: Location | None, draggable_id: str
    ) -> DndState:
        self._set_feedback(DragFeedback())
        if destination is None:
            logger.debug("drag_end %s: dropped outside any board", draggable_id)
            self._notify_end(draggable_id, committed=False, item_ids=[], destination=None)
            return self._state

        item_ids = self.moving_item_ids(draggable_id)
        if find_board(self._state.boards, destination.board_id) is None:
            logger.debug("drag_end %s: unknown board %s", draggable_id, destination.board_id)
            self._notify_end(
                draggable_id, committed=False, item_ids=item_ids, destination=destination
            )
            return self._state

        result = self.validate(source, destination, item_ids)
        if not result.is_allowed:
            logger.debug(
                "drag_end %s rejected: %s invalid=%s",
                draggable_id,
                result.code,
                list(result.invalid_item_ids),
            )
            self._notify_end(
                draggable_id, committed=False, item_ids=item_ids, destination=destination
            )
            return self._state

        boards = commit_move(self._state.boards, item_ids, destination.board_id, destination.index)
        self._publish(self._state.model_copy(update={"boards": boards, "selection": sel.clear()}))
        logger.debug(
            "drag_end %s committed %s -> %s[%d]",
            draggable_id,
            list(item_ids),
            destination.board_id,
            destination.index,
        )
        self._notify_end(draggable_id, committed=True, item_ids=item_ids, destination=destination)
        self._notify("post_selection_change", selected_item_ids=[])
        return self._state

    def on_item_click(self, item_id: str) -> DndState:
        if item_id not in self._state.item_ids():
            logger.debug("item_click ignored: unknown item %s", item_id)
            return self._state
        self._set_selection(sel.toggle(self._state.selection, item_id))
        return self._state

    def on_escape(self) -> DndState:
        if self._clear_on_escape and self._state.selection:
            self._set_selection(sel.clear())
        return self._state

    def dispatch(self, event: DragEvent) -> DndState:
        """Route a typed lifecycle event to its handler."""
        if isinstance(event, DragStart):
            return self.on_drag_start(event.draggable_id)
        if isinstance(event, DragUpdate):
            return self.on_drag_update(event.source, event.destination, event.draggable_id)
        if isinstance(event, DragEnd):
            return self.on_drag_end(event.source, event.destination, event.draggable_id)
        if isinstance(event, ItemClick):
            return self.on_item_click(event.item_id)
        if isinstance(event, EscapePressed):
            return self.on_escape()
        logger.debug("Ignoring unknown event %r", event)
        return self._state

    # ------------------------------------------------------------------
    # Direct setters
    # ------------------------------------------------------------------

    def set_boards(self, boards: Iterable[Board]) -> DndState:
        """Replace the board set. Raises ``ValueError`` if ids are not disjoint.

        Selected ids that no longer resolve are dropped.
        """
        new_boards = tuple(boards)
        check_disjoint(new_boards)
        selection = sel.prune(self._state.selection, new_boards)
        self._publish(self._state.model_copy(update={"boards": new_boards, "selection": selection}))
        return self._state

    def set_selected_item_ids(self, item_ids: Iterable[str]) -> DndState:
        self._set_selection(sel.prune(item_ids, self._state.boards))
        return self._state

    # ------------------------------------------------------------------
    # Internal
    # ------------------------------------------------------------------

    def _set_feedback(self, feedback: DragFeedback) -> None:
        if feedback != self._state.feedback:
            self._publish(self._state.model_copy(update={"feedback": feedback}))

    def _set_selection(self, selection: tuple[str, ...]) -> None:
        if selection == self._state.selection:
            return
        self._publish(self._state.model_copy(update={"selection": selection}))
        self._notify("post_selection_change", selected_item_ids=list(selection))

    def _publish(self, state: DndState) -> None:
        self._state = state
        for listener in list(self._listeners):
            try:
                listener(state)
            except Exception:
                logger.warning("State listener %r failed", listener, exc_info=True)

    def _notify_end(
        self,
        draggable_id: str,
        *,
        committed: bool,
        item_ids: Sequence[str],
        destination: Location | None,
    ) -> None:
        self._notify(
            "post_drag_end",
            draggable_id=draggable_id,
            committed=committed,
            item_ids=list(item_ids),
            destination_board_id=destination.board_id if destination else None,
            destination_index=destination.index if destination else None,
        )

    def _notify(self, hook_name: str, **payload: Any) -> None:
        if self._event_bus is None:
            return
        self._event_bus.dispatch(hook_name, payload)
