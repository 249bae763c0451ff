"""DragService — show, preview, and replay operations for the CLI.

Each operation builds a fresh :class:`DragStateMachine` from settings (or
caller-supplied boards), drives it, and reports the published state as a
ServiceResult. Nothing is persisted between operations.
"""

from __future__ import annotations

import logging
from collections.abc import Sequence
from pathlib import Path
from typing import Any

from pydantic import TypeAdapter, ValidationError

from dragctl.domain.events import Script, parse_script
from dragctl.domain.models import Board, Location
from dragctl.domain.placement import boards_holding, find_board, project_batch
from dragctl.domain.seed import seed_boards
from dragctl.domain.state import DndState
from dragctl.services.base import BaseService
from dragctl.services.machine import DragStateMachine
from dragctl.services.result import FailureCode, ServiceResult
from dragctl.services.telemetry import trace_span, traced

logger = logging.getLogger(__name__)

_BOARDS_ADAPTER: TypeAdapter[tuple[Board, ...]] = TypeAdapter(tuple[Board, ...])


def _state_data(machine: DragStateMachine) -> dict[str, Any]:
    data = machine.state.to_dict()
    data["status"] = machine.status_text()
    return data


class DragService(BaseService):
    """Drag operations backed by a fresh state machine per call."""

    def build_machine(self, boards: Sequence[Board] | None = None) -> DragStateMachine:
        """A machine over *boards* (or the configured seed boards)."""
        if boards is None:
            cfg = self.settings.boards
            boards = seed_boards(cfg.names, cfg.items_per_board)
        return DragStateMachine(
            boards,
            rule=self.rule_set(),
            clear_selection_on_escape=self.settings.selection.clear_on_escape,
            seed_mode=self.settings.selection.seed_mode,
            event_bus=self.event_bus,
        )

    def load_boards(self, path: Path) -> tuple[Board, ...]:
        """Read a JSON list of boards. Raises ValueError on bad content."""
        return _BOARDS_ADAPTER.validate_json(path.read_text(encoding="utf-8"))

    # ------------------------------------------------------------------
    # show
    # ------------------------------------------------------------------

    @traced
    def show(self, boards_path: Path | None = None) -> ServiceResult:
        """Render the starting boards."""
        op = "show"
        boards, err = self._boards_or_error(op, boards_path)
        if err is not None:
            return err
        try:
            machine = self.build_machine(boards)
        except ValueError as exc:
            return ServiceResult.failure(op, FailureCode.INVALID_BOARDS, str(exc))
        data = _state_data(machine)
        return ServiceResult.success(op, data, self._drain_warnings())

    # ------------------------------------------------------------------
    # preview
    # ------------------------------------------------------------------

    @traced
    def preview(
        self,
        item_ids: Sequence[str],
        destination_board_id: str,
        destination_index: int,
        *,
        source_board_id: str | None = None,
        boards_path: Path | None = None,
    ) -> ServiceResult:
        """Validate and project a batch move without committing it.

        The source location defaults to the slot of the first item that
        resolves. A rejected move is still ``ok``; the outcome is in data.
        """
        op = "preview"
        boards, err = self._boards_or_error(op, boards_path)
        if err is not None:
            return err
        try:
            machine = self.build_machine(boards)
        except ValueError as exc:
            return ServiceResult.failure(op, FailureCode.INVALID_BOARDS, str(exc))

        holding = boards_holding(machine.boards, item_ids)
        if not holding:
            return ServiceResult.failure(
                op, FailureCode.UNKNOWN_ITEMS, "None of the items exist", item_ids=list(item_ids)
            )

        source = self._source_location(machine.boards, item_ids, source_board_id, holding)
        destination = Location(board_id=destination_board_id, index=destination_index)
        with trace_span("validate") as span:
            result = machine.validate(source, destination, item_ids)
            if span is not None:
                span.annotate("allowed", result.is_allowed)

        dest_board = find_board(machine.boards, destination_board_id)
        projected = (
            project_batch(machine.boards, dest_board, item_ids, destination_index)
            if dest_board is not None
            else ()
        )
        data = {
            "item_ids": list(item_ids),
            "source": source.model_dump(),
            "destination": destination.model_dump(),
            "allowed": result.is_allowed,
            "code": str(result.code) if result.code else None,
            "invalid_item_ids": list(result.invalid_item_ids),
            "error_message": result.error_message,
            "projected": [item.model_dump(mode="json") for item in projected],
        }
        return ServiceResult.success(op, data, self._drain_warnings())

    # ------------------------------------------------------------------
    # replay
    # ------------------------------------------------------------------

    @traced
    def replay(self, script_path: Path, *, boards_path: Path | None = None) -> ServiceResult:
        """Replay a JSON event script and report every intermediate snapshot.

        Boards come from the script's ``boards`` key, then *boards_path*,
        then the configured seed.
        """
        op = "replay"
        if not script_path.is_file():
            msg = f"No such script: {script_path}"
            return ServiceResult.failure(op, FailureCode.SCRIPT_NOT_FOUND, msg)
        try:
            script: Script = parse_script(script_path.read_text(encoding="utf-8"))
        except (ValueError, ValidationError) as exc:
            msg = f"Invalid script {script_path}: {exc}"
            return ServiceResult.failure(op, FailureCode.INVALID_SCRIPT, msg)

        boards: Sequence[Board] | None = script.boards
        if boards is None:
            boards, err = self._boards_or_error(op, boards_path)
            if err is not None:
                return err
        try:
            machine = self.build_machine(boards)
        except ValueError as exc:
            return ServiceResult.failure(op, FailureCode.INVALID_BOARDS, str(exc))

        steps: list[dict[str, Any]] = []
        moves_applied = 0
        for index, event in enumerate(script.events):
            before = machine.state
            with trace_span(f"event[{index}] {event.type}") as span:
                after = machine.dispatch(event)
                if span is not None:
                    span.annotate("phase", str(after.phase))
            moved = after.boards != before.boards
            moves_applied += int(moved)
            steps.append(self._step(index, event.type, after, moved, machine.status_text()))

        logger.debug("Replayed %d events, %d moves applied", len(steps), moves_applied)
        data = _state_data(machine)
        data["steps"] = steps
        data["event_count"] = len(steps)
        data["moves_applied"] = moves_applied
        return ServiceResult.success(op, data, self._drain_warnings())

    # ------------------------------------------------------------------
    # Internal
    # ------------------------------------------------------------------

    def _boards_or_error(
        self, op: str, boards_path: Path | None
    ) -> tuple[tuple[Board, ...] | None, ServiceResult | None]:
        if boards_path is None:
            return None, None
        if not boards_path.is_file():
            msg = f"No such boards file: {boards_path}"
            return None, ServiceResult.failure(op, FailureCode.BOARDS_NOT_FOUND, msg)
        try:
            return self.load_boards(boards_path), None
        except (ValueError, ValidationError) as exc:
            msg = f"Invalid boards file {boards_path}: {exc}"
            return None, ServiceResult.failure(op, FailureCode.INVALID_BOARDS, msg)

    @staticmethod
    def _source_location(
        boards: Sequence[Board],
        item_ids: Sequence[str],
        source_board_id: str | None,
        holding: Sequence[Board],
    ) -> Location:
        board = find_board(boards, source_board_id) if source_board_id else None
        board = board or holding[0]
        for item_id in item_ids:
            index = board.index_of(item_id)
            if index is not None:
                return Location(board_id=board.id, index=index)
        return Location(board_id=board.id, index=0)

    @staticmethod
    def _step(
        index: int, event_type: str, state: DndState, moved: bool, status: str
    ) -> dict[str, Any]:
        return {
            "index": index,
            "event": event_type,
            "phase": str(state.phase),
            "selected_item_ids": list(state.selection),
            "invalid_item_ids": list(state.invalid_item_ids),
            "error_message": state.error_message,
            "moved": moved,
            "status": status,
        }

