"""Tests for DragService — show, preview, and replay."""

from __future__ import annotations

import json
from pathlib import Path
from typing import Any

import pluggy
import pytest

from dragctl.config.models import BoardsConfig, PluginsConfig, RulesConfig, SelectionConfig
from dragctl.config.settings import DragSettings
from dragctl.domain.rules import ErrorCode, Move, RuleContext, ValidationResult
from dragctl.plugins.manager import PluginManager
from dragctl.services.drag import DragService

hookimpl = pluggy.HookimplMarker("dragctl")


def _service(tmp_path: Path, **overrides: Any) -> DragService:
    overrides.setdefault("no_plugins", True)
    return DragService(DragSettings(project_root=tmp_path, **overrides))


def _write_json(path: Path, data: Any) -> Path:
    path.write_text(json.dumps(data), encoding="utf-8")
    return path


def _loc(board_id: str, index: int) -> dict[str, Any]:
    return {"board_id": board_id, "index": index}


def _drag_events(item_id: str, src: dict[str, Any], dst: dict[str, Any] | None) -> list[dict]:
    return [
        {"type": "drag_start", "draggable_id": item_id},
        {"type": "drag_update", "draggable_id": item_id, "source": src, "destination": dst},
        {"type": "drag_end", "draggable_id": item_id, "source": src, "destination": dst},
    ]


SMALL_BOARDS = [
    {"id": "X", "name": "Todo", "items": [{"id": "x1"}, {"id": "x2", "is_even": True}]},
    {"id": "Y", "name": "Done", "items": [{"id": "y1"}]},
]


class TestShow:
    def test_default_seed(self, tmp_path: Path) -> None:
        result = _service(tmp_path).show()
        assert result.ok
        assert result.op == "show"
        boards = result.data["boards"]
        assert [b["id"] for b in boards] == ["A", "B", "C"]
        assert len(boards[0]["items"]) == 10
        assert boards[0]["items"][1] == {
            "id": "A-item-2",
            "content": "A item 2",
            "is_even": True,
        }
        assert result.data["status"] == ""
        assert result.data["is_dragging"] is False

    def test_configured_seed(self, tmp_path: Path) -> None:
        service = _service(tmp_path, boards=BoardsConfig(names=["L", "R"], items_per_board=2))
        boards = service.show().data["boards"]
        assert [b["id"] for b in boards] == ["L", "R"]
        assert [i["id"] for i in boards[1]["items"]] == ["R-item-1", "R-item-2"]

    def test_boards_file(self, tmp_path: Path) -> None:
        path = _write_json(tmp_path / "boards.json", SMALL_BOARDS)
        result = _service(tmp_path).show(path)
        assert result.ok
        assert [b["name"] for b in result.data["boards"]] == ["Todo", "Done"]

    def test_missing_boards_file(self, tmp_path: Path) -> None:
        result = _service(tmp_path).show(tmp_path / "nope.json")
        assert not result.ok
        assert result.error is not None
        assert result.error.code == "BOARDS_NOT_FOUND"

    def test_malformed_boards_file(self, tmp_path: Path) -> None:
        path = tmp_path / "boards.json"
        path.write_text("{not json", encoding="utf-8")
        result = _service(tmp_path).show(path)
        assert result.error is not None
        assert result.error.code == "INVALID_BOARDS"

    def test_overlapping_boards(self, tmp_path: Path) -> None:
        path = _write_json(
            tmp_path / "boards.json",
            [{"id": "X", "items": [{"id": "dup"}]}, {"id": "Y", "items": [{"id": "dup"}]}],
        )
        result = _service(tmp_path).show(path)
        assert result.error is not None
        assert result.error.code == "INVALID_BOARDS"
        assert "dup" in result.error.message


class TestPreview:
    def test_allowed(self, tmp_path: Path) -> None:
        result = _service(tmp_path).preview(["A-item-1"], "B", 0)
        assert result.ok
        d = result.data
        assert d["allowed"] is True
        assert d["code"] is None
        assert d["source"] == _loc("A", 0)
        assert d["destination"] == _loc("B", 0)
        assert [i["id"] for i in d["projected"][:2]] == ["A-item-1", "B-item-1"]

    def test_forbidden_pair(self, tmp_path: Path) -> None:
        d = _service(tmp_path).preview(["A-item-1", "A-item-3"], "C", 0).data
        assert d["allowed"] is False
        assert d["code"] == "forbidden_board_pair"
        assert d["invalid_item_ids"] == ["A-item-1", "A-item-3"]
        assert d["error_message"] == "Items cannot move from board A to board C."

    def test_parity(self, tmp_path: Path) -> None:
        d = _service(tmp_path).preview(["A-item-2"], "B", 2).data
        assert d["allowed"] is False
        assert d["code"] == ErrorCode.PARITY_ADJACENCY
        assert d["invalid_item_ids"] == ["A-item-2"]

    def test_rules_from_config(self, tmp_path: Path) -> None:
        service = _service(tmp_path, rules=RulesConfig(forbidden_pairs=[], parity=False))
        assert service.preview(["A-item-2"], "C", 2).data["allowed"] is True

    def test_missing_destination(self, tmp_path: Path) -> None:
        d = _service(tmp_path).preview(["A-item-1"], "Z", 0).data
        assert d["code"] == "destination_not_found"
        assert d["projected"] == []

    def test_unknown_items(self, tmp_path: Path) -> None:
        result = _service(tmp_path).preview(["nope"], "B", 0)
        assert not result.ok
        assert result.error is not None
        assert result.error.code == "UNKNOWN_ITEMS"

    def test_source_board_override(self, tmp_path: Path) -> None:
        d = _service(tmp_path).preview(["A-item-1", "B-item-3"], "C", 0, source_board_id="B").data
        assert d["source"] == _loc("B", 2)

    def test_does_not_commit(self, tmp_path: Path) -> None:
        service = _service(tmp_path)
        service.preview(["A-item-1"], "B", 0)
        assert service.show().data["boards"][0]["items"][0]["id"] == "A-item-1"


class TestReplay:
    def test_committed_move(self, tmp_path: Path) -> None:
        script = _write_json(
            tmp_path / "script.json",
            {
                "boards": SMALL_BOARDS,
                "events": [
                    {"type": "item_click", "item_id": "x2"},
                    *_drag_events("x2", _loc("X", 1), _loc("Y", 0)),
                ],
            },
        )
        result = _service(tmp_path).replay(script)
        assert result.ok
        d = result.data
        assert d["event_count"] == 4
        assert d["moves_applied"] == 1
        assert [i["id"] for i in d["boards"][1]["items"]] == ["x2", "y1"]
        assert d["selected_item_ids"] == []
        steps = d["steps"]
        events = [s["event"] for s in steps]
        assert events == ["item_click", "drag_start", "drag_update", "drag_end"]
        assert steps[0]["status"] == "Press ESC to clear the selection"
        assert steps[1]["phase"] == "dragging"
        assert steps[1]["status"] == "Moving 1 item"
        assert steps[3]["moved"] is True
        assert steps[3]["phase"] == "idle"

    def test_rejected_move_reports_feedback(self, tmp_path: Path) -> None:
        script = _write_json(
            tmp_path / "script.json",
            _drag_events("A-item-1", _loc("A", 0), _loc("C", 0)),
        )
        d = _service(tmp_path).replay(script).data
        assert d["moves_applied"] == 0
        update = d["steps"][1]
        assert update["invalid_item_ids"] == ["A-item-1"]
        assert update["error_message"] == "Items cannot move from board A to board C."
        end = d["steps"][2]
        assert end["invalid_item_ids"] == []
        assert end["error_message"] == ""
        assert d["selected_item_ids"] == ["A-item-1"]

    def test_escape_clears(self, tmp_path: Path) -> None:
        script = _write_json(
            tmp_path / "script.json",
            [{"type": "item_click", "item_id": "A-item-1"}, {"type": "escape"}],
        )
        assert _service(tmp_path).replay(script).data["selected_item_ids"] == []

    def test_escape_disabled_by_config(self, tmp_path: Path) -> None:
        script = _write_json(
            tmp_path / "script.json",
            [{"type": "item_click", "item_id": "A-item-1"}, {"type": "escape"}],
        )
        service = _service(tmp_path, selection=SelectionConfig(clear_on_escape=False))
        assert service.replay(script).data["selected_item_ids"] == ["A-item-1"]

    def test_boards_path_fallback(self, tmp_path: Path) -> None:
        boards = _write_json(tmp_path / "boards.json", SMALL_BOARDS)
        script = _write_json(tmp_path / "script.json", [{"type": "item_click", "item_id": "y1"}])
        d = _service(tmp_path).replay(script, boards_path=boards).data
        assert d["selected_item_ids"] == ["y1"]
        assert [b["id"] for b in d["boards"]] == ["X", "Y"]

    def test_missing_script(self, tmp_path: Path) -> None:
        result = _service(tmp_path).replay(tmp_path / "missing.json")
        assert result.error is not None
        assert result.error.code == "SCRIPT_NOT_FOUND"

    @pytest.mark.parametrize(
        "content",
        [
            "{not json",
            json.dumps([{"type": "teleport"}]),
            json.dumps({"events": [{"type": "item_click"}]}),
        ],
    )
    def test_invalid_script(self, tmp_path: Path, content: str) -> None:
        script = tmp_path / "script.json"
        script.write_text(content, encoding="utf-8")
        result = _service(tmp_path).replay(script)
        assert result.error is not None
        assert result.error.code == "INVALID_SCRIPT"

    def test_overlapping_script_boards(self, tmp_path: Path) -> None:
        script = _write_json(
            tmp_path / "script.json",
            {"boards": [{"id": "X", "items": [{"id": "a"}]}, {"id": "Y", "items": [{"id": "a"}]}]},
        )
        result = _service(tmp_path).replay(script)
        assert result.error is not None
        assert result.error.code == "INVALID_BOARDS"


class _RejectEverything:
    @hookimpl
    def register_validation_rules(self) -> list:
        def veto(ctx: RuleContext):  # type: ignore[no-untyped-def]
            def validate(move: Move) -> ValidationResult:
                return ValidationResult(
                    is_allowed=False,
                    invalid_item_ids=move.item_ids,
                    error_message="Vetoed by plugin",
                )

            return validate

        return [veto]


class _ExplodingHook:
    @hookimpl
    def post_drag_start(self, draggable_id: str, selected_item_ids: list[str]) -> None:
        raise RuntimeError("boom")


class TestPlugins:
    def test_plugin_rules_run_after_builtins(self, tmp_path: Path) -> None:
        pm = PluginManager()
        pm.register_plugin(_RejectEverything())
        service = DragService(DragSettings(project_root=tmp_path), plugin_manager=pm)
        d = service.preview(["A-item-1"], "B", 0).data
        assert d["allowed"] is False
        assert d["error_message"] == "Vetoed by plugin"
        forbidden = service.preview(["A-item-1"], "C", 0).data
        assert forbidden["code"] == "forbidden_board_pair"

    def test_plugin_failure_becomes_warning(self, tmp_path: Path) -> None:
        pm = PluginManager()
        pm.register_plugin(_ExplodingHook())
        service = DragService(DragSettings(project_root=tmp_path), plugin_manager=pm)
        script = _write_json(
            tmp_path / "script.json", [{"type": "drag_start", "draggable_id": "A-item-1"}]
        )
        result = service.replay(script)
        assert result.ok
        assert result.warnings == ["Plugin hook post_drag_start failed: boom"]

    def test_no_plugins_flag_skips_manager(self, tmp_path: Path) -> None:
        pm = PluginManager()
        pm.register_plugin(_RejectEverything())
        service = DragService(
            DragSettings(project_root=tmp_path, no_plugins=True), plugin_manager=pm
        )
        assert service.plugin_manager is None
        assert service.preview(["A-item-1"], "B", 0).data["allowed"] is True

    def test_disabled_in_config(self, tmp_path: Path) -> None:
        service = DragService(
            DragSettings(project_root=tmp_path, plugins=PluginsConfig(enabled=False))
        )
        assert service.event_bus is None
