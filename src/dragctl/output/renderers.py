"""Operation-specific Rich renderers for ServiceResult.

Each renderer writes to a Rich Console (backed by StringIO). The caller
extracts the rendered text via ``get_output(console)``.

Renderers are dispatched by ``result.op`` in :func:`render_result`.
Unknown ops fall through to a generic key-value renderer.
"""

from __future__ import annotations

import json
from typing import TYPE_CHECKING, Any

from rich.table import Table
from rich.text import Text
from rich.tree import Tree

from dragctl.domain.selection import order_of
from dragctl.output.console import create_console, get_output, item_style

if TYPE_CHECKING:
    from rich.console import Console

    from dragctl.services.result import ServiceResult


# ── Public API ────────────────────────────────────────────────────────


def render_result(result: ServiceResult, *, verbose: bool = False) -> str:
    """Render a ServiceResult to a styled string via Rich.

    Returns plain text (no ANSI) when Rich detects no terminal, which is
    the case inside Click's CliRunner and piped output.
    """
    console = create_console()

    if result.ok:
        renderer = _OP_RENDERERS.get(result.op, _render_generic)
        renderer(result, console, verbose=verbose)
        if verbose and result.meta:
            console.print()
            console.print(_meta_tree(result.meta))
    else:
        _render_error(result, console, verbose=verbose)

    return get_output(console).rstrip("\n")


def render_quiet(result: ServiceResult) -> str:
    """Render minimal output for ``--quiet`` mode.

    Boards print one line each (``BOARD: id id ...``); previews print
    ``allowed`` or ``rejected <code>``.
    """
    if not result.ok:
        msg = result.error.message if result.error else "Unknown error"
        return f"ERROR: {result.op} — {msg}"

    if result.op == "preview":
        if result.data.get("allowed"):
            return "allowed"
        return f"rejected {result.data.get('code')}"

    boards = result.data.get("boards")
    if isinstance(boards, list):
        return "\n".join(
            f"{board['id']}: {' '.join(item['id'] for item in board['items'])}".rstrip()
            for board in boards
        )

    return f"OK: {result.op}"


# ── Helpers ───────────────────────────────────────────────────────────


def _header(console: Console, result: ServiceResult) -> None:
    console.print(Text.assemble(("OK", "drag.ok"), "  ", (result.op, "drag.op")))


def _field(console: Console, key: str, value: Any) -> None:
    is_id = key == "id" or key.endswith(("_id", "_ids"))
    console.print(
        Text.assemble((f"  {key}: ", "drag.key"), (str(value), "drag.id" if is_id else ""))
    )


def _span_label(span: dict[str, Any]) -> Text:
    duration = span.get("duration_ms", 0.0)
    # replay spans are per event; anything past a few ms is worth a look
    style = "bold red" if duration > 50 else "yellow" if duration > 5 else "dim"
    label = Text.assemble((f"{duration:.3f}ms", style), f"  {span.get('name', '?')}")
    annotations = span.get("annotations") or {}
    if annotations:
        label.append(f"  ({', '.join(f'{k}={v}' for k, v in annotations.items())})")
    return label


def _add_spans(tree: Tree, span: dict[str, Any]) -> None:
    branch = tree.add(_span_label(span))
    for child in span.get("children", []):
        _add_spans(branch, child)


def _meta_tree(meta: dict[str, Any]) -> Tree:
    """``meta`` as a tree; the telemetry span tree nests under its own node."""
    tree = Tree(Text("meta", style="dim"), guide_style="dim")
    for key, value in meta.items():
        if key == "telemetry" and isinstance(value, dict):
            _add_spans(tree, value)
        else:
            tree.add(Text(f"{key}: {value}"))
    return tree



def _board_table(data: dict[str, Any]) -> Table:
    """One column per board; selected items carry their 1-based badge."""
    selected = tuple(data.get("selected_item_ids", ()))
    invalid = set(data.get("invalid_item_ids", []))
    boards: list[dict[str, Any]] = data.get("boards", [])

    table = Table(show_header=True, show_lines=False, pad_edge=False, expand=False)
    for board in boards:
        table.add_column(f"{board.get('name') or board['id']} Board", header_style="drag.board")

    depth = max((len(board["items"]) for board in boards), default=0)
    for row in range(depth):
        cells: list[Text] = []
        for board in boards:
            items = board["items"]
            if row >= len(items):
                cells.append(Text(""))
                continue
            item = items[row]
            badge = order_of(selected, item["id"])
            is_selected = badge is not None
            cell = Text(
                str(item.get("content") or item["id"]),
                style=item_style(selected=is_selected, invalid=item["id"] in invalid),
            )
            if is_selected:
                cell.append(" ")
                cell.append(f"[{badge}]", style="drag.badge")
            if item["id"] in invalid:
                cell.append(" ✗", style="drag.item.invalid")
            cells.append(cell)
        table.add_row(*cells)
    return table


def _status_bar(console: Console, status: str, *, error: bool) -> None:
    if not status:
        return
    style = "drag.status.error" if error else "drag.status"
    for line in status.splitlines():
        console.print(Text(f" {line} ", style=style))


# ── Error renderer ────────────────────────────────────────────────────


def _render_error(result: ServiceResult, console: Console, *, verbose: bool = False) -> None:
    err = result.error
    message = err.message if err else "Unknown error"
    console.print(
        Text.assemble(("ERROR", "drag.error"), "  ", (result.op, "drag.op"), " — ", message)
    )
    if verbose and err and err.detail:
        detail = Tree(Text("detail", style="dim"), guide_style="dim")
        for key, value in err.detail.items():
            detail.add(Text(f"{key}: {value}"))
        console.print(detail)


# ── Operation renderers ───────────────────────────────────────────────


def _render_show(result: ServiceResult, console: Console, *, verbose: bool = False) -> None:
    """Render the board columns and status bar."""
    d = result.data
    _header(console, result)
    _status_bar(console, d.get("status", ""), error=bool(d.get("error_message")))
    console.print(_board_table(d))

def _render_preview(result: ServiceResult, console: Console, *, verbose: bool = False) -> None:
    """Render a move preview: verdict, offending items, projected destination."""
    d = result.data
    _header(console, result)
    _field(console, "item_ids", ", ".join(d.get("item_ids", [])))
    dest = d.get("destination", {})
    _field(console, "destination", f"{dest.get('board_id')}[{dest.get('index')}]")
    verdict = (
        Text("allowed", style="drag.ok")
        if d.get("allowed")
        else Text(f"rejected ({d.get('code')})", style="drag.error")
    )
    console.print(Text.assemble(("  verdict: ", "drag.key"), verdict))
    if not d.get("allowed"):
        _field(console, "invalid_item_ids", ", ".join(d.get("invalid_item_ids", [])))
        _field(console, "error_message", d.get("error_message", ""))

    projected = d.get("projected", [])
    if projected:
        console.print()
        table = Table(show_header=True, show_lines=False, pad_edge=False, expand=False)
        table.add_column("#", justify="right", style="dim")
        table.add_column(f"{dest.get('board_id')} (projected)", header_style="drag.board")
        moving = set(d.get("item_ids", []))
        invalid = set(d.get("invalid_item_ids", []))
        for index, item in enumerate(projected):
            style = item_style(selected=item["id"] in moving, invalid=item["id"] in invalid)
            table.add_row(str(index), Text(str(item.get("content") or item["id"]), style=style))
        console.print(table)

def _render_replay(result: ServiceResult, console: Console, *, verbose: bool = False) -> None:
    """Render the replay trace followed by the final boards."""
    d = result.data
    _header(console, result)
    _field(console, "events", d.get("event_count", 0))
    _field(console, "moves_applied", d.get("moves_applied", 0))

    steps = d.get("steps", [])
    if steps:
        console.print()
        table = Table(show_header=True, show_lines=False, pad_edge=False, expand=False)
        table.add_column("#", justify="right", style="dim")
        table.add_column("Event", style="drag.op")
        table.add_column("Phase")
        table.add_column("Selected", style="drag.id")
        table.add_column("Invalid", style="drag.item.invalid")
        table.add_column("Moved")
        table.add_column("Error")
        for step in steps:
            table.add_row(
                str(step["index"]),
                step["event"],
                step["phase"],
                ", ".join(step["selected_item_ids"]),
                ", ".join(step["invalid_item_ids"]),
                "yes" if step["moved"] else "",
                step["error_message"],
            )
        console.print(table)

    console.print()
    _status_bar(console, d.get("status", ""), error=bool(d.get("error_message")))
    console.print(_board_table(d))

# ── Generic fallback ──────────────────────────────────────────────────


def _render_generic(result: ServiceResult, console: Console, *, verbose: bool = False) -> None:
    """Fallback renderer: status line + all data as key-value pairs."""
    _header(console, result)
    for key, value in result.data.items():
        if isinstance(value, (dict, list)):
            _field(console, key, json.dumps(value, separators=(",", ":")))
        else:
            _field(console, key, value)

# ── Dispatch table ────────────────────────────────────────────────────

_OP_RENDERERS: dict[str, Any] = {
    "show": _render_show,
    "preview": _render_preview,
    "replay": _render_replay,
}
