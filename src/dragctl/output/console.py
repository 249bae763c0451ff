"""Theme and buffered Console for dragctl's Rich output.

Renderers draw into an in-memory Console and hand back the text, so
``format_result()`` stays a plain ``str`` function. Board and item names
are user data: markup and emoji codes in them are printed literally.
"""

from __future__ import annotations

from io import StringIO

from rich.console import Console
from rich.theme import Theme

DRAG_THEME = Theme(
    {
        "drag.ok": "bold green",
        "drag.error": "bold red",
        "drag.warning": "bold yellow",
        "drag.op": "bold cyan",
        "drag.key": "dim",
        "drag.id": "bold blue",
        "drag.board": "bold",
        "drag.item": "",
        "drag.item.selected": "bold cyan",
        "drag.item.invalid": "bold red",
        "drag.badge": "bold white on cyan",
        "drag.status": "white on dark_cyan",
        "drag.status.error": "white on red",
    }
)


DEFAULT_WIDTH = 120


def create_console(*, no_color: bool = False, width: int | None = None) -> Console:
    """A Console writing into a StringIO buffer, *width* columns wide.

    Colors are dropped automatically when stdout is not a terminal.
    """
    return Console(
        file=StringIO(),
        theme=DRAG_THEME,
        no_color=no_color,
        width=width or DEFAULT_WIDTH,
        highlight=False,
        markup=False,
        emoji=False,
    )


def get_output(console: Console) -> str:
    buffer = console.file
    if not isinstance(buffer, StringIO):
        msg = "console was not created by create_console()"
        raise TypeError(msg)
    return buffer.getvalue()


def item_style(*, selected: bool, invalid: bool) -> str:
    """Rich style for an item cell."""
    if invalid:
        return "drag.item.invalid"
    if selected:
        return "drag.item.selected"
    return "drag.item"
