"""Tests for Rich Console factory and theme."""

from io import BytesIO, StringIO, TextIOWrapper

import pytest
from rich.console import Console

from dragctl.output.console import DRAG_THEME, create_console, get_output, item_style


class TestCreateConsole:
    def test_returns_console_with_stringio(self) -> None:
        console = create_console()
        assert isinstance(console.file, StringIO)

    def test_no_color_disables_ansi(self) -> None:
        console = create_console(no_color=True)
        console.print("hello", style="drag.error")
        output = get_output(console)
        assert "\x1b" not in output
        assert "hello" in output

    def test_markup_and_emoji_printed_literally(self) -> None:
        console = create_console(no_color=True)
        console.print("[bold]Inbox[/bold] :star:")
        assert get_output(console).strip() == "[bold]Inbox[/bold] :star:"

    def test_get_output_rejects_foreign_console(self) -> None:
        with pytest.raises(TypeError):
            get_output(Console(file=TextIOWrapper(BytesIO())))

    def test_custom_width(self) -> None:
        assert create_console(width=80).width == 80

    def test_default_width(self) -> None:
        assert create_console().width == 120


class TestTheme:
    def test_item_styles_defined(self) -> None:
        for name in ("drag.item", "drag.item.selected", "drag.item.invalid", "drag.badge"):
            assert name in DRAG_THEME.styles


class TestItemStyle:
    def test_invalid_wins_over_selected(self) -> None:
        assert item_style(selected=True, invalid=True) == "drag.item.invalid"

    def test_selected(self) -> None:
        assert item_style(selected=True, invalid=False) == "drag.item.selected"

    def test_plain(self) -> None:
        assert item_style(selected=False, invalid=False) == "drag.item"
