"""DragCommand: a Click command with an eager ``--examples`` flag.

``--help`` stays short; ``--examples`` prints sample invocations and exits
before required arguments are checked, so ``dragctl replay --examples``
works without a script.
"""

from __future__ import annotations

from collections.abc import Sequence
from typing import Any

import click


class ExamplesOption(click.Option):
    """``--examples`` flag that echoes *examples* and exits."""

    def __init__(self, examples: Sequence[str]) -> None:
        self.examples = tuple(examples)
        super().__init__(
            ["--examples"],
            is_flag=True,
            expose_value=False,
            is_eager=True,
            callback=self._print,
            help="Show usage examples.",
        )

    def _print(self, ctx: click.Context, _param: click.Parameter, value: bool) -> None:
        if not value or ctx.resilient_parsing:
            return
        lines = "\n".join(f"  {example}" for example in self.examples)
        click.echo(f"Examples for '{ctx.command_path}':\n\n{lines}")
        ctx.exit(0)


class DragCommand(click.Command):
    def __init__(self, *args: Any, examples: Sequence[str] = (), **kwargs: Any) -> None:
        super().__init__(*args, **kwargs)
        if examples:
            self.params.append(ExamplesOption(examples))
