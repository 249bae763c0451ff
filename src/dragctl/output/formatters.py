"""Output-mode dispatch for ServiceResult.

The CLI renders ServiceResult for humans (Rich boards and status bar),
for scripts (``--quiet``), or for machines (``--json``).
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from dragctl.services.result import ServiceResult


@dataclass(frozen=True)
class OutputSettings:
    """Output-mode flags derived from global CLI options."""

    json_output: bool = False
    quiet: bool = False
    verbose: bool = False


def format_result(result: ServiceResult, *, settings: OutputSettings | None = None) -> str:
    """Format a ServiceResult for display.

    JSON wins over quiet, quiet wins over the default Rich rendering.
    """
    settings = settings or OutputSettings()
    if settings.json_output:
        return result.model_dump_json(indent=2)

    from dragctl.output.renderers import render_quiet, render_result

    if settings.quiet:
        return render_quiet(result)
    return render_result(result, verbose=settings.verbose)
