"""AppContext: the object every subcommand receives via ``@click.pass_obj``."""

from __future__ import annotations

from typing import TYPE_CHECKING

import click

from dragctl.output.formatters import OutputSettings, format_result

if TYPE_CHECKING:
    from dragctl.config.settings import DragSettings
    from dragctl.services.drag import DragService
    from dragctl.services.result import ServiceResult


class AppContext:
    """Settings, a lazily built DragService, and result emission.

    Building the service loads plugins, so it waits until a command
    actually needs it.
    """

    def __init__(self, settings: DragSettings) -> None:
        from dragctl.config.logging import configure_logging
        from dragctl.services.telemetry import disable_telemetry, enable_telemetry

        self.settings = settings
        self._service: DragService | None = None

        configure_logging(
            verbose=settings.verbose, quiet=settings.quiet, log_json=settings.log_json
        )
        if settings.verbose:
            enable_telemetry()
        else:
            disable_telemetry()

    @property
    def output(self) -> OutputSettings:
        return OutputSettings(
            json_output=self.settings.json_output,
            quiet=self.settings.quiet,
            verbose=self.settings.verbose,
        )

    @property
    def service(self) -> DragService:
        if self._service is None:
            from dragctl.services.drag import DragService

            self._service = DragService(self.settings)
        return self._service

    def emit(self, result: ServiceResult) -> None:
        """Print *result*; a failed result goes to stderr and exits 1.

        Plugin warnings of a successful call are echoed to stderr as well,
        except under ``--json`` where they are already in the payload.
        """
        text = format_result(result, settings=self.output)
        if not result.ok:
            click.echo(text, err=True)
            raise SystemExit(1)
        click.echo(text)
        if not self.output.json_output:
            for warning in result.warnings:
                click.echo(f"WARNING: {warning}", err=True)
