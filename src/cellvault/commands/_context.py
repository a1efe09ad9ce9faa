"""AppContext — shared Click context for all commands.

Created once by the root CLI group and passed to subcommands via
``@click.pass_obj``. Opens the repository lazily so ``--help`` and
``--version`` never touch the database.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

import click

from cellvault.output.formatters import OutputSettings, format_result

if TYPE_CHECKING:
    from cellvault.config.settings import CellSettings
    from cellvault.infrastructure.repository import Repository
    from cellvault.services.result import ServiceResult


class AppContext:
    """Shared context flowing through Click's command hierarchy."""

    def __init__(self, settings: CellSettings) -> None:
        self.settings = settings
        self._repo: Repository | None = None

        from cellvault.config.logging import configure_logging

        configure_logging(verbose=settings.verbose, log_json=settings.log_json)

        if settings.verbose:
            from cellvault.services.telemetry import enable_telemetry

            enable_telemetry()

    @property
    def repo(self) -> Repository:
        """The repository (opened on first access)."""
        if self._repo is None:
            from cellvault.infrastructure.repository import Repository

            self._repo = Repository(self.settings)
        return self._repo

    def close(self) -> None:
        """Release the connection pool if the repository was opened."""
        if self._repo is not None:
            self._repo.close()
            self._repo = None

    def emit(self, result: ServiceResult) -> None:
        """Format and output a ServiceResult with correct exit semantics.

        * Success: writes to stdout; warnings go to stderr outside JSON mode.
        * Failure: writes to stderr and exits with code 1.
        """
        settings = OutputSettings(
            json_output=self.settings.json_output,
            quiet=self.settings.quiet,
            verbose=self.settings.verbose,
        )
        output = format_result(result, settings=settings)
        if result.ok:
            click.echo(output)
            if not settings.json_output:
                for warning in result.warnings:
                    click.echo(f"WARNING: {warning}", err=True)
        else:
            click.echo(output, err=True)
            raise SystemExit(1)
