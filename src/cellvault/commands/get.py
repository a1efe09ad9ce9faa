"""Command: single-cell lookup."""

from __future__ import annotations

from typing import TYPE_CHECKING

import click

from cellvault.commands._base import CellCommand

if TYPE_CHECKING:
    from cellvault.commands._context import AppContext


@click.command(
    cls=CellCommand,
    examples="""\
  cellvault get user-42 profile
  cellvault --json get user-42 profile
  cellvault -q get user-42 profile   # prints the version only""",
)
@click.argument("row")
@click.argument("column")
@click.pass_obj
def get(app: AppContext, row: str, column: str) -> None:
    """Show the latest version and JSON payload of cell ROW/COLUMN."""
    from cellvault.services.cells import CellService

    app.emit(CellService(app.repo).get(row, column))
