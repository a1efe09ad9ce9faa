"""Command: create a new cell."""

from __future__ import annotations

from typing import TYPE_CHECKING, Any

import click

from cellvault.commands._base import CellCommand, parse_json_object

if TYPE_CHECKING:
    from cellvault.commands._context import AppContext


@click.command(
    cls=CellCommand,
    examples="""\
  cellvault put user-42 profile --data '{"name": "Ada"}'
  cellvault --json put r1 c1 --data '{"n": 1}'""",
)
@click.argument("row")
@click.argument("column")
@click.option(
    "--data",
    required=True,
    callback=parse_json_object,
    help="Cell payload as a JSON object.",
)
@click.pass_obj
def put(app: AppContext, row: str, column: str, data: dict[str, Any]) -> None:
    """Create cell ROW/COLUMN at version 0. Fails if it already exists."""
    from cellvault.services.cells import CellService

    app.emit(CellService(app.repo).put(row, column, data))
