"""Command: version-checked cell update."""

from __future__ import annotations

from typing import TYPE_CHECKING, Any

import click

from cellvault.commands._base import CellCommand, parse_json_object

if TYPE_CHECKING:
    from cellvault.commands._context import AppContext


@click.command(
    cls=CellCommand,
    examples="""\
  cellvault update user-42 profile --expected-version 0 --data '{"name": "Ada L."}'
  cellvault --json update r1 c1 -e 3 --data '{"n": 4}'""",
)
@click.argument("row")
@click.argument("column")
@click.option(
    "--data",
    required=True,
    callback=parse_json_object,
    help="New cell payload as a JSON object.",
)
@click.option(
    "-e",
    "--expected-version",
    type=click.IntRange(min=0),
    required=True,
    help="Version you last read; the update fails if the cell has moved on.",
)
@click.pass_obj
def update(
    app: AppContext,
    row: str,
    column: str,
    data: dict[str, Any],
    expected_version: int,
) -> None:
    """Replace the payload of ROW/COLUMN if it is still at the expected version."""
    from cellvault.services.cells import CellService

    app.emit(CellService(app.repo).update(row, column, data, expected_version=expected_version))
