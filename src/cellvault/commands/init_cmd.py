"""Command: store initialization (named init_cmd to avoid shadowing builtins)."""

from __future__ import annotations

from typing import TYPE_CHECKING

import click

from cellvault.commands._base import CellCommand

if TYPE_CHECKING:
    from cellvault.commands._context import AppContext


@click.command(
    "init",
    cls=CellCommand,
    examples="""\
  cellvault init
  cellvault -c ./cellvault.toml init
  cellvault --json init""",
)
@click.pass_obj
def init_cmd(app: AppContext) -> None:
    """Create the cell database and mark it at the latest schema revision."""
    from cellvault.services.upgrade import UpgradeService

    app.emit(UpgradeService(app.repo).initialize())
