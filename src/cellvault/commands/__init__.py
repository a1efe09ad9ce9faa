"""Subcommand modules for cellvault.

Provides register_commands(), which imports each command module only when
the CLI is built.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

if TYPE_CHECKING:
    import click


def register_commands(cli: click.Group) -> None:
    """Register all standalone commands on the root CLI group."""
    from cellvault.commands.apply import apply
    from cellvault.commands.get import get
    from cellvault.commands.init_cmd import init_cmd
    from cellvault.commands.put import put
    from cellvault.commands.update import update
    from cellvault.commands.upgrade import upgrade

    cli.add_command(init_cmd)
    cli.add_command(get)
    cli.add_command(put)
    cli.add_command(update)
    cli.add_command(apply)
    cli.add_command(upgrade)
