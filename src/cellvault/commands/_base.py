"""Custom Click base classes with --examples support.

When ``--examples`` is passed, the command prints usage examples and exits,
keeping ``--help`` short.
"""

from __future__ import annotations

import json
from typing import Any

import click


def _add_examples_option(cmd: click.Command, examples: str) -> None:
    """Attach an eager ``--examples`` flag to a Click command or group."""

    def show_examples(ctx: click.Context, _param: click.Parameter, value: bool) -> None:
        if not value:
            return
        click.echo(f"Examples for '{ctx.command_path}':\n")
        click.echo(examples)
        ctx.exit(0)

    cmd.params.append(
        click.Option(
            ["--examples"],
            is_flag=True,
            expose_value=False,
            is_eager=True,
            callback=show_examples,
            help="Show usage examples.",
        )
    )


class CellCommand(click.Command):
    """Click Command subclass that supports an ``--examples`` flag."""

    def __init__(self, *args: Any, examples: str | None = None, **kwargs: Any) -> None:
        super().__init__(*args, **kwargs)
        self.examples = examples
        if examples:
            _add_examples_option(self, examples)


def parse_json_object(_ctx: click.Context, param: click.Parameter, value: str | None) -> Any:
    """Click callback: decode *value* as a JSON object."""
    if value is None:
        return None
    try:
        decoded = json.loads(value)
    except json.JSONDecodeError as exc:
        msg = f"not valid JSON: {exc.msg}"
        raise click.BadParameter(msg, param=param) from exc
    if not isinstance(decoded, dict):
        raise click.BadParameter("must be a JSON object", param=param)
    return decoded
