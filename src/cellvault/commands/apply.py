"""Command: apply a batch file atomically."""

from __future__ import annotations

import json
from pathlib import Path
from typing import TYPE_CHECKING

import click

from cellvault.commands._base import CellCommand

if TYPE_CHECKING:
    from cellvault.commands._context import AppContext


@click.command(
    cls=CellCommand,
    examples="""\
  cellvault apply changes.json
  cellvault apply changes.json --action import-profiles
  cat changes.json | cellvault --json apply -

  Batch file format:
  {"add":    [{"row": "r1", "column": "c1", "data": {"n": 1}}],
   "update": [{"row": "r2", "column": "c1", "data": {"n": 2}, "version": 3}]}""",
)
@click.argument(
    "batch_file",
    type=click.Path(dir_okay=False, exists=True, allow_dash=True, path_type=Path),
)
@click.option(
    "--action",
    "action_name",
    default="apply",
    show_default=True,
    help="Name recorded in the action log for this batch.",
)
@click.pass_obj
def apply(app: AppContext, batch_file: Path, action_name: str) -> None:
    """Apply every add and update in BATCH_FILE as one all-or-nothing batch."""
    from cellvault.services.actions import ActionService, DocumentBatchAction

    if str(batch_file) == "-":
        source = "-"
        stream = click.get_binary_stream("stdin")
        data = stream.read()
    else:
        source = str(batch_file.resolve())
        data = batch_file.read_bytes()

    try:
        raw = data.decode("utf-8")
    except UnicodeDecodeError as exc:
        msg = f"{source} is not valid UTF-8 (byte {exc.start})"
        raise click.BadParameter(msg, param_hint="BATCH_FILE") from exc

    try:
        document = json.loads(raw)
    except json.JSONDecodeError as exc:
        msg = f"{source} is not valid JSON: {exc.msg}"
        raise click.BadParameter(msg, param_hint="BATCH_FILE") from exc
    if not isinstance(document, dict):
        raise click.BadParameter("batch file must hold a JSON object", param_hint="BATCH_FILE")

    action = DocumentBatchAction(action_name, document)
    app.emit(ActionService(app.repo).run(action, {"source": source}))
