"""Operation-specific Rich renderers for ServiceResult.

Renderers are dispatched by ``result.op`` in :func:`render_result`.
Unknown ops fall through to a generic key-value renderer.
"""

from __future__ import annotations

import json
from typing import TYPE_CHECKING, Any

from rich.table import Table
from rich.text import Text

from cellvault.output.console import create_console, get_output

if TYPE_CHECKING:
    from collections.abc import Callable

    from rich.console import Console

    from cellvault.services.result import ServiceResult


# ── Public API ────────────────────────────────────────────────────────


def render_result(result: ServiceResult, *, verbose: bool = False) -> str:
    """Render a ServiceResult to a styled string via Rich."""
    console = create_console()

    if result.ok:
        renderer = _OP_RENDERERS.get(result.op, _render_generic)
        renderer(result, console, verbose=verbose)
    else:
        _render_error(result, console, verbose=verbose)

    return get_output(console).rstrip("\n")


def render_quiet(result: ServiceResult) -> str:
    """Render minimal output for ``--quiet`` mode."""
    if not result.ok:
        msg = result.error.message if result.error else "Unknown error"
        return f"ERROR: {result.op} — {msg}"
    if result.op == "get":
        return str(result.data.get("version", ""))
    return f"OK: {result.op}"


# ── Helpers ───────────────────────────────────────────────────────────


def _status_line(console: Console, result: ServiceResult) -> None:
    console.print(Text("OK", style="cv.ok"), Text(f"  {result.op}", style="cv.op"))


def _field(console: Console, key: str, value: Any, style: str = "") -> None:
    console.print(Text.assemble((f"  {key}: ", "cv.key"), (str(value), style)))


def _render_meta(console: Console, result: ServiceResult) -> None:
    if not result.meta:
        return
    console.print()
    console.print(Text("  meta:", style="dim"))
    for k, v in result.meta.items():
        if k == "telemetry":
            _render_span(console, v, indent=4)
        else:
            console.print(f"    {k}: {v}")


def _render_span(console: Console, span: dict[str, Any], indent: int) -> None:
    prefix = " " * indent
    duration = span.get("duration_ms", 0.0)
    line = f"{prefix}{duration:>8.2f}ms  {span.get('name', '?')}"
    annotations = span.get("annotations")
    if annotations:
        line += "  (" + ", ".join(f"{k}={v}" for k, v in annotations.items()) + ")"
    console.print(Text(line, style="dim"))
    for child in span.get("children", []):
        _render_span(console, child, indent + 4)


# ── Renderers ─────────────────────────────────────────────────────────


def _render_error(result: ServiceResult, console: Console, *, verbose: bool = False) -> None:
    err = result.error
    msg = err.message if err else "Unknown error"
    code = f" [{err.code}]" if err else ""
    console.print(
        Text("ERROR", style="cv.error"),
        Text(f"  {result.op}{code}", style="cv.op"),
        Text(" — "),
        Text(msg),
    )
    if verbose and err and err.detail:
        console.print(Text("  detail:", style="dim"))
        for k, v in err.detail.items():
            console.print(Text(f"    {k}: {v}"))


def _render_cell(result: ServiceResult, console: Console, *, verbose: bool = False) -> None:
    data = result.data
    _status_line(console, result)
    _field(console, "cell", f"{data['row_id']}/{data['column_name']}", "cv.cell")
    _field(console, "version", data["version"], "cv.version")
    _field(console, "created_at", data["created_at"], "cv.time")
    _field(console, "updated_at", data["updated_at"], "cv.time")
    console.print(Text("  data:", style="cv.key"))
    console.print(Text(json.dumps(data["data"], indent=2, sort_keys=True)), soft_wrap=True)
    if verbose:
        _render_meta(console, result)


def _render_apply(result: ServiceResult, console: Console, *, verbose: bool = False) -> None:
    data = result.data
    _status_line(console, result)
    _field(console, "added", data.get("added", 0))
    _field(console, "updated", data.get("updated", 0))
    if data.get("action"):
        _field(console, "action", data["action"])
    if data.get("action_id"):
        _field(console, "action_id", data["action_id"], "cv.key")

    cells = data.get("cells", [])
    if cells:
        table = Table(show_header=True, pad_edge=False, expand=False)
        table.add_column("Row", style="cv.cell", no_wrap=True)
        table.add_column("Column", style="cv.cell", no_wrap=True)
        table.add_column("Version", style="cv.version", justify="right")
        for cell in cells:
            table.add_row(cell["row_id"], cell["column_name"], str(cell["version"]))
        console.print(table)
    if verbose:
        _render_meta(console, result)


def _render_generic(result: ServiceResult, console: Console, *, verbose: bool = False) -> None:
    _status_line(console, result)
    for key, value in result.data.items():
        if isinstance(value, (dict, list)):
            value = json.dumps(value, separators=(",", ":"))
        _field(console, key, value)
    if verbose:
        _render_meta(console, result)


_OP_RENDERERS: dict[str, Callable[..., None]] = {
    "get": _render_cell,
    "put": _render_apply,
    "update": _render_apply,
    "apply": _render_apply,
    "run_action": _render_apply,
}
