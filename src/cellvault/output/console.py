"""Rich Console factory and theme for cellvault output.

Consoles render into a StringIO buffer so formatters keep a plain
``-> str`` contract. Off a TTY (tests, pipes) Rich drops color codes.
"""

from __future__ import annotations

from io import StringIO

from rich.console import Console
from rich.theme import Theme

CELL_THEME = Theme(
    {
        "cv.ok": "bold green",
        "cv.error": "bold red",
        "cv.op": "bold cyan",
        "cv.key": "dim",
        "cv.cell": "bold blue",
        "cv.version": "magenta",
        "cv.time": "dim",
    }
)


def create_console(*, no_color: bool = False, width: int | None = None) -> Console:
    """Create a Console that renders to a StringIO buffer."""
    return Console(
        file=StringIO(),
        theme=CELL_THEME,
        no_color=no_color,
        highlight=False,
        width=width or 120,
    )


def get_output(console: Console) -> str:
    """Extract rendered text from a StringIO-backed Console."""
    assert isinstance(console.file, StringIO)
    return console.file.getvalue()
