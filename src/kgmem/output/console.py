"""Rich Console factory and theme for kgmem output.

Consoles render into a StringIO buffer so formatting stays a pure
``ServiceResult -> str`` function. In non-TTY environments (tests,
pipes) Rich disables color codes on its own.
"""

from __future__ import annotations

from io import StringIO

from rich.console import Console
from rich.theme import Theme

KG_THEME = Theme(
    {
        "kg.ok": "bold green",
        "kg.error": "bold red",
        "kg.warning": "bold yellow",
        "kg.op": "bold cyan",
        "kg.key": "dim",
        "kg.name": "bold blue",
        "kg.type": "green",
        "kg.relation": "magenta",
        "kg.observation": "default",
    }
)


def create_console(*, no_color: bool = False, width: int | None = None) -> Console:
    """Create a Console that renders to a StringIO buffer.

    Args:
        no_color: Disable ANSI escape codes (used in tests).
        width: Override terminal width (useful for consistent test output).
    """
    return Console(
        file=StringIO(),
        theme=KG_THEME,
        no_color=no_color,
        highlight=False,
        width=width or 120,
    )


def get_output(console: Console) -> str:
    """Extract rendered text from a StringIO-backed Console."""
    assert isinstance(console.file, StringIO)
    return console.file.getvalue()
