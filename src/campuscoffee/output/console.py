"""Rich Console factory and theme for campuscoffee output.

Creates Console instances that render to a StringIO buffer, preserving
the ``format_result() -> str`` contract.  In non-TTY environments
(tests, pipes) Rich automatically disables color codes.
"""

from __future__ import annotations

from io import StringIO

from rich.console import Console
from rich.theme import Theme

COFFEE_THEME = Theme(
    {
        "pos.ok": "bold green",
        "pos.error": "bold red",
        "pos.warning": "bold yellow",
        "pos.op": "bold cyan",
        "pos.key": "dim",
        "pos.id": "bold blue",
        "pos.name": "bold",
        "pos.timestamp": "dim",
        "pos.type.cafe": "green",
        "pos.type.kiosk": "yellow",
        "pos.type.vending_machine": "magenta",
        "pos.type.bakery": "bright_yellow",
        "pos.type.cafeteria": "cyan",
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
        theme=COFFEE_THEME,
        no_color=no_color,
        highlight=False,
        width=width or 120,
    )


def get_output(console: Console) -> str:
    """Extract rendered text from a StringIO-backed Console."""
    assert isinstance(console.file, StringIO)
    return console.file.getvalue()


def style_for_type(pos_type: str) -> str:
    """Return the Rich style name for a POS type, or "" if unstyled."""
    style = f"pos.type.{pos_type.lower()}"
    return style if style in COFFEE_THEME.styles else ""
