"""CLI console helpers with optional Rich support.

This module intentionally avoids module-level imports of optional UI
dependencies so bootstrap paths (``--help``, ``--version``) and the
child re-entry path remain functional even when Rich is not installed.

Two channels exist: messages from argdeck itself go to stderr, while
the supervised child's output is echoed to stdout.
"""

from __future__ import annotations

import sys
from typing import Any

from argdeck.exceptions import EnvironmentError


def _load_rich_console_class() -> type[Any]:
    """Return ``rich.console.Console`` class or raise ``EnvironmentError``."""
    try:
        from rich.console import Console
    except ModuleNotFoundError as exc:
        raise EnvironmentError(
            "rich is not installed. Install with: pip install rich",
        ) from exc
    return Console


def get_rich_console(*, stderr: bool = True) -> Any:
    """Create a Rich console instance (stderr by default)."""
    console_class = _load_rich_console_class()
    return console_class(stderr=stderr)


class _ConsoleProxy:
    """Minimal ``print``-compatible proxy with Rich fallback."""

    def print(self, *objects: object) -> None:
        """Render with Rich when available, else plain stderr print."""
        try:
            rich_console = get_rich_console()
        except EnvironmentError:
            print(*objects, file=sys.stderr)
            return
        rich_console.print(*objects)

    def error(self, text: str) -> None:
        """Print *text* in red; it is never parsed as markup."""
        try:
            rich_console = get_rich_console()
            from rich.text import Text
        except (EnvironmentError, ModuleNotFoundError):
            print(text, file=sys.stderr)
            return
        rich_console.print(Text(text, style="bold red"))

    def write_output(self, text: str) -> None:
        """Echo child output to stdout, keeping its ANSI colours."""
        if not text:
            return
        try:
            rich_console = get_rich_console(stderr=False)
            from rich.text import Text
        except (EnvironmentError, ModuleNotFoundError):
            sys.stdout.write(text)
            sys.stdout.flush()
            return
        # from_ansi splits lines and drops the final newline; restore it.
        end = "\n" if text.endswith("\n") else ""
        rich_console.print(Text.from_ansi(text), end=end, soft_wrap=True)


console = _ConsoleProxy()
