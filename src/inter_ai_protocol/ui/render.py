"""Output rendering for the ``iap`` CLI.

File: src/inter_ai_protocol/ui/render.py

Purpose
- Provide a thin rendering layer for human-readable CLI output.
- Style pass/fail lines with ``rich`` when stdout is a terminal.
- Respect the NO_COLOR environment variable and the --no-color CLI flag.

Functional requirements
- Plain-text output is byte-stable and is what tests and pipes see.
"""

from __future__ import annotations

import os
import sys
from typing import TYPE_CHECKING, Final

from rich.console import Console
from rich.style import Style
from rich.text import Text

if TYPE_CHECKING:
    from collections.abc import Sequence

_S_OK: Final[Style] = Style(color="green", bold=True)
_S_FAIL: Final[Style] = Style(color="red", bold=True)


def _color_allowed(no_color_flag: bool) -> bool:
    """Check whether color output should be attempted."""

    if no_color_flag:
        return False
    if os.environ.get("NO_COLOR", ""):
        return False
    return hasattr(sys.stdout, "isatty") and sys.stdout.isatty()


class CLIRenderer:
    """Thin CLI output renderer.

    Produces deterministic plain text unless color is allowed, in which case
    the same lines are written through a ``rich`` console with styles.
    """

    def __init__(self, *, no_color: bool = False) -> None:
        self._color = _color_allowed(no_color)
        self._console: Console | None = None

    @property
    def color(self) -> bool:
        return self._color

    def items(self, entries: Sequence[str], *, prefix: str = "- ") -> None:
        """Print a bulleted list."""

        for entry in entries:
            self._emit(Text(f"  {prefix}{entry}"))

    def ok(self, label: str) -> None:
        """Print a passing check."""

        self._emit(Text(f"OK  {label}", style=_S_OK))

    def fail(self, label: str) -> None:
        """Print a failing check."""

        self._emit(Text(f"FAIL  {label}", style=_S_FAIL))

    def _emit(self, line: Text) -> None:
        if not self._color:
            print(line.plain)
            return
        if self._console is None:
            self._console = Console(file=sys.stdout, highlight=False, soft_wrap=True)
        self._console.print(line)


def create_renderer(*, no_color: bool = False) -> CLIRenderer:
    """Create a CLI renderer with the given settings."""

    return CLIRenderer(no_color=no_color)


__all__ = ["CLIRenderer", "create_renderer"]
