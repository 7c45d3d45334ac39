import os
import sys
from typing import TextIO

from asciiframe.engine import CharacterGrid

CLEAR_SCREEN = "\033[2J"
CURSOR_HOME = "\033[H"


def get_terminal_size() -> tuple[int, int]:
    """Return (columns, rows) of the terminal, or (80, 24) if not a tty."""
    if not sys.stdout.isatty():
        return (80, 24)
    size = os.get_terminal_size()
    return (size.columns, size.lines)


class TerminalRenderer:
    """Writes grids to a text stream; with ``animate`` each frame overwrites the previous one."""

    def __init__(self, stream: TextIO | None = None, errors: TextIO | None = None, animate: bool = False):
        self.stream = stream
        self.errors = errors
        self.animate = animate
        self._drawn = False

    def render(self, grid: CharacterGrid) -> None:
        stream = self.stream or sys.stdout
        if self.animate:
            stream.write(CURSOR_HOME if self._drawn else CLEAR_SCREEN + CURSOR_HOME)
        stream.write(str(grid) + "\n")
        stream.flush()
        self._drawn = True

    def report_error(self, error: Exception) -> None:
        print(f"error: {error}", file=self.errors or sys.stderr)
