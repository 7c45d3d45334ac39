from __future__ import annotations

import enum
from dataclasses import dataclass, field
from typing import Protocol

from asciiframe.buffer import PixelBuffer


@dataclass
class CharacterGrid:
    rows: list[list[str]] = field(default_factory=list)  # one list of glyphs per row

    @property
    def height(self) -> int:
        return len(self.rows)

    @property
    def width(self) -> int:
        return len(self.rows[0]) if self.rows else 0

    def lines(self) -> list[str]:
        return ["".join(row) for row in self.rows]

    def __str__(self) -> str:
        return "\n".join(self.lines())


class SourceKind(enum.Enum):
    IMAGE = "image"
    VIDEO = "video"


class FrameSource(Protocol):
    kind: SourceKind

    async def capture(self) -> PixelBuffer:
        """Decode the current frame. Raises SourceUnavailable on failure."""
        ...


class Renderer(Protocol):
    def render(self, grid: CharacterGrid) -> None:
        """Display a freshly converted grid."""
        ...

    def report_error(self, error: Exception) -> None:
        """Tell the user a source could not be captured."""
        ...
