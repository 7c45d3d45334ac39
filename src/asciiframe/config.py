import dataclasses
import numbers
from dataclasses import dataclass

from asciiframe.charsets import DEFAULT
from asciiframe.errors import InvalidConfiguration


def validate(sparsity, characters) -> None:
    """Raise InvalidConfiguration unless sparsity is an int >= 1 and characters is non-empty."""
    if isinstance(sparsity, bool) or not isinstance(sparsity, numbers.Integral):
        raise InvalidConfiguration(f"sparsity must be an integer, got {sparsity!r}")
    if sparsity < 1:
        raise InvalidConfiguration(f"sparsity must be >= 1, got {sparsity}")
    if len(characters) == 0:
        raise InvalidConfiguration("characters must contain at least one glyph")


@dataclass(frozen=True)
class ConversionConfig:
    sparsity: int = 4
    characters: tuple[str, ...] = tuple(DEFAULT)
    font_size: int = 8  # only read by renderers

    def __post_init__(self):
        # Accept a plain string and store it as a tuple of glyphs
        object.__setattr__(self, "characters", tuple(self.characters))
        validate(self.sparsity, self.characters)

    def with_changes(self, **changes) -> "ConversionConfig":
        return dataclasses.replace(self, **changes)


DEFAULT_CONFIG = ConversionConfig()


def sparsity_for_width(pixel_width: int, columns: int) -> int:
    """Smallest stride whose output is at most ``columns`` wide for an image ``pixel_width`` pixels wide."""
    if columns < 1:
        raise InvalidConfiguration(f"columns must be >= 1, got {columns}")
    return max(1, -(-pixel_width // columns))
