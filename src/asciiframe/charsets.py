# All sequences are authored dense-to-sparse: index 0 is the most ink.
DEFAULT = "@%#*+=-:. "

CLASSIC = "@#*+=-:. "

# Left-aligned partial blocks, full to empty
DENSE = "█▉▊▋▌▍▎▏ "

# Full block and the three shades
SIMPLE = "█▓▒░ "

DETAILED = "$@B%8&WM#*oahkbdpqwmZO0QLCJUYXzcvunxrjft/\\|()1{}[]?-_+~<>i!lI;:,\"^`'. "

# Braille cells ordered by dot count
BRAILLE = "⣿⣷⣶⣤⣠⣀⡀⠄⠂⠁ "

PRESETS = {
    "default": DEFAULT,
    "classic": CLASSIC,
    "dense": DENSE,
    "simple": SIMPLE,
    "detailed": DETAILED,
    "braille": BRAILLE,
}


def resolve_charset(value: str) -> str:
    """Return the preset called ``value``, or ``value`` itself as a literal glyph sequence."""
    return PRESETS.get(value, value)
