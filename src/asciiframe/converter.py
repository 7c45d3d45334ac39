from pathlib import Path

from PIL import Image

from asciiframe.buffer import PixelBuffer
from asciiframe.config import DEFAULT_CONFIG, ConversionConfig, validate
from asciiframe.engine import CharacterGrid
from asciiframe.sampling import glyph_grid


def convert(buffer: PixelBuffer, config: ConversionConfig) -> CharacterGrid:
    """Turn a pixel buffer into a grid of ceil(height / sparsity) rows of ceil(width / sparsity) glyphs.

    Pure: the buffer is only read for the duration of the call.
    """
    validate(config.sparsity, config.characters)
    if buffer.width == 0 or buffer.height == 0:
        return CharacterGrid()
    return CharacterGrid(rows=glyph_grid(buffer.pixels, config.sparsity, config.characters))


def image_to_ascii(
    image: Image.Image | str | Path,
    config: ConversionConfig = DEFAULT_CONFIG,
) -> str:
    if not isinstance(image, Image.Image):
        image = Image.open(image)
    return str(convert(PixelBuffer.from_image(image), config))
