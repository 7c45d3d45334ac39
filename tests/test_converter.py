import math
from types import SimpleNamespace

import numpy as np
import pytest
from PIL import Image

from asciiframe.buffer import PixelBuffer
from asciiframe.config import ConversionConfig
from asciiframe.converter import convert, image_to_ascii
from asciiframe.errors import InvalidConfiguration


def make_buffer(width, height, colour=(0, 0, 0), channels=3):
    pixels = np.zeros((height, width, channels), dtype=np.uint8)
    pixels[:, :, :3] = colour
    return PixelBuffer(width, height, pixels)


def gray_ramp():
    """256x1 buffer whose pixel x has brightness x."""
    pixels = np.repeat(np.arange(256, dtype=np.uint8)[None, :, None], 3, axis=2)
    return PixelBuffer(256, 1, pixels)


def test_solid_white_maps_to_densest():
    config = ConversionConfig(sparsity=1)
    grid = convert(make_buffer(3, 2, (255, 255, 255)), config)
    assert str(grid) == "@@@\n@@@"


def test_solid_black_maps_to_sparsest():
    config = ConversionConfig(sparsity=1)
    grid = convert(make_buffer(3, 2), config)
    assert str(grid) == "   \n   "


@pytest.mark.parametrize(
    "width, height, sparsity",
    [(4, 4, 2), (5, 7, 2), (1, 1, 3), (10, 10, 1), (9, 4, 4), (30, 17, 5)],
)
def test_output_dimensions(width, height, sparsity):
    grid = convert(make_buffer(width, height, (128, 128, 128)), ConversionConfig(sparsity=sparsity))
    assert grid.height == math.ceil(height / sparsity)
    assert all(len(row) == math.ceil(width / sparsity) for row in grid.rows)


def test_partial_stride_still_sampled():
    buffer = make_buffer(5, 1)
    buffer.pixels[0, 4] = 255
    grid = convert(buffer, ConversionConfig(sparsity=2, characters="#."))
    assert grid.rows == [[".", ".", "#"]]


def test_four_by_four_two_glyph_scenario():
    buffer = make_buffer(4, 4)
    # Only the top-left pixel of each 2x2 cell is read
    buffer.pixels[0, 2] = 255
    buffer.pixels[2, 0] = 255
    buffer.pixels[1, 1] = 255
    buffer.pixels[3, 3] = 255
    grid = convert(buffer, ConversionConfig(sparsity=2, characters="#."))
    assert grid.rows == [[".", "#"], ["#", "."]]


def test_convert_is_deterministic():
    rng = np.random.default_rng(7)
    pixels = rng.integers(0, 256, size=(33, 47, 4), dtype=np.uint8)
    buffer = PixelBuffer(47, 33, pixels)
    config = ConversionConfig(sparsity=3)
    assert convert(buffer, config) == convert(buffer, config)


def test_brighter_never_maps_to_sparser_glyph():
    config = ConversionConfig(sparsity=1)
    row = convert(gray_ramp(), config).rows[0]
    authored = [config.characters.index(glyph) for glyph in row]
    assert all(a >= b for a, b in zip(authored, authored[1:]))
    assert authored[0] == len(config.characters) - 1
    assert authored[-1] == 0


def test_single_glyph_degenerates():
    rng = np.random.default_rng(3)
    pixels = rng.integers(0, 256, size=(6, 9, 3), dtype=np.uint8)
    grid = convert(PixelBuffer(9, 6, pixels), ConversionConfig(sparsity=1, characters="x"))
    assert {glyph for row in grid.rows for glyph in row} == {"x"}


def test_duplicate_glyphs_allowed():
    grid = convert(gray_ramp(), ConversionConfig(sparsity=1, characters="##.."))
    assert set(grid.lines()[0]) == {"#", "."}


def test_alpha_is_ignored():
    buffer = make_buffer(2, 2, (255, 255, 255), channels=4)
    grid = convert(buffer, ConversionConfig(sparsity=1, characters="#."))
    assert str(grid) == "##\n##"


def test_empty_buffer_gives_empty_grid():
    config = ConversionConfig()
    assert convert(PixelBuffer.empty(), config).rows == []
    assert convert(make_buffer(3, 0), config).rows == []
    assert convert(make_buffer(0, 3), config).rows == []
    assert str(convert(PixelBuffer.empty(), config)) == ""


def test_font_size_does_not_change_output():
    buffer = gray_ramp()
    small = ConversionConfig(sparsity=2, font_size=4)
    large = ConversionConfig(sparsity=2, font_size=20)
    assert convert(buffer, small) == convert(buffer, large)


def test_convert_rejects_bad_config_objects():
    buffer = make_buffer(2, 2)
    with pytest.raises(InvalidConfiguration):
        convert(buffer, SimpleNamespace(sparsity=0, characters="#.", font_size=8))
    with pytest.raises(InvalidConfiguration):
        convert(buffer, SimpleNamespace(sparsity=1, characters="", font_size=8))


def test_convert_does_not_keep_buffer():
    buffer = make_buffer(2, 2, (255, 255, 255))
    grid = convert(buffer, ConversionConfig(sparsity=1, characters="#."))
    buffer.pixels[:] = 0
    assert str(grid) == "##\n##"


def test_image_to_ascii_accepts_rgb_image():
    img = Image.new("RGB", (4, 2), (255, 255, 255))
    assert image_to_ascii(img, ConversionConfig(sparsity=2)) == "@@"


def test_image_to_ascii_accepts_grayscale_image():
    img = Image.new("L", (2, 2), 0)
    assert image_to_ascii(img, ConversionConfig(sparsity=1, characters="#.")) == "..\n.."


def test_image_to_ascii_accepts_file_path(png_path):
    assert image_to_ascii(png_path, ConversionConfig(sparsity=1, characters="#.")) == "#."
