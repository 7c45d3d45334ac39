from collections.abc import Sequence

import numpy as np

# ITU-R BT.601 luma weights, scaled by 1000 so quantization stays in integers
LUMA_WEIGHTS = (299, 587, 114)
LUMA_SCALE = 1000
MAX_LUMINANCE = 255


def luminance(r: int, g: int, b: int) -> float:
    """Weighted brightness of one pixel, in [0, 255]."""
    wr, wg, wb = LUMA_WEIGHTS
    return (wr * r + wg * g + wb * b) / LUMA_SCALE


def brightness_to_index(brightness: float, count: int) -> int:
    """Position of ``brightness`` on a scale of ``count`` steps, 0 darkest.

    ``brightness`` is first rounded to the nearest 0.001, the resolution
    ``luminance`` produces, then ``floor(brightness / 255 * (count - 1))`` is
    taken exactly on the integer sum. This agrees with ``quantize`` for every
    pixel.
    """
    weighted = round(brightness * LUMA_SCALE)
    index = weighted * (count - 1) // (MAX_LUMINANCE * LUMA_SCALE)
    return min(max(index, 0), count - 1)


def brightness_to_char(brightness: float, characters: Sequence[str]) -> str:
    """Pick a glyph from a dense-to-sparse sequence; brighter picks denser."""
    count = len(characters)
    return characters[count - 1 - brightness_to_index(brightness, count)]


def sample_points(pixels: np.ndarray, sparsity: int) -> np.ndarray:
    """Top-left RGB pixel of every sparsity x sparsity cell.

    Returns a view of shape (ceil(h / sparsity), ceil(w / sparsity), 3).
    """
    return pixels[::sparsity, ::sparsity, :3]


def quantize(samples: np.ndarray, count: int) -> np.ndarray:
    """Map RGB samples to brightness indices in [0, count - 1], 0 darkest.

    Equivalent to ``floor(luminance / 255 * (count - 1))`` evaluated exactly:
    the weighted sum is kept as an integer so a white pixel can't round down
    below the top index.
    """
    weighted = samples.astype(np.int64) @ np.array(LUMA_WEIGHTS, dtype=np.int64)
    indices = weighted * (count - 1) // (MAX_LUMINANCE * LUMA_SCALE)
    return np.clip(indices, 0, count - 1)


def glyph_grid(pixels: np.ndarray, sparsity: int, characters: Sequence[str]) -> list[list[str]]:
    """Point-sample ``pixels`` and look each sample up in ``characters``, inverting the index."""
    count = len(characters)
    indices = quantize(sample_points(pixels, sparsity), count)
    # Invert so the dense end of the sequence lands on bright pixels
    glyphs = [characters[count - 1 - i] for i in range(count)]
    return [[glyphs[i] for i in row] for row in indices.tolist()]
