from dataclasses import dataclass

import numpy as np
from PIL import Image


@dataclass(frozen=True, eq=False)
class PixelBuffer:
    """A decoded frame: ``pixels`` is a uint8 array of shape (height, width, channels).

    Channels are RGB or RGBA. Alpha is carried along but never read.
    """

    width: int
    height: int
    pixels: np.ndarray

    def __post_init__(self):
        if self.width < 0 or self.height < 0:
            raise ValueError(f"Negative buffer size: {self.width}x{self.height}")
        shape = self.pixels.shape
        if len(shape) != 3 or shape[2] not in (3, 4):
            raise ValueError(f"Expected (height, width, 3|4) pixels, got shape {shape}")
        if shape[:2] != (self.height, self.width):
            raise ValueError(f"Pixel array {shape[1]}x{shape[0]} does not match buffer {self.width}x{self.height}")

    @classmethod
    def empty(cls) -> "PixelBuffer":
        return cls(0, 0, np.zeros((0, 0, 3), dtype=np.uint8))

    @classmethod
    def from_rgba(cls, width: int, height: int, data: bytes | bytearray | memoryview) -> "PixelBuffer":
        """Wrap flat row-major RGBA bytes (4 bytes per pixel) without copying."""
        expected = width * height * 4
        if len(data) != expected:
            raise ValueError(f"Expected {expected} bytes for {width}x{height} RGBA, got {len(data)}")
        pixels = np.frombuffer(data, dtype=np.uint8).reshape(height, width, 4)
        return cls(width, height, pixels)

    @classmethod
    def from_image(cls, image: Image.Image) -> "PixelBuffer":
        has_alpha = image.mode in ("RGBA", "LA", "PA") or "transparency" in image.info
        image = image.convert("RGBA" if has_alpha else "RGB")
        pixels = np.asarray(image, dtype=np.uint8)
        return cls(image.width, image.height, pixels)
