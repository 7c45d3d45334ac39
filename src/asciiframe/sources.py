"""Pillow-backed frame sources.

Decoding runs in a worker thread so the event loop driving the scheduler
stays responsive; that thread hop is the only suspension point in a capture.
"""

import asyncio
import bisect
import itertools
import logging
import time
from pathlib import Path

import numpy as np
from PIL import Image

from asciiframe.buffer import PixelBuffer
from asciiframe.engine import SourceKind
from asciiframe.errors import SourceUnavailable

logger = logging.getLogger(__name__)

# Used for frames that don't declare a duration (ms)
DEFAULT_FRAME_DURATION = 100

_DECODE_ERRORS = (OSError, ValueError, EOFError)


def image_size(path: str | Path) -> tuple[int, int]:
    """(width, height) of an image file, read from its header."""
    try:
        with Image.open(path) as image:
            return image.size
    except _DECODE_ERRORS as exc:
        raise SourceUnavailable(f"Failed to load image {path}: {exc}") from exc


class ImageSource:
    """A still image, given as a path or an already opened Pillow image."""

    kind = SourceKind.IMAGE

    def __init__(self, image: Image.Image | str | Path):
        self.image = image

    def __repr__(self) -> str:
        return f"ImageSource({self.image!r})"

    def _decode(self) -> PixelBuffer:
        try:
            if isinstance(self.image, Image.Image):
                return PixelBuffer.from_image(self.image)
            with Image.open(self.image) as image:
                return PixelBuffer.from_image(image)
        except _DECODE_ERRORS as exc:
            raise SourceUnavailable(f"Failed to load image {self.image}: {exc}") from exc

    async def capture(self) -> PixelBuffer:
        return await asyncio.to_thread(self._decode)


class AnimatedImageSource:
    """A multi-frame image (GIF, APNG, WebP) played back against wall-clock time.

    ``capture`` returns whichever frame is current at the moment it is called,
    so a slow consumer skips frames instead of falling behind. Every frame is
    decoded into the same surface; a buffer is only valid until the next
    capture.
    """

    kind = SourceKind.VIDEO

    def __init__(self, path: str | Path, loop: bool = False, clock=time.monotonic):
        self.path = Path(path)
        self.loop = loop
        self._clock = clock
        self._image: Image.Image | None = None
        self._frame_ends: list[float] = []  # cumulative end time of each frame, seconds
        self._surface: np.ndarray | None = None
        self._started: float | None = None
        self._played = 0.0

    def __repr__(self) -> str:
        return f"AnimatedImageSource({str(self.path)!r})"

    def open(self) -> "AnimatedImageSource":
        try:
            image = Image.open(self.path)
            durations = []
            for index in range(getattr(image, "n_frames", 1)):
                image.seek(index)
                durations.append((image.info.get("duration") or DEFAULT_FRAME_DURATION) / 1000)
            image.seek(0)
        except _DECODE_ERRORS as exc:
            raise SourceUnavailable(f"Failed to load animation {self.path}: {exc}") from exc
        self._image = image
        self._frame_ends = list(itertools.accumulate(durations))
        logger.debug("Opened %s: %d frames, %.2fs", self.path, len(durations), self.duration)
        return self

    def close(self) -> None:
        if self._image is not None:
            self._image.close()
            self._image = None

    @property
    def size(self) -> tuple[int, int]:
        return self._require_open().size

    @property
    def frame_count(self) -> int:
        return len(self._frame_ends)

    @property
    def duration(self) -> float:
        return self._frame_ends[-1] if self._frame_ends else 0.0

    @property
    def playing(self) -> bool:
        return self._started is not None

    @property
    def position(self) -> float:
        """Seconds of playback so far."""
        if self._started is None:
            return self._played
        return self._played + self._clock() - self._started

    @property
    def ended(self) -> bool:
        return not self.loop and self.position >= self.duration

    def play(self) -> None:
        if self._started is None:
            self._started = self._clock()

    def pause(self) -> None:
        if self._started is not None:
            self._played = self.position
            self._started = None

    def current_frame(self) -> int:
        position = self.position
        if self.loop and self.duration > 0:
            position %= self.duration
        return min(bisect.bisect_right(self._frame_ends, position), max(self.frame_count - 1, 0))

    def _require_open(self) -> Image.Image:
        if self._image is None:
            raise SourceUnavailable(f"Animation {self.path} is not open")
        return self._image

    def _decode(self, index: int) -> PixelBuffer:
        image = self._require_open()
        try:
            image.seek(index)
            frame = np.asarray(image.convert("RGB"), dtype=np.uint8)
        except _DECODE_ERRORS as exc:
            raise SourceUnavailable(f"Failed to decode frame {index} of {self.path}: {exc}") from exc
        if self._surface is None or self._surface.shape != frame.shape:
            self._surface = np.empty_like(frame)
        np.copyto(self._surface, frame)
        height, width = frame.shape[:2]
        return PixelBuffer(width, height, self._surface)

    async def capture(self) -> PixelBuffer:
        return await asyncio.to_thread(self._decode, self.current_frame())
