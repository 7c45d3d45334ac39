import asyncio
import enum
import functools
import logging
from collections.abc import Callable
from typing import Protocol

from asciiframe.buffer import PixelBuffer
from asciiframe.config import DEFAULT_CONFIG, ConversionConfig
from asciiframe.converter import convert
from asciiframe.engine import CharacterGrid, FrameSource, Renderer, SourceKind
from asciiframe.errors import Cancelled, SourceUnavailable

logger = logging.getLogger(__name__)


class State(enum.Enum):
    IDLE = "idle"
    CONVERTING_IMAGE = "converting_image"
    PLAYING_VIDEO = "playing_video"
    PAUSED = "paused"


class FrameClock(Protocol):
    def request_frame(self, callback: Callable[[], None]) -> None:
        """Call ``callback`` once, when the next frame can be displayed."""
        ...

    def cancel(self) -> None:
        """Drop any pending request."""
        ...


class AsyncioFrameClock:
    """Frame clock ticking at a fixed rate on the running event loop."""

    def __init__(self, fps: float = 30.0):
        if fps <= 0:
            raise ValueError(f"fps must be positive, got {fps}")
        self.interval = 1.0 / fps
        self._handle: asyncio.TimerHandle | None = None

    def request_frame(self, callback: Callable[[], None]) -> None:
        self.cancel()
        self._handle = asyncio.get_running_loop().call_later(self.interval, callback)

    def cancel(self) -> None:
        if self._handle is not None:
            self._handle.cancel()
            self._handle = None


class FrameScheduler:
    """Drives conversions for one source at a time and hands the grids to a renderer.

    Signal handlers are plain methods meant to be called from the event loop
    by whatever owns the source. At most one conversion is in flight; a frame
    signal arriving while one is running is dropped rather than queued, and
    the loop re-samples whatever frame is current at the next clock tick.

    Every source selection bumps a generation counter. Work started for an
    older generation still runs to completion but its result is thrown away.
    A new conversion waits for any such leftover work on the same source
    before capturing from it.
    """

    def __init__(
        self,
        renderer: Renderer,
        config: ConversionConfig = DEFAULT_CONFIG,
        clock: FrameClock | None = None,
    ):
        self.renderer = renderer
        self.config = config
        self.clock = clock if clock is not None else AsyncioFrameClock()
        self.state = State.IDLE
        self.source: FrameSource | None = None
        self.frames_rendered = 0
        self.frames_dropped = 0
        self._generation = 0
        self._in_flight: asyncio.Task | None = None
        self._frame_requested = False
        self._tasks: set[asyncio.Task] = set()
        self._latest: dict[FrameSource, asyncio.Task] = {}  # newest conversion started per source

    @property
    def busy(self) -> bool:
        return self._in_flight is not None

    def on_source_changed(self, source: FrameSource) -> asyncio.Task | None:
        """Switch to a new source. For a still image, returns the task converting it."""
        self._supersede()
        self.source = source
        if source.kind is SourceKind.IMAGE:
            return self.on_image_ready(source)
        # Video stays loaded but idle until the play signal
        self._transition(State.PAUSED)
        return None

    def on_image_ready(self, source: FrameSource) -> asyncio.Task:
        if source is not self.source:
            self._supersede()
            self.source = source
        elif self._in_flight is not None:
            return self._in_flight
        self._transition(State.CONVERTING_IMAGE)
        self._in_flight = self._start(self._convert_image, source)
        return self._in_flight

    def on_video_play(self) -> None:
        if self.source is None or self.source.kind is not SourceKind.VIDEO:
            logger.debug("Play signal without a video source, ignoring")
            return
        if self.state not in (State.IDLE, State.PAUSED):
            return
        self._transition(State.PLAYING_VIDEO)
        self.on_video_frame_displayable()

    def on_video_frame_displayable(self) -> None:
        if self.state is not State.PLAYING_VIDEO:
            return
        if self._in_flight is not None:
            self.frames_dropped += 1
            logger.debug("Conversion still in flight, dropping frame (%d dropped)", self.frames_dropped)
            return
        self._in_flight = self._start(self._convert_video_frame, self.source)

    def on_video_paused(self) -> None:
        if self.state is State.PLAYING_VIDEO:
            self._cancel_frame_request()
            self._transition(State.PAUSED)

    def on_video_ended(self) -> None:
        self.on_video_paused()

    def update_config(self, config: ConversionConfig) -> asyncio.Task | None:
        """Use ``config`` from now on. A loaded still image is converted again."""
        self.config = config
        if self.source is not None and self.source.kind is SourceKind.IMAGE:
            return self.on_source_changed(self.source)
        return None

    def close(self) -> None:
        self._supersede()

    async def drain(self) -> None:
        """Wait for every conversion started so far to finish."""
        if self._tasks:
            await asyncio.gather(*self._tasks, return_exceptions=True)

    def _transition(self, state: State) -> None:
        if state is not self.state:
            logger.debug("%s -> %s", self.state.name, state.name)
            self.state = state

    def _supersede(self) -> None:
        self._generation += 1
        self._in_flight = None
        self._cancel_frame_request()
        self.source = None
        self._transition(State.IDLE)

    def _spawn(self, coro) -> asyncio.Task:
        task = asyncio.get_running_loop().create_task(coro)
        self._tasks.add(task)
        task.add_done_callback(self._task_done)
        return task

    def _start(self, step, source: FrameSource) -> asyncio.Task:
        previous = self._latest.get(source)
        task = self._spawn(step(source, self._generation, previous))
        self._latest[source] = task
        task.add_done_callback(functools.partial(self._forget, source))
        return task

    def _forget(self, source: FrameSource, task: asyncio.Task) -> None:
        if self._latest.get(source) is task:
            del self._latest[source]

    def _task_done(self, task: asyncio.Task) -> None:
        self._tasks.discard(task)
        if task.cancelled():
            return
        error = task.exception()
        # Capture failures were reported when they happened
        if error is not None and not isinstance(error, SourceUnavailable):
            logger.error("Conversion failed", exc_info=error)

    def _check_current(self, generation: int) -> None:
        if generation != self._generation:
            raise Cancelled(f"source from generation {generation} was superseded by {self._generation}")

    async def _capture(self, source: FrameSource, generation: int, previous: asyncio.Task | None) -> PixelBuffer:
        if previous is not None and not previous.done():
            # A source is only ever captured by one conversion at a time, superseded or not
            await asyncio.wait([previous])
            self._check_current(generation)
        try:
            buffer = await source.capture()
        except SourceUnavailable:
            self._check_current(generation)
            raise
        self._check_current(generation)
        return buffer

    def _render(self, grid: CharacterGrid) -> None:
        self.renderer.render(grid)
        self.frames_rendered += 1

    async def _convert_image(
        self, source: FrameSource, generation: int, previous: asyncio.Task | None
    ) -> CharacterGrid | None:
        try:
            buffer = await self._capture(source, generation, previous)
            grid = convert(buffer, self.config)
        except Cancelled as exc:
            logger.debug("Discarding image result: %s", exc)
            return None
        except SourceUnavailable as exc:
            logger.warning("Could not load %r: %s", source, exc)
            self.renderer.report_error(exc)
            raise
        finally:
            if generation == self._generation:
                self._in_flight = None
                self._transition(State.IDLE)
        self._render(grid)
        return grid

    async def _convert_video_frame(
        self, source: FrameSource, generation: int, previous: asyncio.Task | None
    ) -> CharacterGrid | None:
        grid = None
        try:
            buffer = await self._capture(source, generation, previous)
            grid = convert(buffer, self.config)
        except Cancelled as exc:
            logger.debug("Discarding video frame: %s", exc)
            return None
        except SourceUnavailable as exc:
            logger.warning("Skipping video frame: %s", exc)
            self.renderer.report_error(exc)
        finally:
            if generation == self._generation:
                self._in_flight = None
        if grid is not None:
            self._render(grid)
        self._request_next_frame(generation)
        return grid

    def _request_next_frame(self, generation: int) -> None:
        if generation != self._generation or self.state is not State.PLAYING_VIDEO:
            logger.debug("Playback stopped, not scheduling another frame")
            return
        if not self._frame_requested:
            self._frame_requested = True
            self.clock.request_frame(functools.partial(self._on_clock_tick, generation))

    def _on_clock_tick(self, generation: int) -> None:
        if generation != self._generation:
            return
        self._frame_requested = False
        self.on_video_frame_displayable()

    def _cancel_frame_request(self) -> None:
        self._frame_requested = False
        self.clock.cancel()
