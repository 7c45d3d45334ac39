import argparse
import asyncio
import logging
import sys
from pathlib import Path

from asciiframe.charsets import PRESETS, resolve_charset
from asciiframe.config import DEFAULT_CONFIG, ConversionConfig, sparsity_for_width
from asciiframe.errors import InvalidConfiguration, SourceUnavailable
from asciiframe.scheduler import AsyncioFrameClock, FrameScheduler
from asciiframe.sources import AnimatedImageSource, ImageSource, image_size
from asciiframe.terminal import TerminalRenderer, get_terminal_size


async def show_image(path: Path, config: ConversionConfig) -> None:
    scheduler = FrameScheduler(TerminalRenderer(), config)
    await scheduler.on_source_changed(ImageSource(path))


async def play_animation(path: Path, config: ConversionConfig, fps: float, loop: bool) -> None:
    source = AnimatedImageSource(path, loop=loop).open()
    clock = AsyncioFrameClock(fps)
    scheduler = FrameScheduler(TerminalRenderer(animate=True), config, clock=clock)
    try:
        scheduler.on_source_changed(source)
        source.play()
        scheduler.on_video_play()
        while not source.ended:
            await asyncio.sleep(clock.interval)
        scheduler.on_video_ended()
        await scheduler.drain()
    finally:
        scheduler.close()
        source.close()


def main(argv=None):
    parser = argparse.ArgumentParser(description="Render an image or animation as ASCII art")
    parser.add_argument("image", help="Path to input image")
    parser.add_argument(
        "-s",
        "--sparsity",
        type=int,
        default=None,
        help=f"Sample every Nth pixel in both directions (default: {DEFAULT_CONFIG.sparsity})",
    )
    parser.add_argument(
        "-c",
        "--characters",
        default="default",
        help=f"Glyphs from densest to sparsest, or a preset: {', '.join(PRESETS)} (default: default)",
    )
    parser.add_argument(
        "--font-size", type=int, default=DEFAULT_CONFIG.font_size, help="Font size hint for renderers"
    )
    parser.add_argument(
        "-f", "--fit", action="store_true", default=False, help="Choose the sparsity that fits the terminal width"
    )
    parser.add_argument("-p", "--play", action="store_true", default=False, help="Play an animated image")
    parser.add_argument("--loop", action="store_true", default=False, help="Loop playback until interrupted")
    parser.add_argument("--fps", type=float, default=30.0, help="Redraw rate while playing (default: 30)")
    parser.add_argument("-v", "--verbose", action="store_true", default=False, help="Log debug output to stderr")
    args = parser.parse_args(argv)

    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.WARNING,
        format="%(levelname)s %(name)s: %(message)s",
    )

    image_path = Path(args.image)
    if not image_path.exists():
        print(f"File not found: {image_path}", file=sys.stderr)
        sys.exit(1)
    if args.fps <= 0:
        parser.error("--fps must be positive")

    try:
        sparsity = args.sparsity
        if sparsity is None and args.fit:
            sparsity = sparsity_for_width(image_size(image_path)[0], get_terminal_size()[0])
        config = ConversionConfig(
            sparsity=sparsity if sparsity is not None else DEFAULT_CONFIG.sparsity,
            characters=resolve_charset(args.characters),
            font_size=args.font_size,
        )
    except InvalidConfiguration as exc:
        parser.error(str(exc))
    except SourceUnavailable as exc:
        print(exc, file=sys.stderr)
        sys.exit(1)

    try:
        if args.play:
            asyncio.run(play_animation(image_path, config, args.fps, args.loop))
        else:
            asyncio.run(show_image(image_path, config))
    except SourceUnavailable as exc:
        # Still-image failures were already printed by the renderer
        if args.play:
            print(exc, file=sys.stderr)
        sys.exit(1)
    except KeyboardInterrupt:
        pass
