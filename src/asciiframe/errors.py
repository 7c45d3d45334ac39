class AsciiFrameError(Exception):
    """Base class for asciiframe errors."""


class InvalidConfiguration(AsciiFrameError, ValueError):
    """A conversion was requested with a configuration that can never work."""


class SourceUnavailable(AsciiFrameError):
    """A frame source failed to decode or capture a pixel buffer."""


class Cancelled(AsciiFrameError):
    """A conversion finished after its source had been superseded."""
