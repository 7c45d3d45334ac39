import pytest
from PIL import Image

BLACK = (0, 0, 0)
WHITE = (255, 255, 255)


class FakeTime:
    """Stand-in for time.monotonic that only moves when told to."""

    def __init__(self, now=0.0):
        self.now = now

    def __call__(self):
        return self.now


@pytest.fixture
def fake_time():
    return FakeTime()


@pytest.fixture
def gif_path(tmp_path):
    """A 4x2 animation: black, white, black, 100ms per frame."""
    frames = [Image.new("RGB", (4, 2), colour) for colour in (BLACK, WHITE, BLACK)]
    path = tmp_path / "clip.gif"
    frames[0].save(path, save_all=True, append_images=frames[1:], duration=100, loop=0)
    return path


@pytest.fixture
def png_path(tmp_path):
    """A 2x1 image: one white pixel then one black pixel."""
    img = Image.new("RGB", (2, 1))
    img.putpixel((0, 0), WHITE)
    img.putpixel((1, 0), BLACK)
    path = tmp_path / "pair.png"
    img.save(path)
    return path
