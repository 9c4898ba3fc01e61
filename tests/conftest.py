import asyncio

import pytest

from bubble_art.model import PixelBuffer

RED = (255, 0, 0)
GREEN = (0, 255, 0)
BLUE = (0, 0, 255)
WHITE = (255, 255, 255)


def make_buffer(width, height, pixels):
    """Build a PixelBuffer from a row-major list of RGB tuples."""
    data = bytearray()
    for r, g, b in pixels:
        data += bytes((r, g, b, 255))
    return PixelBuffer(width, height, bytes(data))


def gradient_buffer(width, height):
    pixels = [((x * 7) % 256, (y * 11) % 256, ((x + y) * 5) % 256)
              for y in range(height) for x in range(width)]
    return make_buffer(width, height, pixels)


def run(coro):
    return asyncio.run(coro)


@pytest.fixture
def checker_buffer():
    # 2x2: red, blue / green, white
    return make_buffer(2, 2, [RED, BLUE, GREEN, WHITE])
