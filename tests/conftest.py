"""Common test fixtures."""

import numpy as np
import pytest


def make_image(height, width, color, channels=4):
    """Create a flat RGBA (or RGB) test image."""
    image = np.zeros((height, width, channels), dtype=np.uint8)
    image[:, :, :3] = color
    if channels == 4:
        image[:, :, 3] = 255
    return image


class LinearMeasurer:
    """Text measurer whose metrics scale linearly with font size.

    Width is ``char_width * size`` per character; ascent and descent are
    fixed fractions of the size.
    """

    def __init__(self, char_width=0.5, ascent=0.8, descent=0.2):
        self.char_width = char_width
        self.ascent = ascent
        self.descent = descent
        self.calls = []

    def measure_width(self, text, family, weight, size):
        self.calls.append(("width", text, family, weight, size))
        return self.char_width * size * len(text)

    def measure_ascent_descent(self, text, family, weight, size):
        self.calls.append(("height", text, family, weight, size))
        return self.ascent * size, self.descent * size


@pytest.fixture
def linear_measurer():
    """A deterministic text measurer."""
    return LinearMeasurer()


@pytest.fixture
def gray_card():
    """120×60 gray card with a black block in the center third of a text box.

    Returns:
        Tuple of (image, bbox) where bbox is (x0, y0, x1, y1)
    """
    image = make_image(60, 120, (128, 128, 128))
    bbox = (30, 15, 90, 45)
    image[25:35, 50:70, :3] = 0
    return image, bbox
