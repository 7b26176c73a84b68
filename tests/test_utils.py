"""Tests for shared helpers."""

import re

import cv2
import numpy as np
import pytest

from cardtext.utils import (
    rgb_to_hex, hex_to_rgb, image_from_rgba_bytes, clamp_bbox_to_image, luminance,
    load_image, get_image_files, box_corners,
)
from cardtext.schemas import BoundingBox


def test_rgb_to_hex_format():
    """Hex output is lowercase, zero-padded, rounded and clamped."""
    assert rgb_to_hex((255, 255, 255)) == "#ffffff"
    assert rgb_to_hex((0, 10, 171)) == "#000aab"
    assert rgb_to_hex((12.5, 12.4, 300)) == "#0d0cff"
    assert rgb_to_hex((-4, 0, 0)) == "#000000"
    assert re.match(r"^#[0-9a-f]{6}$", rgb_to_hex(np.array([1, 2, 3], dtype=np.uint8)))


def test_hex_to_rgb():
    """Hex strings parse with or without the hash."""
    assert hex_to_rgb("#0CC863") == (12, 200, 99)
    assert hex_to_rgb("0cc863") == (12, 200, 99)
    with pytest.raises(ValueError):
        hex_to_rgb("#fff")
    with pytest.raises(ValueError):
        hex_to_rgb("#gggggg")


def test_luminance():
    """Rec. 601 weights."""
    assert luminance((255, 255, 255)) == pytest.approx(255)
    assert luminance((0, 0, 0)) == 0
    assert luminance((0, 255, 0)) == pytest.approx(0.587 * 255)


def test_image_from_rgba_bytes():
    """Row-major RGBA bytes become a read-only H×W×4 array."""
    data = bytes([1, 2, 3, 255, 4, 5, 6, 255, 7, 8, 9, 255, 10, 11, 12, 255, 13, 14, 15, 255, 16, 17, 18, 255])
    image = image_from_rgba_bytes(3, 2, data)

    assert image.shape == (2, 3, 4)
    assert tuple(image[1, 0, :3]) == (10, 11, 12)
    with pytest.raises(ValueError):
        image[0, 0, 0] = 0


def test_image_from_rgba_bytes_size_mismatch():
    """A buffer of the wrong length is rejected."""
    with pytest.raises(ValueError, match="expected 24"):
        image_from_rgba_bytes(3, 2, bytes(20))


def test_clamp_bbox_to_image():
    """Boxes are floored/ceiled and limited to the image."""
    assert clamp_bbox_to_image(-5, -5, 500, 500, (40, 60)) == (0, 0, 60, 40)
    assert clamp_bbox_to_image(1.5, 2.7, 10.2, 20.0, (40, 60)) == (1, 2, 11, 20)
    assert clamp_bbox_to_image(70, 0, 80, 10, (40, 60)) is None
    assert clamp_bbox_to_image(10, 10, 10, 20, (40, 60)) is None


def test_box_corners():
    """Boxes and tuples unpack the same way."""
    assert box_corners(BoundingBox(1, 2, 3, 4)) == (1, 2, 3, 4)
    assert box_corners([1, 2, 3, 4]) == (1, 2, 3, 4)


def test_load_image_returns_rgba(tmp_path):
    """Files are decoded to RGBA regardless of OpenCV's BGR order."""
    bgr = np.zeros((4, 5, 3), dtype=np.uint8)
    bgr[:, :] = (255, 0, 0)  # blue in BGR
    path = tmp_path / "blue.png"
    cv2.imwrite(str(path), bgr)

    image = load_image(path)
    assert image.shape == (4, 5, 4)
    assert tuple(image[0, 0]) == (0, 0, 255, 255)


def test_load_image_rejects_garbage(tmp_path):
    """Undecodable files raise ValueError."""
    path = tmp_path / "broken.png"
    path.write_bytes(b"nope")
    with pytest.raises(ValueError, match="Could not load image"):
        load_image(path)


def test_get_image_files(tmp_path):
    """Only image files are listed, in name order."""
    for name in ("b.png", "a.JPG", "notes.txt", "a.json"):
        (tmp_path / name).write_bytes(b"")
    assert [p.name for p in get_image_files(tmp_path)] == ["a.JPG", "b.png"]
    assert get_image_files(tmp_path / "notes.txt") == []
