"""Tests for the command-line interface."""

import json
from pathlib import Path

import cv2
import numpy as np
import pytest
from PIL import features

from cardtext.cli import main, resolve_ocr_path

requires_freetype = pytest.mark.skipif(
    not features.check("freetype2"), reason="Pillow built without FreeType"
)

OCR_DATA = {"lines": [
    {"text": "Jane Doe", "bbox": {"x0": 20, "y0": 20, "x1": 120, "y1": 40},
     "confidence": 90, "words": [{"is_bold": True}]},
]}


def write_card(directory: Path, name: str = "card", ocr: bool = True) -> Path:
    """Write a white card with one black text block and its OCR JSON."""
    image = np.full((100, 200, 3), 255, dtype=np.uint8)
    image[25:35, 30:110] = 0
    image_path = directory / f"{name}.png"
    cv2.imwrite(str(image_path), image)
    if ocr:
        (directory / f"{name}.json").write_text(json.dumps(OCR_DATA), encoding="utf-8")
    return image_path


def test_resolve_ocr_path(tmp_path):
    """OCR files are found next to the image, in a directory, or given directly."""
    image_path = tmp_path / "scans" / "card.png"
    assert resolve_ocr_path(image_path, None) == tmp_path / "scans" / "card.json"
    assert resolve_ocr_path(image_path, str(tmp_path)) == tmp_path / "card.json"
    assert resolve_ocr_path(image_path, "ocr.json") == Path("ocr.json")


@requires_freetype
def test_single_image(tmp_path):
    """One image and its OCR JSON produce one output file."""
    image_path = write_card(tmp_path)
    output_dir = tmp_path / "out"

    main(["-i", str(image_path), "-o", str(output_dir)])

    payload = json.loads((output_dir / "card.texts.json").read_text(encoding="utf-8"))
    assert payload["image"] == "card.png"
    assert payload["width"] == 200
    assert payload["height"] == 100
    assert payload["backgroundColor"] == "#ffffff"

    text = payload["texts"][0]
    assert text["textColor"] == "#000000"
    assert text["bgColor"] == "#ffffff"
    assert text["fontWeight"] == "bold"
    assert 8 <= text["fontSize"] <= 30


@requires_freetype
def test_directory_with_separate_ocr_dir(tmp_path):
    """A directory of images reads OCR files from --ocr by stem."""
    images = tmp_path / "images"
    ocr = tmp_path / "ocr"
    images.mkdir()
    ocr.mkdir()
    for name in ("a", "b"):
        write_card(images, name, ocr=False)
        (ocr / f"{name}.json").write_text(json.dumps(OCR_DATA), encoding="utf-8")

    main(["-i", str(images), "-r", str(ocr), "-o", str(tmp_path / "out"),
          "--set", "fit_font_size=false"])

    for name in ("a", "b"):
        payload = json.loads((tmp_path / "out" / f"{name}.texts.json").read_text(encoding="utf-8"))
        assert payload["texts"][0]["fontSize"] == pytest.approx(17.0)


@requires_freetype
def test_image_without_ocr_is_skipped(tmp_path):
    """An image missing its OCR file is reported while others still run."""
    write_card(tmp_path, "good")
    write_card(tmp_path, "orphan", ocr=False)
    output_dir = tmp_path / "out"

    main(["-i", str(tmp_path), "-o", str(output_dir)])

    assert (output_dir / "good.texts.json").exists()
    assert not (output_dir / "orphan.texts.json").exists()


def test_all_images_failing_exits_with_error(tmp_path):
    """A run where no image succeeds exits non-zero."""
    image_path = write_card(tmp_path, ocr=False)
    with pytest.raises(SystemExit) as excinfo:
        main(["-i", str(image_path), "-o", str(tmp_path / "out")])
    assert excinfo.value.code == 1


def test_missing_input_exits_with_error(tmp_path):
    """A nonexistent input path exits non-zero."""
    with pytest.raises(SystemExit) as excinfo:
        main(["-i", str(tmp_path / "nothing.png"), "-o", str(tmp_path / "out")])
    assert excinfo.value.code == 1


def test_missing_font_file_aborts(tmp_path):
    """Misconfigured fonts stop the run instead of falling back."""
    image_path = write_card(tmp_path)
    with pytest.raises(SystemExit) as excinfo:
        main(["-i", str(image_path), "-o", str(tmp_path / "out"),
              "--set", f"fonts.Sans={tmp_path / 'missing.ttf'}"])
    assert excinfo.value.code == 1


def test_invalid_config_exits_with_error(tmp_path):
    """Bad configuration is reported before any image is processed."""
    image_path = write_card(tmp_path)
    with pytest.raises(SystemExit) as excinfo:
        main(["-i", str(image_path), "-o", str(tmp_path / "out"), "--set", "bogus=1"])
    assert excinfo.value.code == 1


@requires_freetype
def test_malformed_ocr_file_is_skipped(tmp_path):
    """OCR JSON with non-object word hints fails only its own image."""
    write_card(tmp_path, "a", ocr=False)
    write_card(tmp_path, "b")
    bad = {"lines": [dict(OCR_DATA["lines"][0], words=["bold"])]}
    (tmp_path / "a.json").write_text(json.dumps(bad), encoding="utf-8")
    output_dir = tmp_path / "out"

    main(["-i", str(tmp_path), "-o", str(output_dir)])

    assert not (output_dir / "a.texts.json").exists()
    assert (output_dir / "b.texts.json").exists()


def test_ocr_line_of_wrong_type_exits_with_error(tmp_path):
    """A line that is not an object is an input error, not a crash."""
    image_path = write_card(tmp_path, ocr=False)
    (tmp_path / "card.json").write_text(json.dumps({"lines": [5]}), encoding="utf-8")
    with pytest.raises(SystemExit) as excinfo:
        main(["-i", str(image_path), "-o", str(tmp_path / "out")])
    assert excinfo.value.code == 1
