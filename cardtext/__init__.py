"""Cardtext: text color and font metrics extraction for scanned cards.

This package turns OCR-detected text lines (text, bounding box, per-word
style hints) into rendering parameters for a vector editor: text and
background colors, font size, family and weight, plus one page background.
"""

__version__ = "0.1.0"
__author__ = "Cardtext Team"

# Main pipeline components
from .color_space import rgb_to_lab, delta_e, linearize
from .medoid import medoid_color
from .find_text_colors import find_text_colors, sample_border_color
from .card_background import estimate_card_background
from .font_metrics import (
    TextMeasurer,
    PillowTextMeasurer,
    MeasurementSetupError,
    estimate_font_size,
    infer_font_family,
    infer_font_weight,
)
from .text_normalizer import normalize_cjk_spaces
from .schemas import BoundingBox, FontHint, OcrLine, ColorResult, DetectedText, CardResult
from .config import ExtractorConfig, load_config
from .extractor import extract_card, load_ocr_lines
from .utils import load_image, image_from_rgba_bytes, setup_logger

# CLI entry point
from .cli import main

__all__ = [
    "rgb_to_lab",
    "delta_e",
    "linearize",
    "medoid_color",
    "find_text_colors",
    "sample_border_color",
    "estimate_card_background",
    "TextMeasurer",
    "PillowTextMeasurer",
    "MeasurementSetupError",
    "estimate_font_size",
    "infer_font_family",
    "infer_font_weight",
    "normalize_cjk_spaces",
    "BoundingBox",
    "FontHint",
    "OcrLine",
    "ColorResult",
    "DetectedText",
    "CardResult",
    "ExtractorConfig",
    "load_config",
    "extract_card",
    "load_ocr_lines",
    "load_image",
    "image_from_rgba_bytes",
    "setup_logger",
    "main",
]
