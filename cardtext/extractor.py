"""Per-image extraction pipeline.

Turns OCR lines plus the decoded image into editor-ready text records: colors
from the region classifier, font family and weight from the word hints, font
size from the measurer, and one page-level background color.
"""

import json
from pathlib import Path
from typing import Any, List, Optional, Sequence, Union

from .card_background import estimate_card_background
from .config import ExtractorConfig
from .find_text_colors import find_text_colors
from .font_metrics import TextMeasurer, estimate_font_size, infer_font_family, infer_font_weight
from .schemas import CardResult, DetectedText, OcrLine
from .text_normalizer import normalize_cjk_spaces
from .utils import ImageArray, setup_logger

logger = setup_logger(__name__)

def parse_ocr_lines(data: Any) -> List[OcrLine]:
    """Parse OCR output given as a list of lines or ``{"lines": [...]}``.

    Raises:
        ValueError: If the structure is not recognized
    """
    if isinstance(data, dict):
        data = data.get("lines")
    if not isinstance(data, list):
        raise ValueError("OCR data must be a list of lines or an object with a 'lines' list")
    return [OcrLine.from_dict(line) for line in data]

def load_ocr_lines(path: Union[str, Path]) -> List[OcrLine]:
    """Read OCR lines from a JSON file.

    Raises:
        ValueError: If the file is missing or is not valid OCR JSON
    """
    path = Path(path)
    try:
        with open(path, "r", encoding="utf-8") as fh:
            data = json.load(fh)
    except FileNotFoundError as e:
        raise ValueError(f"OCR file not found: {path}") from e
    except json.JSONDecodeError as e:
        raise ValueError(f"Invalid JSON in OCR file {path}: {e}") from e
    return parse_ocr_lines(data)

def extract_text(
    image: ImageArray,
    line: OcrLine,
    line_id: str,
    measurer: Optional[TextMeasurer] = None,
    config: Optional[ExtractorConfig] = None
) -> DetectedText:
    """Build the editor record for one OCR line.

    Raises:
        MeasurementSetupError: If the measurer cannot load a needed font
    """
    config = config or ExtractorConfig()

    text = line.text.strip()
    if config.normalize_cjk_spaces:
        text = normalize_cjk_spaces(text)

    colors = find_text_colors(image, line.bbox)
    font_family = infer_font_family(line.words)
    font_weight = infer_font_weight(line.words)

    # Without fitting the size comes from the box height alone
    font_size = estimate_font_size(
        text, line.bbox, font_family, font_weight, measurer if config.fit_font_size else None
    )

    return DetectedText(
        id=line_id,
        text=text,
        bbox=line.bbox,
        font_size=font_size,
        text_color=colors.text_color,
        bg_color=colors.bg_color,
        font_family=font_family,
        font_weight=font_weight,
        confidence=line.confidence,
    )

def extract_card(
    image: ImageArray,
    lines: Sequence[OcrLine],
    measurer: Optional[TextMeasurer] = None,
    config: Optional[ExtractorConfig] = None
) -> CardResult:
    """Extract rendering parameters for every OCR line of one image.

    This is the main entry point of the pipeline. Lines without text are
    dropped; the remaining ones are numbered ``text-0``, ``text-1``, ...

    Args:
        image: RGB(A) image array the OCR ran on
        lines: OCR lines in reading order
        measurer: Text measurer for font size fitting
        config: Extractor settings (defaults when omitted)

    Returns:
        CardResult with one DetectedText per kept line and the page background

    Raises:
        MeasurementSetupError: If the measurer cannot load a needed font
    """
    config = config or ExtractorConfig()
    kept = [line for line in lines if line.text.strip()]
    if len(kept) < len(lines):
        logger.debug(f"Dropped {len(lines) - len(kept)} empty OCR lines")

    texts = [
        extract_text(image, line, f"text-{i}", measurer, config)
        for i, line in enumerate(kept)
    ]
    background = estimate_card_background(image, [line.bbox for line in kept])

    img_h, img_w = image.shape[:2]
    logger.info(f"Extracted {len(texts)} text lines from {img_w}×{img_h} image, background {background}")
    return CardResult(width=img_w, height=img_h, background_color=background, texts=texts)
