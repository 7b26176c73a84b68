"""Font size, family and weight estimation for detected text lines.

Font size is fitted against the OCR bounding box with a text measurer: lines
of three or more characters are fitted by width (binary search), shorter
ones by glyph height at a probe size. Family and weight come from a majority
vote over the OCR engine's per-word style flags.

Measuring text needs a font rasterizer, which is an external capability. It
is modelled as the :class:`TextMeasurer` protocol and passed in explicitly;
:class:`PillowTextMeasurer` is the bundled implementation.
"""

from io import BytesIO
from pathlib import Path
from typing import Dict, Mapping, Optional, Protocol, Sequence, Tuple, Union

from PIL import ImageFont, features

from .schemas import FontHint
from .utils import BoxLike, setup_logger, box_corners

logger = setup_logger(__name__)

SANS_SERIF_FAMILY = "Noto Sans JP"
SERIF_FAMILY = "Noto Serif JP"
MONOSPACE_FAMILY = "monospace"
DEFAULT_FONT_FAMILY = SANS_SERIF_FAMILY

FONT_WEIGHT_NORMAL = "normal"
FONT_WEIGHT_BOLD = "bold"

# Size returned for boxes without height
DEFAULT_FONT_SIZE = 16.0
# Share of the box height taken by the glyphs when nothing can be measured
HEIGHT_RATIO_FALLBACK = 0.85
# Final size is kept within these multiples of the box height
MIN_HEIGHT_RATIO = 0.4
MAX_HEIGHT_RATIO = 1.5

# Binary search for fit-by-width
MIN_FIT_SIZE = 1.0
MAX_FIT_SIZE = 200.0
FIT_ITERATIONS = 20
# Shorter text is fitted by height
MIN_WIDTH_FIT_CHARS = 3
# Font size used to measure glyph height
PROBE_SIZE = 100.0


class MeasurementSetupError(RuntimeError):
    """The text measurer could not be set up (missing or unusable fonts).

    This indicates a misconfigured environment, not bad input, and is never
    converted into a default font size.
    """


class TextMeasurer(Protocol):
    """Measures rendered text for a given family, weight and pixel size."""

    def measure_width(self, text: str, family: str, weight: str, size: float) -> float:
        ...

    def measure_ascent_descent(self, text: str, family: str, weight: str, size: float) -> Tuple[float, float]:
        ...


class PillowTextMeasurer:
    """Text measurer backed by Pillow's FreeType bindings.

    Font files are looked up by ``"<family>:<weight>"`` first, then by
    ``"<family>"``. Families without a configured file use Pillow's bundled
    scalable font when ``use_default_font`` is set.

    One face per font file is cached per instance; use the measurer as a context
    manager (or call :meth:`close`) to release them.
    """

    def __init__(
        self,
        font_files: Optional[Mapping[str, Union[str, Path]]] = None,
        use_default_font: bool = True
    ):
        self.font_files: Dict[str, Path] = {k: Path(v) for k, v in (font_files or {}).items()}
        self.use_default_font = use_default_font
        self._fonts: Dict[Optional[Path], Tuple[float, ImageFont.FreeTypeFont]] = {}
        self._font_data: Dict[Path, bytes] = {}

        if not features.check("freetype2"):
            raise MeasurementSetupError("Pillow was built without FreeType support")

        for key, path in self.font_files.items():
            if not path.is_file():
                raise MeasurementSetupError(f"Font file for '{key}' not found: {path}")

    def __enter__(self) -> "PillowTextMeasurer":
        return self

    def __exit__(self, exc_type, exc_value, traceback) -> None:
        self.close()

    def close(self) -> None:
        """Drop all loaded fonts."""
        self._fonts.clear()
        self._font_data.clear()

    def font_path(self, family: str, weight: str) -> Optional[Path]:
        """Configured font file for a family/weight, or None for the default font.

        Raises:
            MeasurementSetupError: If nothing is configured and the default font is disabled
        """
        for key in (f"{family}:{weight}", family):
            if key in self.font_files:
                return self.font_files[key]
        if self.use_default_font:
            return None
        raise MeasurementSetupError(f"No font file configured for '{family}' ({weight})")

    def get_font(self, family: str, weight: str, size: float) -> ImageFont.FreeTypeFont:
        """Load the font for a family, weight and size.

        Only the most recently used size is kept per font file; the file
        itself is read once and new sizes are created from its bytes.

        Raises:
            MeasurementSetupError: If the font cannot be loaded
        """
        path = self.font_path(family, weight)
        size = float(size)
        cached = self._fonts.get(path)
        if cached is not None and cached[0] == size:
            return cached[1]

        try:
            if path is None:
                font = ImageFont.load_default(size=size)
            else:
                if path not in self._font_data:
                    self._font_data[path] = path.read_bytes()
                font = ImageFont.truetype(BytesIO(self._font_data[path]), size=size)
        except (OSError, ValueError) as e:
            raise MeasurementSetupError(f"Could not load font for '{family}' ({weight}): {e}") from e

        if not isinstance(font, ImageFont.FreeTypeFont):
            raise MeasurementSetupError("Default font is not scalable; configure a TrueType font file")

        self._fonts[path] = (size, font)
        return font

    def measure_width(self, text: str, family: str, weight: str, size: float) -> float:
        return float(self.get_font(family, weight, size).getlength(text))

    def measure_ascent_descent(self, text: str, family: str, weight: str, size: float) -> Tuple[float, float]:
        # Ink box relative to the left baseline: top is negative above it
        _, top, _, bottom = self.get_font(family, weight, size).getbbox(text, anchor="ls")
        return float(-top), float(bottom)


def fit_by_width(measurer: TextMeasurer, text: str, target_width: float,
                 font_family: str, font_weight: str) -> float:
    """Binary search for the size whose rendered width matches the target.

    Converges from below: a measured width equal to the target moves the
    upper bound, so the result does not overshoot the box.
    """
    lo, hi = MIN_FIT_SIZE, MAX_FIT_SIZE
    for _ in range(FIT_ITERATIONS):
        mid = (lo + hi) / 2
        if measurer.measure_width(text, font_family, font_weight, mid) < target_width:
            lo = mid
        else:
            hi = mid
    return (lo + hi) / 2


def fit_by_height(measurer: TextMeasurer, text: str, target_height: float,
                  font_family: str, font_weight: str) -> float:
    """Scale the probe size by the ratio of box height to rendered ink height."""
    ascent, descent = measurer.measure_ascent_descent(text, font_family, font_weight, PROBE_SIZE)
    rendered_height = ascent + descent
    if rendered_height <= 0:
        logger.debug(f"Degenerate glyph height for {text!r}, using height ratio fallback")
        return target_height * HEIGHT_RATIO_FALLBACK
    return target_height / rendered_height * PROBE_SIZE


def estimate_font_size(
    text: str,
    bbox: BoxLike,
    font_family: str = DEFAULT_FONT_FAMILY,
    font_weight: str = FONT_WEIGHT_NORMAL,
    measurer: Optional[TextMeasurer] = None
) -> float:
    """Estimate the pixel font size that makes ``text`` fill ``bbox``.

    Args:
        text: Recognized text of the line
        bbox: Box as BoundingBox or (x0, y0, x1, y1)
        font_family: Family the text will be rendered with
        font_weight: "normal" or "bold"
        measurer: Text measurer; without one the size is derived from the
            box height alone

    Returns:
        Font size in pixels, within [0.4, 1.5] × box height for any box
        with positive height; 16 otherwise

    Raises:
        MeasurementSetupError: If the measurer cannot load the needed font
    """
    x0, y0, x1, y1 = box_corners(bbox)
    box_width = x1 - x0
    box_height = y1 - y0

    if box_height <= 0:
        return DEFAULT_FONT_SIZE

    trimmed = text.strip()
    if measurer is None or not trimmed:
        return box_height * HEIGHT_RATIO_FALLBACK

    if len(trimmed) >= MIN_WIDTH_FIT_CHARS and box_width > 0:
        estimated = fit_by_width(measurer, trimmed, box_width, font_family, font_weight)
    else:
        estimated = fit_by_height(measurer, trimmed, box_height, font_family, font_weight)

    return max(box_height * MIN_HEIGHT_RATIO, min(box_height * MAX_HEIGHT_RATIO, estimated))


def infer_font_family(hints: Optional[Sequence[FontHint]]) -> str:
    """Majority vote over word hints; monospace wins ties.

    Each word counts once: monospace if flagged so, else serif if flagged
    so, else sans-serif.
    """
    if not hints:
        return DEFAULT_FONT_FAMILY

    monospace = serif = sans_serif = 0
    for hint in hints:
        if hint.is_monospace:
            monospace += 1
        elif hint.is_serif:
            serif += 1
        else:
            sans_serif += 1

    if monospace >= serif and monospace >= sans_serif:
        return MONOSPACE_FAMILY
    if serif > sans_serif:
        return SERIF_FAMILY
    return SANS_SERIF_FAMILY


def infer_font_weight(hints: Optional[Sequence[FontHint]]) -> str:
    """Bold only when a strict majority of words is bold."""
    if not hints:
        return FONT_WEIGHT_NORMAL

    bold_count = sum(1 for hint in hints if hint.is_bold)
    return FONT_WEIGHT_BOLD if bold_count > len(hints) / 2 else FONT_WEIGHT_NORMAL
