"""Data records exchanged with the OCR and editor collaborators."""

from dataclasses import dataclass, field
from typing import Any, Dict, List, Mapping


def _flag(data: Mapping[str, Any], snake: str, camel: str) -> bool:
    return bool(data.get(snake, data.get(camel, False)))


@dataclass(frozen=True)
class BoundingBox:
    """Axis-aligned box in image-pixel space; may extend past the image."""
    x0: float
    y0: float
    x1: float
    y1: float

    @property
    def width(self) -> float:
        return self.x1 - self.x0

    @property
    def height(self) -> float:
        return self.y1 - self.y0

    def contains(self, x: float, y: float) -> bool:
        """Inclusive point-in-box test."""
        return self.x0 <= x <= self.x1 and self.y0 <= y <= self.y1

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "BoundingBox":
        if not isinstance(data, Mapping):
            raise ValueError(f"Invalid bounding box: {data!r}")
        try:
            return cls(float(data["x0"]), float(data["y0"]), float(data["x1"]), float(data["y1"]))
        except (KeyError, TypeError) as e:
            raise ValueError(f"Invalid bounding box: {data!r}") from e

    def to_dict(self) -> Dict[str, float]:
        return {"x0": self.x0, "y0": self.y0, "x1": self.x1, "y1": self.y1}


@dataclass(frozen=True)
class FontHint:
    """Per-word style flags reported by the OCR engine."""
    is_bold: bool = False
    is_serif: bool = False
    is_monospace: bool = False

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "FontHint":
        if not isinstance(data, Mapping):
            raise ValueError(f"Word style hint must be an object: {data!r}")
        return cls(
            is_bold=_flag(data, "is_bold", "isBold"),
            is_serif=_flag(data, "is_serif", "isSerif"),
            is_monospace=_flag(data, "is_monospace", "isMonospace"),
        )


@dataclass
class OcrLine:
    """One detected text line as delivered by the OCR engine."""
    text: str
    bbox: BoundingBox
    confidence: float = 0.0
    words: List[FontHint] = field(default_factory=list)

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "OcrLine":
        if not isinstance(data, Mapping):
            raise ValueError(f"OCR line must be an object: {data!r}")
        if "bbox" not in data:
            raise ValueError(f"OCR line is missing a bbox: {data!r}")
        words = data.get("words") or []
        if not isinstance(words, list):
            raise ValueError(f"OCR line words must be a list: {words!r}")
        try:
            confidence = float(data.get("confidence", 0.0))
        except (TypeError, ValueError) as e:
            raise ValueError(f"Invalid OCR confidence: {data.get('confidence')!r}") from e
        return cls(
            text=str(data.get("text", "")),
            bbox=BoundingBox.from_dict(data["bbox"]),
            confidence=confidence,
            words=[FontHint.from_dict(w) for w in words],
        )


@dataclass(frozen=True)
class ColorResult:
    """Text and background color of one region, as ``#rrggbb`` strings."""
    text_color: str
    bg_color: str


@dataclass
class DetectedText:
    """Rendering parameters for one text line, consumed by the editor."""
    id: str
    text: str
    bbox: BoundingBox
    font_size: float
    text_color: str
    bg_color: str
    font_family: str
    font_weight: str
    confidence: float

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "text": self.text,
            "bbox": self.bbox.to_dict(),
            "fontSize": self.font_size,
            "textColor": self.text_color,
            "bgColor": self.bg_color,
            "fontFamily": self.font_family,
            "fontWeight": self.font_weight,
            "confidence": self.confidence,
        }


@dataclass
class CardResult:
    """Everything extracted from one image."""
    width: int
    height: int
    background_color: str
    texts: List[DetectedText] = field(default_factory=list)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "width": self.width,
            "height": self.height,
            "backgroundColor": self.background_color,
            "texts": [t.to_dict() for t in self.texts],
        }
