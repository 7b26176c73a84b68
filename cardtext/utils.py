"""Shared utilities and type definitions for cardtext."""

import math
import logging
from pathlib import Path
from typing import List, Optional, Sequence, Tuple, Union

import cv2
import numpy as np

from .schemas import BoundingBox

# Type aliases for clarity
ImageArray = np.ndarray  # H×W×4 RGBA (or H×W×3 RGB) uint8
Color = Tuple[int, int, int]  # RGB color tuple
PixelBox = Tuple[int, int, int, int]  # (x0, y0, x1, y1), end-exclusive
ImagePath = Union[str, Path]

WHITE: Color = (255, 255, 255)
BLACK: Color = (0, 0, 0)

# Supported image extensions
IMAGE_EXTENSIONS = {'.jpg', '.jpeg', '.png', '.bmp', '.tiff', '.tif', '.webp'}

def setup_logger(name: str, level: int = logging.INFO) -> logging.Logger:
    """Set up a logger with consistent formatting.
    
    Args:
        name: Logger name
        level: Logging level
        
    Returns:
        Configured logger instance
    """
    logger = logging.getLogger(name)
    
    if not logger.handlers:  # Avoid duplicate handlers
        handler = logging.StreamHandler()
        formatter = logging.Formatter(
            '%(asctime)s - %(name)s - %(levelname)s - %(message)s',
            datefmt='%Y-%m-%d %H:%M:%S'
        )
        handler.setFormatter(formatter)
        logger.addHandler(handler)
        
    logger.setLevel(level)
    return logger

def load_image(image_path: ImagePath) -> ImageArray:
    """Load an image from file path.
    
    Args:
        image_path: Path to image file
        
    Returns:
        Image array in RGBA format
        
    Raises:
        ValueError: If image cannot be loaded
    """
    image = cv2.imread(str(image_path), cv2.IMREAD_COLOR)
    if image is None:
        raise ValueError(f"Could not load image: {image_path}")
    return cv2.cvtColor(image, cv2.COLOR_BGR2RGBA)

def image_from_rgba_bytes(width: int, height: int, data: Union[bytes, bytearray, Sequence[int]]) -> ImageArray:
    """Wrap a row-major RGBA byte sequence as an H×W×4 array.
    
    Args:
        width: Image width in pixels
        height: Image height in pixels
        data: Row-major RGBA bytes, 4 per pixel
        
    Returns:
        Read-only RGBA image array
        
    Raises:
        ValueError: If the buffer length does not match the dimensions
    """
    if isinstance(data, (bytes, bytearray)):
        flat = np.frombuffer(bytes(data), dtype=np.uint8)
    else:
        flat = np.asarray(data, dtype=np.uint8)
    
    expected = width * height * 4
    if width < 0 or height < 0 or flat.size != expected:
        raise ValueError(
            f"Pixel buffer has {flat.size} bytes, expected {expected} for {width}×{height} RGBA"
        )
    
    image = flat.reshape(height, width, 4)
    image.flags.writeable = False
    return image

def get_image_files(path: Path) -> List[Path]:
    """Get list of image files from path (file or directory).
    
    Args:
        path: Path to file or directory
        
    Returns:
        List of image file paths
    """
    if path.is_file():
        if path.suffix.lower() in IMAGE_EXTENSIONS:
            return [path]
        else:
            return []
    
    return sorted(f for f in path.glob("*") if f.suffix.lower() in IMAGE_EXTENSIONS)

def clamp_bbox_to_image(
    x0: float, y0: float, x1: float, y1: float, image_shape: Tuple[int, int]
) -> Optional[PixelBox]:
    """Clamp box coordinates to integer pixel bounds inside the image.
    
    The start edge is floored and the end edge ceiled before clamping, so
    fractional OCR coordinates never lose a partially covered pixel.
    
    Args:
        x0, y0, x1, y1: Box corners in image-pixel space
        image_shape: Image shape as (height, width)
        
    Returns:
        End-exclusive (x0, y0, x1, y1), or None if nothing is left after clamping
    """
    img_h, img_w = image_shape[:2]
    
    left = max(0, int(math.floor(x0)))
    top = max(0, int(math.floor(y0)))
    right = min(img_w, int(math.ceil(x1)))
    bottom = min(img_h, int(math.ceil(y1)))
    
    if left >= right or top >= bottom:
        return None
    return (left, top, right, bottom)

def rgb_to_hex(color: Sequence[float]) -> str:
    """Format an RGB color as a lowercase ``#rrggbb`` string.
    
    Channels are rounded half-up and clamped to 0..255.
    """
    channels = [max(0, min(255, int(math.floor(float(c) + 0.5)))) for c in color[:3]]
    return "#{:02x}{:02x}{:02x}".format(*channels)

def hex_to_rgb(hex_color: str) -> Color:
    """Convert hex color string to RGB tuple.
    
    Args:
        hex_color: Hex color string (e.g., "#FF0000" or "FF0000")
        
    Returns:
        RGB color tuple
        
    Raises:
        ValueError: If the string is not a 6-digit hex color
    """
    value = hex_color.strip().lstrip('#')
    if len(value) != 6:
        raise ValueError(f"Invalid hex color: {hex_color!r}")
    try:
        return (int(value[0:2], 16), int(value[2:4], 16), int(value[4:6], 16))
    except ValueError as e:
        raise ValueError(f"Invalid hex color: {hex_color!r}") from e

def luminance(color: Sequence[float]) -> float:
    """Perceived brightness (Rec. 601 weights) on a 0-255 scale."""
    r, g, b = color[:3]
    return 0.299 * r + 0.587 * g + 0.114 * b

def as_color(pixel: Sequence[int]) -> Color:
    """Convert a numpy pixel (or any RGB(A) sequence) to a plain int tuple."""
    return (int(pixel[0]), int(pixel[1]), int(pixel[2]))

BoxLike = Union[BoundingBox, Sequence[float]]

def box_corners(bbox: BoxLike) -> Tuple[float, float, float, float]:
    """Return (x0, y0, x1, y1) for a BoundingBox or a 4-sequence."""
    if isinstance(bbox, BoundingBox):
        return (bbox.x0, bbox.y0, bbox.x1, bbox.y1)
    x0, y0, x1, y1 = bbox
    return (x0, y0, x1, y1)
