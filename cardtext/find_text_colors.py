"""Color analysis module for finding text and background colors in a region.

This module uses a background-first approach:

1. The background color is estimated from a thin band of pixels just outside
   the bounding box (OCR boxes are tight, so the border is almost always
   background).
2. Interior pixels are classified against that background by CIE76 ΔE in Lab
   space: close pixels belong to the background cluster, the rest to text.
3. Each cluster is represented by its medoid, a color that really occurs in
   the image, so anti-aliased edges and JPEG noise never produce a blended
   "phantom" color.

Degenerate input never raises: a box with nothing left after clamping yields
black text on white.
"""

from typing import Optional

import numpy as np

from .color_space import rgb_to_lab, rgb_array_to_lab, batch_delta_e
from .medoid import medoid_color
from .schemas import ColorResult
from .utils import (
    ImageArray, Color, PixelBox, BoxLike, BLACK, WHITE, box_corners,
    setup_logger, clamp_bbox_to_image, rgb_to_hex, luminance, as_color,
)

logger = setup_logger(__name__)

# Distance of the sampling band from the box edge, in pixels
BORDER_MARGIN = 2
# Sampling stride for both border and interior pixels
SAMPLE_STEP = 2
# ΔE below this is background; CIE76 "small perceptible difference".
# Printed text is typically ΔE > 40 from its background.
TEXT_DELTA_E_THRESHOLD = 20.0
# Fewer foreground samples than this are treated as noise
MIN_TEXT_PIXELS = 3

FALLBACK_RESULT = ColorResult(text_color="#000000", bg_color="#ffffff")

def _clamped_box(image: ImageArray, bbox: BoxLike) -> Optional[PixelBox]:
    x0, y0, x1, y1 = box_corners(bbox)
    return clamp_bbox_to_image(x0, y0, x1, y1, image.shape[:2])

def sample_border_pixels(image: ImageArray, box: PixelBox, margin: int = BORDER_MARGIN,
                         step: int = SAMPLE_STEP) -> np.ndarray:
    """Collect pixels along the four edges just outside a clamped box.
    
    Args:
        image: RGB(A) image array
        box: Clamped, end-exclusive (x0, y0, x1, y1)
        margin: Distance of the band from the box edge
        step: Sampling stride along each edge
        
    Returns:
        N×3 array of RGB pixels in top, bottom, left, right order
    """
    img_h, img_w = image.shape[:2]
    x0, y0, x1, y1 = box
    
    top_y = max(0, y0 - margin)
    bottom_y = min(img_h - 1, y1 + margin)
    left_x = max(0, x0 - margin)
    right_x = min(img_w - 1, x1 + margin)
    
    edges = [
        image[top_y, x0:x1:step, :3],
        image[bottom_y, x0:x1:step, :3],
        image[y0:y1:step, left_x, :3],
        image[y0:y1:step, right_x, :3],
    ]
    return np.concatenate(edges, axis=0)

def sample_border_color(image: ImageArray, bbox: BoxLike) -> Optional[Color]:
    """Estimate the background color around a bounding box.
    
    Args:
        image: RGB(A) image array
        bbox: Box as BoundingBox or (x0, y0, x1, y1)
        
    Returns:
        Medoid of the border band, or None when the box is degenerate
        after clamping to the image
    """
    box = _clamped_box(image, bbox)
    if box is None:
        return None
    
    border = sample_border_pixels(image, box)
    if len(border) == 0:
        return None
    return medoid_color(border)

def find_text_colors(image: ImageArray, bbox: BoxLike) -> ColorResult:
    """Find the text color and background color inside a bounding box.
    
    This is the main entry point for per-region color analysis.
    
    Args:
        image: RGB(A) image array, H×W×4 or H×W×3 uint8
        bbox: Box as BoundingBox or (x0, y0, x1, y1) in image pixels
        
    Returns:
        ColorResult with both colors as ``#rrggbb``
    """
    # Phase 1: background from the border band
    border_bg = sample_border_color(image, bbox)
    if border_bg is None:
        logger.debug(f"Degenerate box {box_corners(bbox)}, using default colors")
        return FALLBACK_RESULT
    border_lab = rgb_to_lab(border_bg)
    
    # Phase 2: classify interior samples by distance to the background
    x0, y0, x1, y1 = _clamped_box(image, bbox)
    interior = image[y0:y1:SAMPLE_STEP, x0:x1:SAMPLE_STEP, :3].reshape(-1, 3)
    distances = batch_delta_e(rgb_array_to_lab(interior), border_lab)
    
    is_background = distances < TEXT_DELTA_E_THRESHOLD
    bg_cluster = interior[is_background]
    text_cluster = interior[~is_background]
    
    # Phase 3: representative colors
    if len(bg_cluster) > 0:
        bg_color = medoid_color(bg_cluster)
    else:
        bg_color = border_bg
    
    if len(text_cluster) >= MIN_TEXT_PIXELS:
        text_color = medoid_color(text_cluster)
    elif len(distances) > 0 and distances.max() > 0:
        # Too few text samples to trust a medoid; take the most distinct pixel
        text_color = as_color(interior[int(np.argmax(distances))])
        logger.debug(f"Only {len(text_cluster)} text samples, using farthest pixel {text_color}")
    else:
        text_color = contrasting_color(border_bg)
        logger.debug(f"No distinguishable text, using contrast fallback {text_color}")
    
    return ColorResult(text_color=rgb_to_hex(text_color), bg_color=rgb_to_hex(bg_color))

def contrasting_color(background: Color) -> Color:
    """Black on light backgrounds, white on dark ones."""
    return BLACK if luminance(background) > 128 else WHITE
