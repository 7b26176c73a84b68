"""Page-level background color estimation.

A single average over the card is pulled toward stray text pixels and
highlights, while a single medoid is one real but noisy pixel. This module
combines the two: the medoid of a sparse grid locates the background cluster,
and the mean of the grid samples close to it gives a smooth fill color.
"""

import math
from typing import Iterable, List, Optional

import numpy as np

from .color_space import rgb_to_lab, rgb_array_to_lab, batch_delta_e
from .medoid import medoid_color
from .utils import ImageArray, BoxLike, WHITE, setup_logger, rgb_to_hex, box_corners

logger = setup_logger(__name__)

# Fraction of width/height skipped on each side (scanner and camera borders)
EDGE_MARGIN_RATIO = 0.05
# Samples per axis
GRID_SIZE = 25
# Samples farther than this from the medoid are outliers
OUTLIER_DELTA_E_THRESHOLD = 15.0

def _inside_any(x: int, y: int, boxes: List[BoxLike]) -> bool:
    for box in boxes:
        x0, y0, x1, y1 = box_corners(box)
        if x0 <= x <= x1 and y0 <= y <= y1:
            return True
    return False

def sample_background_grid(image: ImageArray, exclude: Optional[Iterable[BoxLike]] = None) -> np.ndarray:
    """Sample a regular grid over the inner area of the image.
    
    Args:
        image: RGB(A) image array
        exclude: Boxes whose (inclusive) area must not be sampled
        
    Returns:
        N×3 array of RGB samples, possibly empty
    """
    img_h, img_w = image.shape[:2]
    boxes = list(exclude or [])
    
    margin_x = int(math.floor(img_w * EDGE_MARGIN_RATIO))
    margin_y = int(math.floor(img_h * EDGE_MARGIN_RATIO))
    inner_w = img_w - margin_x * 2
    inner_h = img_h - margin_y * 2
    
    samples = []
    for gy in range(GRID_SIZE):
        for gx in range(GRID_SIZE):
            x = margin_x + int(math.floor((gx + 0.5) / GRID_SIZE * inner_w))
            y = margin_y + int(math.floor((gy + 0.5) / GRID_SIZE * inner_h))
            
            if x < 0 or x >= img_w or y < 0 or y >= img_h:
                continue
            if _inside_any(x, y, boxes):
                continue
            
            samples.append(image[y, x, :3])
    
    if not samples:
        return np.empty((0, 3), dtype=np.uint8)
    return np.array(samples)

def estimate_card_background(image: ImageArray, exclude: Optional[Iterable[BoxLike]] = None) -> str:
    """Estimate one background color for the whole image.
    
    Args:
        image: RGB(A) image array
        exclude: Text boxes to keep out of the sample
        
    Returns:
        Background color as ``#rrggbb``; white when nothing could be sampled
    """
    samples = sample_background_grid(image, exclude)
    if len(samples) == 0:
        logger.debug("No background samples outside text regions, using white")
        return rgb_to_hex(WHITE)
    
    # Pass 1: the background cluster center
    center = medoid_color(samples)
    
    # Pass 2: mean of the samples near that center
    distances = batch_delta_e(rgb_array_to_lab(samples), rgb_to_lab(center))
    inliers = samples[distances < OUTLIER_DELTA_E_THRESHOLD]
    if len(inliers) == 0:
        return rgb_to_hex(center)
    
    logger.debug(f"Background: {len(inliers)}/{len(samples)} samples within ΔE "
                 f"{OUTLIER_DELTA_E_THRESHOLD} of medoid {center}")
    return rgb_to_hex(inliers.astype(np.float64).mean(axis=0))
