"""Representative color selection by medoid.

The medoid is always a color that was actually observed, unlike a mean: a
dithered black/white pattern averages to gray, which is neither the text nor
the background color. Distances are CIE76 in Lab space.
"""

from typing import Sequence, Union

import numpy as np

from .color_space import rgb_array_to_lab, pairwise_delta_e
from .utils import Color, WHITE, as_color

# Pairwise cost is O(n^2), so larger inputs are subsampled
MAX_MEDOID_SAMPLES = 200

def subsample_evenly(colors: np.ndarray, max_samples: int = MAX_MEDOID_SAMPLES) -> np.ndarray:
    """Pick ``max_samples`` rows at an even stride, deterministically.
    
    Args:
        colors: N×C array of colors
        max_samples: Upper bound on the number of rows kept
        
    Returns:
        The input itself when it is small enough, else the strided subsample
    """
    n = len(colors)
    if n <= max_samples:
        return colors
    
    step = n / max_samples
    indices = [int(i * step) for i in range(max_samples)]
    return colors[indices]

def medoid_color(colors: Union[Sequence[Sequence[int]], np.ndarray]) -> Color:
    """Return the sample with the smallest total ΔE to all other samples.
    
    Args:
        colors: RGB colors as a sequence of tuples or an N×3 (N×4) array
        
    Returns:
        The medoid as an RGB tuple; white for an empty input. Ties go to
        the earliest sample.
    """
    samples = np.asarray(colors)
    if samples.size == 0:
        return WHITE
    samples = samples.reshape(-1, samples.shape[-1])
    if len(samples) == 1:
        return as_color(samples[0])
    
    samples = subsample_evenly(samples)
    
    distances = pairwise_delta_e(rgb_array_to_lab(samples))
    totals = distances.sum(axis=1)
    best_idx = int(np.argmin(totals))
    
    return as_color(samples[best_idx])
