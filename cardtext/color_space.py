"""sRGB to CIELAB conversion and CIE76 color difference.

All distances in cardtext are measured in CIELAB (D65 reference white) so
that thresholds track perceived difference rather than raw channel values.
Both scalar helpers (single colors) and vectorized helpers (N×3 arrays of
pixels) are provided and share the same constants.
"""

from typing import Sequence, Tuple

import numpy as np

LabColor = Tuple[float, float, float]  # (L, a, b)

# sRGB -> XYZ matrix for the D65 illuminant
SRGB_TO_XYZ = np.array([
    [0.4124564, 0.3575761, 0.1804375],
    [0.2126729, 0.7151522, 0.0721750],
    [0.0193339, 0.1191920, 0.9503041],
])

# D65 reference white
WHITE_POINT = np.array([0.95047, 1.0, 1.08883])

_EPSILON = 0.008856
_KAPPA_SLOPE = 7.787
_OFFSET = 16.0 / 116.0

def linearize(channel: float) -> float:
    """Decode one 0-255 sRGB channel to linear light in 0..1."""
    s = channel / 255.0
    if s <= 0.04045:
        return s / 12.92
    return ((s + 0.055) / 1.055) ** 2.4

def _f(t: float) -> float:
    return t ** (1.0 / 3.0) if t > _EPSILON else _KAPPA_SLOPE * t + _OFFSET

def rgb_to_lab(color: Sequence[float]) -> LabColor:
    """Convert an RGB color to CIELAB.
    
    Args:
        color: (r, g, b) with channels in 0..255; extra channels are ignored
        
    Returns:
        (L, a, b) tuple
    """
    linear = [linearize(c) for c in color[:3]]
    x, y, z = (float(np.dot(SRGB_TO_XYZ[row], linear)) / WHITE_POINT[row] for row in range(3))
    fx, fy, fz = _f(x), _f(y), _f(z)
    return (116.0 * fy - 16.0, 500.0 * (fx - fy), 200.0 * (fy - fz))

def delta_e(lab1: Sequence[float], lab2: Sequence[float]) -> float:
    """CIE76 color difference: Euclidean distance in (L, a, b)."""
    dl = lab1[0] - lab2[0]
    da = lab1[1] - lab2[1]
    db = lab1[2] - lab2[2]
    return float(np.sqrt(dl * dl + da * da + db * db))

def rgb_array_to_lab(colors: np.ndarray) -> np.ndarray:
    """Vectorized :func:`rgb_to_lab` for an N×3 (or N×4) array of pixels.
    
    Args:
        colors: Array of RGB(A) values in 0..255
        
    Returns:
        N×3 float64 array of (L, a, b)
    """
    arr = np.asarray(colors, dtype=np.float64)
    if arr.size == 0:
        return np.empty((0, 3))
    rgb = arr.reshape(-1, arr.shape[-1])[:, :3] / 255.0
    linear = np.where(rgb <= 0.04045, rgb / 12.92, ((rgb + 0.055) / 1.055) ** 2.4)
    
    xyz = linear @ SRGB_TO_XYZ.T / WHITE_POINT
    f = np.where(xyz > _EPSILON, np.cbrt(xyz), _KAPPA_SLOPE * xyz + _OFFSET)
    
    lab = np.empty_like(f)
    lab[:, 0] = 116.0 * f[:, 1] - 16.0
    lab[:, 1] = 500.0 * (f[:, 0] - f[:, 1])
    lab[:, 2] = 200.0 * (f[:, 1] - f[:, 2])
    return lab

def batch_delta_e(lab_array: np.ndarray, target_lab: Sequence[float]) -> np.ndarray:
    """CIE76 distance from every row of an N×3 Lab array to one Lab color."""
    diff = np.asarray(lab_array, dtype=np.float64) - np.asarray(target_lab, dtype=np.float64)
    return np.linalg.norm(diff, axis=1)

def pairwise_delta_e(lab_array: np.ndarray) -> np.ndarray:
    """N×N matrix of CIE76 distances between all rows of a Lab array."""
    lab_array = np.asarray(lab_array, dtype=np.float64)
    diff = lab_array[:, None, :] - lab_array[None, :, :]
    return np.linalg.norm(diff, axis=2)
