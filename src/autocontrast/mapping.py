"""
Mapping Table Builder

Turns clip bounds into a 256-entry lookup table:

    table[i] = clamp(0, 255, round((i - lower) * 255 / (upper - lower)))

Rounding is half away from zero, the way C's round() behaves. Values are
clamped at 0 before rounding, where half away from zero is floor(x + 0.5).
"""

import numpy as np

from .errors import DegenerateRangeError
from .numba_utils import N_LEVELS

MAX_LEVEL = N_LEVELS - 1


def identity_table() -> np.ndarray:
    """Table that maps every sample to itself."""
    return np.arange(N_LEVELS, dtype=np.uint8)


def build_mapping_table(bounds) -> np.ndarray:
    """
    Build the linear stretch table for (lower, upper).

    Args:
        bounds: ClipBounds or any (lower, upper, ...) sequence

    Returns:
        numpy.ndarray: Non-decreasing uint8 table of 256 entries

    Raises:
        DegenerateRangeError: If upper <= lower
    """
    lower, upper = int(bounds[0]), int(bounds[1])
    if upper <= lower:
        raise DegenerateRangeError(lower, upper)

    levels = np.arange(N_LEVELS, dtype=np.float64)
    stretched = np.maximum(levels - lower, 0.0) * MAX_LEVEL / (upper - lower)
    rounded = np.floor(stretched + 0.5)

    return np.minimum(rounded, MAX_LEVEL).astype(np.uint8)
