"""
Percentile Border Finder

Walks the histogram from both ends to find the black and white points of
the stretch. Each walk keeps its own running total and stops at the first
bin where that total exceeds clip_fraction * total_samples; that bin is the
bound. A walk that never exceeds the threshold ends on its last index
(255 going up, 0 going down) and is reported as exhausted.
"""

import logging
import math
from typing import NamedTuple

import numpy as np

from .errors import InvalidClipFractionError
from .numba_utils import N_LEVELS

logger = logging.getLogger(__name__)

UPWARD = range(N_LEVELS)
DOWNWARD = range(N_LEVELS - 1, -1, -1)


class ClipBounds(NamedTuple):
    """Lower and upper intensity bounds of the stretch."""

    lower: int
    upper: int
    threshold: float = 0.0
    lower_exhausted: bool = False
    upper_exhausted: bool = False

    @property
    def exhausted(self) -> bool:
        return self.lower_exhausted or self.upper_exhausted

    @property
    def width(self) -> int:
        return self.upper - self.lower


def validate_clip_fraction(clip_fraction: float) -> float:
    """Return the clip fraction as a float, rejecting negative and non-finite values."""
    try:
        value = float(clip_fraction)
    except (TypeError, ValueError) as e:
        raise InvalidClipFractionError(clip_fraction, "not a number") from e

    if not math.isfinite(value):
        raise InvalidClipFractionError(clip_fraction, "must be finite")
    if value < 0.0:
        raise InvalidClipFractionError(clip_fraction, "must not be negative")
    return value


def _scan(histogram: np.ndarray, indices: range, threshold: float) -> tuple[int, bool]:
    cumulative = 0
    for index in indices:
        cumulative += int(histogram[index])
        if cumulative > threshold:
            return index, False
    return indices[-1], True


def find_clip_bounds(
    histogram: np.ndarray, total: int | None = None, clip_fraction: float = 0.0
) -> ClipBounds:
    """
    Find the clip bounds of a 256-bin histogram.

    Args:
        histogram: Sample value counts, length 256
        total: Number of samples the threshold is relative to (default: histogram sum)
        clip_fraction: Fraction of samples allowed to be clipped at each end

    Returns:
        ClipBounds with the lower/upper bin indices and exhaustion flags
    """
    histogram = np.asarray(histogram)
    if histogram.shape != (N_LEVELS,):
        raise ValueError(f"Histogram must have {N_LEVELS} bins, got shape {histogram.shape}")

    clip_fraction = validate_clip_fraction(clip_fraction)
    if total is None:
        total = int(histogram.sum())

    threshold = clip_fraction * total

    lower, lower_exhausted = _scan(histogram, UPWARD, threshold)
    upper, upper_exhausted = _scan(histogram, DOWNWARD, threshold)

    bounds = ClipBounds(lower, upper, threshold, lower_exhausted, upper_exhausted)
    if bounds.exhausted:
        logger.warning(
            f"Clip fraction {clip_fraction} (threshold {threshold:g} of {total} samples) "
            f"exhausted the border scan; bounds fell back to {lower}, {upper}"
        )
    else:
        logger.debug(f"min, max = {lower} {upper} (threshold {threshold:g})")
    return bounds
