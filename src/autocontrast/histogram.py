"""
Histogram Builder

Counts the 256 sample values of a flat buffer with a partitioned reduction:
- The buffer is cut into T = min(workers, len) contiguous blocks of len // T samples
- Each block counts into its own private row (numba prange kernel)
- Rows are summed sequentially, so the result does not depend on scheduling
- The len % T tail samples are counted afterwards in one pass
"""

import logging

import numpy as np

from .buffer import as_sample_array
from .numba_utils import N_LEVELS, limited_threads, partition_counts

logger = logging.getLogger(__name__)


def build_histogram(samples, workers: int = 1) -> np.ndarray:
    """
    Compute the frequency of every sample value.

    Args:
        samples: uint8 buffer, any shape (treated as flat)
        workers: Number of partitions counted in parallel (>= 1)

    Returns:
        numpy.ndarray: int64 array of 256 counts summing to the sample count

    Raises:
        ValueError: If workers < 1 or samples are not uint8
    """
    if workers < 1:
        raise ValueError(f"workers must be >= 1, got {workers}")

    flat = as_sample_array(samples)
    # More partitions than samples would only add empty rows
    partitions = max(1, min(int(workers), flat.size))
    block = flat.size // partitions

    with limited_threads(partitions):
        partials = partition_counts(flat, partitions)

    histogram = partials.sum(axis=0)

    tail = flat[block * partitions :]
    if tail.size:
        histogram += np.bincount(tail, minlength=N_LEVELS)

    logger.debug(
        f"Histogram of {flat.size} samples: {partitions} partition(s) of {block}, tail {tail.size}"
    )
    return histogram
