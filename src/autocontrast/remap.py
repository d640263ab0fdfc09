"""
Pixel Remapper

Applies a 256-entry lookup table to every sample. There is no combine
step, so the buffer is simply split into `workers` contiguous chunks.
"""

import numpy as np

from .buffer import as_sample_array
from .numba_utils import N_LEVELS, limited_threads, remap_partitions


def apply_mapping(samples, table: np.ndarray, workers: int = 1, out: np.ndarray | None = None) -> np.ndarray:
    """
    Map every sample through the lookup table.

    Args:
        samples: uint8 buffer, any shape (treated as flat)
        table: uint8 lookup table of 256 entries
        workers: Number of chunks processed in parallel (>= 1)
        out: Contiguous uint8 array receiving the result; may be the samples
            themselves for in-place operation (default: new array)

    Returns:
        numpy.ndarray: The output array
    """
    if workers < 1:
        raise ValueError(f"workers must be >= 1, got {workers}")

    table = np.asarray(table)
    if table.shape != (N_LEVELS,) or table.dtype != np.uint8:
        raise ValueError(f"Mapping table must be {N_LEVELS} uint8 entries")

    flat = as_sample_array(samples)
    if out is None:
        out = np.empty_like(flat)
    target = check_output(out, flat)

    with limited_threads(workers):
        remap_partitions(flat, table, target, max(1, min(int(workers), flat.size)))

    return out


def check_output(out: np.ndarray, samples: np.ndarray) -> np.ndarray:
    """
    Validate an output array for the given flat samples and return it flat.

    The output may be the samples themselves but must not overlap them at an
    offset, since chunks would then read samples another chunk already wrote.
    """
    if not isinstance(out, np.ndarray) or out.dtype != np.uint8:
        raise ValueError("Output buffer must be a uint8 numpy array")
    if not out.flags.c_contiguous:
        raise ValueError("Output buffer must be contiguous")
    if not out.flags.writeable:
        raise ValueError("Output buffer is read-only")
    if out.size != samples.size:
        raise ValueError(f"Output buffer holds {out.size} samples, expected {samples.size}")

    target = out.reshape(-1)
    if np.shares_memory(target, samples) and _address(target) != _address(samples):
        raise ValueError("Output buffer partially overlaps the samples")
    return target


def _address(array: np.ndarray) -> int:
    return array.__array_interface__["data"][0]
