"""
Numba-optimized kernels for the per-sample passes over a pixel buffer.
"""
from contextlib import contextmanager

import numba
import numpy as np
from numba import njit, prange

N_LEVELS = 256


@contextmanager
def limited_threads(workers: int):
    """
    Cap numba's thread pool for the calling thread while the block runs.

    numba.set_num_threads is thread-local, so concurrent callers with
    different worker counts do not interfere with each other.
    """
    previous = numba.get_num_threads()
    numba.set_num_threads(max(1, min(int(workers), numba.config.NUMBA_NUM_THREADS)))
    try:
        yield
    finally:
        numba.set_num_threads(previous)


@njit(parallel=True, cache=True)
def partition_counts(samples, partitions):
    """
    Count sample values per partition.

    Partition p covers samples[p * block:(p + 1) * block] with
    block = len(samples) // partitions and writes only row p of the result,
    so no two iterations touch the same counter. The tail that does not fill
    a whole block is left to the caller.
    """
    block = samples.shape[0] // partitions
    counts = np.zeros((partitions, N_LEVELS), dtype=np.int64)

    for p in prange(partitions):
        start = p * block
        for i in range(start, start + block):
            counts[p, samples[i]] += 1

    return counts


@njit(parallel=True, cache=True)
def remap_partitions(samples, table, out, partitions):
    """
    Write table[samples[i]] into out[i] over contiguous partitions.

    out may be samples itself; every index is read and written by the same
    partition.
    """
    n = samples.shape[0]
    block = (n + partitions - 1) // partitions

    for p in prange(partitions):
        start = p * block
        stop = min(start + block, n)
        for i in range(start, stop):
            out[i] = table[samples[i]]
