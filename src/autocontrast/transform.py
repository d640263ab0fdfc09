"""
Auto contrast transform: histogram -> borders -> mapping table -> remap.

The four stages run strictly one after another; only the histogram and
remap stages are parallel inside themselves. Every error is raised before
the remap stage writes a single output sample.
"""

import logging
import time
from dataclasses import dataclass, field

import numpy as np

from .borders import ClipBounds, find_clip_bounds, validate_clip_fraction
from .buffer import as_sample_array
from .errors import DegenerateRangeError, EmptyBufferError, InvalidClipFractionError
from .histogram import build_histogram
from .mapping import build_mapping_table, identity_table
from .remap import apply_mapping, check_output

logger = logging.getLogger(__name__)

ON_DEGENERATE_RAISE = "raise"
ON_DEGENERATE_IDENTITY = "identity"
DEGENERATE_POLICIES = (ON_DEGENERATE_RAISE, ON_DEGENERATE_IDENTITY)


@dataclass
class StretchResult:
    """Output of one transform together with its intermediate structures."""

    output: np.ndarray
    histogram: np.ndarray
    bounds: ClipBounds
    table: np.ndarray
    workers: int
    timings: dict[str, float] = field(default_factory=dict)
    identity_fallback: bool = False

    @property
    def processing_ms(self) -> float:
        return sum(self.timings.values())


class _StageTimer:
    def __init__(self):
        self.timings: dict[str, float] = {}

    def run(self, name: str, func, *args, **kwargs):
        start_time = time.perf_counter()
        result = func(*args, **kwargs)
        elapsed = (time.perf_counter() - start_time) * 1000.0
        self.timings[name] = elapsed
        logger.debug(f"{name.capitalize()} in {elapsed:.3f}ms")
        return result


def _resolve_table(bounds: ClipBounds, clip_fraction: float, on_degenerate: str) -> tuple[np.ndarray, bool]:
    try:
        if bounds.exhausted:
            raise InvalidClipFractionError(
                clip_fraction,
                f"no bin exceeds the threshold of {bounds.threshold:g} samples",
            )
        return build_mapping_table(bounds), False
    except (DegenerateRangeError, InvalidClipFractionError) as e:
        if on_degenerate == ON_DEGENERATE_RAISE:
            raise
        logger.warning(f"{e}; leaving samples unchanged")
        return identity_table(), True


def stretch(
    buffer,
    sample_count: int | None = None,
    clip_fraction: float = 0.0,
    workers: int = 1,
    *,
    out: np.ndarray | None = None,
    on_degenerate: str = ON_DEGENERATE_RAISE,
) -> StretchResult:
    """
    Run the auto contrast transform and keep the intermediate results.

    Args:
        buffer: uint8 samples (numpy array of any shape, or bytes-like)
        sample_count: Expected number of samples; must match the buffer if given
        clip_fraction: Fraction of samples allowed to clip at each end (>= 0)
        workers: Parallel partitions for the histogram and remap stages (>= 1)
        out: Contiguous uint8 array for the result; pass the buffer itself to
            stretch in place (default: new array)
        on_degenerate: "raise" to fail on a zero-width or exhausted range,
            "identity" to log a warning and leave samples unchanged

    Returns:
        StretchResult

    Raises:
        EmptyBufferError: If the buffer has no samples
        InvalidClipFractionError: For a negative clip fraction, or one that
            exhausts the border scan under the "raise" policy
        DegenerateRangeError: If the bounds coincide under the "raise" policy
        ValueError: For malformed buffers, worker counts or policies
    """
    if on_degenerate not in DEGENERATE_POLICIES:
        raise ValueError(f"on_degenerate must be one of {DEGENERATE_POLICIES}, got {on_degenerate!r}")
    if workers < 1:
        raise ValueError(f"workers must be >= 1, got {workers}")

    samples = as_sample_array(buffer)
    if sample_count is not None and sample_count != samples.size:
        raise ValueError(f"sample_count {sample_count} does not match buffer of {samples.size} samples")
    if samples.size == 0:
        raise EmptyBufferError()

    clip_fraction = validate_clip_fraction(clip_fraction)
    if out is not None:
        check_output(out, samples)

    workers = int(workers)
    logger.debug(f"Processing {samples.size} samples with {workers} worker(s), clip {clip_fraction}")

    timer = _StageTimer()
    histogram = timer.run("histogram", build_histogram, samples, workers)
    bounds = timer.run("borders", find_clip_bounds, histogram, samples.size, clip_fraction)
    table, fallback = timer.run("mapping", _resolve_table, bounds, clip_fraction, on_degenerate)
    output = timer.run("remap", apply_mapping, samples, table, workers, out)

    return StretchResult(
        output=output,
        histogram=histogram,
        bounds=bounds,
        table=table,
        workers=workers,
        timings=timer.timings,
        identity_fallback=fallback,
    )


def transform(
    buffer,
    sample_count: int | None = None,
    clip_fraction: float = 0.0,
    workers: int = 1,
    *,
    out: np.ndarray | None = None,
    on_degenerate: str = ON_DEGENERATE_RAISE,
) -> np.ndarray:
    """
    Stretch the contrast of a uint8 sample buffer.

    Same arguments as stretch(); returns only the transformed samples.
    """
    return stretch(
        buffer,
        sample_count,
        clip_fraction,
        workers,
        out=out,
        on_degenerate=on_degenerate,
    ).output
