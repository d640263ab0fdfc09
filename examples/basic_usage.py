"""
Basic usage examples for autocontrast.

Demonstrates the transform on raw buffers, on decoded images, and the
effect of the clip fraction and worker count.
"""

import time

import numpy as np

from autocontrast import (
    AutoContrastProcessor,
    DegenerateRangeError,
    PixelBuffer,
    read_pnm,
    stretch,
    transform,
    write_pnm,
)


def create_test_image(height=480, width=640):
    """Create a synthetic low contrast RGB image with a few outlier pixels."""
    rng = np.random.default_rng(0)
    y, x = np.mgrid[0:height, 0:width]

    image = np.empty((height, width, 3), dtype=np.uint8)
    image[:, :, 0] = 90 + (x * 40 // width)
    image[:, :, 1] = 100 + (y * 30 // height)
    image[:, :, 2] = 110 + rng.integers(0, 10, (height, width))

    # Hot and dead pixels that a plain min/max stretch would latch onto
    image[0, :5] = 255
    image[-1, :5] = 0
    return image


def example_raw_buffer():
    """Stretch a flat sample buffer."""
    print("=== Raw Buffer ===")

    samples = np.array([10, 10, 10, 50, 50, 200, 200, 200, 200], dtype=np.uint8)
    print(f"Input:  {samples.tolist()}")
    print(f"Output: {transform(samples, clip_fraction=0.0, workers=2).tolist()}")


def example_clip_fraction():
    """Show how the clip fraction ignores outliers."""
    print("\n=== Clip Fraction ===")

    buffer = PixelBuffer.from_image(create_test_image())

    for clip_fraction in [0.0, 0.001, 0.01, 0.05]:
        result = stretch(buffer.data, clip_fraction=clip_fraction, workers=4)
        print(
            f"clip {clip_fraction:<6} -> bounds ({result.bounds.lower}, {result.bounds.upper}), "
            f"output range {result.output.min()}-{result.output.max()}"
        )


def example_worker_counts():
    """Time the transform for several worker counts; outputs are identical."""
    print("\n=== Worker Counts ===")

    buffer = PixelBuffer.from_image(create_test_image(2000, 3000))
    reference = None

    for workers in [1, 2, 4, 8]:
        start_time = time.perf_counter()
        output = transform(buffer.data, clip_fraction=0.01, workers=workers)
        elapsed = (time.perf_counter() - start_time) * 1000

        if reference is None:
            reference = output
        print(f"Time ({workers} thread(s)): {elapsed:.2f} ms, identical: {np.array_equal(output, reference)}")


def example_degenerate_image():
    """A flat image has nothing to stretch."""
    print("\n=== Degenerate Image ===")

    flat = PixelBuffer.from_image(np.full((10, 10), 128, dtype=np.uint8))

    try:
        AutoContrastProcessor(workers=2).process(flat)
    except DegenerateRangeError as e:
        print(f"Rejected: {e}")

    result = AutoContrastProcessor(workers=2, on_degenerate="identity").process(flat)
    print(f"Identity fallback: {result.statistics['identity_fallback']}")


def example_file_round_trip():
    """Write a PNM, stretch it, and write the result."""
    print("\n=== File Round Trip ===")

    write_pnm("example_input.pnm", PixelBuffer.from_image(create_test_image()))
    pixel_buffer = read_pnm("example_input.pnm")

    processor = AutoContrastProcessor(clip_fraction=0.01)
    result = processor.process(pixel_buffer)
    write_pnm("example_output.pnm", result.image)

    for key, value in result.statistics["before"].items():
        print(f"  {key}: {value}")
    print("Saved: example_output.pnm")


if __name__ == "__main__":
    example_raw_buffer()
    example_clip_fraction()
    example_worker_counts()
    example_degenerate_image()
    example_file_round_trip()
