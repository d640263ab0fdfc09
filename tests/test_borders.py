import numpy as np
import pytest

from autocontrast.borders import ClipBounds, find_clip_bounds
from autocontrast.errors import InvalidClipFractionError
from autocontrast.histogram import build_histogram


def reference_bounds(samples: np.ndarray, clip_fraction: float) -> tuple[int, int]:
    """Plain sequential version of the border scan."""
    counts = [0] * 256
    for value in samples.tolist():
        counts[value] += 1
    threshold = clip_fraction * len(samples)

    lower, total = 255, 0
    for index in range(256):
        total += counts[index]
        if total > threshold:
            lower = index
            break

    upper, total = 0, 0
    for index in range(255, -1, -1):
        total += counts[index]
        if total > threshold:
            upper = index
            break

    return lower, upper


class TestFindClipBounds:
    def test_concrete_scenario(self):
        samples = np.array([10, 10, 10, 50, 50, 200, 200, 200, 200], dtype=np.uint8)
        histogram = build_histogram(samples)

        assert histogram[10] == 3
        assert histogram[50] == 2
        assert histogram[200] == 4

        bounds = find_clip_bounds(histogram, samples.size, 0.0)

        assert (bounds.lower, bounds.upper) == (10, 200)
        assert not bounds.exhausted

    def test_uniform_spread_without_clip(self):
        histogram = np.zeros(256, dtype=np.int64)
        histogram[12:240] = 5

        bounds = find_clip_bounds(histogram, clip_fraction=0.0)

        assert bounds.lower == 12
        assert bounds.upper == 239

    def test_full_range_without_clip(self):
        histogram = np.ones(256, dtype=np.int64)

        bounds = find_clip_bounds(histogram, 256, 0.0)

        assert (bounds.lower, bounds.upper) == (0, 255)

    @pytest.mark.parametrize("workers", [1, 2, 3, 8])
    def test_uniform_thousand_samples_with_one_percent_clip(self, workers):
        rng = np.random.default_rng(42)
        samples = rng.integers(0, 256, 1000, dtype=np.uint8)

        bounds = find_clip_bounds(build_histogram(samples, workers), samples.size, 0.01)

        assert bounds.threshold == pytest.approx(10.0)
        assert (bounds.lower, bounds.upper) == reference_bounds(samples, 0.01)

    def test_threshold_is_compared_as_real_number(self):
        histogram = np.ones(256, dtype=np.int64)

        # threshold 0.5: the first bin (cumulative 1) already exceeds it
        assert find_clip_bounds(histogram, 256, 0.5 / 256).lower == 0
        # threshold 1.5: cumulative 1 does not exceed it, cumulative 2 does
        bounds = find_clip_bounds(histogram, 256, 1.5 / 256)
        assert (bounds.lower, bounds.upper) == (1, 254)

    def test_triggering_bin_is_the_bound(self):
        histogram = np.zeros(256, dtype=np.int64)
        histogram[[5, 6, 7]] = [2, 2, 2]
        histogram[[250, 251]] = [2, 2]

        # 10 samples, threshold 2: bin 5 reaches exactly 2, bin 6 exceeds it
        bounds = find_clip_bounds(histogram, 10, 0.2)

        assert bounds.lower == 6
        assert bounds.upper == 250

    def test_single_value_bounds_coincide(self):
        histogram = np.zeros(256, dtype=np.int64)
        histogram[77] = 40

        for clip_fraction in (0.0, 0.1, 0.5, 0.99):
            bounds = find_clip_bounds(histogram, 40, clip_fraction)
            assert (bounds.lower, bounds.upper) == (77, 77)

    def test_exhausted_scans_use_terminal_values(self):
        histogram = np.zeros(256, dtype=np.int64)
        histogram[100:110] = 3

        bounds = find_clip_bounds(histogram, 30, 1.0)

        assert (bounds.lower, bounds.upper) == (255, 0)
        assert bounds.lower_exhausted
        assert bounds.upper_exhausted
        assert bounds.exhausted

    def test_total_defaults_to_histogram_sum(self):
        histogram = np.zeros(256, dtype=np.int64)
        histogram[0] = 1
        histogram[128] = 98
        histogram[255] = 1

        bounds = find_clip_bounds(histogram, clip_fraction=0.01)

        assert bounds.threshold == pytest.approx(1.0)
        assert (bounds.lower, bounds.upper) == (128, 128)

    def test_bounds_unpack_like_a_pair(self):
        bounds = ClipBounds(3, 200)
        lower, upper = bounds[:2]

        assert (lower, upper) == (3, 200)
        assert bounds.width == 197

    def test_invalid_clip_fraction(self):
        histogram = np.ones(256, dtype=np.int64)

        with pytest.raises(InvalidClipFractionError):
            find_clip_bounds(histogram, 256, -0.01)

        with pytest.raises(InvalidClipFractionError):
            find_clip_bounds(histogram, 256, float("nan"))

        with pytest.raises(InvalidClipFractionError):
            find_clip_bounds(histogram, 256, "lots")

    def test_wrong_histogram_size(self):
        with pytest.raises(ValueError):
            find_clip_bounds(np.ones(255, dtype=np.int64))
