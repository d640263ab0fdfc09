#!/usr/bin/env python3
"""
Auto Contrast Processor

Runs the global histogram stretch on a decoded PixelBuffer:
- Counts every sample of every channel into one shared 256-bin histogram
- Finds black/white points, ignoring clip_fraction of the samples at each end
- Applies the same linear stretch table to all channels

Grayscale and RGB buffers go through the same code path; the layout of the
buffer does not matter because the histogram and table are global.
"""

import logging
from dataclasses import dataclass, field
from typing import Any

import numpy as np

from .buffer import PixelBuffer
from .settings import StretchSettings
from .transform import StretchResult, stretch

logger = logging.getLogger(__name__)


@dataclass
class ProcessingResult:
    """Result object for one processed image."""

    image: PixelBuffer
    stretch: StretchResult
    parameters: dict[str, Any]
    statistics: dict[str, Any] = field(default_factory=dict)

    def __repr__(self):
        return (
            f"ProcessingResult({self.image.width}x{self.image.height}x{self.image.channels}, "
            f"bounds=({self.stretch.bounds.lower}, {self.stretch.bounds.upper}))"
        )


class AutoContrastProcessor:
    """
    Global auto contrast for 8-bit pixel buffers.

    Holds the settings for a batch of images; each call to process() builds
    its histogram, bounds and table from scratch.
    """

    def __init__(self, settings: StretchSettings | None = None, **overrides):
        """
        Initialize Auto Contrast Processor.

        Args:
            settings: Base settings (default: StretchSettings())
            **overrides: Individual settings fields replacing the base values
        """
        base = settings or StretchSettings()
        self.settings = base.with_overrides(**overrides)

    def process(self, pixel_buffer: PixelBuffer, in_place: bool = False) -> ProcessingResult:
        """
        Apply auto contrast to a pixel buffer.

        Args:
            pixel_buffer: Decoded image samples
            in_place: Overwrite pixel_buffer.data instead of allocating

        Returns:
            ProcessingResult with the stretched buffer and run statistics
        """
        if not isinstance(pixel_buffer, PixelBuffer):
            raise ValueError("Input must be a PixelBuffer")

        workers = self.settings.resolved_workers
        logger.info(
            f"Processing auto contrast - {pixel_buffer.width}x{pixel_buffer.height}, "
            f"channels: {pixel_buffer.channels}, clip: {self.settings.clip_fraction}, "
            f"workers: {workers}"
        )

        result = stretch(
            pixel_buffer.data,
            pixel_buffer.sample_count,
            self.settings.clip_fraction,
            workers,
            out=pixel_buffer.data if in_place else None,
            on_degenerate=self.settings.on_degenerate,
        )

        output = pixel_buffer if in_place else pixel_buffer.with_data(result.output)
        statistics = {
            "before": self.get_contrast_statistics(result.histogram),
            "lower_bound": result.bounds.lower,
            "upper_bound": result.bounds.upper,
            "identity_fallback": result.identity_fallback,
            "processing_ms": result.processing_ms,
        }

        logger.info(
            f"Auto contrast completed - bounds ({result.bounds.lower}, {result.bounds.upper}) "
            f"in {result.processing_ms:.3f}ms"
        )
        return ProcessingResult(
            image=output,
            stretch=result,
            parameters=self.settings.to_dict(),
            statistics=statistics,
        )

    @staticmethod
    def get_contrast_statistics(histogram: np.ndarray) -> dict:
        """
        Summarize the contrast of an image from its histogram.

        Args:
            histogram: 256-bin sample counts

        Returns:
            Dictionary with contrast statistics
        """
        histogram = np.asarray(histogram, dtype=np.float64)
        total = histogram.sum()
        if total == 0:
            return {
                "standard_deviation": 0.0,
                "dynamic_range": 0.0,
                "min_value": 0.0,
                "max_value": 0.0,
                "needs_enhancement": False,
            }

        levels = np.arange(histogram.size, dtype=np.float64)
        mean = float((levels * histogram).sum() / total)
        std_dev = float(np.sqrt(((levels - mean) ** 2 * histogram).sum() / total))

        occupied = np.flatnonzero(histogram)
        min_val, max_val = float(occupied[0]), float(occupied[-1])
        dynamic_range = max_val - min_val

        return {
            "standard_deviation": std_dev,
            "dynamic_range": dynamic_range,
            "min_value": min_val,
            "max_value": max_val,
            "needs_enhancement": std_dev < 30.0 or dynamic_range < 100.0,
        }
