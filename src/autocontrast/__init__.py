"""
autocontrast - Global histogram contrast stretch for 8-bit pixel buffers

Finds robust black/white points from the sample histogram, ignoring a clip
fraction of the samples at each end, and remaps every sample through a
linear lookup table. Histogram and remap passes run in parallel.
"""

__version__ = "0.1.0"

from .auto_contrast_processor import AutoContrastProcessor as AutoContrastProcessor
from .auto_contrast_processor import ProcessingResult as ProcessingResult
from .borders import ClipBounds as ClipBounds
from .borders import find_clip_bounds as find_clip_bounds
from .buffer import Layout as Layout
from .buffer import PixelBuffer as PixelBuffer
from .errors import AutoContrastError as AutoContrastError
from .errors import DegenerateRangeError as DegenerateRangeError
from .errors import EmptyBufferError as EmptyBufferError
from .errors import InvalidClipFractionError as InvalidClipFractionError
from .errors import PnmFormatError as PnmFormatError
from .histogram import build_histogram as build_histogram
from .io_utils import read_pnm as read_pnm
from .io_utils import write_pnm as write_pnm
from .mapping import build_mapping_table as build_mapping_table
from .mapping import identity_table as identity_table
from .remap import apply_mapping as apply_mapping
from .settings import StretchSettings as StretchSettings
from .settings import load_settings as load_settings
from .transform import StretchResult as StretchResult
from .transform import stretch as stretch
from .transform import transform as transform


def process_file(input_path, output_path, clip_fraction=0.0, workers=None, on_degenerate="raise"):
    """
    Read a P5/P6 image, stretch its contrast and write it back out.

    Args:
        input_path: Source image
        output_path: Destination image
        clip_fraction: Fraction of samples allowed to clip at each end
        workers: Parallel partitions (default: one per logical CPU)
        on_degenerate: "raise" or "identity"

    Returns:
        ProcessingResult
    """
    settings = StretchSettings(clip_fraction, workers, on_degenerate)
    result = AutoContrastProcessor(settings).process(read_pnm(input_path), in_place=True)
    write_pnm(output_path, result.image)
    return result


__all__ = [
    # Core transform
    "transform",
    "stretch",
    "StretchResult",
    # Stages
    "build_histogram",
    "find_clip_bounds",
    "ClipBounds",
    "build_mapping_table",
    "identity_table",
    "apply_mapping",
    # Buffers and processing
    "PixelBuffer",
    "Layout",
    "AutoContrastProcessor",
    "ProcessingResult",
    "StretchSettings",
    "load_settings",
    # I/O
    "read_pnm",
    "write_pnm",
    "process_file",
    # Errors
    "AutoContrastError",
    "DegenerateRangeError",
    "EmptyBufferError",
    "InvalidClipFractionError",
    "PnmFormatError",
]
