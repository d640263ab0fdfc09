"""
Command line interface for the PNM auto contrast tool.

    autocontrast THREADS INPUT OUTPUT COEFF

Reads a binary P5/P6 image, stretches its contrast with COEFF of the
samples clipped at each end using THREADS workers, and writes the result.
"""

import argparse
import logging
import re
import sys
from pathlib import Path

from . import __version__
from .auto_contrast_processor import AutoContrastProcessor
from .io_utils import read_pnm, write_pnm
from .settings import StretchSettings, load_settings
from .transform import DEGENERATE_POLICIES

logger = logging.getLogger(__name__)

_INT_PREFIX = re.compile(r"\s*[+-]?\d+")
_FLOAT_PREFIX = re.compile(r"\s*[+-]?(\d+\.?\d*|\.\d+)([eE][+-]?\d+)?")


def _parse_number(text: str, pattern: re.Pattern, convert):
    match = pattern.match(text)
    if not match:
        raise argparse.ArgumentTypeError(f"Invalid number: {text}")
    if text[match.end() :]:
        raise argparse.ArgumentTypeError(f"Trailing characters after number: {text}")
    return convert(match.group(0))


def thread_count(text: str) -> int:
    value = _parse_number(text, _INT_PREFIX, int)
    if value < 1:
        raise argparse.ArgumentTypeError(f"Thread count must be at least 1: {text}")
    return value


def clip_coefficient(text: str) -> float:
    value = _parse_number(text, _FLOAT_PREFIX, float)
    if value < 0:
        raise argparse.ArgumentTypeError(f"Coefficient must not be negative: {text}")
    return value


def sweep_counts(max_threads: int) -> list[int]:
    """Powers of two from 1 up to max_threads, plus max_threads itself."""
    counts = []
    count = 1
    while count < max_threads:
        counts.append(count)
        count *= 2
    counts.append(max_threads)
    return counts


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="autocontrast",
        description="Global auto contrast for binary PNM (P5/P6) images",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  # Stretch with 4 threads, clipping 1% of the samples at each end
  autocontrast 4 input.pnm output.pnm 0.01

  # Plain min/max stretch with stage timings
  autocontrast 1 input.pnm output.pnm 0 --debug

  # Time 1, 2, 4 and 8 threads on the same image
  autocontrast 8 input.pnm output.pnm 0.01 --sweep 8
        """,
    )

    parser.add_argument("threads", type=thread_count, help="Number of worker threads (>= 1)")
    parser.add_argument("input", help="Input P5/P6 image")
    parser.add_argument("output", help="Output image path")
    parser.add_argument(
        "coeff",
        type=clip_coefficient,
        help="Fraction of samples to clip at each end (>= 0, e.g. 0.01)",
    )

    parser.add_argument(
        "--on-degenerate",
        choices=DEGENERATE_POLICIES,
        default=None,
        help="What to do when no stretch range exists (default: raise)",
    )
    parser.add_argument(
        "--sweep",
        type=thread_count,
        metavar="MAX_THREADS",
        help="Time the transform for 1, 2, 4 ... MAX_THREADS threads",
    )
    parser.add_argument("--config", help="JSON settings file supplying defaults")
    parser.add_argument("--debug", action="store_true", help="Log every stage with timings")
    parser.add_argument("--version", action="version", version=f"autocontrast {__version__}")

    return parser


def main(argv: list[str] | None = None) -> int:
    """Main CLI entry point."""
    parser = build_parser()
    args = parser.parse_args(argv)

    logging.basicConfig(
        level=logging.DEBUG if args.debug else logging.WARNING,
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
    )

    input_path = Path(args.input)
    output_path = Path(args.output)

    try:
        base = load_settings(args.config) if args.config else StretchSettings()
        settings = base.with_overrides(
            clip_fraction=args.coeff,
            workers=args.threads,
            on_degenerate=args.on_degenerate,
        )

        logger.debug(f'Handling "{input_path}"...')
        pixel_buffer = read_pnm(input_path)

        if args.sweep:
            for workers in sweep_counts(args.sweep):
                processor = AutoContrastProcessor(settings, workers=workers)
                result = processor.process(pixel_buffer.copy())
                print(f"Time ({workers} thread(s)): {result.stretch.processing_ms:g} ms")
        else:
            processor = AutoContrastProcessor(settings)
            result = processor.process(pixel_buffer, in_place=True)
            print(f"Time ({settings.workers} thread(s)): {result.stretch.processing_ms:g} ms")

        write_pnm(output_path, result.image)

    except (ValueError, OSError) as e:
        print(f"Error processing image: {e}", file=sys.stderr)
        if args.debug:
            import traceback

            traceback.print_exc()
        return 1

    return 0


if __name__ == "__main__":
    sys.exit(main())
