import logging
from dataclasses import dataclass
from pathlib import Path

import numpy as np
from PIL import Image, UnidentifiedImageError

from .buffer import PixelBuffer
from .errors import PnmFormatError

logger = logging.getLogger(__name__)

PNM_CHANNELS = {"P5": 1, "P6": 3}
PNM_MODES = {1: "L", 3: "RGB"}
MAXVAL = 255
WHITESPACE = b" \t\n\r\v\f"


@dataclass(frozen=True)
class PnmHeader:
    magic: str
    width: int
    height: int
    maxval: int
    offset: int  # bytes before the raster

    @property
    def channels(self) -> int:
        return PNM_CHANNELS[self.magic]

    @property
    def raster_size(self) -> int:
        return self.width * self.height * self.channels


def _read_token(fh) -> bytes:
    token = b""
    while True:
        char = fh.read(1)
        if not char:
            return token
        if char == b"#" and not token:
            # Comment runs to the end of the line
            while char and char not in b"\r\n":
                char = fh.read(1)
            continue
        if char in WHITESPACE:
            if token:
                return token
            continue
        token += char


def read_pnm_header(fh) -> PnmHeader:
    """
    Parse the header of a binary PNM stream.

    Leaves the stream positioned on the first raster byte.
    """
    magic = _read_token(fh).decode("ascii", errors="replace")
    if magic not in PNM_CHANNELS:
        raise PnmFormatError(f'PNM file not recognized: "P5" or "P6" not found (got {magic!r})')

    values = []
    for name in ("width", "height", "maxval"):
        token = _read_token(fh)
        try:
            values.append(int(token))
        except ValueError:
            raise PnmFormatError(f"PNM file not recognized: bad {name} {token!r}") from None

    width, height, maxval = values
    if width <= 0 or height <= 0:
        raise PnmFormatError(f"Invalid PNM dimensions {width}x{height}")
    if maxval != MAXVAL:
        raise PnmFormatError(f"Only 8-bit PNM files are supported (maxval {maxval})")

    return PnmHeader(magic, width, height, maxval, fh.tell())


def read_pnm(file_path) -> PixelBuffer:
    """
    Load a P5 (grayscale) or P6 (RGB) file into an interleaved PixelBuffer.

    Raises:
        FileNotFoundError: If the file does not exist
        PnmFormatError: If the header is not an 8-bit P5/P6 header or the
            raster is truncated
    """
    path = Path(file_path)
    if not path.exists():
        raise FileNotFoundError(f"Image not found: {file_path}")

    with path.open("rb") as fh:
        header = read_pnm_header(fh)

    available = path.stat().st_size - header.offset
    if available < header.raster_size:
        raise PnmFormatError(
            f"PNM raster truncated: {available} of {header.raster_size} bytes present in {path}"
        )

    logger.info(f"Image Size: {header.width}x{header.height} ({header.magic}, {header.raster_size} samples)")

    try:
        with Image.open(path) as img:
            if img.format != "PPM" or img.mode != PNM_MODES[header.channels]:
                raise PnmFormatError(f"Unexpected image {img.format}/{img.mode} in {path}")
            data = np.array(img, dtype=np.uint8)
    except (UnidentifiedImageError, OSError) as e:
        raise PnmFormatError(f"Could not decode {path}: {e}") from e

    return PixelBuffer.from_image(data)


def write_pnm(file_path, pixel_buffer: PixelBuffer) -> Path:
    """
    Save a PixelBuffer as P5 (one channel) or P6 (three channels), maxval 255.

    Returns:
        Path of the written file
    """
    if pixel_buffer.channels not in PNM_MODES:
        raise PnmFormatError(f"PNM needs 1 or 3 channels, got {pixel_buffer.channels}")

    path = Path(file_path)
    path.parent.mkdir(parents=True, exist_ok=True)

    Image.fromarray(pixel_buffer.as_image()).save(path, format="PPM")
    logger.info(f"Wrote {path} ({pixel_buffer.width}x{pixel_buffer.height})")
    return path
