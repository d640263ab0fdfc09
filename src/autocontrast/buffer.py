"""
Flat pixel buffers and the channel views laid over them.

A PixelBuffer owns one flat uint8 array. Channel planes are numpy views
into that array, never separate allocations, so stretching the flat buffer
in place is visible through every view.
"""

from dataclasses import dataclass
from enum import Enum

import numpy as np


class Layout(Enum):
    """Order of samples inside the flat buffer."""

    INTERLEAVED = "interleaved"  # RGBRGB..., pixel-major
    PLANAR = "planar"  # RR...GG...BB..., channel-major


def as_sample_array(data) -> np.ndarray:
    """
    View any uint8 sample container as a flat contiguous array.

    Contiguous arrays are reshaped without copying so in-place work reaches
    the caller's memory. bytes-like input is wrapped read-only.

    Raises:
        ValueError: If the data is not made of unsigned 8-bit samples
    """
    if isinstance(data, (bytes, bytearray, memoryview)):
        view = memoryview(data)
        if view.itemsize != 1:
            raise ValueError(f"Samples must be uint8, got buffer items of format {view.format!r}")
        return np.frombuffer(view, dtype=np.uint8)

    if not isinstance(data, np.ndarray):
        raise ValueError("Samples must be a numpy array or a bytes-like object")

    if data.dtype != np.uint8:
        raise ValueError(f"Samples must be uint8, got {data.dtype}")

    return np.ascontiguousarray(data).reshape(-1)


@dataclass(eq=False)
class PixelBuffer:
    """
    Decoded image samples with known geometry.

    Attributes:
        data: Flat uint8 array of width * height * channels samples
        width: Image width in pixels
        height: Image height in pixels
        channels: Samples per pixel (1 for grayscale, 3 for RGB)
        layout: Whether channels are interleaved or stored as planes
    """

    data: np.ndarray
    width: int
    height: int
    channels: int = 1
    layout: Layout = Layout.INTERLEAVED

    def __post_init__(self):
        if self.width < 0 or self.height < 0:
            raise ValueError("Image dimensions must be non-negative")
        if self.channels < 1:
            raise ValueError("Image must have at least one channel")

        self.data = as_sample_array(self.data)
        expected = self.width * self.height * self.channels
        if self.data.size != expected:
            raise ValueError(
                f"Buffer holds {self.data.size} samples, expected {expected} "
                f"for {self.width}x{self.height}x{self.channels}"
            )

    @classmethod
    def from_image(cls, image: np.ndarray) -> "PixelBuffer":
        """
        Wrap an (H, W) or (H, W, C) uint8 array as an interleaved buffer.

        The flat data is a view of the image when the image is contiguous.
        """
        if not isinstance(image, np.ndarray):
            raise ValueError("Input must be a numpy array")

        if image.ndim == 2:
            height, width = image.shape
            channels = 1
        elif image.ndim == 3:
            height, width, channels = image.shape
        else:
            raise ValueError("Image must be 2D grayscale or 3D color")

        return cls(as_sample_array(image), width, height, channels)

    @property
    def pixel_count(self) -> int:
        return self.width * self.height

    @property
    def sample_count(self) -> int:
        return self.data.size

    def channel(self, index: int) -> np.ndarray:
        """Return a non-owning 1-D view of one channel's samples."""
        if not 0 <= index < self.channels:
            raise IndexError(f"Channel {index} out of range for {self.channels} channels")

        if self.layout is Layout.PLANAR:
            start = index * self.pixel_count
            return self.data[start : start + self.pixel_count]
        return self.data[index :: self.channels]

    def channel_views(self) -> list[np.ndarray]:
        return [self.channel(index) for index in range(self.channels)]

    def to_planar(self) -> "PixelBuffer":
        """Return a new buffer holding the same samples in planar order."""
        if self.layout is Layout.PLANAR or self.channels == 1:
            return PixelBuffer(self.data.copy(), self.width, self.height, self.channels, Layout.PLANAR)

        planes = self.data.reshape(self.pixel_count, self.channels).T
        return PixelBuffer(
            np.ascontiguousarray(planes).reshape(-1),
            self.width,
            self.height,
            self.channels,
            Layout.PLANAR,
        )

    def to_interleaved(self) -> "PixelBuffer":
        """Return a new buffer holding the same samples in interleaved order."""
        if self.layout is Layout.INTERLEAVED or self.channels == 1:
            return PixelBuffer(self.data.copy(), self.width, self.height, self.channels)

        pixels = self.data.reshape(self.channels, self.pixel_count).T
        return PixelBuffer(
            np.ascontiguousarray(pixels).reshape(-1), self.width, self.height, self.channels
        )

    def as_image(self) -> np.ndarray:
        """
        Return the samples shaped (H, W) or (H, W, C).

        Interleaved buffers are returned as a view; planar buffers are
        converted first.
        """
        source = self if self.layout is Layout.INTERLEAVED else self.to_interleaved()
        if self.channels == 1:
            return source.data.reshape(self.height, self.width)
        return source.data.reshape(self.height, self.width, self.channels)

    def with_data(self, data: np.ndarray) -> "PixelBuffer":
        """Return a buffer with this geometry and layout over other samples."""
        return PixelBuffer(data, self.width, self.height, self.channels, self.layout)

    def copy(self) -> "PixelBuffer":
        return self.with_data(self.data.copy())
