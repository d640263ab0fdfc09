"""
Error types raised by the auto contrast transform and its PNM collaborator.

Every failure is a ``ValueError`` so callers that only guard against bad
input keep working; the subclasses let a batch driver decide whether to skip
an image or abort.
"""


class AutoContrastError(ValueError):
    """Base class for all auto contrast failures."""


class EmptyBufferError(AutoContrastError):
    """Raised when the transform is given zero samples."""

    def __init__(self, message: str = "Pixel buffer contains no samples"):
        super().__init__(message)


class DegenerateRangeError(AutoContrastError):
    """
    Raised when the clip bounds leave no range to stretch.

    Attributes:
        lower: Lower clip bound found by the border scan
        upper: Upper clip bound found by the border scan
    """

    def __init__(self, lower: int, upper: int):
        self.lower = lower
        self.upper = upper
        if upper == lower:
            detail = f"lower and upper bound are both {lower}"
        else:
            detail = f"upper bound {upper} is below lower bound {lower}"
        super().__init__(f"Cannot stretch a degenerate range: {detail}")


class InvalidClipFractionError(AutoContrastError):
    """Raised for a negative clip fraction, or one large enough to exhaust a border scan."""

    def __init__(self, clip_fraction: float, reason: str):
        self.clip_fraction = clip_fraction
        super().__init__(f"Invalid clip fraction {clip_fraction!r}: {reason}")


class PnmFormatError(AutoContrastError):
    """Raised when a file is not a readable 8-bit P5/P6 image."""
