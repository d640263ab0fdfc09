"""
Settings for the auto contrast transform.

Settings are an explicit object handed to each call; nothing here is
process-wide state. They can be built in code or loaded from a JSON file
whose keys are the field names below.
"""

import json
import logging
from dataclasses import asdict, dataclass, fields, replace
from pathlib import Path

import psutil

from .borders import validate_clip_fraction
from .transform import DEGENERATE_POLICIES, ON_DEGENERATE_RAISE

logger = logging.getLogger(__name__)


def default_workers() -> int:
    """Number of logical CPUs, or 1 when it cannot be determined."""
    return psutil.cpu_count(logical=True) or 1


@dataclass(frozen=True)
class StretchSettings:
    """
    Parameters of one auto contrast run.

    Attributes:
        clip_fraction: Fraction of samples allowed to clip at each end (>= 0)
        workers: Parallel partitions; None means one per logical CPU
        on_degenerate: "raise" or "identity", see transform.stretch
    """

    clip_fraction: float = 0.0
    workers: int | None = None
    on_degenerate: str = ON_DEGENERATE_RAISE

    def __post_init__(self):
        self.validate()

    def validate(self) -> None:
        validate_clip_fraction(self.clip_fraction)

        if self.workers is not None:
            if isinstance(self.workers, bool) or not isinstance(self.workers, int):
                raise ValueError(f"workers must be an integer, got {self.workers!r}")
            if self.workers < 1:
                raise ValueError(f"workers must be >= 1, got {self.workers}")

        if self.on_degenerate not in DEGENERATE_POLICIES:
            raise ValueError(
                f"on_degenerate must be one of {DEGENERATE_POLICIES}, got {self.on_degenerate!r}"
            )

    @property
    def resolved_workers(self) -> int:
        return self.workers if self.workers is not None else default_workers()

    def with_overrides(self, **overrides) -> "StretchSettings":
        """Return a copy with the non-None overrides applied."""
        return replace(self, **{k: v for k, v in overrides.items() if v is not None})

    def to_dict(self) -> dict:
        return asdict(self)

    @classmethod
    def from_dict(cls, data: dict) -> "StretchSettings":
        known = {f.name for f in fields(cls)}
        unknown = set(data) - known
        if unknown:
            raise ValueError(f"Unknown settings: {sorted(unknown)}")
        return cls(**data)


def load_settings(path) -> StretchSettings:
    """
    Load settings from a JSON file.

    Raises:
        FileNotFoundError: If the file does not exist
        ValueError: If the file is not a JSON object of known settings
    """
    path = Path(path)
    if not path.exists():
        raise FileNotFoundError(f"Settings file not found: {path}")

    try:
        with path.open("r", encoding="utf-8") as f:
            data = json.load(f)
    except json.JSONDecodeError as e:
        raise ValueError(f"Settings file {path} is not valid JSON: {e}") from e

    if not isinstance(data, dict):
        raise ValueError(f"Settings file {path} must contain a JSON object")

    settings = StretchSettings.from_dict(data)
    logger.info(f"Loaded settings from {path}: {settings.to_dict()}")
    return settings
