"""Tunable settings for the low-contrast text analysis."""
from __future__ import annotations

import os
from dataclasses import dataclass, replace
from typing import Callable, Optional, TypeVar

from .errors import ConfigurationError

ENV_MIN_READABLE_CONTRAST = "GLYPH_CONTRAST_MIN_READABLE_CONTRAST"
ENV_MIN_BLOB_WIDTH = "GLYPH_CONTRAST_MIN_BLOB_WIDTH"
ENV_RUN_THRESHOLD = "GLYPH_CONTRAST_RUN_THRESHOLD"

T = TypeVar("T")


@dataclass(frozen=True)
class AnalysisConfig:
    """Thresholds used by the column classifier and the run aggregator.

    ``min_readable_contrast`` is the WCAG ratio a text/background boundary must
    reach to count as readable; higher values are stricter. Blobs narrower than
    ``min_blob_width`` columns are ignored, and ``run_threshold`` caps the number
    of consecutive low-contrast columns required before a blob is reported.
    """

    min_readable_contrast: float = 1.5
    min_blob_width: int = 4
    run_threshold: int = 10

    def __post_init__(self) -> None:
        if not self.min_readable_contrast >= 1.0:
            raise ConfigurationError(
                f"min_readable_contrast must be >= 1.0, got {self.min_readable_contrast!r}"
            )
        if self.min_blob_width < 1:
            raise ConfigurationError(f"min_blob_width must be >= 1, got {self.min_blob_width!r}")
        if self.run_threshold < 1:
            raise ConfigurationError(f"run_threshold must be >= 1, got {self.run_threshold!r}")

    @classmethod
    def from_env(cls, **overrides: object) -> "AnalysisConfig":
        """Build a config from ``GLYPH_CONTRAST_*`` variables, then apply overrides.

        Overrides whose value is ``None`` are ignored so CLI flags can be passed
        through unconditionally.
        """

        config = cls(
            min_readable_contrast=_read_env(ENV_MIN_READABLE_CONTRAST, float, cls.min_readable_contrast),
            min_blob_width=_read_env(ENV_MIN_BLOB_WIDTH, int, cls.min_blob_width),
            run_threshold=_read_env(ENV_RUN_THRESHOLD, int, cls.run_threshold),
        )
        explicit = {key: value for key, value in overrides.items() if value is not None}
        return replace(config, **explicit) if explicit else config

    def to_dict(self) -> dict:
        return {
            "min_readable_contrast": self.min_readable_contrast,
            "min_blob_width": self.min_blob_width,
            "run_threshold": self.run_threshold,
        }


def _read_env(name: str, parse: Callable[[str], T], default: T) -> T:
    raw: Optional[str] = os.getenv(name)
    if raw is None or not raw.strip():
        return default
    try:
        return parse(raw.strip())
    except ValueError as exc:
        raise ConfigurationError(f"{name} has an invalid value: {raw!r}") from exc
