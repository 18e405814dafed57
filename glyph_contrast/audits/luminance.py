"""WCAG 2.0 relative luminance and contrast ratio.

See http://www.w3.org/TR/WCAG20-TECHS/G17.html#G17-procedure for the formulas.
"""
from __future__ import annotations

from typing import Sequence, Union

import numpy as np

RGB = Union[int, Sequence[int], np.ndarray]

_COEFFICIENTS = np.array([0.2126, 0.7152, 0.0722], dtype=np.float64)
_LINEAR_THRESHOLD = 0.03928


def _channels(rgb: RGB) -> np.ndarray:
    """Accepts an ``(r, g, b)`` triple or a packed ``0xRRGGBB`` integer."""
    if isinstance(rgb, (int, np.integer)):
        value = int(rgb)
        return np.array([(value >> 16) & 0xFF, (value >> 8) & 0xFF, value & 0xFF], dtype=np.float64)
    channels = np.asarray(rgb, dtype=np.float64)
    if channels.shape != (3,):
        raise ValueError(f"Expected an RGB triple, got shape {channels.shape}")
    return channels


def _linearize(normalized: np.ndarray) -> np.ndarray:
    return np.where(
        normalized <= _LINEAR_THRESHOLD,
        normalized / 12.92,
        ((normalized + 0.055) / 1.055) ** 2.4,
    )


def relative_luminance(rgb: RGB) -> float:
    linear = _linearize(_channels(rgb) / 255.0)
    return float(linear @ _COEFFICIENTS)


def luminance_map(image: np.ndarray) -> np.ndarray:
    """Relative luminance of every pixel of an ``(H, W, 3)`` RGB image."""
    linear = _linearize(image.astype(np.float64) / 255.0)
    return linear @ _COEFFICIENTS


def contrast_from_luminance(l1: float, l2: float) -> float:
    if l1 >= l2:
        return (l1 + 0.05) / (l2 + 0.05)
    return (l2 + 0.05) / (l1 + 0.05)


def contrast_ratio(rgb_a: RGB, rgb_b: RGB) -> float:
    """Contrast ratio between two colors, from 1.0 (identical) to 21.0."""
    return contrast_from_luminance(relative_luminance(rgb_a), relative_luminance(rgb_b))
