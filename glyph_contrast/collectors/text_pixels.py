"""Derive the text-pixel mask by comparing two renderings of the same page."""
from __future__ import annotations

import numpy as np

from ..errors import ContractViolation


def text_pixels_from_renders(black_text: np.ndarray, white_text: np.ndarray) -> np.ndarray:
    """Pixels that change when all text switches from black to white are text.

    Both images must be renderings of the same page and viewport, once with every
    text color forced to black and once forced to white.
    """
    if black_text.shape != white_text.shape:
        raise ContractViolation(
            f"Renders differ in size: {black_text.shape} vs {white_text.shape}"
        )
    if black_text.ndim == 3:
        return np.any(black_text != white_text, axis=2)
    return black_text != white_text
