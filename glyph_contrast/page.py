"""Validated screenshot and text-pixel grids for one web page."""
from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path
from typing import Optional

import numpy as np

from .errors import ContractViolation


@dataclass(frozen=True)
class PageSnapshot:
    """A rendered page: RGB pixels plus the mask of pixels belonging to text.

    Both arrays are indexed ``[y, x]``. Use :meth:`from_arrays` to build one;
    it checks the grid contract once so the analysis never has to.
    """

    screenshot: np.ndarray
    text_pixels: np.ndarray
    path: Optional[Path] = None

    @property
    def width(self) -> int:
        return int(self.screenshot.shape[1])

    @property
    def height(self) -> int:
        return int(self.screenshot.shape[0])

    @classmethod
    def from_arrays(
        cls,
        screenshot: np.ndarray,
        text_pixels: np.ndarray,
        *,
        path: Optional[str | Path] = None,
    ) -> "PageSnapshot":
        if screenshot is None or text_pixels is None:
            raise ContractViolation("Both a screenshot and a text-pixel mask are required")

        screenshot = np.asarray(screenshot)
        text_pixels = np.asarray(text_pixels)

        if screenshot.ndim != 3 or screenshot.shape[2] != 3:
            raise ContractViolation(
                f"Screenshot must have shape (height, width, 3), got {screenshot.shape}"
            )
        if text_pixels.ndim != 2:
            raise ContractViolation(
                f"Text-pixel mask must have shape (height, width), got {text_pixels.shape}"
            )
        height, width = screenshot.shape[:2]
        if height == 0 or width == 0:
            raise ContractViolation(f"Screenshot has zero area ({width}x{height})")
        if text_pixels.shape != (height, width):
            mask_height, mask_width = text_pixels.shape
            raise ContractViolation(
                f"Text-pixel mask is {mask_width}x{mask_height} "
                f"but the screenshot is {width}x{height}"
            )
        if screenshot.dtype != np.uint8:
            if np.issubdtype(screenshot.dtype, np.integer) and screenshot.min() >= 0 and screenshot.max() <= 255:
                screenshot = screenshot.astype(np.uint8)
            else:
                raise ContractViolation(
                    f"Screenshot must hold 8-bit channels, got dtype {screenshot.dtype}"
                )

        screenshot = screenshot.copy()
        text_pixels = text_pixels.astype(bool)
        screenshot.setflags(write=False)
        text_pixels.setflags(write=False)
        return cls(
            screenshot=screenshot,
            text_pixels=text_pixels,
            path=Path(path) if path is not None else None,
        )
