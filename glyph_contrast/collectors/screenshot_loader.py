"""Utilities for loading screenshots and text masks from disk into numpy arrays."""
from __future__ import annotations

import base64
from dataclasses import dataclass
from pathlib import Path
from typing import Optional

import cv2
import numpy as np

from ..page import PageSnapshot


@dataclass(frozen=True)
class ScreenshotArtifacts:
    """Represents an image on disk and its RGB array representation."""

    path: Path
    image: np.ndarray


class ScreenshotLoader:
    """Loads screenshots from file paths or encoded payloads.

    OpenCV decodes to BGR; every image returned here is converted to RGB.
    """

    def load_from_path(self, path: str | Path) -> ScreenshotArtifacts:
        path = Path(path)
        image = cv2.imread(str(path), cv2.IMREAD_COLOR)
        if image is None:
            raise ValueError(f"Unable to read screenshot at {path}")
        return ScreenshotArtifacts(path=path, image=cv2.cvtColor(image, cv2.COLOR_BGR2RGB))

    def load_from_bytes(self, payload: bytes, *, output_path: Optional[Path] = None) -> ScreenshotArtifacts:
        array = np.frombuffer(payload, dtype=np.uint8)
        image = cv2.imdecode(array, cv2.IMREAD_COLOR)
        if image is None:
            raise ValueError("Invalid image byte payload")
        if output_path is None:
            output_path = Path("outputs/screenshot.png")
        output_path.parent.mkdir(parents=True, exist_ok=True)
        cv2.imwrite(str(output_path), image)
        return ScreenshotArtifacts(path=output_path, image=cv2.cvtColor(image, cv2.COLOR_BGR2RGB))

    def load_from_base64(self, data: str, *, output_path: Optional[Path] = None) -> ScreenshotArtifacts:
        raw = base64.b64decode(data)
        return self.load_from_bytes(raw, output_path=output_path)

    def load_mask_from_path(self, path: str | Path) -> np.ndarray:
        """Reads a text mask image; any non-zero pixel counts as text."""
        path = Path(path)
        mask = cv2.imread(str(path), cv2.IMREAD_GRAYSCALE)
        if mask is None:
            raise ValueError(f"Unable to read text mask at {path}")
        return mask > 0

    def load_page(self, screenshot_path: str | Path, mask_path: str | Path) -> PageSnapshot:
        screenshot = self.load_from_path(screenshot_path)
        text_pixels = self.load_mask_from_path(mask_path)
        return PageSnapshot.from_arrays(screenshot.image, text_pixels, path=screenshot.path)


def save_mask(mask: np.ndarray, path: Path) -> Path:
    """Writes a boolean mask as a black/white PNG readable by ``load_mask_from_path``."""
    path.parent.mkdir(parents=True, exist_ok=True)
    if not cv2.imwrite(str(path), mask.astype(np.uint8) * 255):
        raise ValueError(f"Unable to write mask to {path}")
    return path
