"""Turns a mask of buggy pixels into rectangles that highlight them."""
from __future__ import annotations

from dataclasses import dataclass, field
from typing import List

import cv2
import numpy as np


@dataclass(frozen=True)
class Rect:
    x: int
    y: int
    width: int
    height: int

    def to_dict(self) -> dict:
        return {"x": self.x, "y": self.y, "width": self.width, "height": self.height}


@dataclass(frozen=True)
class BugRegion:
    """Rectangles surrounding each cluster of buggy pixels on the page."""

    rects: List[Rect] = field(default_factory=list)

    def __bool__(self) -> bool:
        return bool(self.rects)

    def to_dict(self) -> dict:
        return {"rects": [rect.to_dict() for rect in self.rects]}


def surround_buggy_pixels(buggy_pixels: np.ndarray, *, padding: int = 2) -> BugRegion:
    """Group nearby buggy pixels and return one padded rectangle per group.

    Pixels closer than ``padding`` to each other end up in the same group.
    Rectangles are clipped to the page and ordered top to bottom, then left to
    right.
    """
    if padding < 0:
        raise ValueError(f"padding must be >= 0, got {padding}")
    if not buggy_pixels.any():
        return BugRegion()

    height, width = buggy_pixels.shape
    mask = buggy_pixels.astype(np.uint8) * 255
    if padding:
        kernel = cv2.getStructuringElement(cv2.MORPH_RECT, (2 * padding + 1, 2 * padding + 1))
        mask = cv2.dilate(mask, kernel, iterations=1)

    count, _, stats, _ = cv2.connectedComponentsWithStats(mask, connectivity=8)
    rects = []
    # Label 0 is the background.
    for label in range(1, count):
        x, y, w, h = (int(value) for value in stats[label, :4])
        x1 = max(x, 0)
        y1 = max(y, 0)
        x2 = min(x + w, width)
        y2 = min(y + h, height)
        rects.append(Rect(x=x1, y=y1, width=x2 - x1, height=y2 - y1))
    rects.sort(key=lambda rect: (rect.y, rect.x))
    return BugRegion(rects=rects)
