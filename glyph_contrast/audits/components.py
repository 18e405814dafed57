"""Flood fill of 4-connected text pixels into blobs."""
from __future__ import annotations

from collections import deque
from dataclasses import dataclass

import numpy as np


@dataclass(frozen=True)
class BlobBounds:
    """Horizontal extent of one blob plus the number of pixels it covers."""

    min_x: int
    max_x: int
    pixel_count: int

    @property
    def width(self) -> int:
        return self.max_x - self.min_x + 1


class ComponentExtractor:
    """Breadth-first extraction of text blobs over a shared visited mask.

    ``visited``, ``min_y`` and ``max_y`` belong to the analysis run and are
    reused for every blob: the extents are reset to ``min_y = height`` and
    ``max_y = -1`` when a new blob starts, the visited mask is never reset.
    """

    def __init__(self, text_pixels: np.ndarray) -> None:
        self.text = text_pixels
        self.height, self.width = text_pixels.shape
        self.visited = np.zeros((self.height, self.width), dtype=bool)
        self.min_y = np.empty(self.width, dtype=np.intp)
        self.max_y = np.empty(self.width, dtype=np.intp)

    def is_unvisited_text(self, x: int, y: int) -> bool:
        return bool(self.text[y, x]) and not self.visited[y, x]

    def extract(self, x0: int, y0: int) -> BlobBounds:
        """Visit every text pixel reachable from ``(x0, y0)``.

        Fills ``min_y``/``max_y`` for each column the blob touches and returns
        the blob's horizontal bounds.
        """
        text = self.text
        visited = self.visited
        min_y = self.min_y
        max_y = self.max_y
        last_x = self.width - 1
        last_y = self.height - 1

        min_y.fill(self.height)
        max_y.fill(-1)
        min_x = max_x = x0
        pixel_count = 0

        todo = deque([(x0, y0)])
        while todo:
            x, y = todo.popleft()
            # A pixel can be queued by several neighbours before it is reached.
            if visited[y, x]:
                continue
            visited[y, x] = True
            pixel_count += 1
            if y < min_y[x]:
                min_y[x] = y
            if y > max_y[x]:
                max_y[x] = y
            if x < min_x:
                min_x = x
            elif x > max_x:
                max_x = x

            if y > 0 and text[y - 1, x] and not visited[y - 1, x]:
                todo.append((x, y - 1))
            if x < last_x and text[y, x + 1] and not visited[y, x + 1]:
                todo.append((x + 1, y))
            if y < last_y and text[y + 1, x] and not visited[y + 1, x]:
                todo.append((x, y + 1))
            if x > 0 and text[y, x - 1] and not visited[y, x - 1]:
                todo.append((x - 1, y))

        return BlobBounds(min_x=min_x, max_x=max_x, pixel_count=pixel_count)
