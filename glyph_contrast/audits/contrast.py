"""Detection of text rendered with too low contrast against its background."""
from __future__ import annotations

from dataclasses import dataclass
from typing import Optional

import numpy as np
import structlog

from ..config import AnalysisConfig
from ..page import PageSnapshot
from .components import BlobBounds, ComponentExtractor
from .luminance import contrast_from_luminance, luminance_map

logger = structlog.get_logger(__name__)


@dataclass(frozen=True)
class ContrastAnalysis:
    """Result of one scan: the page-wide mask of low-contrast text pixels."""

    buggy_pixels: np.ndarray
    blob_count: int
    flagged_blob_count: int

    @property
    def found_buggy_pixels(self) -> bool:
        return bool(self.buggy_pixels.any())

    @property
    def buggy_pixel_count(self) -> int:
        return int(np.count_nonzero(self.buggy_pixels))

    def to_dict(self) -> dict:
        return {
            "blob_count": self.blob_count,
            "flagged_blob_count": self.flagged_blob_count,
            "buggy_pixel_count": self.buggy_pixel_count,
        }


class ContrastAnalyzer:
    """Runs one analysis over a page.

    Every text blob is flood filled once. Each of its columns is classified as
    readable or low-contrast, and blobs with a long enough stretch of
    low-contrast columns get their text pixels marked in ``buggy_pixels``.
    An analyzer instance owns its buffers and is meant to be run once.
    """

    def __init__(self, page: PageSnapshot, config: Optional[AnalysisConfig] = None) -> None:
        self.page = page
        self.config = config or AnalysisConfig()
        self.text = page.text_pixels
        self.height, self.width = self.text.shape
        self.luminance = luminance_map(page.screenshot)
        self.extractor = ComponentExtractor(self.text)
        self.buggy_pixels = np.zeros((self.height, self.width), dtype=bool)

    def run(self) -> ContrastAnalysis:
        blob_count = 0
        flagged_blob_count = 0
        # Only text pixels can start a blob, so visit them in the same
        # column-major order (outer x, inner y) as a full page scan would.
        xs, ys = np.nonzero(self.text.T)
        for x, y in zip(xs.tolist(), ys.tolist()):
            if self.extractor.visited[y, x]:
                continue
            blob = self.extractor.extract(x, y)
            blob_count += 1
            if self.mark_buggy_columns(blob):
                flagged_blob_count += 1
                logger.debug(
                    "low_contrast_blob",
                    min_x=blob.min_x,
                    max_x=blob.max_x,
                    pixels=blob.pixel_count,
                )

        analysis = ContrastAnalysis(
            buggy_pixels=self.buggy_pixels,
            blob_count=blob_count,
            flagged_blob_count=flagged_blob_count,
        )
        logger.info(
            "contrast_analysis_finished",
            width=self.width,
            height=self.height,
            min_readable_contrast=self.config.min_readable_contrast,
            **analysis.to_dict(),
        )
        return analysis

    def mark_buggy_columns(self, blob: BlobBounds) -> bool:
        """Mark the columns of ``blob`` that form a sustained low-contrast stretch.

        A stretch must reach ``min(run_threshold, width)`` consecutive
        low-contrast columns before anything is marked; once it does, marking
        continues until a readable column ends the stretch. Returns whether any
        column was marked.
        """
        # Glyph edges smeared by anti-aliasing produce narrow spurious blobs.
        if blob.width < self.config.min_blob_width:
            return False

        threshold = min(self.config.run_threshold, blob.width)
        marked = False
        consecutive = 0
        x = blob.min_x
        while x <= blob.max_x:
            if not self.too_low_contrast_in_column(x):
                consecutive = 0
                x += 1
                continue
            consecutive += 1
            if consecutive == threshold:
                marked = True
                for column in range(x - threshold + 1, x + 1):
                    self.mark_text_pixels_in_column(column)
                x += 1
                while x <= blob.max_x and self.too_low_contrast_in_column(x):
                    self.mark_text_pixels_in_column(x)
                    x += 1
                consecutive = 0
                # x is past the blob or on the readable column that ended the stretch.
            x += 1
        return marked

    def too_low_contrast_in_column(self, x: int) -> bool:
        """Whether no text/background boundary in column ``x`` is readable.

        Walks the runs of text pixels between the blob's ``min_y`` and ``max_y``
        in this column, comparing the first two pixels of each run with the
        background pixel above it and the last two with the background pixel
        below. The second pixel from each edge is checked too because the edge
        pixel itself is often anti-aliased. One readable boundary anywhere clears
        the whole column, even if other runs in it are hard to read.
        """
        text = self.text
        luminance = self.luminance
        height = self.height
        max_y = int(self.extractor.max_y[x])
        y = int(self.extractor.min_y[x])

        while True:
            if y > 0:
                background = luminance[y - 1, x]
                if self.readable(luminance[y, x], background):
                    return False
                y += 1
                if y < height and text[y, x] and self.readable(luminance[y, x], background):
                    return False
            while y < height and text[y, x]:
                y += 1
            if y < height:
                background = luminance[y, x]
                if self.readable(luminance[y - 1, x], background):
                    return False
                if y >= 2 and text[y - 2, x] and self.readable(luminance[y - 2, x], background):
                    return False
            if y > max_y:
                return True
            while not text[y, x]:
                y += 1

    def readable(self, text_luminance: float, background_luminance: float) -> bool:
        contrast = contrast_from_luminance(float(text_luminance), float(background_luminance))
        return contrast >= self.config.min_readable_contrast

    def mark_text_pixels_in_column(self, x: int) -> None:
        top = int(self.extractor.min_y[x])
        bottom = int(self.extractor.max_y[x]) + 1
        self.buggy_pixels[top:bottom, x] |= self.text[top:bottom, x]
