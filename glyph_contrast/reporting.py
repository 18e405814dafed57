"""Report generation utilities (JSON and highlighted screenshots)."""
from __future__ import annotations

import json
from dataclasses import dataclass
from pathlib import Path
from typing import TYPE_CHECKING, Tuple

import cv2

if TYPE_CHECKING:  # pragma: no cover
    from .pipeline import LayoutBug, PipelineResult


@dataclass
class JSONReportWriter:
    """Writes pipeline results to a JSON artifact."""

    indent: int = 2

    def write(self, result: "PipelineResult", path: Path) -> Path:
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_text(json.dumps(result.to_json_dict(), indent=self.indent), encoding="utf-8")
        return path


@dataclass
class HighlightWriter:
    """Draws the bug region over the screenshot and saves it as an image."""

    color: Tuple[int, int, int] = (255, 0, 0)
    thickness: int = 1
    tint_buggy_pixels: bool = True

    def render(self, bug: "LayoutBug"):
        image = bug.screenshot.copy()
        if self.tint_buggy_pixels:
            image[bug.buggy_pixels] = self.color
        for rect in bug.region.rects:
            cv2.rectangle(
                image,
                (rect.x, rect.y),
                (rect.x + rect.width - 1, rect.y + rect.height - 1),
                self.color,
                thickness=self.thickness,
            )
        return image

    def write(self, bug: "LayoutBug", path: Path) -> Path:
        path.parent.mkdir(parents=True, exist_ok=True)
        image = self.render(bug)
        if not cv2.imwrite(str(path), cv2.cvtColor(image, cv2.COLOR_RGB2BGR)):
            raise ValueError(f"Unable to write highlighted screenshot to {path}")
        return path
