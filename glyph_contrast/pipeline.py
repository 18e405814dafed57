"""High-level orchestration of low-contrast text detection."""
from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from pathlib import Path
from typing import Any, Dict, List, Optional

import numpy as np
import structlog

from .audits.contrast import ContrastAnalysis, ContrastAnalyzer
from .collectors.screenshot_loader import ScreenshotLoader
from .collectors.selenium_collector import SeleniumCollector
from .config import AnalysisConfig
from .page import PageSnapshot
from .regions import BugRegion, surround_buggy_pixels
from .reporting import HighlightWriter, JSONReportWriter

logger = structlog.get_logger(__name__)

TOO_LOW_CONTRAST_DESCRIPTION = "Detected text with too low contrast."


class InputMode(str, Enum):
    """Enumerates supported input modalities."""

    URL = "url"
    SCREENSHOT = "screenshot"


@dataclass(frozen=True)
class LayoutBug:
    """One reported defect, highlighting every buggy pixel on the page."""

    description: str
    screenshot: np.ndarray
    screenshot_path: Optional[Path]
    buggy_pixels: np.ndarray
    region: BugRegion

    def to_dict(self) -> dict:
        return {
            "description": self.description,
            "screenshot_path": str(self.screenshot_path) if self.screenshot_path else None,
            "buggy_pixel_count": int(np.count_nonzero(self.buggy_pixels)),
            "region": self.region.to_dict(),
        }


class TextContrastDetector:
    """Finds text whose contrast to the surrounding background is too low."""

    def __init__(self, config: Optional[AnalysisConfig] = None, *, region_padding: int = 2) -> None:
        self.config = config or AnalysisConfig()
        self.region_padding = region_padding

    @property
    def min_readable_contrast(self) -> float:
        return self.config.min_readable_contrast

    def analyze(self, page: PageSnapshot) -> ContrastAnalysis:
        return ContrastAnalyzer(page, self.config).run()

    def find_layout_bugs(self, page: PageSnapshot) -> List[LayoutBug]:
        return self.layout_bugs_from(page, self.analyze(page))

    def layout_bugs_from(self, page: PageSnapshot, analysis: ContrastAnalysis) -> List[LayoutBug]:
        """At most one bug per page, however many blobs were flagged."""
        if not analysis.found_buggy_pixels:
            return []
        region = surround_buggy_pixels(analysis.buggy_pixels, padding=self.region_padding)
        return [
            LayoutBug(
                description=TOO_LOW_CONTRAST_DESCRIPTION,
                screenshot=page.screenshot,
                screenshot_path=page.path,
                buggy_pixels=analysis.buggy_pixels,
                region=region,
            )
        ]


@dataclass
class PipelineResult:
    """Detector outputs and the artifacts written for them."""

    page: PageSnapshot
    analysis: ContrastAnalysis
    layout_bugs: List[LayoutBug]
    config: AnalysisConfig
    artifacts: Dict[str, Any]

    def to_json_dict(self) -> Dict[str, Any]:
        return {
            "config": self.config.to_dict(),
            "page": {"width": self.page.width, "height": self.page.height},
            "analysis": self.analysis.to_dict(),
            "layout_bugs": [bug.to_dict() for bug in self.layout_bugs],
            "artifacts": {
                key: str(value) if isinstance(value, Path) else value
                for key, value in self.artifacts.items()
            },
        }


class DetectionPipeline:
    """Coordinates collectors, the detector and report writers."""

    def __init__(
        self,
        detector: Optional[TextContrastDetector] = None,
        selenium_collector: Optional[SeleniumCollector] = None,
        screenshot_loader: Optional[ScreenshotLoader] = None,
        json_writer: Optional[JSONReportWriter] = None,
        highlight_writer: Optional[HighlightWriter] = None,
    ) -> None:
        self.detector = detector or TextContrastDetector()
        self.selenium_collector = selenium_collector or SeleniumCollector()
        self.screenshot_loader = screenshot_loader or ScreenshotLoader()
        self.json_writer = json_writer or JSONReportWriter()
        self.highlight_writer = highlight_writer or HighlightWriter()

    def run(
        self,
        mode: InputMode,
        value: str,
        *,
        mask_path: Optional[str | Path] = None,
        output_dir: Optional[Path] = None,
    ) -> PipelineResult:
        """Collect or load a page, analyze it and write the report artifacts."""

        output_dir = output_dir or Path("outputs")
        output_dir.mkdir(parents=True, exist_ok=True)
        artifacts: Dict[str, Any] = {}

        if mode is InputMode.URL:
            collected = self.selenium_collector.collect(value, output_dir=output_dir)
            page = collected.page
            artifacts.update({"url": collected.url, "text_mask_path": collected.text_mask_path})
        elif mode is InputMode.SCREENSHOT:
            if mask_path is None:
                raise ValueError("A text mask is required when analyzing a screenshot")
            page = self.screenshot_loader.load_page(value, mask_path)
            artifacts["text_mask_path"] = Path(mask_path)
        else:
            raise ValueError(f"Unsupported input mode: {mode}")

        artifacts["screenshot_path"] = page.path
        analysis = self.detector.analyze(page)
        layout_bugs = self.detector.layout_bugs_from(page, analysis)

        for bug in layout_bugs:
            artifacts["highlight_path"] = self.highlight_writer.write(
                bug, output_dir / "contrast_highlight.png"
            )

        result = PipelineResult(
            page=page,
            analysis=analysis,
            layout_bugs=layout_bugs,
            config=self.detector.config,
            artifacts=artifacts,
        )
        report_path = self.json_writer.write(result, output_dir / "audit.json")
        logger.info("report_written", path=str(report_path), layout_bugs=len(layout_bugs))
        return result
