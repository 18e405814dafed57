"""Command-line interface for detecting text with too low contrast."""
from __future__ import annotations

import argparse
import sys
from pathlib import Path
from typing import List, Optional

from .config import AnalysisConfig
from .logs import configure_logging
from .pipeline import DetectionPipeline, InputMode, TextContrastDetector


def parse_args(argv: Optional[List[str]] = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="Detect text rendered with too low contrast")
    parser.add_argument("mode", choices=[item.value for item in InputMode])
    parser.add_argument("value", help="URL or path to screenshot, depending on mode")
    parser.add_argument("--mask", type=Path, help="Text-pixel mask image (screenshot mode)")
    parser.add_argument(
        "--output-dir",
        type=Path,
        default=Path("outputs"),
        help="Directory to store audit artifacts",
    )
    parser.add_argument(
        "--min-contrast",
        type=float,
        default=None,
        help="Minimal readable contrast ratio (default 1.5)",
    )
    parser.add_argument("--min-blob-width", type=int, default=None)
    parser.add_argument("--run-threshold", type=int, default=None)
    parser.add_argument(
        "--log-level",
        default="WARNING",
        choices=["DEBUG", "INFO", "WARNING", "ERROR"],
        help="Verbosity of the structured log written to stderr",
    )
    parser.add_argument("--json-logs", action="store_true", help="Emit logs as JSON lines")
    args = parser.parse_args(argv)
    if args.mode == InputMode.SCREENSHOT.value and args.mask is None:
        parser.error("--mask is required in screenshot mode")
    return args


def main(argv: Optional[List[str]] = None) -> int:
    args = parse_args(argv)
    configure_logging(args.log_level, json_format=args.json_logs)
    config = AnalysisConfig.from_env(
        min_readable_contrast=args.min_contrast,
        min_blob_width=args.min_blob_width,
        run_threshold=args.run_threshold,
    )
    pipeline = DetectionPipeline(detector=TextContrastDetector(config))
    result = pipeline.run(
        InputMode(args.mode), args.value, mask_path=args.mask, output_dir=args.output_dir
    )
    print(f"Text blobs analyzed: {result.analysis.blob_count}")
    print(f"Low-contrast text pixels: {result.analysis.buggy_pixel_count}")
    print(f"Layout bugs: {len(result.layout_bugs)}")
    for bug in result.layout_bugs:
        print(f"- {bug.description}")
        for rect in bug.region.rects:
            print(f"  at x={rect.x} y={rect.y} ({rect.width}x{rect.height})")
    print(f"Artifacts written to {args.output_dir.resolve()}")
    return 1 if result.layout_bugs else 0


if __name__ == "__main__":  # pragma: no cover
    sys.exit(main())
