"""Detection of web page text rendered with too low contrast."""

from .pipeline import TextContrastDetector  # re-export for convenience

__all__ = ["TextContrastDetector"]
