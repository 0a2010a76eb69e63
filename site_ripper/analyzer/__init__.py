"""
Analyzer module for extracting a design summary from a cloned site.

Contains extractors for colors, fonts, UI components and libraries,
plus the HTML report builder.
"""

from .colors import ColorExtractor, is_valid_color
from .typography import FontExtractor
from .components import ComponentDetector, ComponentSample, LibraryDetector
from .report import ReportBuilder, build_report
from .design import DesignExtractor, DesignReport

__all__ = [
    # Main extractor
    "DesignExtractor",
    "DesignReport",
    # Colors
    "ColorExtractor",
    "is_valid_color",
    # Typography
    "FontExtractor",
    # Components
    "ComponentDetector",
    "ComponentSample",
    "LibraryDetector",
    # Report
    "ReportBuilder",
    "build_report",
]
