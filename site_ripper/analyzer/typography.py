"""
Typography analyzer module for collecting font-family declarations.
"""

import re
from typing import Dict, List

from ..utils.log import get_logger


# Typography scale shown in the design report: (label, font-size, bold)
TYPOGRAPHY_SCALE = [
    ("Heading 1", "2.5rem", True),
    ("Heading 2", "2rem", True),
    ("Heading 3", "1.5rem", True),
    ("Heading 4", "1.25rem", True),
    ("Paragraph text", "1rem", False),
    ("Small text", "0.875rem", False),
]

SYSTEM_FONT_STACK = (
    "-apple-system, BlinkMacSystemFont, 'Segoe UI', Roboto, Helvetica, Arial, sans-serif"
)


class FontExtractor:
    """
    Collects font-family values from CSS.

    Each distinct declaration is one entry, fallback stack included, so
    "Inter, sans-serif" and "Inter" are reported separately.
    """

    FONT_FAMILY_PATTERN = re.compile(r'font-family:\s*([^;}]+)', re.IGNORECASE)

    def __init__(self):
        self.logger = get_logger("typography")
        self._fonts: Dict[str, None] = {}

    @property
    def fonts(self) -> List[str]:
        return list(self._fonts)

    def extract(self, css: str) -> List[str]:
        """
        Extract font families from one stylesheet.

        Args:
            css: Raw stylesheet text

        Returns:
            Font families that were new to the collection
        """
        added = []
        for match in self.FONT_FAMILY_PATTERN.finditer(css):
            family = match.group(1).strip()
            if family and family not in self._fonts:
                self._fonts[family] = None
                added.append(family)
        return added
