"""
Color extractor module for building a palette from stylesheet text.

Runs an ordered list of regular expressions over raw CSS and keeps every
unique value that survives a cheap "is this plausibly a color" filter.
"""

import re
from typing import Dict, List

from ..utils.log import get_logger


# Values such as "12px", "1.5", "-3rem" or "100%"
NUMERIC_VALUE = re.compile(r'^-?\d+(\.\d+)?(px|rem|em|%|vh|vw)?$', re.IGNORECASE)

IMPORTANT_SUFFIX = re.compile(r'\s*!\s*important\s*$', re.IGNORECASE)

CSS_WIDE_KEYWORDS = {'inherit', 'initial', 'unset', 'none', 'revert'}


def is_valid_color(value: str) -> bool:
    """
    Quick filtering of obvious non-colors.

    Rejects empty values, variable references, calc()/url() expressions,
    bare numbers and lengths, and CSS-wide keywords.
    """
    if not value:
        return False

    lowered = value.lower()
    if 'var(' in lowered:
        return False
    if 'calc(' in lowered or 'url(' in lowered:
        return False
    if NUMERIC_VALUE.match(value):
        return False
    if lowered in CSS_WIDE_KEYWORDS:
        return False

    return True


def clean_color_value(value: str) -> str:
    """Trim a raw value and drop a trailing !important."""
    return IMPORTANT_SUFFIX.sub('', value.strip().rstrip(';')).strip()


class ColorExtractor:
    """
    Extracts color values from CSS.

    Colors are kept in first-seen order across every stylesheet passed
    to extract(), with duplicates dropped.
    """

    # Matched in this order; the last one captures a property value
    COLOR_PATTERNS = [
        re.compile(r'#[0-9a-f]{3,8}\b', re.IGNORECASE),
        re.compile(r'rgba?\([\d\s,.%/]+\)', re.IGNORECASE),
        re.compile(r'hsla?\([\d\s%,.deg/]+\)', re.IGNORECASE),
        re.compile(r'var\(--[a-zA-Z0-9_-]+\)'),
        re.compile(r'(background|color|border|fill|stroke):\s*([^;:{}]+)', re.IGNORECASE),
    ]

    def __init__(self):
        """Initialize the color extractor."""
        self.logger = get_logger("colors")
        self._colors: Dict[str, None] = {}

    @property
    def colors(self) -> List[str]:
        """Unique colors in the order they were first seen."""
        return list(self._colors)

    def extract(self, css: str) -> List[str]:
        """
        Extract colors from one stylesheet and merge them into the palette.

        Args:
            css: Raw stylesheet text

        Returns:
            Colors that were new to the palette, in match order
        """
        added = []

        for pattern in self.COLOR_PATTERNS:
            for match in pattern.finditer(css):
                # Property matches contribute only their value
                if match.lastindex and match.lastindex >= 2:
                    value = clean_color_value(match.group(2))
                else:
                    value = clean_color_value(match.group(0))

                if not is_valid_color(value) or value in self._colors:
                    continue

                self._colors[value] = None
                added.append(value)

        if added:
            self.logger.debug(f"Found {len(added)} new colors")

        return added
