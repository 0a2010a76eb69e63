"""
Component detector module for sampling UI components.

Picks representative buttons, cards, form inputs and alerts out of page
markup using CSS selectors, and detects common front-end libraries.
"""

from dataclasses import dataclass
from typing import Dict, List, Optional, Tuple

from bs4 import BeautifulSoup, Tag

from ..utils.constants import MAX_SAMPLE_HTML, MIN_CARD_HTML
from ..utils.html import get_class_string
from ..utils.log import get_logger


COMPONENT_CATEGORIES = ("buttons", "cards", "inputs", "alerts")


@dataclass
class ComponentSample:
    """A single component example taken from a page."""
    category: str
    tag_name: str
    class_name: str
    style: str
    text: str
    html: str
    input_type: Optional[str] = None

    @property
    def dedup_key(self) -> Tuple:
        if self.category == "inputs":
            return (self.input_type, self.class_name)
        return (self.class_name,)


def truncate_html(html: str, limit: int = MAX_SAMPLE_HTML) -> str:
    if len(html) > limit:
        return html[:limit] + "..."
    return html


class ComponentDetector:
    """
    Collects component samples across the pages of one site.

    Samples are deduplicated per category by their exact class string
    (inputs by type and class), keeping the first one seen. This is a
    rough heuristic: two elements sharing a class list but looking
    different still count as one component.
    """

    SELECTORS = {
        "buttons": [
            'button', 'a.btn', 'a.button', 'a[role="button"]',
            'a[class*="btn"]', 'a[class*="button"]',
        ],
        "cards": [
            '[class*="card"]', '[class*="box"]', '[class*="container"]',
            '[class*="panel"]', 'div[class*="shadow"]',
        ],
        "inputs": ['input', 'select', 'textarea'],
        "alerts": [
            '[class*="alert"]', '[class*="notification"]', '[class*="message"]',
            '[class*="toast"]', '[role="alert"]',
        ],
    }

    def __init__(self, max_html: int = MAX_SAMPLE_HTML, min_card_html: int = MIN_CARD_HTML):
        self.logger = get_logger("components")
        self.max_html = max_html
        self.min_card_html = min_card_html

        self.components: Dict[str, List[ComponentSample]] = {
            category: [] for category in COMPONENT_CATEGORIES
        }
        self._seen: Dict[str, set] = {category: set() for category in COMPONENT_CATEGORIES}

    def detect(self, soup: BeautifulSoup) -> int:
        """
        Add the components found in one parsed page.

        Args:
            soup: Parsed page

        Returns:
            Number of new samples added
        """
        added = 0
        for category in COMPONENT_CATEGORIES:
            selector = ', '.join(self.SELECTORS[category])
            for element in soup.select(selector):
                sample = self._make_sample(category, element)
                if sample is not None and self._add(sample):
                    added += 1
        return added

    def _make_sample(self, category: str, element: Tag) -> Optional[ComponentSample]:
        html = str(element)
        input_type = None

        if category == "inputs":
            input_type = (element.get('type') or element.name).lower()
            if input_type == 'hidden':
                return None
        elif category == "cards":
            # Too large to preview or too small to be a real card
            if len(html) > self.max_html or len(html) < self.min_card_html:
                return None
        elif category == "alerts":
            if len(html) > self.max_html:
                return None

        return ComponentSample(
            category=category,
            tag_name=element.name,
            class_name=get_class_string(element),
            style=element.get('style', ''),
            text=element.get_text(strip=True),
            html=truncate_html(html, self.max_html),
            input_type=input_type,
        )

    def _add(self, sample: ComponentSample) -> bool:
        seen = self._seen[sample.category]
        if sample.dedup_key in seen:
            return False
        seen.add(sample.dedup_key)
        self.components[sample.category].append(sample)
        return True

    def counts(self) -> Dict[str, int]:
        return {category: len(items) for category, items in self.components.items()}


class LibraryDetector:
    """
    Detects front-end libraries from script/stylesheet URLs and page markup.
    """

    # Library -> substrings looked for in script and stylesheet URLs
    SOURCE_PATTERNS = {
        'jQuery': ['jquery'],
        'React': ['react'],
        'Angular': ['angular'],
        'Vue.js': ['vue'],
        'Bootstrap': ['bootstrap'],
        'Tailwind CSS': ['tailwind'],
        'Material UI': ['material', '@mui'],
        'Axios': ['axios'],
        'Lodash': ['lodash'],
    }

    # Library -> substrings looked for anywhere in the markup
    MARKUP_PATTERNS = {
        'Font Awesome': ['font-awesome', 'fontawesome'],
        'Next.js': ['__NEXT_DATA__', '/_next/'],
    }

    def __init__(self):
        self.logger = get_logger("libraries")
        self._libraries: Dict[str, None] = {}

    @property
    def libraries(self) -> List[str]:
        return list(self._libraries)

    def detect(self, soup: BeautifulSoup, html: str) -> List[str]:
        """Detect libraries on one page; returns the ones found there."""
        sources = [s.get('src', '').lower() for s in soup.find_all('script', src=True)]
        sources += [l.get('href', '').lower() for l in soup.find_all('link', href=True)]

        found = []
        for name, needles in self.SOURCE_PATTERNS.items():
            if any(needle in src for src in sources for needle in needles):
                found.append(name)
        for name, needles in self.MARKUP_PATTERNS.items():
            if any(needle in html for needle in needles):
                found.append(name)

        for name in found:
            if name not in self._libraries:
                self.logger.debug(f"Detected library: {name}")
                self._libraries[name] = None

        return found
