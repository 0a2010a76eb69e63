"""
Asset extractor for parsed pages.

Finds the stylesheets, scripts, images and same-origin links of a page,
keeping a handle on each element so its attribute can be rewritten once
the referenced asset has been saved locally.
"""

from dataclasses import dataclass, field
from typing import List, Set

from bs4 import BeautifulSoup, Tag

from ..utils.html import get_rel_values
from ..utils.log import get_logger
from ..utils.paths import normalize_url, is_same_origin


@dataclass
class AssetReference:
    """One element attribute that points at a downloadable asset."""

    tag: Tag
    attribute: str
    url: str
    kind: str  # 'stylesheet', 'script' or 'image'


@dataclass
class ExtractedPage:
    """References and links found on a single page."""

    stylesheets: List[AssetReference] = field(default_factory=list)
    scripts: List[AssetReference] = field(default_factory=list)
    images: List[AssetReference] = field(default_factory=list)

    # Same-origin page links in document order, deduplicated
    links: List[str] = field(default_factory=list)

    # Links to other origins (for reference, not crawled)
    external_links: Set[str] = field(default_factory=set)

    def asset_references(self) -> List[AssetReference]:
        """Get all asset references combined."""
        return self.stylesheets + self.scripts + self.images


class AssetExtractor:
    """
    Extracts asset references and links from parsed HTML.

    Stylesheets and scripts are only collected from the crawl origin.
    Images follow the same rule unless same_origin_images is disabled.
    """

    def __init__(self, base_url: str, same_origin_images: bool = True):
        """
        Initialize the asset extractor.

        Args:
            base_url: URL whose origin counts as internal
            same_origin_images: Only collect images from the crawl origin
        """
        self.base_url = base_url
        self.same_origin_images = same_origin_images
        self.logger = get_logger("extractor")

    def extract(self, soup: BeautifulSoup, page_url: str) -> ExtractedPage:
        """
        Extract asset references and links from a parsed page.

        Args:
            soup: Parsed page
            page_url: URL of the page (for resolving relative URLs)

        Returns:
            ExtractedPage with everything found
        """
        page = ExtractedPage()

        self._extract_stylesheets(soup, page_url, page)
        self._extract_scripts(soup, page_url, page)
        self._extract_images(soup, page_url, page)
        self._extract_links(soup, page_url, page)

        self.logger.debug(
            f"Extracted from {page_url}: "
            f"{len(page.links)} links, "
            f"{len(page.asset_references())} assets"
        )

        return page

    def _resolve_internal(self, value: str, page_url: str) -> str:
        full_url = normalize_url(value or '', page_url)
        if full_url and is_same_origin(full_url, self.base_url):
            return full_url
        return ""

    def _extract_stylesheets(
        self,
        soup: BeautifulSoup,
        page_url: str,
        page: ExtractedPage
    ) -> None:
        """Extract <link rel="stylesheet"> references."""
        for link in soup.find_all('link', href=True):
            # rel can hold several tokens, e.g. "stylesheet preload"
            if 'stylesheet' not in get_rel_values(link):
                continue
            full_url = self._resolve_internal(link.get('href'), page_url)
            if full_url:
                page.stylesheets.append(AssetReference(link, 'href', full_url, 'stylesheet'))

    def _extract_scripts(
        self,
        soup: BeautifulSoup,
        page_url: str,
        page: ExtractedPage
    ) -> None:
        """Extract <script src> references."""
        for script in soup.find_all('script', src=True):
            full_url = self._resolve_internal(script.get('src'), page_url)
            if full_url:
                page.scripts.append(AssetReference(script, 'src', full_url, 'script'))

    def _extract_images(
        self,
        soup: BeautifulSoup,
        page_url: str,
        page: ExtractedPage
    ) -> None:
        """Extract <img src> references."""
        for img in soup.find_all('img', src=True):
            if self.same_origin_images:
                full_url = self._resolve_internal(img.get('src'), page_url)
            else:
                full_url = normalize_url(img.get('src', ''), page_url)
            if full_url:
                page.images.append(AssetReference(img, 'src', full_url, 'image'))

    def _extract_links(
        self,
        soup: BeautifulSoup,
        page_url: str,
        page: ExtractedPage
    ) -> None:
        """Extract anchor links, split into internal and external."""
        seen: Set[str] = set()

        for anchor in soup.find_all('a', href=True):
            href = anchor.get('href', '').strip()

            # Fragments and javascript:/mailto: are dropped by normalize_url
            full_url = normalize_url(href, page_url)
            if not full_url:
                continue

            if is_same_origin(full_url, self.base_url):
                if full_url not in seen:
                    seen.add(full_url)
                    page.links.append(full_url)
            else:
                page.external_links.add(full_url)
