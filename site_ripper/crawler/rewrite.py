"""
Link rewriter for pointing page references at local copies.
"""

from bs4 import BeautifulSoup

from .extractor import AssetReference
from ..utils.log import get_logger
from ..utils.paths import get_relative_path


class LinkRewriter:
    """
    Rewrites asset references in a parsed page to local relative paths.

    Paths are relative to the directory of the page's own output file, so
    the saved tree can be opened straight from disk.
    """

    def __init__(self):
        self.logger = get_logger("rewriter")

    def rewrite_reference(
        self,
        reference: AssetReference,
        page_local_path: str,
        asset_local_path: str
    ) -> str:
        """
        Point one element attribute at a locally saved asset.

        Args:
            reference: Element attribute to rewrite
            page_local_path: Local file path of the page
            asset_local_path: Local file path of the asset

        Returns:
            The new attribute value
        """
        rel_path = get_relative_path(page_local_path, asset_local_path)
        reference.tag[reference.attribute] = rel_path
        self.logger.debug(f"Rewrote {reference.kind} {reference.url} -> {rel_path}")
        return rel_path

    def strip_base_tags(self, soup: BeautifulSoup) -> int:
        """Remove <base> tags, which would break relative asset paths."""
        bases = soup.find_all('base')
        for base in bases:
            base.decompose()
        return len(bases)
