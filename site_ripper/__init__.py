"""
Site Ripper - clone a website's pages and assets for offline use.

This package provides functionality to crawl a site, download its assets,
produce a simplified static copy, and extract a design report (colors,
fonts and UI components) from what was downloaded.
"""

__version__ = "1.0.0"
__author__ = "Site Ripper Team"
