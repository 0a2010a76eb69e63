"""
Crawler module for website cloning.

Contains components for fetching, crawling, extracting, downloading, and rewriting.
"""

from .fetcher import Fetcher, FetchResult
from .crawler import WebsiteCrawler, CrawlResult, CrawlTask
from .extractor import AssetExtractor
from .downloader import AssetDownloader
from .rewrite import LinkRewriter

__all__ = [
    "Fetcher",
    "FetchResult",
    "WebsiteCrawler",
    "CrawlResult",
    "CrawlTask",
    "AssetExtractor",
    "AssetDownloader",
    "LinkRewriter",
]
