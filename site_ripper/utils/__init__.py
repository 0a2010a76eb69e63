"""
Utility modules for site ripping.

Contains logging, path handling utilities, and constants.
"""

from .log import setup_logger, get_logger
from .paths import normalize_url, get_asset_path, ensure_dir
from .constants import (
    DEFAULT_USER_AGENT,
    DEFAULT_TIMEOUT,
    DEFAULT_MAX_REDIRECTS,
    DEFAULT_MAX_DEPTH,
    DEFAULT_CRAWL_DELAY,
    DEFAULT_WORKERS,
)

__all__ = [
    "setup_logger",
    "get_logger",
    "normalize_url",
    "get_asset_path",
    "ensure_dir",
    "DEFAULT_USER_AGENT",
    "DEFAULT_TIMEOUT",
    "DEFAULT_MAX_REDIRECTS",
    "DEFAULT_MAX_DEPTH",
    "DEFAULT_CRAWL_DELAY",
    "DEFAULT_WORKERS",
]
