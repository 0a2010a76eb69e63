"""
Path and URL utilities for the site ripper.

Provides URL normalization, origin checks, local path generation,
and directory management.
"""

import os
import re
import hashlib
from typing import Dict, Optional, Tuple
from urllib.parse import urlparse, urlunparse, urljoin, unquote

from .constants import ASSET_BUCKETS, IMAGE_EXTENSIONS, FONT_EXTENSIONS


# hrefs that never point at a fetchable resource
SKIPPED_SCHEMES = ('javascript:', 'data:', 'mailto:', 'tel:', '#')

_DEFAULT_PORTS = {'http': 80, 'https': 443}

_UNSAFE_CHARS = re.compile(r'[<>:"|?*\\]')


def normalize_url(url: str, base_url: Optional[str] = None) -> str:
    """
    Normalize a URL by resolving relative paths and removing fragments.

    Args:
        url: URL to normalize
        base_url: Base URL for resolving relative URLs

    Returns:
        Normalized absolute URL, or an empty string for hrefs that
        cannot be fetched (fragments, javascript:, mailto:, ...)
    """
    if not url:
        return ""

    url = url.strip()
    if not url or url.lower().startswith(SKIPPED_SCHEMES):
        return ""

    # Protocol-relative URLs inherit the base scheme
    if url.startswith('//'):
        scheme = urlparse(base_url).scheme if base_url else 'https'
        url = f"{scheme}:{url}"

    if base_url and not url.lower().startswith(('http://', 'https://')):
        url = urljoin(base_url, url)

    parsed = urlparse(url)
    if parsed.scheme.lower() not in ('http', 'https') or not parsed.netloc:
        return ""

    cleaned = urlunparse((
        parsed.scheme.lower(),
        parsed.netloc.lower(),
        parsed.path or '/',
        parsed.params,
        parsed.query,
        ''
    ))

    # Remove trailing slash for consistency (except for root path)
    if cleaned.endswith('/') and len(parsed.path) > 1:
        cleaned = cleaned.rstrip('/')

    return cleaned


def get_origin(url: str) -> Tuple[str, str, Optional[int]]:
    """
    Get the (scheme, host, port) origin triple of a URL.

    Default ports are made explicit so http://a.com and http://a.com:80
    compare equal.
    """
    parsed = urlparse(url)
    scheme = parsed.scheme.lower()
    host = (parsed.hostname or '').lower()
    try:
        port = parsed.port
    except ValueError:
        port = None
    if port is None:
        port = _DEFAULT_PORTS.get(scheme)
    return scheme, host, port


def is_same_origin(url: str, base_url: str) -> bool:
    """
    Check if a URL shares scheme, host and port with the base URL.

    Args:
        url: URL to check
        base_url: Base URL for comparison

    Returns:
        True if same origin, False otherwise
    """
    return get_origin(url) == get_origin(base_url)


def _safe_join(output_dir: str, relative: str) -> str:
    """Join a URL-derived relative path under output_dir without escaping it."""
    parts = [
        _UNSAFE_CHARS.sub('_', part)
        for part in relative.split('/')
        if part not in ('', '.', '..')
    ]
    return os.path.join(output_dir, *parts)


def url_to_path(url: str, output_dir: str) -> str:
    """
    Convert a page URL to a local file path preserving directory structure.

    The root path maps to index.html, and a path whose last segment has
    no extension is treated as a directory holding an index.html.

    Args:
        url: URL to convert
        output_dir: Base output directory

    Returns:
        Local file path
    """
    parsed = urlparse(url)
    path = unquote(parsed.path).strip('/')

    if not path:
        path = "index.html"
    elif not path.endswith(('.html', '.htm')):
        last_segment = path.split('/')[-1]
        if not os.path.splitext(last_segment)[1]:
            path = f"{path}/index.html"

    return _safe_join(output_dir, path)


def get_asset_type(url: str) -> str:
    """
    Determine the asset bucket from the file extension of a URL.

    Args:
        url: Asset URL

    Returns:
        One of 'css', 'js', 'images', 'fonts', or 'other'
    """
    path = urlparse(url).path.lower()
    ext = os.path.splitext(path)[1]

    if ext == '.css':
        return 'css'
    if ext in ('.js', '.mjs'):
        return 'js'
    if ext in IMAGE_EXTENSIONS:
        return 'images'
    if ext in FONT_EXTENSIONS:
        return 'fonts'
    return 'other'


def get_asset_path(
    url: str,
    asset_type: str,
    output_dir: str,
    hash_name: bool = False
) -> str:
    """
    Generate a local path for an asset based on its bucket.

    The file name is the basename of the URL path (query string dropped).
    Different URLs sharing a basename map to the same file unless
    hash_name is set, in which case a short URL hash is appended to the stem.

    Args:
        url: Asset URL
        asset_type: Bucket name ('css', 'js', 'images', 'fonts', 'other')
        output_dir: Base output directory
        hash_name: Qualify the file name with a hash of the full URL

    Returns:
        Local file path for the asset
    """
    path = unquote(urlparse(url).path)
    filename = os.path.basename(path.rstrip('/')) or "asset"

    if hash_name:
        url_hash = hashlib.sha256(url.encode()).hexdigest()[:8]
        name, ext = os.path.splitext(filename)
        filename = f"{name}_{url_hash}{ext}"

    filename = _UNSAFE_CHARS.sub('_', filename)
    if filename in ('.', '..'):
        filename = "asset"

    return os.path.join(output_dir, "assets", asset_type, filename)


def ensure_dir(path: str) -> None:
    """
    Ensure a directory exists, creating it if necessary.

    Args:
        path: Directory path to ensure exists
    """
    os.makedirs(path, exist_ok=True)


def ensure_parent_dir(file_path: str) -> None:
    """
    Ensure the parent directory of a file exists.

    Args:
        file_path: File path whose parent directory should exist
    """
    parent = os.path.dirname(file_path)
    if parent:
        ensure_dir(parent)


def create_output_structure(output_dir: str) -> Dict[str, str]:
    """
    Create the output directory structure for a cloned website.

    Args:
        output_dir: Base output directory

    Returns:
        Dictionary of created directory paths
    """
    dirs = {'root': output_dir}
    for bucket in ASSET_BUCKETS:
        dirs[bucket] = os.path.join(output_dir, 'assets', bucket)

    for dir_path in dirs.values():
        ensure_dir(dir_path)

    return dirs


def get_relative_path(from_path: str, to_path: str) -> str:
    """
    Calculate the relative path from one file to another.

    Args:
        from_path: Source file path
        to_path: Target file path

    Returns:
        Relative path string with forward slashes
    """
    from_dir = os.path.dirname(from_path)
    rel_path = os.path.relpath(to_path, from_dir)
    return rel_path.replace('\\', '/')
