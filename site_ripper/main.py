#!/usr/bin/env python3
"""
Site Ripper - clone a website's pages and assets to local disk.

Crawls same-origin pages from a seed URL up to a maximum link depth,
downloads stylesheets, scripts and images, rewrites references to the
local copies and optionally extracts a design report afterwards.

Usage:
    site-ripper --url https://example.com --output ./cloned-site --depth 2

Features:
    - Follows same-origin links breadth-wise with a bounded worker pool
    - Downloads CSS, JS and images into per-type asset buckets
    - Rewrites references for offline viewing
    - Generates sitemap.json and errors.json
    - Optional design extraction (colors, fonts, components)
"""

import argparse
import asyncio
import logging
import os
import signal
import sys
from typing import List, Optional
from urllib.parse import urlparse

from .analyzer import DesignExtractor
from .crawler import WebsiteCrawler
from .errors import ClonerError
from .utils.constants import (
    DEFAULT_OUTPUT_DIR,
    DEFAULT_DESIGN_DIR,
    DEFAULT_MAX_DEPTH,
    DEFAULT_CRAWL_DELAY,
    DEFAULT_TIMEOUT,
    DEFAULT_WORKERS,
)
from .utils.log import (
    setup_logger,
    print_status,
    print_success,
    print_error,
    print_info,
    print_warning,
)


def parse_arguments(argv: Optional[List[str]] = None) -> argparse.Namespace:
    """
    Parse command line arguments.

    Returns:
        Parsed arguments namespace
    """
    parser = argparse.ArgumentParser(
        prog='site-ripper',
        description='Clone a website for offline viewing',
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
    %(prog)s --url https://example.com
    %(prog)s --url https://example.com --output ./site --depth 3 --no-assets
    %(prog)s --url https://example.com --extract --design-output ./design
        """
    )

    # Checked by hand so a missing URL exits with status 1
    parser.add_argument(
        '--url', '-u',
        type=str,
        help='URL of the website to clone (e.g., https://example.com)'
    )

    parser.add_argument(
        '--output', '-o',
        type=str,
        default=DEFAULT_OUTPUT_DIR,
        help=f'Output directory for the cloned website (default: {DEFAULT_OUTPUT_DIR})'
    )

    parser.add_argument(
        '--depth', '-d',
        type=int,
        default=DEFAULT_MAX_DEPTH,
        help=f'Maximum crawl depth (default: {DEFAULT_MAX_DEPTH})'
    )

    assets = parser.add_mutually_exclusive_group()
    assets.add_argument(
        '--assets',
        dest='assets',
        action='store_true',
        default=True,
        help='Download stylesheets, scripts and images (default)'
    )
    assets.add_argument(
        '--no-assets',
        dest='assets',
        action='store_false',
        help='Only save HTML pages'
    )

    parser.add_argument(
        '--extract',
        action='store_true',
        help='Extract design elements after the crawl'
    )

    parser.add_argument(
        '--design-output',
        type=str,
        default=DEFAULT_DESIGN_DIR,
        help=f'Output directory for extracted design elements (default: {DEFAULT_DESIGN_DIR})'
    )

    parser.add_argument(
        '--delay',
        type=float,
        default=DEFAULT_CRAWL_DELAY,
        help=f'Delay before each request in seconds (default: {DEFAULT_CRAWL_DELAY})'
    )

    parser.add_argument(
        '--timeout',
        type=float,
        default=DEFAULT_TIMEOUT,
        help=f'Request timeout in seconds (default: {DEFAULT_TIMEOUT})'
    )

    parser.add_argument(
        '--workers', '-w',
        type=int,
        default=DEFAULT_WORKERS,
        help=f'Number of pages processed concurrently (default: {DEFAULT_WORKERS})'
    )

    parser.add_argument(
        '--hash-asset-names',
        action='store_true',
        help='Append a short URL hash to asset file names to avoid collisions'
    )

    parser.add_argument(
        '--verbose', '-v',
        action='store_true',
        help='Enable verbose logging'
    )

    parser.add_argument(
        '--quiet', '-q',
        action='store_true',
        help='Suppress output except errors'
    )

    parser.add_argument(
        '--log-file',
        type=str,
        default=None,
        help='Also write logs to this file'
    )

    return parser.parse_args(argv)


def validate_url(url: str) -> str:
    """
    Validate and normalize the input URL.

    Args:
        url: URL string to validate

    Returns:
        Normalized URL string

    Raises:
        ValueError: If URL is invalid
    """
    url = url.strip()

    # Add protocol if missing
    if not url.startswith(('http://', 'https://')):
        url = 'https://' + url

    parsed = urlparse(url)
    if not parsed.netloc:
        raise ValueError(f"Invalid URL: {url}")

    return url


def print_summary(result) -> None:
    """
    Print the crawl summary.

    Args:
        result: CrawlResult object
    """
    print_status("=" * 60, "dim")
    print_success("CRAWL SUMMARY")
    print_status("=" * 60, "dim")
    print_status(f"  Pages downloaded:  {result.pages_crawled}", "white")
    print_status(f"  Pages failed:      {result.pages_failed}", "white")
    print_status(f"  Assets downloaded: {result.assets_downloaded}", "white")
    print_status(f"  Assets reused:     {result.assets_skipped}", "white")
    print_status(f"  Errors:            {len(result.errors)}", "white")
    print_status(f"  Duration:          {result.duration_seconds:.1f} seconds", "white")
    if result.cancelled:
        print_warning("Crawl was cancelled before the queue was drained")
    print_status("=" * 60, "dim")


def _install_cancel_handler(crawler: WebsiteCrawler) -> bool:
    """Route Ctrl+C to crawler.cancel() so in-flight pages can finish."""
    loop = asyncio.get_running_loop()
    try:
        loop.add_signal_handler(signal.SIGINT, crawler.cancel)
    except (NotImplementedError, RuntimeError):
        # Not available on Windows event loops
        return False
    return True


async def main(argv: Optional[List[str]] = None) -> int:
    """
    Main entry point for the site ripper.

    Returns:
        Exit code (0 for success, 1 for error)
    """
    args = parse_arguments(argv)

    log_level = logging.DEBUG if args.verbose else (logging.WARNING if args.quiet else logging.INFO)
    setup_logger(level=log_level, log_file=args.log_file)

    if not args.url:
        print_error("Please provide a URL with --url (e.g., --url https://example.com)")
        return 1

    handler_installed = False

    try:
        url = validate_url(args.url)

        if not args.quiet:
            print_info(f"Target URL: {url}")
            print_info(f"Output: {args.output}")
            print_info(f"Depth: {args.depth}, Assets: {args.assets}, Workers: {args.workers}")

        crawler = WebsiteCrawler(
            url=url,
            output_dir=args.output,
            max_depth=args.depth,
            download_assets=args.assets,
            delay=args.delay,
            workers=args.workers,
            timeout=args.timeout,
            hash_asset_names=args.hash_asset_names
        )
        handler_installed = _install_cancel_handler(crawler)

        result = await crawler.crawl()

        if not args.quiet:
            print_summary(result)

        print_success(f"Website cloned to: {os.path.abspath(args.output)}")

        if args.extract:
            print_status("Extracting design elements...")
            report = DesignExtractor(args.output, args.design_output).extract()
            print_success(
                f"Design report saved to: "
                f"{report.output_files.get('design_report', os.path.abspath(args.design_output))}"
            )

        return 0

    except KeyboardInterrupt:
        print_error("Crawl interrupted by user")
        return 1
    except ValueError as e:
        print_error(f"Invalid input: {e}")
        return 1
    except ClonerError as e:
        print_error(f"Error: {e}")
        return 1
    except Exception as e:
        print_error(f"Error: {e}")
        if args.verbose:
            logging.getLogger("site_ripper").exception("Unhandled error")
        return 1
    finally:
        if handler_installed:
            asyncio.get_running_loop().remove_signal_handler(signal.SIGINT)


def run() -> None:
    """Entry point wrapper for running as module."""
    sys.exit(asyncio.run(main()))


if __name__ == '__main__':
    run()
