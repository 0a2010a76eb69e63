"""
Batch entry points that work on previously cloned sites.

Both tools select a site by name from a directory of cloned sites:

    site-ripper-static --site example.com
    site-ripper-design --site example.com
    site-ripper-design --all
"""

import argparse
import logging
import os
from typing import List, Optional

from .analyzer import DesignExtractor
from .errors import SiteNotFoundError
from .static import StaticRewriter
from .utils.constants import DEFAULT_SITES_DIR, DEFAULT_STATIC_DIR, DEFAULT_REPORTS_DIR
from .utils.log import setup_logger, print_error, print_info, print_success, print_status


def list_sites(sites_dir: str) -> List[str]:
    """Names of the site directories under sites_dir, sorted."""
    if not os.path.isdir(sites_dir):
        return []
    return sorted(
        entry.name for entry in os.scandir(sites_dir)
        if entry.is_dir()
    )


def resolve_site(sites_dir: str, name: Optional[str]) -> str:
    """
    Get the directory of a cloned site.

    Raises:
        SiteNotFoundError: If no name was given or the site does not exist
    """
    available = list_sites(sites_dir)
    if not name or name not in available:
        raise SiteNotFoundError(name, available)
    return os.path.join(sites_dir, name)


def report_missing_site(error: SiteNotFoundError, sites_dir: str, prog: str) -> int:
    """Print the available sites after a bad --site and return the exit code."""
    if error.name:
        print_error(f"{error} in {os.path.abspath(sites_dir)}")
    else:
        print_error("Please specify a site with --site")

    if error.available:
        print_info("Available sites:")
        for site in error.available:
            print_status(f"  - {site}", "white")
        print_status(f"\nRun with: {prog} --site [site-name]", "dim")
    else:
        print_info("No sites found. Run site-ripper first.")
    return 1


def _base_parser(prog: str, description: str) -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog=prog, description=description)
    parser.add_argument(
        '--site', '-s',
        type=str,
        help='Name of the cloned site directory'
    )
    parser.add_argument(
        '--sites-dir',
        type=str,
        default=DEFAULT_SITES_DIR,
        help=f'Directory holding cloned sites (default: {DEFAULT_SITES_DIR})'
    )
    parser.add_argument('--verbose', '-v', action='store_true', help='Enable verbose logging')
    parser.add_argument('--quiet', '-q', action='store_true', help='Suppress output except errors')
    return parser


def _setup_logging(args: argparse.Namespace) -> None:
    level = logging.DEBUG if args.verbose else (logging.WARNING if args.quiet else logging.INFO)
    setup_logger(level=level)


def static_main(argv: Optional[List[str]] = None) -> int:
    """Convert a cloned site into a simplified static copy."""
    parser = _base_parser(
        'site-ripper-static',
        'Convert a cloned site to simplified static HTML'
    )
    parser.add_argument(
        '--output-root',
        type=str,
        default=DEFAULT_STATIC_DIR,
        help=f'Directory for static copies (default: {DEFAULT_STATIC_DIR})'
    )
    parser.add_argument(
        '--no-banner',
        action='store_true',
        help='Do not inject the static preview banner'
    )
    args = parser.parse_args(argv)
    _setup_logging(args)

    try:
        input_dir = resolve_site(args.sites_dir, args.site)
    except SiteNotFoundError as e:
        return report_missing_site(e, args.sites_dir, parser.prog)

    output_dir = os.path.join(args.output_root, args.site)
    print_status(f'Converting cloned site "{args.site}" to static HTML...')

    result = StaticRewriter(input_dir, output_dir, banner=not args.no_banner).rewrite()

    print_success(f"Conversion complete! {result.pages_written} pages written")
    if result.errors:
        print_error(f"{len(result.errors)} pages could not be converted")
    print_info(f"Open {os.path.join(output_dir, 'index.html')} in your browser")
    return 0


def design_main(argv: Optional[List[str]] = None) -> int:
    """Extract design reports from one or all cloned sites."""
    parser = _base_parser(
        'site-ripper-design',
        'Extract a design report from a cloned site'
    )
    parser.add_argument(
        '--all',
        action='store_true',
        help='Process every cloned site'
    )
    parser.add_argument(
        '--output-root',
        type=str,
        default=DEFAULT_REPORTS_DIR,
        help=f'Directory for design reports (default: {DEFAULT_REPORTS_DIR})'
    )
    parser.add_argument(
        '--max-samples',
        type=int,
        default=None,
        help='Maximum samples per component category in the report'
    )
    args = parser.parse_args(argv)
    _setup_logging(args)

    if args.all:
        sites = list_sites(args.sites_dir)
        if not sites:
            print_error(f"No cloned sites found in {os.path.abspath(args.sites_dir)}")
            return 1
    else:
        try:
            resolve_site(args.sites_dir, args.site)
        except SiteNotFoundError as e:
            return report_missing_site(e, args.sites_dir, parser.prog)
        sites = [args.site]

    failures = 0
    for site in sites:
        site_dir = os.path.join(args.sites_dir, site)
        output_dir = os.path.join(args.output_root, site)
        try:
            report = DesignExtractor(site_dir, output_dir, args.max_samples).extract()
        except OSError as e:
            print_error(f"Error processing {site}: {e}")
            failures += 1
            continue
        print_success(
            f"{site}: {len(report.colors)} colors, {len(report.fonts)} fonts -> "
            f"{os.path.join(output_dir, 'design-report.html')}"
        )

    return 1 if failures == len(sites) else 0

