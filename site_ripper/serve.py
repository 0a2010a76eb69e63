"""
Local preview server for a cloned site.

Usage:
    site-ripper-serve --site example.com --port 8080
"""

import argparse
import logging
import mimetypes
import os
from typing import List, Optional

from aiohttp import web

from .batch import resolve_site, report_missing_site
from .errors import SiteNotFoundError
from .utils.constants import DEFAULT_SITES_DIR, DEFAULT_SERVE_PORT
from .utils.log import get_logger, setup_logger, print_info, print_success

SITE_DIR_KEY = web.AppKey("site_dir", str)

logger = get_logger("serve")


def resolve_request_path(site_dir: str, request_path: str) -> Optional[str]:
    """
    Map a request path onto a file in the site directory.

    Returns:
        Absolute file path, or None if it does not exist or escapes the root
    """
    root = os.path.realpath(site_dir)
    relative = request_path.lstrip('/')
    if not relative:
        relative = 'index.html'

    candidate = os.path.realpath(os.path.join(root, relative))
    if candidate != root and not candidate.startswith(root + os.sep):
        return None

    if os.path.isdir(candidate):
        candidate = os.path.join(candidate, 'index.html')

    if not os.path.isfile(candidate):
        return None
    return candidate


async def handle_file(request: web.Request) -> web.StreamResponse:
    site_dir = request.app[SITE_DIR_KEY]
    # request.path is already decoded and excludes the query string
    file_path = resolve_request_path(site_dir, request.path)

    if file_path is None:
        logger.info(f"404 {request.path}")
        return web.Response(status=404, text="404 Not Found")

    content_type, _ = mimetypes.guess_type(file_path)
    logger.debug(f"200 {request.path} -> {file_path}")

    with open(file_path, 'rb') as f:
        body = f.read()

    return web.Response(body=body, content_type=content_type or 'application/octet-stream')


def create_app(site_dir: str) -> web.Application:
    """Build the aiohttp application serving one site directory."""
    app = web.Application()
    app[SITE_DIR_KEY] = os.path.abspath(site_dir)
    app.router.add_get('/{tail:.*}', handle_file)
    return app


def main(argv: Optional[List[str]] = None) -> int:
    """Parse arguments and serve the selected site."""
    parser = argparse.ArgumentParser(
        prog='site-ripper-serve',
        description='Serve a cloned site over local HTTP'
    )
    parser.add_argument('--site', '-s', type=str, help='Name of the cloned site directory')
    parser.add_argument(
        '--sites-dir',
        type=str,
        default=DEFAULT_SITES_DIR,
        help=f'Directory holding cloned sites (default: {DEFAULT_SITES_DIR})'
    )
    parser.add_argument(
        '--host',
        default='127.0.0.1',
        help='Host to bind to (default: 127.0.0.1)'
    )
    parser.add_argument(
        '--port', '-p',
        type=int,
        default=DEFAULT_SERVE_PORT,
        help=f'Port to listen on (default: {DEFAULT_SERVE_PORT})'
    )
    parser.add_argument('--verbose', '-v', action='store_true', help='Log every request')

    args = parser.parse_args(argv)
    setup_logger(level=logging.DEBUG if args.verbose else logging.INFO)

    try:
        site_dir = resolve_site(args.sites_dir, args.site)
    except SiteNotFoundError as e:
        return report_missing_site(e, args.sites_dir, parser.prog)

    print_success(f"Serving {site_dir}")
    print_info(f"Open http://{args.host}:{args.port}/ in your browser (Ctrl+C to stop)")

    web.run_app(create_app(site_dir), host=args.host, port=args.port, print=None)
    return 0
