"""
Main website crawler module.

Drives a queue of crawl tasks through a bounded pool of workers. Each
worker fetches a page, downloads its assets, rewrites references to the
local copies, queues same-origin links one level deeper, and saves the
page into a tree mirroring the URL paths.
"""

import asyncio
import json
import os
import time
from dataclasses import dataclass, field
from typing import Dict, Set, List, Optional, Any

from bs4 import BeautifulSoup

from .fetcher import Fetcher
from .extractor import AssetExtractor, ExtractedPage
from .downloader import AssetDownloader
from .rewrite import LinkRewriter
from ..errors import FetchError, FilesystemError, ParseError
from ..utils.html import parse_html
from ..utils.log import get_logger
from ..utils.paths import (
    normalize_url,
    url_to_path,
    create_output_structure,
    ensure_dir,
    is_same_origin,
)
from ..utils.constants import (
    DEFAULT_MAX_DEPTH,
    DEFAULT_CRAWL_DELAY,
    DEFAULT_WORKERS,
    DEFAULT_TIMEOUT,
    DEFAULT_MAX_REDIRECTS,
    DEFAULT_USER_AGENT,
)


@dataclass
class CrawlTask:
    """A URL waiting to be crawled, with its distance from the seed."""

    url: str
    depth: int


@dataclass
class PageRecord:
    """A fetched page and where it will be written."""

    url: str
    depth: int
    soup: BeautifulSoup
    local_path: str


@dataclass
class CrawlResult:
    """Results of the crawling operation."""

    pages_crawled: int = 0
    assets_downloaded: int = 0
    assets_skipped: int = 0
    visited: List[str] = field(default_factory=list)
    failed: List[str] = field(default_factory=list)
    errors: List[Dict] = field(default_factory=list)
    sitemap: List[str] = field(default_factory=list)
    duration_seconds: float = 0.0
    pages_failed: int = 0
    cancelled: bool = False


class WebsiteCrawler:
    """
    Main website crawler class.

    Each instance owns its visited and failed sets, so separate crawls
    never share state. A URL is added to the visited set synchronously
    when it is queued, before any fetch starts, which guarantees it is
    fetched at most once per run.
    """

    def __init__(
        self,
        url: str,
        output_dir: str,
        max_depth: int = DEFAULT_MAX_DEPTH,
        download_assets: bool = True,
        delay: float = DEFAULT_CRAWL_DELAY,
        workers: int = DEFAULT_WORKERS,
        timeout: float = DEFAULT_TIMEOUT,
        max_redirects: int = DEFAULT_MAX_REDIRECTS,
        hash_asset_names: bool = False,
        same_origin_images: bool = True,
        user_agent: str = DEFAULT_USER_AGENT,
        fetcher: Optional[Fetcher] = None
    ):
        """
        Initialize the website crawler.

        Args:
            url: Seed URL to crawl
            output_dir: Directory to save the cloned website
            max_depth: Maximum number of link hops from the seed
            download_assets: Download stylesheets, scripts and images
            delay: Delay before each request in seconds
            workers: Number of pages processed concurrently
            timeout: Per-request timeout in seconds
            max_redirects: Maximum redirect hops per request
            hash_asset_names: Qualify asset file names with a URL hash
            same_origin_images: Only download images from the seed origin
            user_agent: User agent string for requests
            fetcher: Optional pre-built fetcher (left open after the crawl)
        """
        self.start_url = normalize_url(url)
        if not self.start_url:
            raise ValueError(f"Invalid URL: {url}")
        if max_depth < 0:
            raise ValueError("max_depth must be >= 0")

        self.output_dir = os.path.abspath(output_dir)
        self.max_depth = max_depth
        self.download_assets = download_assets
        self.delay = delay
        self.workers = max(1, workers)
        self.timeout = timeout
        self.max_redirects = max_redirects
        self.hash_asset_names = hash_asset_names
        self.user_agent = user_agent

        # Links are followed only within this origin
        self.origin_url = self.start_url

        self.logger = get_logger("crawler")

        self._fetcher = fetcher
        self.extractor = AssetExtractor(self.start_url, same_origin_images)
        self.rewriter = LinkRewriter()
        self.downloader: Optional[AssetDownloader] = None

        # Tracking sets
        self._visited_urls: Set[str] = set()
        self._failed_urls: Set[str] = set()
        self._saved_pages: Dict[str, str] = {}  # URL -> local path
        self._errors: List[Dict] = []
        self._pages_failed = 0

        self._queue: Optional[asyncio.Queue] = None
        self._cancel_event = asyncio.Event()
        self._fatal: Optional[Exception] = None

    @property
    def visited_urls(self) -> Set[str]:
        return set(self._visited_urls)

    @property
    def failed_urls(self) -> Set[str]:
        return set(self._failed_urls)

    @property
    def saved_pages(self) -> Dict[str, str]:
        return dict(self._saved_pages)

    @property
    def cancelled(self) -> bool:
        return self._cancel_event.is_set()

    def cancel(self) -> None:
        """
        Stop dispatching new pages.

        Pages already being processed finish normally; queued ones are dropped.
        """
        if not self._cancel_event.is_set():
            self.logger.warning("Crawl cancelled, draining in-flight pages")
        self._cancel_event.set()

    async def crawl(self) -> CrawlResult:
        """
        Run the crawl until the queue is empty or the crawl is cancelled.

        Returns:
            CrawlResult with statistics

        Raises:
            FilesystemError: If the seed page could not be written
        """
        start_time = time.time()

        self.logger.info(f"Starting to clone {self.start_url} to {self.output_dir}")
        self.logger.info(
            f"Max depth: {self.max_depth}, Download assets: {self.download_assets}, "
            f"Workers: {self.workers}"
        )

        if self.download_assets:
            create_output_structure(self.output_dir)
        else:
            ensure_dir(self.output_dir)

        fetcher = self._fetcher or Fetcher(
            timeout=self.timeout,
            max_redirects=self.max_redirects,
            user_agent=self.user_agent
        )
        owns_fetcher = self._fetcher is None

        self.downloader = AssetDownloader(
            output_dir=self.output_dir,
            fetcher=fetcher,
            delay=self.delay,
            hash_names=self.hash_asset_names
        )

        self._queue = asyncio.Queue()
        self._enqueue(self.start_url, 0)

        workers = [
            asyncio.ensure_future(self._worker(fetcher))
            for _ in range(self.workers)
        ]

        try:
            await self._queue.join()
        finally:
            for worker in workers:
                worker.cancel()
            await asyncio.gather(*workers, return_exceptions=True)
            if owns_fetcher:
                await fetcher.close()

        self._pages_failed = len(self._failed_urls)
        self._merge_download_errors()

        if self._fatal is not None:
            raise self._fatal

        self._generate_sitemap()
        self._generate_error_log()

        duration = time.time() - start_time

        result = CrawlResult(
            pages_crawled=len(self._saved_pages),
            pages_failed=self._pages_failed,
            assets_downloaded=len(self.downloader.downloaded_assets),
            assets_skipped=len(self.downloader.skipped_assets),
            visited=sorted(self._visited_urls),
            failed=sorted(self._failed_urls),
            errors=list(self._errors),
            sitemap=sorted(self._saved_pages),
            duration_seconds=duration,
            cancelled=self.cancelled
        )

        self.logger.info(
            f"Pages Downloaded: {result.pages_crawled}, "
            f"Pages Failed: {self._pages_failed}, "
            f"Assets: {result.assets_downloaded} downloaded, {result.assets_skipped} reused "
            f"in {duration:.1f}s"
        )

        return result

    def _enqueue(self, url: str, depth: int) -> bool:
        """
        Queue a URL unless it was already seen or is too deep.

        Runs without awaiting, so the visited check and insert cannot
        interleave with another worker.
        """
        if self.cancelled:
            return False
        if depth > self.max_depth:
            return False
        if url in self._visited_urls:
            return False

        self._visited_urls.add(url)
        self._queue.put_nowait(CrawlTask(url, depth))
        return True

    async def _worker(self, fetcher: Fetcher) -> None:
        """Take tasks off the queue until cancelled by crawl()."""
        while True:
            task = await self._queue.get()
            try:
                if self.cancelled:
                    self.logger.debug(f"Dropping {task.url} (cancelled)")
                    continue
                await self._crawl_page(fetcher, task)
            except FilesystemError as e:
                self._record_failure(task.url, e, 'save_error')
                if task.depth == 0:
                    self._fatal = e
                    self.cancel()
            except Exception as e:
                self.logger.error(f"Error cloning {task.url}: {e}")
                self._record_failure(task.url, e, 'crawl_error')
            finally:
                self._queue.task_done()

    async def _crawl_page(self, fetcher: Fetcher, task: CrawlTask) -> bool:
        """
        Crawl a single page.

        Args:
            fetcher: Fetcher to use
            task: Task holding the URL and depth

        Returns:
            True if the page was saved, False otherwise
        """
        url, depth = task.url, task.depth
        self.logger.info(f"[{len(self._saved_pages) + 1}] Cloning: {url} (depth: {depth})")

        try:
            if self.delay:
                await asyncio.sleep(self.delay)
            result = await fetcher.fetch(url)
        except FetchError as e:
            self.logger.error(f"Error cloning {url}: {e}")
            self._record_failure(url, e, 'fetch_error')
            return False

        final_url = normalize_url(result.final_url) or url
        if final_url != url:
            if not is_same_origin(final_url, self.origin_url):
                if depth == 0:
                    # The seed decides the origin, e.g. example.com -> www.example.com
                    self.logger.info(f"Seed redirected to {final_url}, following that origin")
                    self.origin_url = final_url
                    self.extractor.base_url = final_url
                else:
                    self.logger.info(f"Skipping external redirect: {url} -> {final_url}")
                    self._record_failure(url, f"Redirected off-site to {final_url}", 'external_redirect')
                    return False
            self._visited_urls.add(final_url)

        if not result.is_text or "html" not in result.content_type.lower():
            self.logger.warning(f"Skipping non-HTML response for {url} ({result.content_type})")
            self._record_failure(url, f"Not an HTML page: {result.content_type}", 'not_html')
            return False

        try:
            soup = parse_html(result.body, url)
        except ParseError as e:
            self.logger.error(str(e))
            self._record_failure(url, e, 'parse_error')
            return False

        page = PageRecord(
            url=url,
            depth=depth,
            soup=soup,
            local_path=url_to_path(url, self.output_dir)
        )

        # Resolve against the raw URL; normalizing drops the trailing slash of /dir/
        extracted = self.extractor.extract(page.soup, result.final_url or url)

        if self.download_assets:
            await self._process_assets(page, extracted)

        if depth < self.max_depth:
            queued = sum(1 for link in extracted.links if self._enqueue(link, depth + 1))
            self.logger.debug(f"Queued {queued} new links from {url}")

        self.downloader.save_page(url, str(page.soup), page.local_path)
        self._saved_pages[url] = page.local_path
        return True

    async def _process_assets(self, page: PageRecord, extracted: ExtractedPage) -> None:
        """Download a page's assets and point its references at the local copies."""
        references = extracted.asset_references()
        if not references:
            return

        records = await asyncio.gather(
            *(self.downloader.download(ref.url) for ref in references),
            return_exceptions=True
        )

        for reference, record in zip(references, records):
            if isinstance(record, Exception):
                self.logger.error(f"Error processing {reference.kind} {reference.url}: {record}")
                continue
            if record is None:
                continue
            self.rewriter.rewrite_reference(reference, page.local_path, record.local_path)

        self.rewriter.strip_base_tags(page.soup)

    def _record_failure(self, url: str, error: Any, error_type: str) -> None:
        self._failed_urls.add(url)
        self._errors.append({
            'url': url,
            'error': str(error),
            'type': error_type
        })

    def _merge_download_errors(self) -> None:
        if self.downloader is None:
            return
        self._failed_urls.update(self.downloader.failed_assets)
        self._errors.extend(self.downloader.errors)

    def _generate_sitemap(self) -> None:
        """Generate sitemap.json file."""
        sitemap_path = os.path.join(self.output_dir, 'sitemap.json')

        sitemap_data = {
            'base_url': self.start_url,
            'origin': self.origin_url,
            'max_depth': self.max_depth,
            'total_pages': len(self._saved_pages),
            'total_assets': len(self.downloader.downloaded_assets),
            'pages': {
                url: os.path.relpath(path, self.output_dir).replace('\\', '/')
                for url, path in sorted(self._saved_pages.items())
            },
            'assets': sorted(
                list(self.downloader.downloaded_assets.keys()) +
                list(self.downloader.skipped_assets.keys())
            ),
            'failed': sorted(self._failed_urls)
        }

        with open(sitemap_path, 'w', encoding='utf-8') as f:
            json.dump(sitemap_data, f, indent=2, ensure_ascii=False)

        self.logger.info(f"Generated sitemap: {sitemap_path}")

    def _generate_error_log(self) -> None:
        """Generate errors.json file if there are errors."""
        if not self._errors:
            return

        errors_path = os.path.join(self.output_dir, 'errors.json')

        with open(errors_path, 'w', encoding='utf-8') as f:
            json.dump(self._errors, f, indent=2, ensure_ascii=False)

        self.logger.info(f"Generated error log: {errors_path}")
