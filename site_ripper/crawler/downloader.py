"""
Asset downloader for fetching and saving website resources.

Assets land in per-type buckets under <output>/assets/. A destination
file that already exists is never fetched again, so re-running a crawl
over the same output directory reuses what is on disk.
"""

import asyncio
import os
from dataclasses import dataclass
from typing import Dict, List, Optional, Set

from .fetcher import Fetcher
from ..errors import FetchError, FilesystemError
from ..utils.log import get_logger
from ..utils.paths import get_asset_path, get_asset_type, ensure_parent_dir


@dataclass
class AssetRecord:
    """A resource saved (or found already saved) under the output tree."""

    url: str
    asset_type: str
    local_path: str
    skipped: bool = False


class AssetDownloader:
    """
    Downloads assets through a Fetcher and writes them to disk.

    Concurrent requests for the same destination share a single download.
    """

    def __init__(
        self,
        output_dir: str,
        fetcher: Fetcher,
        delay: float = 0.0,
        hash_names: bool = False
    ):
        """
        Initialize the asset downloader.

        Args:
            output_dir: Base output directory for saving assets
            fetcher: Fetcher used for all requests
            delay: Seconds to wait before each request
            hash_names: Qualify asset file names with a hash of their URL
        """
        self.output_dir = output_dir
        self.fetcher = fetcher
        self.delay = delay
        self.hash_names = hash_names
        self.logger = get_logger("downloader")

        # Track downloaded assets
        self._downloaded: Dict[str, str] = {}  # URL -> local path
        self._skipped: Dict[str, str] = {}
        self._failed: Set[str] = set()
        self._errors: List[Dict] = []

        # Destination path -> in-flight download
        self._inflight: Dict[str, asyncio.Task] = {}

    @property
    def downloaded_assets(self) -> Dict[str, str]:
        """Get mapping of URL to local path for assets fetched this run."""
        return self._downloaded.copy()

    @property
    def skipped_assets(self) -> Dict[str, str]:
        """Get mapping of URL to local path for assets already on disk."""
        return self._skipped.copy()

    @property
    def failed_assets(self) -> Set[str]:
        """Get set of URLs that failed to download."""
        return self._failed.copy()

    @property
    def errors(self) -> List[Dict]:
        return list(self._errors)

    def local_path_for(self, url: str) -> str:
        """Get the destination path an asset URL maps to."""
        return get_asset_path(url, get_asset_type(url), self.output_dir, self.hash_names)

    async def download(self, url: str) -> Optional[AssetRecord]:
        """
        Download a single asset unless its destination already exists.

        Args:
            url: Absolute asset URL

        Returns:
            AssetRecord on success or skip, None if the download failed
        """
        local_path = self.local_path_for(url)

        task = self._inflight.get(local_path)
        if task is None:
            if os.path.exists(local_path):
                self._skipped.setdefault(url, local_path)
                self.logger.debug(f"Already on disk, skipping: {url}")
                return AssetRecord(url, get_asset_type(url), local_path, skipped=True)

            task = asyncio.ensure_future(self._download(url, local_path))
            self._inflight[local_path] = task

        return await asyncio.shield(task)

    async def _download(self, url: str, local_path: str) -> Optional[AssetRecord]:
        asset_type = get_asset_type(url)

        try:
            if self.delay:
                await asyncio.sleep(self.delay)

            result = await self.fetcher.fetch(url)

            ensure_parent_dir(local_path)
            with open(local_path, 'wb') as f:
                f.write(result.content)

        except FetchError as e:
            self.logger.error(f"Error downloading asset {url}: {e}")
            self._record_failure(url, e, 'download_error')
            return None
        except OSError as e:
            self.logger.error(f"Error saving asset {url}: {e}")
            self._record_failure(url, e, 'save_error')
            return None

        self._downloaded[url] = local_path
        self.logger.info(f"Downloaded asset: {os.path.relpath(local_path, self.output_dir)}")

        return AssetRecord(url, asset_type, local_path)

    def _record_failure(self, url: str, error: Exception, error_type: str) -> None:
        self._failed.add(url)
        self._errors.append({
            'url': url,
            'error': str(error),
            'type': error_type
        })

    def save_page(self, url: str, html_content: str, local_path: str) -> None:
        """
        Save HTML content to a local file.

        Args:
            url: Original page URL
            html_content: HTML content to save
            local_path: Local file path

        Raises:
            FilesystemError: If the file could not be written
        """
        try:
            ensure_parent_dir(local_path)
            with open(local_path, 'w', encoding='utf-8') as f:
                f.write(html_content)
        except OSError as e:
            raise FilesystemError(local_path, e) from e

        self.logger.info(f"Saved: {local_path}")
