"""
Tests for the asset downloader using a stub fetcher.
"""

import asyncio
import os

import pytest

from site_ripper.crawler.downloader import AssetDownloader
from site_ripper.crawler.fetcher import FetchResult
from site_ripper.errors import FetchError, FilesystemError


class StubFetcher:
    """Returns fixed bodies and counts calls per URL."""

    def __init__(self, bodies, delay=0.01):
        self.bodies = bodies
        self.delay = delay
        self.calls = []

    async def fetch(self, url):
        self.calls.append(url)
        await asyncio.sleep(self.delay)
        if url not in self.bodies:
            raise FetchError(url, 404)
        return FetchResult(url, url, 200, 'application/octet-stream', self.bodies[url])


class TestAssetDownloader:
    """Test download, reuse and failure recording"""

    @pytest.mark.asyncio
    async def test_concurrent_requests_share_one_fetch(self, temp_dir):
        fetcher = StubFetcher({'https://e.com/a.css': b'a{}'})
        downloader = AssetDownloader(temp_dir, fetcher)

        records = await asyncio.gather(*[
            downloader.download('https://e.com/a.css') for _ in range(5)
        ])

        assert fetcher.calls == ['https://e.com/a.css']
        assert all(r is not None and r.local_path == records[0].local_path for r in records)
        with open(records[0].local_path, 'rb') as f:
            assert f.read() == b'a{}'

    @pytest.mark.asyncio
    async def test_existing_file_is_not_refetched(self, temp_dir):
        fetcher = StubFetcher({'https://e.com/logo.png': b'new'})
        downloader = AssetDownloader(temp_dir, fetcher)

        target = downloader.local_path_for('https://e.com/logo.png')
        os.makedirs(os.path.dirname(target))
        with open(target, 'wb') as f:
            f.write(b'old')

        record = await downloader.download('https://e.com/logo.png')

        assert record.skipped
        assert fetcher.calls == []
        with open(target, 'rb') as f:
            assert f.read() == b'old'

    @pytest.mark.asyncio
    async def test_failed_download_recorded(self, temp_dir):
        downloader = AssetDownloader(temp_dir, StubFetcher({}))

        record = await downloader.download('https://e.com/missing.js')

        assert record is None
        assert downloader.failed_assets == {'https://e.com/missing.js'}
        assert downloader.errors[0]['type'] == 'download_error'

    def test_save_page_error_raises_filesystem_error(self, temp_dir):
        downloader = AssetDownloader(temp_dir, StubFetcher({}))
        blocker = os.path.join(temp_dir, 'file')
        with open(blocker, 'w') as f:
            f.write('x')

        with pytest.raises(FilesystemError):
            downloader.save_page('https://e.com/', '<html></html>', os.path.join(blocker, 'index.html'))
