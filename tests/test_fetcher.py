"""
Tests for the HTTP fetcher.
"""

import pytest

from site_ripper.crawler.fetcher import Fetcher, FetchResult, is_text_content_type
from site_ripper.errors import FetchError, FetchTimeoutError, TooManyRedirectsError


class TestContentType:
    """Test text vs. binary classification"""

    def test_text_types(self):
        assert is_text_content_type('text/html; charset=utf-8')
        assert is_text_content_type('text/css')
        assert is_text_content_type('application/javascript')
        assert is_text_content_type('application/json')

    def test_binary_types(self):
        assert not is_text_content_type('image/png')
        assert not is_text_content_type('font/woff2')
        assert not is_text_content_type('')

    def test_result_content_bytes(self):
        result = FetchResult('u', 'u', 200, 'text/html', 'héllo')
        assert result.is_text
        assert result.content == 'héllo'.encode('utf-8')


class TestFetcher:
    """Test fetching against a local server"""

    @pytest.mark.asyncio
    async def test_fetch_html_as_text(self, fake_site, serve):
        fake_site.page('/', '<html><body>Hello</body></html>')

        async with serve(fake_site) as server:
            async with Fetcher(timeout=5) as fetcher:
                result = await fetcher.fetch(str(server.make_url('/')))

        assert result.status == 200
        assert result.is_text
        assert 'Hello' in result.body
        assert result.redirects == 0

    @pytest.mark.asyncio
    async def test_fetch_image_as_bytes(self, fake_site, serve):
        fake_site.asset('/logo.png', b'\x89PNG\r\n', 'image/png')

        async with serve(fake_site) as server:
            async with Fetcher(timeout=5) as fetcher:
                result = await fetcher.fetch(str(server.make_url('/logo.png')))

        assert not result.is_text
        assert result.body == b'\x89PNG\r\n'

    @pytest.mark.asyncio
    async def test_redirect_is_followed(self, fake_site, serve):
        fake_site.redirect('/old', '/new')
        fake_site.page('/new', '<p>moved</p>')

        async with serve(fake_site) as server:
            async with Fetcher(timeout=5) as fetcher:
                result = await fetcher.fetch(str(server.make_url('/old')))
                log = list(fetcher.fetch_log)

        assert result.final_url.endswith('/new')
        assert result.redirects == 1
        assert 'moved' in result.body
        assert len(log) == 2
        assert fake_site.hits == ['/old', '/new']

    @pytest.mark.asyncio
    async def test_server_error_raises(self, fake_site, serve):
        fake_site.page('/broken', 'oops', status=500)

        async with serve(fake_site) as server:
            async with Fetcher(timeout=5) as fetcher:
                with pytest.raises(FetchError) as excinfo:
                    await fetcher.fetch(str(server.make_url('/broken')))

        assert excinfo.value.status == 500
        assert 'HTTP Error: 500' in str(excinfo.value)

    @pytest.mark.asyncio
    async def test_not_found_raises(self, fake_site, serve):
        async with serve(fake_site) as server:
            async with Fetcher(timeout=5) as fetcher:
                with pytest.raises(FetchError) as excinfo:
                    await fetcher.fetch(str(server.make_url('/missing')))

        assert excinfo.value.status == 404

    @pytest.mark.asyncio
    async def test_redirect_loop_is_capped(self, fake_site, serve):
        fake_site.redirect('/loop', '/loop')

        async with serve(fake_site) as server:
            async with Fetcher(timeout=5, max_redirects=3) as fetcher:
                with pytest.raises(TooManyRedirectsError):
                    await fetcher.fetch(str(server.make_url('/loop')))

        # The original request plus three followed hops
        assert fake_site.count('/loop') == 4

    @pytest.mark.asyncio
    async def test_timeout_raises(self, fake_site, serve):
        fake_site.slow('/slow', 1.0)

        async with serve(fake_site) as server:
            async with Fetcher(timeout=0.2) as fetcher:
                with pytest.raises(FetchTimeoutError):
                    await fetcher.fetch(str(server.make_url('/slow')))

    @pytest.mark.asyncio
    async def test_connection_error_raises_fetch_error(self):
        async with Fetcher(timeout=2) as fetcher:
            with pytest.raises(FetchError):
                # Port 9 on localhost is normally closed
                await fetcher.fetch('http://127.0.0.1:9/')
