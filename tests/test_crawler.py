"""
Tests for the website crawler.

Every test crawls an in-process site served on localhost.
"""

import json
import os
from unittest.mock import patch

import pytest

from site_ripper.crawler import AssetDownloader, WebsiteCrawler
from site_ripper.errors import FilesystemError, ParseError
from site_ripper.utils.html import parse_html as real_parse_html


def page(body: str, head: str = "") -> str:
    return f"<html><head>{head}</head><body>{body}</body></html>"


def make_crawler(server, output_dir, **kwargs) -> WebsiteCrawler:
    kwargs.setdefault('delay', 0)
    kwargs.setdefault('timeout', 5)
    return WebsiteCrawler(str(server.make_url('/')), output_dir, **kwargs)


class TestCrawlerSetup:
    """Test constructor validation"""

    def test_invalid_url_rejected(self, temp_dir):
        with pytest.raises(ValueError):
            WebsiteCrawler('not a url', temp_dir)

    def test_negative_depth_rejected(self, temp_dir):
        with pytest.raises(ValueError):
            WebsiteCrawler('https://example.com', temp_dir, max_depth=-1)

    def test_instances_do_not_share_state(self, temp_dir):
        first = WebsiteCrawler('https://example.com', temp_dir)
        second = WebsiteCrawler('https://example.com', temp_dir)
        first._visited_urls.add('https://example.com/x')
        assert second.visited_urls == set()

    def test_cancel_sets_event(self, temp_dir):
        crawler = WebsiteCrawler('https://example.com', temp_dir)
        assert not crawler.cancelled

        crawler.cancel()
        crawler.cancel()

        assert crawler._cancel_event.is_set()
        assert crawler.cancelled


class TestCrawl:
    """Test crawling behaviour end to end"""

    @pytest.mark.asyncio
    async def test_pages_mirror_url_paths(self, fake_site, serve, temp_dir):
        fake_site.page('/', page('<a href="/blog">Blog</a> <a href="/about.html">About</a>'))
        fake_site.page('/blog', page('<p>blog</p>'))
        fake_site.page('/about.html', page('<p>about</p>'))

        async with serve(fake_site) as server:
            result = await make_crawler(server, temp_dir, download_assets=False).crawl()

        assert result.pages_crawled == 3
        assert os.path.isfile(os.path.join(temp_dir, 'index.html'))
        assert os.path.isfile(os.path.join(temp_dir, 'blog', 'index.html'))
        assert os.path.isfile(os.path.join(temp_dir, 'about.html'))

    @pytest.mark.asyncio
    async def test_no_url_fetched_twice(self, fake_site, serve, temp_dir):
        fake_site.page('/', page('<a href="/a">A</a><a href="/b">B</a><a href="/a#top">A again</a>'))
        fake_site.page('/a', page('<a href="/">home</a><a href="/b">B</a>'))
        fake_site.page('/b', page('<a href="/a/">A</a><a href="/">home</a>'))

        async with serve(fake_site) as server:
            await make_crawler(server, temp_dir, max_depth=5, workers=3).crawl()

        assert fake_site.count('/') == 1
        assert fake_site.count('/a') == 1
        assert fake_site.count('/b') == 1

    @pytest.mark.asyncio
    async def test_depth_limit(self, fake_site, serve, temp_dir):
        fake_site.page('/', page('<a href="/one">1</a>'))
        fake_site.page('/one', page('<a href="/two">2</a>'))
        fake_site.page('/two', page('<a href="/three">3</a>'))
        fake_site.page('/three', page('<p>deep</p>'))

        async with serve(fake_site) as server:
            result = await make_crawler(server, temp_dir, max_depth=1).crawl()

        assert fake_site.hits == ['/', '/one']
        assert result.pages_crawled == 2

    @pytest.mark.asyncio
    async def test_depth_zero_only_fetches_seed(self, fake_site, serve, temp_dir):
        fake_site.page('/', page('<a href="/one">1</a>'))
        fake_site.page('/one', page('<p>one</p>'))

        async with serve(fake_site) as server:
            result = await make_crawler(server, temp_dir, max_depth=0).crawl()

        assert fake_site.hits == ['/']
        assert result.pages_crawled == 1

    @pytest.mark.asyncio
    async def test_one_failing_page_does_not_stop_the_crawl(self, fake_site, serve, temp_dir):
        links = ''.join(f'<a href="/p{i}">{i}</a>' for i in range(9))
        fake_site.page('/', page(links))
        for i in range(8):
            fake_site.page(f'/p{i}', page(f'<p>{i}</p>'))
        fake_site.page('/p8', 'server error', status=500)

        async with serve(fake_site) as server:
            result = await make_crawler(server, temp_dir, max_depth=1).crawl()

        assert result.pages_crawled == 9
        assert result.pages_failed == 1
        assert any(url.endswith('/p8') for url in result.failed)
        assert result.errors[0]['type'] == 'fetch_error'

        with open(os.path.join(temp_dir, 'errors.json'), encoding='utf-8') as f:
            errors = json.load(f)
        assert len(errors) == 1

    @pytest.mark.asyncio
    async def test_seed_failure_is_reported(self, fake_site, serve, temp_dir):
        async with serve(fake_site) as server:
            result = await make_crawler(server, temp_dir).crawl()

        assert result.pages_crawled == 0
        assert result.pages_failed == 1

    @pytest.mark.asyncio
    async def test_external_links_not_followed(self, fake_site, serve, temp_dir):
        fake_site.page('/', page('<a href="https://elsewhere.invalid/page">x</a><a href="mailto:a@b.c">m</a>'))

        async with serve(fake_site) as server:
            result = await make_crawler(server, temp_dir).crawl()

        assert result.pages_crawled == 1
        assert result.failed == []

    @pytest.mark.asyncio
    async def test_non_html_link_is_skipped(self, fake_site, serve, temp_dir):
        fake_site.page('/', page('<a href="/data.json">data</a>'))
        fake_site.asset('/data.json', b'{"a": 1}', 'application/json')

        async with serve(fake_site) as server:
            result = await make_crawler(server, temp_dir).crawl()

        assert result.pages_crawled == 1
        assert [e['type'] for e in result.errors] == ['not_html']

    @pytest.mark.asyncio
    async def test_unparseable_page_is_recorded(self, fake_site, serve, temp_dir):
        fake_site.page('/', page('<a href="/broken">broken</a>'))
        fake_site.page('/broken', page('<p>broken</p>'))

        def flaky_parse(html, source='document'):
            if source.endswith('/broken'):
                raise ParseError(source, 'unreadable')
            return real_parse_html(html, source)

        async with serve(fake_site) as server:
            with patch('site_ripper.crawler.crawler.parse_html', side_effect=flaky_parse):
                result = await make_crawler(server, temp_dir).crawl()

        assert result.pages_crawled == 1
        assert [e['type'] for e in result.errors] == ['parse_error']

    @pytest.mark.asyncio
    async def test_relative_links_resolve_against_directory_page(self, fake_site, serve, temp_dir):
        fake_site.page('/', page('<a href="/docs/">Docs</a>'))
        fake_site.redirect('/docs', '/docs/')
        fake_site.page('/docs/', page('<a href="intro">Intro</a>', '<link rel="stylesheet" href="style.css">'))
        fake_site.page('/docs/intro', page('<p>intro</p>'))
        fake_site.asset('/docs/style.css', b'body { color: red; }', 'text/css')

        async with serve(fake_site) as server:
            result = await make_crawler(server, temp_dir).crawl()

        assert fake_site.count('/docs/intro') == 1
        assert fake_site.count('/docs/style.css') == 1
        assert fake_site.count('/intro') == 0
        assert fake_site.count('/style.css') == 0
        assert result.pages_crawled == 3
        assert result.errors == []
        assert os.path.isfile(os.path.join(temp_dir, 'docs', 'intro', 'index.html'))
        assert os.path.isfile(os.path.join(temp_dir, 'assets', 'css', 'style.css'))

    @pytest.mark.asyncio
    async def test_seed_save_failure_is_fatal(self, fake_site, serve, temp_dir):
        fake_site.page('/', page('<a href="/blog">Blog</a>'))
        fake_site.page('/blog', page('<p>blog</p>'))

        def failing_save(downloader, url, html, local_path):
            raise FilesystemError(local_path, OSError('disk full'))

        async with serve(fake_site) as server:
            with patch.object(AssetDownloader, 'save_page', failing_save):
                with pytest.raises(FilesystemError):
                    await make_crawler(server, temp_dir).crawl()

    @pytest.mark.asyncio
    async def test_child_save_failure_is_recorded(self, fake_site, serve, temp_dir):
        fake_site.page('/', page('<a href="/blog">Blog</a><a href="/about">About</a>'))
        fake_site.page('/blog', page('<p>blog</p>'))
        fake_site.page('/about', page('<p>about</p>'))
        real_save = AssetDownloader.save_page

        def failing_save(downloader, url, html, local_path):
            if url.endswith('/blog'):
                raise FilesystemError(local_path, OSError('disk full'))
            return real_save(downloader, url, html, local_path)

        async with serve(fake_site) as server:
            with patch.object(AssetDownloader, 'save_page', failing_save):
                result = await make_crawler(server, temp_dir).crawl()

        assert result.pages_crawled == 2
        assert result.pages_failed == 1
        assert [e['type'] for e in result.errors] == ['save_error']
        assert os.path.isfile(os.path.join(temp_dir, 'about', 'index.html'))

    @pytest.mark.asyncio
    async def test_seed_redirect_adopts_new_origin(self, fake_site, site_factory, serve, temp_dir):
        other = site_factory()
        other.page('/home', page('<a href="/next">Next</a>'))
        other.page('/next', page('<p>next</p>'))

        async with serve(other) as other_server:
            fake_site.redirect('/', str(other_server.make_url('/home')))

            async with serve(fake_site) as server:
                crawler = make_crawler(server, temp_dir)
                result = await crawler.crawl()

            new_origin = str(other_server.make_url('/'))

        assert crawler.origin_url.startswith(new_origin.rstrip('/'))
        assert other.count('/next') == 1
        assert result.pages_crawled == 2
        assert result.errors == []

    @pytest.mark.asyncio
    async def test_redirect_to_other_origin_is_skipped(self, fake_site, site_factory, serve, temp_dir):
        other = site_factory().page('/landing', page('<p>other</p>'))

        async with serve(other) as other_server:
            fake_site.page('/', page('<a href="/out">out</a>'))
            fake_site.redirect('/out', str(other_server.make_url('/landing')))

            async with serve(fake_site) as server:
                result = await make_crawler(server, temp_dir).crawl()

        assert result.pages_crawled == 1
        assert [e['type'] for e in result.errors] == ['external_redirect']

    @pytest.mark.asyncio
    async def test_sitemap_written(self, fake_site, serve, temp_dir):
        fake_site.page('/', page('<a href="/blog">Blog</a>'))
        fake_site.page('/blog', page('<p>blog</p>'))

        async with serve(fake_site) as server:
            await make_crawler(server, temp_dir, download_assets=False).crawl()

        with open(os.path.join(temp_dir, 'sitemap.json'), encoding='utf-8') as f:
            sitemap = json.load(f)

        assert sitemap['total_pages'] == 2
        assert sorted(sitemap['pages'].values()) == ['blog/index.html', 'index.html']
        assert not os.path.exists(os.path.join(temp_dir, 'errors.json'))

    @pytest.mark.asyncio
    async def test_cancel_drains_in_flight_pages(self, fake_site, serve, temp_dir):
        fake_site.page('/', page('<a href="/a">a</a><a href="/b">b</a>'))
        fake_site.page('/a', page('<p>a</p>'))
        fake_site.page('/b', page('<p>b</p>'))

        async with serve(fake_site) as server:
            crawler = make_crawler(server, temp_dir, workers=1)
            fake_site.on_hit = lambda path: crawler.cancel()
            result = await crawler.crawl()

        assert result.cancelled
        assert result.pages_crawled == 1
        assert fake_site.hits == ['/']


class TestAssets:
    """Test asset download and reference rewriting"""

    def build_site(self, fake_site):
        head = (
            '<link rel="stylesheet" href="/static/style.css">'
            '<script src="/static/app.js"></script>'
        )
        fake_site.page('/', page('<img src="/img/logo.png"><a href="/blog">Blog</a>', head))
        fake_site.page('/blog', page('<img src="/img/logo.png">', head))
        fake_site.asset('/static/style.css', b'body { color: #123456; }', 'text/css')
        fake_site.asset('/static/app.js', b'console.log(1);', 'application/javascript')
        fake_site.asset('/img/logo.png', b'\x89PNG', 'image/png')

    @pytest.mark.asyncio
    async def test_assets_saved_and_references_rewritten(self, fake_site, serve, temp_dir):
        self.build_site(fake_site)

        async with serve(fake_site) as server:
            result = await make_crawler(server, temp_dir).crawl()

        assert result.assets_downloaded == 3
        assert os.path.isfile(os.path.join(temp_dir, 'assets', 'css', 'style.css'))
        assert os.path.isfile(os.path.join(temp_dir, 'assets', 'js', 'app.js'))
        assert os.path.isfile(os.path.join(temp_dir, 'assets', 'images', 'logo.png'))

        with open(os.path.join(temp_dir, 'index.html'), encoding='utf-8') as f:
            index = f.read()
        with open(os.path.join(temp_dir, 'blog', 'index.html'), encoding='utf-8') as f:
            blog = f.read()

        assert 'href="assets/css/style.css"' in index
        assert 'src="assets/images/logo.png"' in index
        assert 'href="../assets/css/style.css"' in blog
        assert 'src="../assets/js/app.js"' in blog

    @pytest.mark.asyncio
    async def test_shared_asset_fetched_once(self, fake_site, serve, temp_dir):
        self.build_site(fake_site)

        async with serve(fake_site) as server:
            await make_crawler(server, temp_dir).crawl()

        assert fake_site.count('/static/style.css') == 1
        assert fake_site.count('/img/logo.png') == 1

    @pytest.mark.asyncio
    async def test_second_run_reuses_assets_on_disk(self, fake_site, serve, temp_dir):
        self.build_site(fake_site)

        async with serve(fake_site) as server:
            await make_crawler(server, temp_dir).crawl()
            fake_site.hits.clear()
            second = await make_crawler(server, temp_dir).crawl()

        assert second.assets_downloaded == 0
        assert second.assets_skipped == 3
        assert sorted(fake_site.hits) == ['/', '/blog']

    @pytest.mark.asyncio
    async def test_no_assets_flag(self, fake_site, serve, temp_dir):
        self.build_site(fake_site)

        async with serve(fake_site) as server:
            result = await make_crawler(server, temp_dir, download_assets=False).crawl()

        assert result.assets_downloaded == 0
        assert fake_site.count('/static/style.css') == 0

        with open(os.path.join(temp_dir, 'index.html'), encoding='utf-8') as f:
            assert 'href="/static/style.css"' in f.read()

    @pytest.mark.asyncio
    async def test_missing_asset_recorded(self, fake_site, serve, temp_dir):
        fake_site.page('/', page('<img src="/img/missing.png">'))

        async with serve(fake_site) as server:
            result = await make_crawler(server, temp_dir).crawl()

        assert result.pages_crawled == 1
        assert result.pages_failed == 0
        assert [e['type'] for e in result.errors] == ['download_error']

        with open(os.path.join(temp_dir, 'index.html'), encoding='utf-8') as f:
            assert 'src="/img/missing.png"' in f.read()
