"""
Shared fixtures and a small in-process test website.
"""

import asyncio
import contextlib
import shutil
import sys
import tempfile
from pathlib import Path
from typing import Callable, Dict, List, Optional, Tuple

import pytest
from aiohttp import web
from aiohttp.test_utils import TestServer

# Add project root to path
sys.path.insert(0, str(Path(__file__).parent.parent))


class FakeSite:
    """Serves canned responses by path and records every request."""

    def __init__(self):
        self.routes: Dict[str, Tuple[int, str, bytes, Dict[str, str], float]] = {}
        self.hits: List[str] = []
        self.on_hit: Optional[Callable[[str], None]] = None

    def page(self, path: str, html: str, status: int = 200) -> "FakeSite":
        self.routes[path] = (status, 'text/html; charset=utf-8', html.encode('utf-8'), {}, 0.0)
        return self

    def asset(self, path: str, body: bytes, content_type: str) -> "FakeSite":
        self.routes[path] = (200, content_type, body, {}, 0.0)
        return self

    def redirect(self, path: str, location: str, status: int = 302) -> "FakeSite":
        self.routes[path] = (status, 'text/plain', b'', {'Location': location}, 0.0)
        return self

    def slow(self, path: str, seconds: float) -> "FakeSite":
        self.routes[path] = (200, 'text/html', b'<html></html>', {}, seconds)
        return self

    def count(self, path: str) -> int:
        return self.hits.count(path)

    async def handle(self, request: web.Request) -> web.Response:
        self.hits.append(request.path)
        if self.on_hit is not None:
            self.on_hit(request.path)

        route = self.routes.get(request.path)
        if route is None:
            return web.Response(status=404, text='not found')

        status, content_type, body, headers, delay = route
        if delay:
            await asyncio.sleep(delay)

        return web.Response(
            status=status,
            body=body,
            headers={**headers, 'Content-Type': content_type}
        )

    def build_app(self) -> web.Application:
        app = web.Application()
        app.router.add_route('GET', '/{tail:.*}', self.handle)
        return app


@contextlib.asynccontextmanager
async def serve_site(site: FakeSite):
    """Run a FakeSite on a local port for the duration of the block."""
    server = TestServer(site.build_app())
    await server.start_server()
    try:
        yield server
    finally:
        await server.close()


@pytest.fixture
def fake_site() -> FakeSite:
    return FakeSite()


@pytest.fixture
def temp_dir():
    path = tempfile.mkdtemp()
    yield path
    shutil.rmtree(path, ignore_errors=True)


@pytest.fixture
def serve():
    return serve_site


@pytest.fixture
def site_factory():
    return FakeSite
