"""
HTTP fetcher for pages and assets.

Performs a single GET per call with manual, bounded redirect handling and
decides between text and raw bytes from the response Content-Type.
"""

import asyncio
from dataclasses import dataclass
from typing import List, Optional, Union
from urllib.parse import urljoin

import aiohttp
from aiohttp import ClientTimeout, ClientError

from ..errors import FetchError, FetchTimeoutError, TooManyRedirectsError
from ..utils.log import get_logger
from ..utils.constants import (
    DEFAULT_USER_AGENT,
    DEFAULT_ACCEPT,
    DEFAULT_ACCEPT_LANGUAGE,
    DEFAULT_TIMEOUT,
    DEFAULT_MAX_REDIRECTS,
    TEXT_CONTENT_TYPES,
)


REDIRECT_STATUSES = (301, 302, 303, 307, 308)


def is_text_content_type(content_type: str) -> bool:
    """Return True if a Content-Type header should be decoded as text."""
    content_type = (content_type or '').lower()
    return any(marker in content_type for marker in TEXT_CONTENT_TYPES)


@dataclass
class FetchResult:
    """Body and metadata of a completed fetch."""

    url: str
    final_url: str
    status: int
    content_type: str
    body: Union[str, bytes]
    redirects: int = 0

    @property
    def is_text(self) -> bool:
        return isinstance(self.body, str)

    @property
    def content(self) -> bytes:
        """Body as bytes, encoding text bodies as UTF-8."""
        if isinstance(self.body, str):
            return self.body.encode('utf-8')
        return self.body


class Fetcher:
    """
    Fetches URLs over HTTP(S) using a shared aiohttp session.

    Use as an async context manager so the session is closed afterwards:

        async with Fetcher(timeout=15) as fetcher:
            result = await fetcher.fetch("https://example.com/")
    """

    def __init__(
        self,
        timeout: float = DEFAULT_TIMEOUT,
        max_redirects: int = DEFAULT_MAX_REDIRECTS,
        user_agent: str = DEFAULT_USER_AGENT,
        session: Optional[aiohttp.ClientSession] = None
    ):
        """
        Initialize the fetcher.

        Args:
            timeout: Per-request timeout in seconds
            max_redirects: Maximum redirect hops before giving up
            user_agent: User agent string for requests
            session: Optional externally managed session
        """
        self.timeout = timeout
        self.max_redirects = max_redirects
        self.user_agent = user_agent
        self.logger = get_logger("fetcher")

        self._session = session
        self._owns_session = session is None

        # Every URL requested, in order, redirect hops included
        self.fetch_log: List[str] = []

    @property
    def headers(self) -> dict:
        return {
            "User-Agent": self.user_agent,
            "Accept": DEFAULT_ACCEPT,
            "Accept-Language": DEFAULT_ACCEPT_LANGUAGE,
        }

    async def __aenter__(self) -> "Fetcher":
        await self.start()
        return self

    async def __aexit__(self, exc_type, exc, tb) -> None:
        await self.close()

    async def start(self) -> None:
        """Open the HTTP session if one was not supplied."""
        if self._session is None:
            self._session = aiohttp.ClientSession(headers=self.headers)
            self._owns_session = True

    async def close(self) -> None:
        """Close the HTTP session if this fetcher opened it."""
        if self._session is not None and self._owns_session:
            await self._session.close()
            self._session = None

    async def fetch(self, url: str) -> FetchResult:
        """
        Fetch a URL, following at most max_redirects redirects.

        Args:
            url: Absolute URL to fetch

        Returns:
            FetchResult with a str body for text content types, bytes otherwise

        Raises:
            FetchError: On a non-2xx, non-redirect status or transport error
            TooManyRedirectsError: If the redirect chain is too long
            FetchTimeoutError: If the request exceeds the timeout
        """
        if self._session is None:
            await self.start()

        current = url
        hops = 0

        while True:
            self.fetch_log.append(current)
            self.logger.debug(f"GET {current}")

            try:
                async with self._session.get(
                    current,
                    allow_redirects=False,
                    timeout=ClientTimeout(total=self.timeout),
                    headers=self.headers
                ) as response:
                    status = response.status

                    if status in REDIRECT_STATUSES:
                        location = response.headers.get('Location')
                        if not location:
                            raise FetchError(current, status, "Redirect without Location header")
                        if hops >= self.max_redirects:
                            raise TooManyRedirectsError(url, self.max_redirects, status)
                        hops += 1
                        current = urljoin(current, location)
                        self.logger.debug(f"Redirect {status} -> {current}")
                        continue

                    if not 200 <= status < 300:
                        raise FetchError(current, status)

                    content_type = response.headers.get('Content-Type', '')
                    raw = await response.read()

            except asyncio.TimeoutError as e:
                if isinstance(e, FetchError):
                    raise
                raise FetchTimeoutError(current, self.timeout) from e
            except ClientError as e:
                raise FetchError(current, None, str(e) or e.__class__.__name__) from e

            # Decoded as UTF-8 whatever charset the header declares
            if is_text_content_type(content_type):
                body: Union[str, bytes] = raw.decode('utf-8', errors='replace')
            else:
                body = raw

            return FetchResult(
                url=url,
                final_url=current,
                status=status,
                content_type=content_type,
                body=body,
                redirects=hops
            )
