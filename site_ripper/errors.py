"""
Exception types raised by the site ripper components.
"""

import asyncio
from typing import List, Optional


class ClonerError(Exception):
    """Base class for all site ripper errors."""


class FetchError(ClonerError):
    """An HTTP fetch did not produce a usable response."""

    def __init__(self, url: str, status: Optional[int] = None, message: Optional[str] = None):
        self.url = url
        self.status = status
        if message is None:
            message = f"HTTP Error: {status}" if status is not None else "Request failed"
        super().__init__(f"{message} ({url})")


class TooManyRedirectsError(FetchError):
    """The redirect chain exceeded the configured hop limit."""

    def __init__(self, url: str, max_redirects: int, status: Optional[int] = None):
        self.max_redirects = max_redirects
        super().__init__(url, status, f"Exceeded {max_redirects} redirects")


class FetchTimeoutError(FetchError, asyncio.TimeoutError):
    """The request did not complete within its timeout."""

    def __init__(self, url: str, timeout: float):
        self.timeout = timeout
        super().__init__(url, None, f"Timed out after {timeout}s")


class ParseError(ClonerError):
    """HTML or CSS content could not be parsed."""

    def __init__(self, source: str, message: str):
        self.source = source
        super().__init__(f"Could not parse {source}: {message}")


class FilesystemError(ClonerError):
    """Writing to the output tree failed."""

    def __init__(self, path: str, cause: OSError):
        self.path = path
        self.cause = cause
        super().__init__(f"Could not write {path}: {cause}")


class SiteNotFoundError(ClonerError):
    """A batch tool was pointed at a site that does not exist."""

    def __init__(self, name: Optional[str], available: List[str]):
        self.name = name
        self.available = available
        if name:
            message = f"Site '{name}' not found"
        else:
            message = "No site specified"
        super().__init__(message)
