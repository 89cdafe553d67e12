"""
Exceptions raised by the crawler.

Fetch failures are local to the page that failed, except for the seed page,
whose failure is wrapped in a SeedFetchError and ends the whole crawl.
"""

from typing import Optional


class CrawlerError(Exception):
    """Base class for all crawler errors."""


class FetchError(CrawlerError):
    """A page could not be retrieved."""

    def __init__(self, url: str, detail: str = ""):
        self.url = url
        self.detail = detail
        message = f"{self.kind} fetching {url}"
        if detail:
            message = f"{message}: {detail}"
        super().__init__(message)

    @property
    def kind(self) -> str:
        return type(self).__name__


class FetchTimeout(FetchError):
    pass


class FetchConnectionError(FetchError):
    pass


class DecodeError(FetchError):
    pass


class HttpStatusError(FetchError):
    def __init__(self, url: str, status_code: int, detail: str = ""):
        self.status_code = status_code
        super().__init__(url, detail or f"HTTP {status_code}")


class SeedFetchError(CrawlerError):
    """The seed page failed to fetch, so there is nothing to crawl."""

    def __init__(self, url: str, cause: FetchError):
        self.url = url
        self.cause = cause
        super().__init__(f"Seed {url} could not be fetched: {cause}")

    @property
    def status_code(self) -> Optional[int]:
        return getattr(self.cause, "status_code", None)


class DispatchError(CrawlerError):
    """A result was pushed to a stream that is already closed."""
