"""
Page retrieval.

The crawler only depends on Fetcher.fetch(url) -> str raising FetchError
subclasses, so tests can swap in an in-memory fetcher.
"""

import logging
from typing import Dict, Optional

import certifi
import requests

from .errors import DecodeError, FetchConnectionError, FetchError, FetchTimeout, HttpStatusError
from .utils import exponential_backoff
from . import config

logger = logging.getLogger(__name__)

HTML_CONTENT_TYPES = ("text/html", "application/xhtml+xml")


class Fetcher:
    """Retrieves page text for a URL."""

    def fetch(self, url: str) -> str:
        raise NotImplementedError

    def close(self) -> None:
        pass

    def __enter__(self):
        return self

    def __exit__(self, *exc_info) -> None:
        self.close()


class HttpFetcher(Fetcher):
    """Fetcher backed by a shared requests session."""

    def __init__(
        self,
        timeout: float = config.REQUEST_TIMEOUT,
        max_retries: int = config.MAX_RETRIES,
        base_delay: float = config.BASE_DELAY,
        headers: Optional[Dict[str, str]] = None,
    ) -> None:
        self.timeout = timeout
        self.session = self._init_session(headers or config.HEADERS)
        # Only transient failures are worth another attempt
        self._get = exponential_backoff(
            max_retries=max_retries,
            exceptions=(FetchTimeout, FetchConnectionError),
            base_delay=base_delay,
        )(self._get_once)

    def _init_session(self, headers: Dict[str, str]) -> requests.Session:
        """Initialize and configure the HTTP session."""
        session = requests.Session()
        session.headers.update(headers)
        return session

    def close(self) -> None:
        self.session.close()

    def fetch(self, url: str) -> str:
        """Fetch a page and return its decoded text.

        Non-HTML responses are not downloaded and come back as an empty page.
        """
        response = self._get(url)
        if response is None:
            return ""
        return self._decode(url, response)

    def _get_once(self, url: str) -> Optional[requests.Response]:
        logger.debug(f"Attempting to fetch URL: {url}")
        try:
            response = self.session.get(
                url, timeout=self.timeout, allow_redirects=True, verify=certifi.where(), stream=True
            )
        except requests.RequestException as e:
            raise self._translate(url, e) from e

        try:
            if response.status_code >= 400:
                raise HttpStatusError(
                    url, response.status_code, f"HTTP {response.status_code} {response.reason or ''}".strip()
                )

            content_type = (response.headers.get("content-type") or "").lower()
            if content_type and not content_type.startswith(HTML_CONTENT_TYPES):
                logger.warning(f"Skipping non-HTML content: {content_type} at {url}")
                return None

            try:
                # reads the whole body while the connection is still open
                response.content
            except requests.RequestException as e:
                raise self._translate(url, e) from e
        finally:
            response.close()

        logger.debug(f"Fetched {url} with status {response.status_code}")
        return response

    def _translate(self, url: str, error: requests.RequestException) -> FetchError:
        if isinstance(error, requests.exceptions.Timeout):
            return FetchTimeout(url, str(error))
        if isinstance(error, requests.exceptions.ConnectionError):
            return FetchConnectionError(url, str(error))
        return FetchError(url, str(error))

    def _decode(self, url: str, response: requests.Response) -> str:
        encoding = response.encoding or "utf-8"
        try:
            return response.content.decode(encoding)
        except (UnicodeDecodeError, LookupError) as e:
            raise DecodeError(url, f"cannot decode body as {encoding}: {e}") from e
