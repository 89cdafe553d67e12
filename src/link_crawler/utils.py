import functools
import logging
import time
from typing import Any, Callable, Optional, Tuple, Type
from urllib.parse import urlparse, urlunparse

logger = logging.getLogger(__name__)

CRAWLABLE_SCHEMES = ("http", "https")
DEFAULT_PORTS = {"http": 80, "https": 443}


def get_origin(url: str) -> str:
    """Return the scheme and authority of a URL.

    Examples:
        >>> get_origin('https://example.com:8443/path?q=1')
        'https://example.com:8443'
        >>> get_origin('/relative/path')
        ''
    """
    parsed = urlparse(url)
    if not parsed.scheme or not parsed.netloc:
        return ""
    return f"{parsed.scheme}://{parsed.netloc}"


def is_absolute(url: str) -> bool:
    """Check that a URL can be fetched: http(s) scheme and a host."""
    try:
        parsed = urlparse(url)
        return parsed.scheme.lower() in CRAWLABLE_SCHEMES and bool(parsed.hostname)
    except ValueError:
        return False


def normalize_url(url: str) -> Optional[str]:
    """Normalize an absolute URL so that equivalent spellings dedupe together.

    Lowercases scheme and host, drops default ports and the fragment.
    Path and query are kept as-is. Returns None for URLs that cannot be crawled.
    """
    if not url or not is_absolute(url):
        return None
    try:
        parsed = urlparse(url.strip())
        scheme = parsed.scheme.lower()
        netloc = parsed.hostname.lower()
        if ":" in netloc:
            # IPv6 literal
            netloc = f"[{netloc}]"
        port = parsed.port
        if port and port != DEFAULT_PORTS.get(scheme):
            netloc = f"{netloc}:{port}"
        if parsed.username:
            userinfo = parsed.username
            if parsed.password:
                userinfo += f":{parsed.password}"
            netloc = f"{userinfo}@{netloc}"
        return urlunparse((scheme, netloc, parsed.path, parsed.params, parsed.query, ""))
    except ValueError as e:
        logger.debug(f"Error normalizing URL {url}: {e}")
        return None


def exponential_backoff(
    max_retries: int = 3,
    exceptions: Tuple[Type[Exception], ...] = (Exception,),
    base_delay: float = 1.0,
) -> Callable:
    """Decorator for exponential backoff retry logic."""

    def decorator(func: Callable) -> Callable:
        @functools.wraps(func)
        def wrapper(*args: Any, **kwargs: Any) -> Any:
            attempts = max(1, max_retries)
            for attempt in range(attempts):
                try:
                    return func(*args, **kwargs)
                except exceptions as e:
                    if attempt == attempts - 1:
                        raise
                    delay = base_delay * (2**attempt)
                    logger.warning(f"Attempt {attempt + 1} failed: {str(e)}. Retrying in {delay} seconds...")
                    time.sleep(delay)
            # This line should not be reached
            return None

        return wrapper

    return decorator
