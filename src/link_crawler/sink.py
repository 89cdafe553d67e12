import logging
from typing import Callable, List, Optional

from .stream import ResultStream

logger = logging.getLogger(__name__)


class ResultSink:
    """Consumes visited URLs from a ResultStream until it is closed.

    The stream closes both when a crawl completes and when it is cancelled,
    so draining always ends; after a cancellation the list is partial.
    """

    def __init__(self, on_url: Optional[Callable[[str], None]] = None) -> None:
        self.on_url = on_url
        self.urls: List[str] = []

    def drain(self, stream: ResultStream) -> List[str]:
        for url in stream:
            logger.debug(f"Visited: {url}")
            self.urls.append(url)
            if self.on_url is not None:
                self.on_url(url)
        logger.debug(f"Result stream closed after {len(self.urls)} URLs")
        return self.urls
