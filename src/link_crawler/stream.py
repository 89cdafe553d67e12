"""
Result stream shared by the crawl workers (write end) and a consumer (read end).
"""

import queue
import threading
from typing import Iterator, Optional

from .errors import DispatchError

_CLOSED = object()


class ResultStream:
    """Unbounded multi-producer queue of visited URLs that can be closed once.

    Producers never block, so a slow consumer cannot stall the crawl.
    """

    def __init__(self) -> None:
        self._queue: "queue.Queue[object]" = queue.Queue()
        self._lock = threading.Lock()
        self._closed = False
        self._drained = False

    @property
    def closed(self) -> bool:
        return self._closed

    def put(self, url: str) -> None:
        with self._lock:
            if self._closed:
                raise DispatchError(f"Result stream closed, dropping {url}")
            self._queue.put_nowait(url)

    def close(self) -> None:
        with self._lock:
            if self._closed:
                return
            self._closed = True
            self._queue.put_nowait(_CLOSED)

    def get(self, timeout: Optional[float] = None) -> Optional[str]:
        """Return the next URL, or None once the stream is closed and empty.

        Raises queue.Empty if nothing arrives within ``timeout`` seconds.
        """
        if self._drained:
            return None
        item = self._queue.get(timeout=timeout)
        if item is _CLOSED:
            # leave the marker for any other consumer
            self._queue.put_nowait(_CLOSED)
            self._drained = True
            return None
        return item

    def __iter__(self) -> Iterator[str]:
        while True:
            url = self.get()
            if url is None:
                return
            yield url
