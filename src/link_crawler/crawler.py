"""
Depth-bounded concurrent crawler.
Fetches pages on a thread pool, follows extracted links up to a hop limit and
streams every visited URL to a ResultStream.
"""

import logging
import threading
from concurrent.futures import ThreadPoolExecutor
from typing import Callable, List, Optional, Set, Union

from .errors import DispatchError, FetchError, SeedFetchError
from .extractor import get_extractor
from .fetcher import Fetcher, HttpFetcher
from .sink import ResultSink
from .stream import ResultStream
from .types import CrawlReport, CrawlTask, FetchFailure
from .utils import normalize_url
from . import config

logger = logging.getLogger(__name__)

Extractor = Callable[[str, str], List[str]]


class VisitedSet:
    """URLs claimed by a crawl run: fetched, in flight, or emitted as leaves."""

    def __init__(self) -> None:
        self._urls: Set[str] = set()
        self._lock = threading.Lock()

    def claim(self, url: str) -> bool:
        """Atomically add ``url``; return False if it was already claimed."""
        with self._lock:
            if url in self._urls:
                return False
            self._urls.add(url)
            return True

    def __contains__(self, url: str) -> bool:
        with self._lock:
            return url in self._urls

    def __len__(self) -> int:
        with self._lock:
            return len(self._urls)


class PendingCounter:
    """Counts submitted tasks that have not finished yet (a wait group)."""

    def __init__(self) -> None:
        self._count = 0
        self._cond = threading.Condition()

    @property
    def count(self) -> int:
        with self._cond:
            return self._count

    def add(self) -> None:
        with self._cond:
            self._count += 1

    def done(self) -> None:
        with self._cond:
            self._count -= 1
            if self._count <= 0:
                self._cond.notify_all()

    def wake(self) -> None:
        with self._cond:
            self._cond.notify_all()

    def wait(self, stop: threading.Event) -> None:
        """Block until no tasks are outstanding or ``stop`` is set."""
        with self._cond:
            self._cond.wait_for(lambda: self._count <= 0 or stop.is_set())


class CrawlRun:
    """A single crawl in progress. Created by Crawler.start().

    Pages are crawled one hop level at a time: links found on hop-h pages are
    queued and only run once every hop-h task has finished. A URL is therefore
    always claimed at its shortest distance from the seed.
    """

    def __init__(self, crawler: "Crawler", seed: str) -> None:
        self.crawler = crawler
        self.seed = seed
        self.results = ResultStream()
        self.visited = VisitedSet()
        self._pending = PendingCounter()
        self._stop = threading.Event()
        self._finished = threading.Event()
        self._lock = threading.Lock()
        self._next_level: List[CrawlTask] = []
        self._emitted: List[str] = []
        self._failures: List[FetchFailure] = []
        self._error: Optional[SeedFetchError] = None
        self._cancelled = False
        self._executor = ThreadPoolExecutor(max_workers=crawler.concurrency, thread_name_prefix="crawl-worker")

    def _start(self) -> None:
        self.visited.claim(self.seed)
        self._next_level.append(CrawlTask(url=self.seed, depth=self.crawler.max_depth, is_seed=True))
        supervisor = threading.Thread(target=self._supervise, name="crawl-supervisor", daemon=True)
        supervisor.start()

    @property
    def done(self) -> bool:
        return self._finished.is_set()

    def cancel(self) -> None:
        """Stop dispatching new work and close the result stream early."""
        if self._finished.is_set() or self._stop.is_set():
            return
        logger.info(f"Cancelling crawl of {self.seed}")
        with self._lock:
            self._cancelled = True
        self._stop.set()
        self._pending.wake()

    def wait(self, timeout: Optional[float] = None) -> CrawlReport:
        """Wait for the run to end and return its report.

        Raises:
            SeedFetchError: the seed page could not be fetched
            TimeoutError: the run did not end within ``timeout`` seconds
        """
        if not self._finished.wait(timeout):
            raise TimeoutError(f"Crawl of {self.seed} still running after {timeout} seconds")
        if self._error is not None:
            raise self._error
        return self.report()

    def join(self) -> None:
        """Wait for the run to end and for every worker thread to exit.

        After cancel() this includes fetches that were abandoned mid-flight,
        so the fetcher can be closed safely afterwards.
        """
        self._finished.wait()
        self._executor.shutdown(wait=True)

    def report(self) -> CrawlReport:
        """Snapshot of what the run has produced so far."""
        with self._lock:
            return CrawlReport(
                seed=self.seed,
                max_depth=self.crawler.max_depth,
                visited=list(self._emitted),
                failures=list(self._failures),
                cancelled=self._cancelled,
            )

    def _supervise(self) -> None:
        hop = 0
        while not self._stop.is_set():
            with self._lock:
                tasks, self._next_level = self._next_level, []
            if not tasks:
                break
            logger.debug(f"Running {len(tasks)} tasks at hop {hop}")
            for task in tasks:
                self._submit(task)
            self._pending.wait(self._stop)
            hop += 1

        # Queued tasks are dropped; running ones finish on their own and are ignored
        self._executor.shutdown(wait=False, cancel_futures=True)
        self.results.close()
        with self._lock:
            emitted, failed = len(self._emitted), len(self._failures)
        logger.info(f"Crawl of {self.seed} finished: {emitted} visited, {failed} failed")
        self._finished.set()

    def _submit(self, task: CrawlTask) -> None:
        self._pending.add()
        self._executor.submit(self._run_task, task)

    def _run_task(self, task: CrawlTask) -> None:
        try:
            self._visit(task)
        except Exception:
            logger.exception(f"Unexpected error while crawling {task['url']}")
        finally:
            self._pending.done()

    def _visit(self, task: CrawlTask) -> None:
        url, depth = task["url"], task["depth"]
        if self._stop.is_set():
            return

        if depth <= 0 and not task["is_seed"]:
            logger.debug(f"Depth floor reached at {url}, not fetching")
            self._emit(url)
            return

        logger.debug(f"Fetching {url} ({depth} hops left)")
        try:
            html = self.crawler.fetcher.fetch(url)
        except FetchError as e:
            self._record_failure(task, e)
            return
        except Exception as e:
            self._record_failure(task, FetchError(url, f"{type(e).__name__}: {e}"))
            return

        if self._stop.is_set():
            logger.debug(f"Discarding {url}, crawl was cancelled")
            return

        if depth > 0:
            queued = self._queue_children(url, html, depth - 1)
            logger.info(f"Visited {url}: queued {queued} new links at depth {depth - 1}")
        self._emit(url)

    def _queue_children(self, url: str, html: str, child_depth: int) -> int:
        children = []
        for link in self._extract(html, url):
            child = normalize_url(link)
            if child is None:
                logger.debug(f"Skipping uncrawlable link {link!r} on {url}")
                continue
            if self.visited.claim(child):
                children.append(CrawlTask(url=child, depth=child_depth, is_seed=False))
        with self._lock:
            self._next_level.extend(children)
        return len(children)

    def _extract(self, html: str, url: str) -> List[str]:
        try:
            return self.crawler.extractor(html, url)
        except Exception as e:
            logger.error(f"Link extraction failed for {url}: {e}")
            return []

    def _emit(self, url: str) -> None:
        try:
            self.results.put(url)
        except DispatchError:
            logger.debug(f"Result stream already closed, dropping {url}")
            return
        with self._lock:
            self._emitted.append(url)

    def _record_failure(self, task: CrawlTask, error: FetchError) -> None:
        failure = FetchFailure.model_validate(error)
        with self._lock:
            self._failures.append(failure)
        if task["is_seed"]:
            logger.error(f"Seed fetch failed, aborting crawl: {error}")
            self._error = SeedFetchError(task["url"], error)
            self._stop.set()
            self._pending.wake()
        else:
            logger.warning(f"Failed to fetch {task['url']} ({error.kind}): {error.detail}")


class Crawler:
    def __init__(
        self,
        fetcher: Optional[Fetcher] = None,
        max_depth: int = config.MAX_DEPTH,
        concurrency: int = config.CONCURRENCY,
        extractor: Union[str, Extractor] = config.EXTRACTOR,
    ) -> None:
        """Initialize crawler with a fetcher and traversal limits."""
        if max_depth < 0:
            raise ValueError(f"max_depth must be >= 0, got {max_depth}")
        if concurrency < 1:
            raise ValueError(f"concurrency must be >= 1, got {concurrency}")
        self.extractor = get_extractor(extractor) if isinstance(extractor, str) else extractor
        self.max_depth = max_depth
        self.concurrency = concurrency
        self._owns_fetcher = fetcher is None
        self.fetcher = fetcher if fetcher is not None else HttpFetcher()

    def close(self) -> None:
        """Close the fetcher if this crawler created it."""
        if self._owns_fetcher:
            self.fetcher.close()

    def __enter__(self):
        return self

    def __exit__(self, *exc_info) -> None:
        self.close()

    def start(self, seed: str) -> CrawlRun:
        """Start crawling ``seed`` in the background."""
        normalized = normalize_url(seed) if isinstance(seed, str) else None
        if not normalized:
            raise ValueError(f"Seed must be an absolute http(s) URL, got {seed!r}")

        logger.info(f"Starting crawl of {normalized} (max depth {self.max_depth}, concurrency {self.concurrency})")
        run = CrawlRun(self, normalized)
        run._start()
        return run

    def crawl(self, seed: str, on_url: Optional[Callable[[str], None]] = None) -> CrawlReport:
        """Crawl ``seed`` to completion and return the report.

        Raises:
            SeedFetchError: the seed page could not be fetched
        """
        run = self.start(seed)
        try:
            ResultSink(on_url).drain(run.results)
        except BaseException:
            run.cancel()
            run.join()
            raise
        return run.wait()
