"""
Depth-bounded concurrent web crawler.
"""

from .crawler import Crawler, CrawlRun
from .errors import FetchError, SeedFetchError
from .extractor import extract_links
from .fetcher import Fetcher, HttpFetcher
from .sink import ResultSink
from .types import CrawlReport

__all__ = [
    "Crawler",
    "CrawlRun",
    "CrawlReport",
    "Fetcher",
    "HttpFetcher",
    "FetchError",
    "SeedFetchError",
    "ResultSink",
    "extract_links",
]
