"""
Entry point for the crawler.
Run with: python -m link_crawler https://example.com [--depth 2] [--concurrency 8]
"""

import argparse
import logging
import sys

from .crawler import Crawler
from .errors import SeedFetchError
from .extractor import EXTRACTORS
from .fetcher import HttpFetcher
from .sink import ResultSink
from . import config

logger = logging.getLogger(__name__)


def parse_arguments(argv=None):
    parser = argparse.ArgumentParser(description="Depth-bounded concurrent web crawler")
    parser.add_argument("seed", help="Absolute URL to start crawling from")
    parser.add_argument(
        "--depth", type=int, default=config.MAX_DEPTH, help="Link hops to follow after the seed page (0 = seed only)"
    )
    parser.add_argument("--concurrency", type=int, default=config.CONCURRENCY, help="Maximum concurrent fetches")
    parser.add_argument("--timeout", type=float, default=config.REQUEST_TIMEOUT, help="Per-request timeout in seconds")
    parser.add_argument(
        "--extractor", choices=sorted(EXTRACTORS), default=config.EXTRACTOR, help="Link extraction strategy"
    )
    parser.add_argument("--json", action="store_true", help="Print the final report as JSON")
    parser.add_argument("--log-level", default=config.LOG_LEVEL, help="Logging level (DEBUG, INFO, WARNING, ...)")
    return parser.parse_args(argv)


def print_report(report, as_json: bool) -> None:
    if as_json:
        print(report.model_dump_json(indent=2))
        return
    print(report.summary())
    for failure in report.failures:
        print(f"  {failure.kind}: {failure.url} {failure.detail}".rstrip())


def main(argv=None) -> int:
    """Main entry point for the crawler."""
    args = parse_arguments(argv)

    logging.basicConfig(
        level=args.log_level.upper(),
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
    )

    on_url = None if args.json else print
    with HttpFetcher(timeout=args.timeout) as fetcher:
        try:
            crawler = Crawler(fetcher, max_depth=args.depth, concurrency=args.concurrency, extractor=args.extractor)
            run = crawler.start(args.seed)
        except ValueError as e:
            logger.error(str(e))
            return 1

        try:
            ResultSink(on_url).drain(run.results)
            report = run.wait()
        except SeedFetchError as e:
            logger.error(str(e))
            return 1
        except KeyboardInterrupt:
            run.cancel()
            print_report(run.wait(), args.json)
            return 130
        finally:
            # abandoned fetches still hold the session until they return
            run.join()

    print_report(report, args.json)
    return 0


if __name__ == "__main__":
    sys.exit(main())
