"""
Outbound link extraction.

Two strategies share the same resolution rule: an href starting with "/" is
joined to the origin of the page it was found on, anything else is returned
untouched. Filtering out fragments, mailto: links and other uncrawlable values
is left to the crawler.
"""

import logging
import re
from typing import Callable, Dict, Iterable, List

from bs4 import BeautifulSoup

from .utils import get_origin

logger = logging.getLogger(__name__)

# Double-quoted href on an anchor tag. Single-quoted and unquoted attributes
# are not matched by this strategy.
HREF_PATTERN = re.compile(r'<a\s+(?:[^>]*?\s)?href="([^"]*)"', re.IGNORECASE)


def resolve_href(href: str, origin: str) -> str:
    """Turn a root-relative href into an absolute URL; pass everything else through."""
    if href.startswith("/"):
        return origin + href
    return href


def _unique(urls: Iterable[str]) -> List[str]:
    seen = set()
    unique = []
    for url in urls:
        if url not in seen:
            seen.add(url)
            unique.append(url)
    return unique


def extract_links(html: str, source_url: str) -> List[str]:
    """Extract outbound URLs from page text with a regular expression.

    Args:
        html (str): Raw page text
        source_url (str): URL the page was fetched from

    Returns:
        List[str]: Distinct URLs in document order

    Examples:
        >>> extract_links('<a href="/y">y</a>', 'https://a.com/x')
        ['https://a.com/y']
    """
    if not html:
        return []
    origin = get_origin(source_url)
    return _unique(resolve_href(match.group(1), origin) for match in HREF_PATTERN.finditer(html))


def extract_links_dom(html: str, source_url: str) -> List[str]:
    """Extract outbound URLs by parsing anchors with BeautifulSoup.

    Unlike the regex strategy this also picks up single-quoted and unquoted
    href attributes.
    """
    if not html:
        return []
    origin = get_origin(source_url)
    soup = BeautifulSoup(html, "html.parser")
    hrefs = [a_tag["href"] for a_tag in soup.find_all("a", href=True)]
    logger.debug(f"Found {len(hrefs)} anchor tags on {source_url}")
    return _unique(resolve_href(href, origin) for href in hrefs)


EXTRACTORS: Dict[str, Callable[[str, str], List[str]]] = {
    "regex": extract_links,
    "dom": extract_links_dom,
}


def get_extractor(name: str) -> Callable[[str, str], List[str]]:
    """Look up an extraction strategy by name."""
    try:
        return EXTRACTORS[name]
    except KeyError:
        raise ValueError(f"Unknown extractor {name!r}, expected one of {sorted(EXTRACTORS)}") from None
