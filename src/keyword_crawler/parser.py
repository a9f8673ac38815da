"""
Page Parser Module for the Keyword Crawler

This module provides functions for:
- Whitespace tokenization of a fetched page
- Keyword counting and word/link statistics
- Resolving href targets relative to the page they appear on
- Filtering links down to crawlable document types
"""

import time
from dataclasses import dataclass, field
from typing import Callable, Dict, Iterable, Optional
from urllib.parse import urlsplit

from .queues import Page
from .utils import site_root, page_directory

HREF_PREFIX = 'href="'
CRAWLABLE_EXTENSIONS = (".html", ".htm", ".txt")


@dataclass
class ParseResult:
    """Statistics gathered from a single page."""
    url: str
    keyword_counts: Dict[str, int]
    word_count: int = 0
    url_count: int = 0
    parse_time_ms: float = 0.0
    links: list = field(default_factory=list)


def extract_href(token: str) -> Optional[str]:
    """
    Pull the link target out of a token starting with ``href="``.

    Returns:
        str or None: Target without fragment, or None if the closing quote is missing
    """
    end = token.find('"', len(HREF_PREFIX))
    if end < 0:
        return None
    target = token[len(HREF_PREFIX):end]
    return target.split("#", 1)[0]


def resolve_link(page_url: str, href: str) -> str:
    """
    Resolve an href target against the URL of the page it was found on.

    Precedence:
    - ``http...``  absolute, unchanged
    - ``//host/x`` protocol-relative, takes the page's scheme
    - ``/x``       against the page's scheme and host
    - ``../x``     one directory up from the page's directory per ``../``
    - ``./x``      against the page's directory
    - ``x``        sibling of the page

    Examples:
        >>> resolve_link("http://a.com/b/c.html", "../d.html")
        'http://a.com/d.html'
        >>> resolve_link("http://a.com/b/c.html", "/e.html")
        'http://a.com/e.html'
        >>> resolve_link("http://a.com/b/c.html", "f.html")
        'http://a.com/b/f.html'
    """
    if href.startswith("http"):
        return href
    if href.startswith("//"):
        return urlsplit(page_url).scheme + ":" + href
    if href.startswith("/"):
        return site_root(page_url) + href
    if href.startswith("../"):
        root = site_root(page_url)
        directory = page_directory(page_url)
        while href.startswith("../"):
            href = href[3:]
            if len(directory) > len(root):
                directory = directory[:directory.rfind("/")]
        return directory + "/" + href
    if href.startswith("./"):
        return page_directory(page_url) + href[1:]
    return page_directory(page_url) + "/" + href


def has_crawlable_extension(url: str) -> bool:
    return url.endswith(CRAWLABLE_EXTENSIONS)


def parse_page(page: Page, keywords: Iterable[str],
               offer_link: Callable[[str], bool]) -> ParseResult:
    """
    Tokenize a page on whitespace, count words and keywords, and feed links back.

    Every token starting with ``href="`` counts towards ``url_count``, even when
    it turns out to be malformed or points at a non-crawlable resource.

    Args:
        page (Page): Fetched page
        keywords (Iterable[str]): Exact tokens to count
        offer_link (Callable): Receives every accepted, resolved link

    Returns:
        ParseResult: Per-page statistics
    """
    start = time.perf_counter()
    counts = {k: 0 for k in keywords}
    result = ParseResult(url=page.url, keyword_counts=counts)

    for token in page.body.split():
        result.word_count += 1
        if token in counts:
            counts[token] += 1
        if not token.startswith(HREF_PREFIX):
            continue

        result.url_count += 1
        href = extract_href(token)
        if href is None:
            continue
        link = resolve_link(page.url, href)
        if not has_crawlable_extension(link):
            continue
        result.links.append(link)
        offer_link(link)

    result.parse_time_ms = (time.perf_counter() - start) * 1000.0
    return result
