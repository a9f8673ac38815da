"""
Utility Functions for the Keyword Crawler

This module provides:
- URL normalization (the key used for frontier deduplication)
- Site root / directory helpers used by link resolution
- A thread-safe in-flight counter describing how busy a worker pool is
"""

import threading
from urllib.parse import urlsplit, urlunsplit, urldefrag, quote, unquote

MAX_URL_LENGTH = 2048


def normalize_url(url: str):
    """
    Normalize an absolute URL.

    Transformations:
    - Remove fragments
    - Normalize case of scheme and host
    - Remove default ports (80/443)
    - Normalize path encoding

    Args:
        url (str): Absolute URL

    Returns:
        str or None: Normalized URL, or None if invalid
    """
    if not url:
        return None
    try:
        url, _ = urldefrag(url.strip())
        parts = list(urlsplit(url))
        parts[0] = parts[0].lower()  # scheme
        parts[1] = parts[1].lower()  # netloc
        if parts[1].endswith(':80') and parts[0] == 'http':
            parts[1] = parts[1][:-3]
        if parts[1].endswith(':443') and parts[0] == 'https':
            parts[1] = parts[1][:-4]
        parts[2] = quote(unquote(parts[2]))
        return urlunsplit(parts) or None
    except ValueError:
        return None


def site_root(url: str) -> str:
    """Return ``scheme://host`` of a URL."""
    parts = urlsplit(url)
    return f"{parts.scheme}://{parts.netloc}"


def page_directory(url: str) -> str:
    """
    Return the directory portion of a page URL, without the trailing slash.

    >>> page_directory("http://a.com/b/c.html")
    'http://a.com/b'
    >>> page_directory("http://a.com")
    'http://a.com'
    """
    path = urlsplit(url).path or "/"
    return site_root(url) + path[:path.rfind("/")]


class InFlight:
    """
    Thread-safe activity counter for one worker pool.

    ``active`` counts workers that are holding an item or are about to try a
    dequeue; a worker enters *before* touching its queue so that an item is
    never out of the queue while the pool looks idle. ``completed`` only grows
    and is bumped in the same critical section that releases a finished item.
    """

    def __init__(self):
        self._lock = threading.Lock()
        self._active = 0
        self._completed = 0

    def enter(self):
        with self._lock:
            self._active += 1

    def leave(self, completed: bool = False):
        with self._lock:
            self._active -= 1
            if completed:
                self._completed += 1

    @property
    def active(self) -> int:
        with self._lock:
            return self._active

    @property
    def completed(self) -> int:
        with self._lock:
            return self._completed

    def idle(self) -> bool:
        return self.active == 0
