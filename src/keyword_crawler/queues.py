"""
Work Queues for the Crawler Pipeline

This module provides the two shared queues that connect the worker pools:
- Frontier: deduplicating queue of URLs waiting to be fetched
- PageBuffer: FIFO of fetched pages waiting to be parsed

Both are safe for arbitrary concurrent callers. Neither blocks: taking from an
empty queue raises QueueEmpty immediately, and the caller decides how to back off.
"""

import logging
import threading
from collections import deque
from dataclasses import dataclass

from .utils import normalize_url, MAX_URL_LENGTH

logger = logging.getLogger(__name__)


class QueueEmpty(Exception):
    """Raised by ``take()`` when there is nothing to hand out."""


@dataclass(frozen=True)
class Page:
    """A fetched page: its URL and raw body."""
    url: str
    body: str


class Frontier:
    """
    Thread-safe URL frontier with permanent deduplication.

    The seen-set records every URL ever admitted and is never pruned, so a URL
    that was taken and fully processed still cannot be offered again.
    """

    def __init__(self):
        self._lock = threading.Lock()
        self._queue = deque()
        self._seen = set()

    def offer(self, url: str) -> bool:
        """
        Add a URL to the frontier if it has never been admitted before.

        Args:
            url (str): Absolute URL (normalized before the membership test)

        Returns:
            bool: True if URL was enqueued, False if it was a duplicate or invalid
        """
        normalized = normalize_url(url)
        if not normalized or len(normalized) > MAX_URL_LENGTH:
            return False
        with self._lock:
            if normalized in self._seen:
                return False
            self._seen.add(normalized)
            self._queue.append(normalized)
        logger.debug("Admitted %s", normalized)
        return True

    def take(self) -> str:
        """
        Remove and return the next URL.

        Raises:
            QueueEmpty: If no URL is waiting
        """
        with self._lock:
            if not self._queue:
                raise QueueEmpty()
            return self._queue.popleft()

    def size(self) -> int:
        with self._lock:
            return len(self._queue)

    def seen_count(self) -> int:
        """Number of URLs ever admitted during this run."""
        with self._lock:
            return len(self._seen)


class PageBuffer:
    """Thread-safe FIFO of pages awaiting parsing."""

    def __init__(self):
        self._lock = threading.Lock()
        self._pages = deque()

    def push(self, page: Page):
        if not page.url:
            raise ValueError("page url must not be empty")
        with self._lock:
            self._pages.append(page)

    def take(self) -> Page:
        with self._lock:
            if not self._pages:
                raise QueueEmpty()
            return self._pages.popleft()

    def size(self) -> int:
        with self._lock:
            return len(self._pages)
