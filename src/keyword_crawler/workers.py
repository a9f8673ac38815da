"""
Worker Pools

Two pools of worker loops drive the pipeline:
- FetcherPool drains the Frontier, fetches each URL and pushes pages to the PageBuffer
- ParserPool drains the PageBuffer, parses pages, feeds links back to the Frontier
  and reports statistics to the Aggregator

A worker loop is a plain function run by an executor thread. It checks the stop
event once per iteration and is never interrupted mid-item. Each pool exposes an
InFlight counter that the coordinator reads for quiescence detection.
"""

import logging
import threading
from typing import Callable, Iterable

from .aggregator import Aggregator
from .fetcher import FetchError
from .parser import parse_page
from .queues import Frontier, PageBuffer, Page, QueueEmpty
from .utils import InFlight

logger = logging.getLogger("crawler")
fetch_logger = logging.getLogger("fetcher")


class _Pool:
    """Shared loop skeleton: claim, take, process, release, back off when empty."""

    name = "pool"

    def __init__(self, stop_event: threading.Event, idle_backoff: float = 0.05):
        self.stop_event = stop_event
        self.idle_backoff = idle_backoff
        self.inflight = InFlight()

    def _take(self):
        raise NotImplementedError

    def _process(self, item):
        raise NotImplementedError

    def worker(self):
        """Loop until the stop event is observed at the top of an iteration."""
        logger.debug("%s worker started", self.name)
        while not self.stop_event.is_set():
            # Claim before dequeue so a taken item is never invisible.
            self.inflight.enter()
            try:
                item = self._take()
            except QueueEmpty:
                self.inflight.leave()
                self.stop_event.wait(self.idle_backoff)
                continue

            try:
                self._process(item)
            except Exception as e:
                logger.exception("%s worker error on %s: %s", self.name, item, e)
            finally:
                self.inflight.leave(completed=True)
        logger.debug("%s worker stopped", self.name)


class FetcherPool(_Pool):
    """Workers that turn URLs from the Frontier into Pages in the PageBuffer."""

    name = "fetcher"

    def __init__(self, frontier: Frontier, buffer: PageBuffer,
                 fetch: Callable[[str, float], str], stop_event: threading.Event,
                 timeout: float = 15.0, idle_backoff: float = 0.05):
        super().__init__(stop_event, idle_backoff)
        self.frontier = frontier
        self.buffer = buffer
        self.fetch = fetch
        self.timeout = timeout
        self.error_count = 0
        self.empty_count = 0
        self._stats_lock = threading.Lock()

    def _take(self):
        return self.frontier.take()

    def _process(self, url: str):
        try:
            body = self.fetch(url, self.timeout)
        except FetchError as e:
            fetch_logger.warning("fetch failed (%s): %s", type(e).__name__, e)
            self._count_error()
            return
        except Exception as e:
            logger.exception("unexpected fetch error for %s: %s", url, e)
            self._count_error()
            return

        if not body:
            logger.debug("empty body, dropping %s", url)
            with self._stats_lock:
                self.empty_count += 1
            return
        self.buffer.push(Page(url, body))

    def _count_error(self):
        with self._stats_lock:
            self.error_count += 1


class ParserPool(_Pool):
    """Workers that parse Pages, feed links back and report statistics."""

    name = "parser"

    def __init__(self, frontier: Frontier, buffer: PageBuffer, aggregator: Aggregator,
                 keywords: Iterable[str], stop_event: threading.Event,
                 idle_backoff: float = 0.05):
        super().__init__(stop_event, idle_backoff)
        self.frontier = frontier
        self.buffer = buffer
        self.aggregator = aggregator
        self.keywords = tuple(keywords)

    def _take(self):
        return self.buffer.take()

    def _process(self, page: Page):
        result = parse_page(page, self.keywords, self.frontier.offer)
        self.aggregator.report(
            result.url,
            result.keyword_counts,
            result.word_count,
            result.url_count,
            result.parse_time_ms,
        )
