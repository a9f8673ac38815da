"""
Statistics Aggregator

Collects per-page statistics reported by parser workers into global totals,
enforces the page limit, and forwards a point-in-time snapshot to a reporter
after every accepted page.
"""

import logging
import threading
import time
from dataclasses import dataclass
from typing import Dict, Optional

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class Snapshot:
    """Aggregate statistics right after one page was accepted."""
    url: str
    pages_total: int
    avg_words_per_page: float
    avg_urls_per_page: float
    keyword_totals: Dict[str, int]
    page_limit: int
    avg_parse_time_ms: float
    total_running_time_ms: float


class Aggregator:
    """
    Thread-safe accumulator of crawl statistics with a hard page ceiling.

    The whole read-modify-write of a report runs under one lock, so totals are
    exact sums and ``page_count`` never passes ``page_limit``.
    """

    def __init__(self, page_limit: int, reporter=None):
        if page_limit < 1:
            raise ValueError("page_limit must be > 0")
        self.page_limit = page_limit
        self.reporter = reporter
        self._lock = threading.Lock()
        self.start_time = time.time()

        self.page_count = 0
        self.word_count = 0
        self.url_count = 0
        self.keyword_totals: Dict[str, int] = {}
        self.total_parse_time_ms = 0.0
        self.parse_times = []           # (url, parse_time_ms) per accepted page

    def hit_limit(self) -> bool:
        return self.page_count >= self.page_limit

    def report(self, url: str, keyword_counts: Dict[str, int], word_count: int,
               url_count: int, parse_time_ms: float) -> Optional[Snapshot]:
        """
        Merge one page's statistics into the global totals.

        Pages reported after the limit has been reached are dropped.

        Returns:
            Snapshot or None: The forwarded snapshot, or None if the report was dropped
        """
        with self._lock:
            if self.hit_limit():
                logger.debug("Limit reached, dropping report for %s", url)
                return None

            self.page_count += 1
            self.word_count += word_count
            self.url_count += url_count
            for keyword, count in keyword_counts.items():
                self.keyword_totals[keyword] = self.keyword_totals.get(keyword, 0) + count
            self.total_parse_time_ms += parse_time_ms
            self.parse_times.append((url, parse_time_ms))

            snap = Snapshot(
                url=url,
                pages_total=self.page_count,
                avg_words_per_page=self.word_count / self.page_count,
                avg_urls_per_page=self.url_count / self.page_count,
                keyword_totals=dict(self.keyword_totals),
                page_limit=self.page_limit,
                avg_parse_time_ms=self.total_parse_time_ms / self.page_count,
                total_running_time_ms=(time.time() - self.start_time) * 1000.0,
            )
            # Reporters see snapshots in acceptance order.
            if self.reporter is not None:
                self.reporter.report(snap)
            return snap

    def summary(self) -> dict:
        """Final totals for the run summary."""
        with self._lock:
            pages = max(1, self.page_count)
            return {
                "page_limit": self.page_limit,
                "pages_total": self.page_count,
                "limit_reached": self.hit_limit(),
                "word_count": self.word_count,
                "url_count": self.url_count,
                "avg_words_per_page": self.word_count / pages,
                "avg_urls_per_page": self.url_count / pages,
                "keyword_totals": dict(self.keyword_totals),
                "avg_parse_time_ms": self.total_parse_time_ms / pages,
                "elapsed_total_sec": time.time() - self.start_time,
            }
