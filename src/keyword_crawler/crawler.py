"""
Crawler Module - Coordinator

Orchestrates one bounded crawl:
- Builds the Frontier, PageBuffer and Aggregator for the run
- Runs a pool of fetcher workers and a pool of parser workers on one executor
- Seeds the frontier and polls for termination (page limit or quiescence)
- Signals cooperative shutdown and joins the workers
- Writes a run summary when storage is configured
"""

import concurrent.futures as cf
import logging
import threading
import time

from .aggregator import Aggregator
from .fetcher import Fetcher, DEFAULT_USER_AGENT
from .queues import Frontier, PageBuffer
from .reporter import make_reporter
from .workers import FetcherPool, ParserPool

logger = logging.getLogger("crawler")

DEFAULTS = {
    "workers": 5,
    "request_timeout_sec": 15,
    "user_agent": DEFAULT_USER_AGENT,
    "poll_interval_sec": 1.0,
    "idle_backoff_sec": 0.05,
    "reporter": "console",
    "join_workers": True,
}


class Crawler:
    """
    Coordinator for a single crawl run.

    The fetch capability and reporter sink are injectable; by default a
    requests-based Fetcher and the reporter named in ``cfg["reporter"]`` are used.
    """

    def __init__(self, cfg: dict, fetch=None, reporter=None, storage=None):
        """
        Args:
            cfg (dict): Run configuration (seed_url, keywords, max_pages, workers, ...)
            fetch (callable, optional): ``fetch(url, timeout) -> str``
            reporter (optional): Object with ``report(snapshot)``
            storage (Storage, optional): Where the run summary is written
        """
        self.cfg = {**DEFAULTS, **cfg}

        self.seed_url = str(self.cfg["seed_url"]).strip()
        keywords = self.cfg["keywords"]
        if isinstance(keywords, str):
            keywords = keywords.split()
        self.keywords = [str(k) for k in keywords if k]
        self.max_pages = int(self.cfg["max_pages"])
        self.workers = int(self.cfg["workers"])
        if self.max_pages < 1:
            raise ValueError("max_pages must be > 0")
        if self.workers < 1:
            raise ValueError("workers must be > 0")

        self.request_timeout = float(self.cfg["request_timeout_sec"])
        self.poll_interval = float(self.cfg["poll_interval_sec"])
        self.idle_backoff = float(self.cfg["idle_backoff_sec"])
        self.join_workers = bool(self.cfg["join_workers"])

        self._own_fetcher = None
        if fetch is None:
            self._own_fetcher = Fetcher(self.cfg["user_agent"], self.request_timeout)
            fetch = self._own_fetcher
        self.fetch = fetch
        self.reporter = reporter if reporter is not None else make_reporter(
            self.cfg["reporter"], self.max_pages)
        self.storage = storage

        self._stop = threading.Event()
        self._stop_requested = False

        # Created per run
        self.frontier = None
        self.buffer = None
        self.aggregator = None
        self.fetchers = None
        self.parsers = None
        self.stop_reason = None

    def stop(self):
        """Ask the coordinator to end the run at its next poll."""
        self._stop_requested = True

    # ---------- Termination ----------
    def _quiescent(self) -> bool:
        """
        True when no worker holds an item and both queues are empty.

        Reads follow the pipeline order (frontier, fetchers, buffer, parsers) so
        an item that is only dequeued during the check is still seen. An item
        that moves further requires a completion, and the completion totals are
        compared before and after the reads.
        """
        before = (self.fetchers.inflight.completed, self.parsers.inflight.completed)
        idle = (
            self.frontier.size() == 0
            and self.fetchers.inflight.idle()
            and self.buffer.size() == 0
            and self.parsers.inflight.idle()
        )
        after = (self.fetchers.inflight.completed, self.parsers.inflight.completed)
        return idle and before == after

    def _should_stop(self) -> bool:
        if self._stop_requested:
            self.stop_reason = "stopped"
            return True
        if self.aggregator.hit_limit():
            self.stop_reason = "page_limit"
            return True
        if self._quiescent():
            self.stop_reason = "quiescent"
            return True
        return False

    # ---------- Main loop ----------
    def run(self) -> dict:
        """
        Crawl from the seed URL until the page limit is hit or no work remains.

        Returns:
            dict: Run summary
        """
        self.frontier = Frontier()
        self.buffer = PageBuffer()
        self.aggregator = Aggregator(self.max_pages, self.reporter)
        self._stop.clear()
        self._stop_requested = False
        self.stop_reason = None

        self.fetchers = FetcherPool(self.frontier, self.buffer, self.fetch, self._stop,
                                    timeout=self.request_timeout, idle_backoff=self.idle_backoff)
        self.parsers = ParserPool(self.frontier, self.buffer, self.aggregator, self.keywords,
                                  self._stop, idle_backoff=self.idle_backoff)

        logger.info("Starting crawl of %s: max_pages=%d workers=%d keywords=%s",
                    self.seed_url, self.max_pages, self.workers, self.keywords)

        pool = cf.ThreadPoolExecutor(max_workers=2 * self.workers,
                                     thread_name_prefix="crawler")
        futures = []
        try:
            for _ in range(self.workers):
                futures.append(pool.submit(self.fetchers.worker))
            for _ in range(self.workers):
                futures.append(pool.submit(self.parsers.worker))

            if not self.frontier.offer(self.seed_url):
                logger.error("Seed URL rejected: %r", self.seed_url)

            while not self._should_stop():
                time.sleep(self.poll_interval)
        finally:
            self._stop.set()
            logger.info("Stopping workers (%s)", self.stop_reason or "error")
            pool.shutdown(wait=self.join_workers)
            if self.join_workers:
                for fut in futures:
                    exc = fut.exception()
                    if exc is not None:
                        logger.error("worker exited with error: %s", exc)
            close = getattr(self.reporter, "close", None)
            if close is not None:
                close()
            if self._own_fetcher is not None and self.join_workers:
                self._own_fetcher.close()

        return self._final_report()

    # ---------- Final report ----------
    def get_status_dict(self) -> dict:
        status = self.aggregator.summary()
        status.update({
            "seed_url": self.seed_url,
            "keywords": list(self.keywords),
            "workers": self.workers,
            "stop_reason": self.stop_reason,
            "urls_admitted": self.frontier.seen_count(),
            "frontier_queue_size": self.frontier.size(),
            "page_buffer_size": self.buffer.size(),
            "fetch_errors": self.fetchers.error_count,
            "empty_pages": self.fetchers.empty_count,
        })
        return status

    def _final_report(self) -> dict:
        summary = self.get_status_dict()
        logger.info("Crawl finished (%s): %d page(s), %d word(s), %d fetch error(s) in %.3fs",
                    summary["stop_reason"], summary["pages_total"], summary["word_count"],
                    summary["fetch_errors"], summary["elapsed_total_sec"])

        if self.storage is not None:
            path = self.storage.save_run(summary, self.aggregator.parse_times)
            summary["summary_path"] = path
            logger.info("Summary JSON: %s", path)
        return summary
