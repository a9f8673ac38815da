import threading
from typing import Dict

import pytest

from keyword_crawler.fetcher import NotFound


class FakeSite:
    """
    In-memory site graph used as the fetch capability.
    Unknown URLs raise NotFound; every call is recorded.
    """

    def __init__(self, pages: Dict[str, str], delay: float = 0.0):
        self.pages = pages
        self.delay = delay
        self.calls = []
        self._lock = threading.Lock()

    def __call__(self, url: str, timeout: float) -> str:
        with self._lock:
            self.calls.append(url)
        if self.delay:
            threading.Event().wait(self.delay)
        if url not in self.pages:
            raise NotFound(url, "HTTP 404")
        return self.pages[url]


class RecordingReporter:
    def __init__(self):
        self.snapshots = []
        self.closed = False

    def report(self, snap):
        self.snapshots.append(snap)

    def close(self):
        self.closed = True


@pytest.fixture()
def fast_cfg():
    """
    Return a run config with short polling so tests finish quickly.
    """
    return {
        "seed_url": "http://a.com/index.html",
        "keywords": ["science", "good", "the"],
        "max_pages": 50,
        "workers": 3,
        "poll_interval_sec": 0.05,
        "idle_backoff_sec": 0.01,
        "reporter": "none",
    }


@pytest.fixture()
def reporter():
    return RecordingReporter()


@pytest.fixture()
def chain_site():
    """
    Provide a linear chain of ten pages, each linking to the next.
    """
    pages = {}
    for i in range(10):
        name = "index.html" if i == 0 else f"p{i}.html"
        nxt = f'<a href="p{i + 1}.html">next</a>' if i < 9 else "the end"
        pages[f"http://a.com/{name}"] = f"<html> good science {nxt} </html>"
    return FakeSite(pages)
