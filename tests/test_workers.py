import threading

from keyword_crawler.aggregator import Aggregator
from keyword_crawler.fetcher import FetchTimeout
from keyword_crawler.queues import Frontier, PageBuffer, Page
from keyword_crawler.utils import InFlight
from keyword_crawler.workers import FetcherPool, ParserPool


def _run_until(pool, done, timeout=5.0):
    """Run one worker in a thread until ``done()`` holds, then stop and join it."""
    t = threading.Thread(target=pool.worker)
    t.start()
    deadline = threading.Event()
    waited = 0.0
    while not done() and waited < timeout:
        deadline.wait(0.01)
        waited += 0.01
    pool.stop_event.set()
    t.join(timeout)
    assert not t.is_alive()


def test_inflight_counter():
    c = InFlight()
    assert c.idle()
    c.enter()
    c.enter()
    assert c.active == 2
    c.leave()
    c.leave(completed=True)
    assert c.idle()
    assert c.completed == 1


def test_fetcher_pushes_pages_and_drops_failures():
    frontier, buffer = Frontier(), PageBuffer()
    bodies = {"http://a.com/ok.html": "hello", "http://a.com/empty.html": ""}

    def fetch(url, timeout):
        if url not in bodies:
            raise FetchTimeout(url, "timed out")
        return bodies[url]

    for u in ["http://a.com/ok.html", "http://a.com/empty.html", "http://a.com/slow.html"]:
        frontier.offer(u)
    pool = FetcherPool(frontier, buffer, fetch, threading.Event(), timeout=1, idle_backoff=0.01)

    _run_until(pool, lambda: pool.inflight.completed == 3)

    assert buffer.size() == 1
    assert buffer.take() == Page("http://a.com/ok.html", "hello")
    assert pool.error_count == 1
    assert pool.empty_count == 1
    assert pool.inflight.idle()
    # Failed URLs are never requeued.
    assert frontier.size() == 0
    assert not frontier.offer("http://a.com/slow.html")


def test_fetcher_survives_unexpected_exception():
    frontier, buffer = Frontier(), PageBuffer()
    frontier.offer("http://a.com/boom.html")
    frontier.offer("http://a.com/fine.html")

    def fetch(url, timeout):
        if "boom" in url:
            raise RuntimeError("kaboom")
        return "fine"

    pool = FetcherPool(frontier, buffer, fetch, threading.Event(), idle_backoff=0.01)
    _run_until(pool, lambda: pool.inflight.completed == 2)
    assert buffer.size() == 1
    assert pool.error_count == 1


def test_parser_reports_and_feeds_frontier(reporter):
    frontier, buffer = Frontier(), PageBuffer()
    agg = Aggregator(10, reporter)
    buffer.push(Page("http://a.com/b/c.html", 'good good <a href="../d.html">x</a>'))
    pool = ParserPool(frontier, buffer, agg, ["good"], threading.Event(), idle_backoff=0.01)

    _run_until(pool, lambda: pool.inflight.completed == 1)

    assert frontier.take() == "http://a.com/d.html"
    assert agg.page_count == 1
    assert agg.keyword_totals == {"good": 2}
    assert agg.url_count == 1
    assert reporter.snapshots[0].url == "http://a.com/b/c.html"


def test_worker_exits_promptly_when_stopped():
    stop = threading.Event()
    pool = FetcherPool(Frontier(), PageBuffer(), lambda u, t: "", stop, idle_backoff=10)
    t = threading.Thread(target=pool.worker)
    t.start()
    stop.set()
    t.join(2)
    assert not t.is_alive()
    assert pool.inflight.idle()
