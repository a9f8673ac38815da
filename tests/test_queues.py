import threading

import pytest

from keyword_crawler.queues import Frontier, PageBuffer, Page, QueueEmpty


def test_offer_take_fifo():
    f = Frontier()
    assert f.offer("http://a.com/1.html")
    assert f.offer("http://a.com/2.html")
    assert f.size() == 2
    assert f.take() == "http://a.com/1.html"
    assert f.take() == "http://a.com/2.html"
    with pytest.raises(QueueEmpty):
        f.take()


def test_dedup_is_permanent():
    f = Frontier()
    assert f.offer("http://a.com/x.html")
    f.take()
    assert f.size() == 0
    assert not f.offer("http://a.com/x.html")
    assert f.size() == 0
    assert f.seen_count() == 1


def test_dedup_uses_normalized_form():
    f = Frontier()
    assert f.offer("HTTP://A.com:80/x.html#top")
    assert not f.offer("http://a.com/x.html")
    assert f.take() == "http://a.com/x.html"


@pytest.mark.parametrize("url", ["", None, "http://a.com/" + "x" * 3000 + ".html"])
def test_offer_rejects_invalid(url):
    f = Frontier()
    assert not f.offer(url)
    assert f.size() == 0


def test_concurrent_offers_admit_each_url_once():
    f = Frontier()
    urls = [f"http://a.com/{i}.html" for i in range(200)]
    admitted = []
    lock = threading.Lock()
    start = threading.Barrier(8)

    def offer_all():
        start.wait()
        mine = [u for u in urls if f.offer(u)]
        with lock:
            admitted.extend(mine)

    threads = [threading.Thread(target=offer_all) for _ in range(8)]
    for t in threads:
        t.start()
    for t in threads:
        t.join()

    assert sorted(admitted) == sorted(urls)

    taken = []
    while True:
        try:
            taken.append(f.take())
        except QueueEmpty:
            break
    assert len(taken) == len(set(taken)) == 200


def test_page_buffer_fifo_and_empty():
    b = PageBuffer()
    with pytest.raises(QueueEmpty):
        b.take()
    b.push(Page("http://a.com/1.html", "one"))
    b.push(Page("http://a.com/1.html", "again"))
    assert b.size() == 2
    assert b.take().body == "one"
    assert b.take().body == "again"
    assert b.size() == 0


def test_page_buffer_rejects_missing_url():
    with pytest.raises(ValueError):
        PageBuffer().push(Page("", "body"))
