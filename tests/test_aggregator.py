import threading

import pytest

from keyword_crawler.aggregator import Aggregator


def test_merges_keyword_counts(reporter):
    agg = Aggregator(10, reporter)
    agg.report("http://a.com/1.html", {"good": 2}, 10, 1, 2.0)
    snap = agg.report("http://a.com/2.html", {"good": 1, "the": 4}, 30, 3, 4.0)

    assert agg.keyword_totals == {"good": 3, "the": 4}
    assert snap.keyword_totals == {"good": 3, "the": 4}
    assert snap.pages_total == 2
    assert snap.avg_words_per_page == 20
    assert snap.avg_urls_per_page == 2
    assert snap.avg_parse_time_ms == 3.0
    assert snap.page_limit == 10
    assert snap.total_running_time_ms >= 0
    assert [s.url for s in reporter.snapshots] == ["http://a.com/1.html", "http://a.com/2.html"]


def test_snapshot_is_a_copy():
    agg = Aggregator(5)
    snap = agg.report("u", {"good": 1}, 1, 0, 0.0)
    agg.report("v", {"good": 1}, 1, 0, 0.0)
    assert snap.keyword_totals == {"good": 1}


def test_reports_after_limit_are_dropped(reporter):
    agg = Aggregator(2, reporter)
    assert agg.report("1", {}, 1, 0, 0.0) is not None
    assert not agg.hit_limit()
    assert agg.report("2", {}, 1, 0, 0.0) is not None
    assert agg.hit_limit()
    assert agg.report("3", {"good": 9}, 100, 5, 1.0) is None
    assert agg.page_count == 2
    assert agg.word_count == 2
    assert "good" not in agg.keyword_totals
    assert len(reporter.snapshots) == 2


def test_rejects_non_positive_limit():
    with pytest.raises(ValueError):
        Aggregator(0)


def test_concurrent_reports_respect_ceiling_and_sum_exactly(reporter):
    limit = 150
    agg = Aggregator(limit, reporter)
    start = threading.Barrier(10)

    def hammer():
        start.wait()
        for i in range(50):
            agg.report(f"u{i}", {"good": 1}, 3, 1, 0.5)
            assert agg.page_count <= limit

    threads = [threading.Thread(target=hammer) for _ in range(10)]
    for t in threads:
        t.start()
    for t in threads:
        t.join()

    assert agg.page_count == limit
    assert agg.word_count == 3 * limit
    assert agg.url_count == limit
    assert agg.keyword_totals == {"good": limit}
    assert [s.pages_total for s in reporter.snapshots] == list(range(1, limit + 1))


def test_summary_without_pages():
    s = Aggregator(3).summary()
    assert s["pages_total"] == 0
    assert s["limit_reached"] is False
    assert s["avg_words_per_page"] == 0
