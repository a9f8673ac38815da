"""
Reporter sinks that receive one Snapshot per accepted page.

- ConsoleReporter prints a full statistics block for every page
- ProgressReporter drives a tqdm progress bar towards the page limit
- NullReporter discards everything
"""

import sys

from tqdm import tqdm

from .aggregator import Snapshot


class NullReporter:
    def report(self, snap: Snapshot):
        pass

    def close(self):
        pass


class ConsoleReporter:
    """Prints a statistics block per page, newest last."""

    def __init__(self, stream=None):
        self.stream = stream or sys.stdout

    def format(self, snap: Snapshot) -> str:
        lines = [
            "",
            f"Parsed: {snap.url}",
            f"Pages Retrieved: {snap.pages_total}",
            f"Average words per page: {snap.avg_words_per_page:.0f}",
            f"Average URLs per page: {snap.avg_urls_per_page:.0f}",
            f"{'Keyword':<22}{'Ave. hits per page':<25}Total hits",
        ]
        for keyword, total in snap.keyword_totals.items():
            avg = total / snap.pages_total
            lines.append(f"  {keyword:<22}{avg:<25.3f}{total}")
        lines.append("")
        lines.append(f"Page limit: {snap.page_limit}")
        lines.append(f"Average parse time per page: {snap.avg_parse_time_ms:.3f}msec")
        lines.append(f"Total running time: {snap.total_running_time_ms / 1000:.3f}sec")
        return "\n".join(lines)

    def report(self, snap: Snapshot):
        print(self.format(snap), file=self.stream, flush=True)

    def close(self):
        pass


class ProgressReporter:
    """Progress bar over the page limit with the latest totals as postfix."""

    def __init__(self, page_limit: int):
        self._pbar = tqdm(
            total=page_limit,
            desc="Crawling",
            unit="page",
            ncols=90,
            bar_format="{l_bar}{bar}| {n_fmt}/{total_fmt} [{elapsed}<{remaining}, {rate_fmt}]"
        )

    @property
    def pages(self) -> int:
        return self._pbar.n

    def report(self, snap: Snapshot):
        top = sorted(snap.keyword_totals.items(), key=lambda kv: kv[1], reverse=True)[:3]
        self._pbar.set_postfix_str(
            f"words/page={snap.avg_words_per_page:.0f} "
            + " ".join(f"{k}={v}" for k, v in top)
        )
        self._pbar.n = min(snap.pages_total, snap.page_limit)
        self._pbar.refresh()

    def close(self):
        self._pbar.close()


def make_reporter(kind: str, page_limit: int):
    """Build a reporter from its config name: console, progress or none."""
    kind = (kind or "console").lower()
    if kind == "console":
        return ConsoleReporter()
    if kind == "progress":
        return ProgressReporter(page_limit)
    if kind == "none":
        return NullReporter()
    raise ValueError(f"Unknown reporter: {kind}")
