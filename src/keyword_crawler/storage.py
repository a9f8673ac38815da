import os, json, logging

import matplotlib
matplotlib.use("Agg")  # Use non-interactive backend for plotting
import matplotlib.pyplot as plt

logger = logging.getLogger(__name__)


class Storage:
    def __init__(self, root: str):
        self.root = root
        self.reports_dir = os.path.join(root, 'reports')
        os.makedirs(self.reports_dir, exist_ok=True)

    def write_summary_json(self, summary: dict, filename: str = "summary.json"):
        p = os.path.join(self.reports_dir, filename)
        with open(p, "w", encoding="utf-8") as f:
            json.dump(summary, f, ensure_ascii=False, indent=2)
        return p

    def make_charts(self, summary: dict, parse_times=None):
        """
        Generate charts for a finished run.

        Creates:
        1. Bar chart of keyword totals
        2. Histogram of per-page parse times (if any pages were parsed)

        Returns:
            list: Paths of the written images
        """
        written = []

        totals = summary.get("keyword_totals") or {}
        plt.figure()
        plt.bar(list(totals.keys()), list(totals.values()))
        plt.title("Keyword Totals")
        plt.ylabel("hits")
        plt.tight_layout()
        p = os.path.join(self.reports_dir, "keywords.png")
        plt.savefig(p)
        plt.close()
        written.append(p)

        times = [t for _, t in (parse_times or []) if t is not None]
        if times:
            plt.figure()
            plt.hist(times, bins=30)
            plt.title("Parse Time Distribution (ms)")
            plt.xlabel("milliseconds")
            plt.ylabel("pages")
            plt.tight_layout()
            p = os.path.join(self.reports_dir, "parse_times_hist.png")
            plt.savefig(p)
            plt.close()
            written.append(p)

        return written

    def save_run(self, summary: dict, parse_times=None):
        """Write summary JSON and charts; chart failures are logged, not raised."""
        path = self.write_summary_json(summary)
        try:
            self.make_charts(summary, parse_times)
        except Exception as e:
            logger.warning("charts failed: %s", e)
        return path
