#!/usr/bin/env python3
"""
Keyword Crawler Main Module

This module serves as the entry point for the keyword crawler application.
It handles configuration, command-line arguments, interactive prompting for
missing run settings, logging setup, and crawler initialization and execution.
"""

import argparse
import logging
import os
import signal
import sys
from urllib.parse import urlsplit

import yaml

from keyword_crawler.crawler import Crawler
from keyword_crawler.storage import Storage


def parse_args(argv=None):
    """Parse command-line arguments for the crawler.

    Returns:
        argparse.Namespace: Parsed command-line arguments including:
            - config: Path to configuration file (default: config.yaml)
            - seed: Seed URL to start crawling from
            - keywords: Keywords to count
            - max-pages: Maximum number of pages to parse
            - workers: Number of threads per worker pool
            - reporter: console, progress or none
            - data-root: Root directory for logs and reports
            - verbose: Enable verbose logging
    """
    ap = argparse.ArgumentParser(description='Keyword Crawler')
    ap.add_argument('--config', default='config.yaml')
    ap.add_argument('--seed')
    ap.add_argument('--keywords', nargs='+')
    ap.add_argument('--max-pages', type=int)
    ap.add_argument('--workers', type=int)
    ap.add_argument('--reporter', choices=['console', 'progress', 'none'])
    ap.add_argument('--data-root', default='data')
    ap.add_argument('--no-reports', action='store_true')
    ap.add_argument('--verbose', action='store_true')
    return ap.parse_args(argv)


def load_config(path):
    """Load crawler configuration from YAML file.

    Searches both the provided path (relative to current working directory)
    and the directory of this file. A missing file yields an empty config so
    everything can still come from flags or the prompt.
    """
    candidates = [path]
    if not os.path.isabs(path):
        candidates.append(os.path.join(os.path.dirname(__file__), path))

    for candidate in candidates:
        if os.path.exists(candidate):
            with open(candidate, 'r', encoding='utf-8') as f:
                try:
                    cfg = yaml.safe_load(f) or {}
                except yaml.YAMLError as e:
                    raise ValueError(f"Invalid YAML in {candidate}: {e}") from e
            if not isinstance(cfg, dict):
                raise TypeError(f"Top level of {candidate} must be a mapping, got {type(cfg).__name__}")
            return cfg
    return {}


def apply_overrides(cfg: dict, args) -> dict:
    """Override configuration with command-line arguments if provided."""
    if args.seed:      cfg['seed_url'] = args.seed
    if args.keywords:  cfg['keywords'] = args.keywords
    if args.max_pages: cfg['max_pages'] = args.max_pages
    if args.workers:   cfg['workers'] = args.workers
    if args.reporter:  cfg['reporter'] = args.reporter
    if args.no_reports: cfg['write_reports'] = False
    return cfg


def _ask_positive_int(prompt, input_fn):
    while True:
        try:
            value = int(input_fn(prompt))
        except ValueError:
            continue
        if value > 0:
            return value


def _positive_int_or_none(value):
    try:
        value = int(value)
    except (TypeError, ValueError):
        return None
    return value if value > 0 else None


def prompt_missing(cfg: dict, input_fn=input) -> dict:
    """Ask for any run setting that neither the config file nor flags supplied."""
    if not cfg.get('seed_url'):
        cfg['seed_url'] = input_fn("Enter seed URL: ").strip()
    if not cfg.get('keywords'):
        cfg['keywords'] = input_fn("Enter keywords separated by spaces: ").split()
    if _positive_int_or_none(cfg.get('max_pages')) is None:
        cfg['max_pages'] = _ask_positive_int(
            "Enter maximum number of pages to parse (greater than 0): ", input_fn)
    if _positive_int_or_none(cfg.get('workers')) is None:
        cfg['workers'] = _ask_positive_int(
            "Enter number of threads to use (greater than 0): ", input_fn)
    return cfg


def setup_logging(verbose: bool, data_root: str):
    """Configure logging for the crawler.

    Sets up logging to both console and file, with level based on verbosity.

    Args:
        verbose (bool): If True, set logging level to DEBUG; otherwise INFO
        data_root (str): Directory where log files will be stored
    """
    os.makedirs(os.path.join(data_root, 'logs'), exist_ok=True)
    level = logging.DEBUG if verbose else logging.INFO
    logging.basicConfig(
        level=level,
        format='%(asctime)s %(levelname)s %(name)s: %(message)s',
        handlers=[
            logging.StreamHandler(sys.stdout),
            logging.FileHandler(os.path.join(data_root, 'logs', 'crawler.log'), mode='a', encoding='utf-8')
        ]
    )
    logging.getLogger('urllib3').setLevel(logging.WARNING)
    logging.getLogger('matplotlib').setLevel(logging.WARNING)


def main(argv=None):
    """Main entry point for the crawler application."""
    args = parse_args(argv)
    cfg = apply_overrides(load_config(args.config), args)

    print("    Web spider\n")
    print("  Scours a given website for words.\n")
    cfg = prompt_missing(cfg)

    # Data directory is named after the seed host
    host = urlsplit(cfg['seed_url']).netloc or 'local'
    data_root = os.path.join(args.data_root, host.lower().replace('.', '_').replace(':', '_'))
    os.makedirs(data_root, exist_ok=True)
    setup_logging(args.verbose, data_root)

    storage = Storage(data_root) if cfg.get('write_reports', True) else None
    crawler = Crawler(cfg, storage=storage)

    def _signal_handler(sig, frame):
        print("\n🛑 Stopping crawler... please wait for active threads to finish.")
        crawler.stop()

    signal.signal(signal.SIGINT, _signal_handler)

    summary = crawler.run()
    print("Done!")
    print(f"\n📊 Report: {summary['pages_total']} page(s), stopped by {summary['stop_reason']}")
    if summary.get('summary_path'):
        print(f"📝 Summary JSON: {summary['summary_path']}")
    return 0


if __name__ == '__main__':
    sys.exit(main())
