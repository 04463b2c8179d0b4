"""
Run the App Store lead crawl from CLI.
"""

from __future__ import annotations

import argparse
import asyncio
import json
from dataclasses import asdict, replace

from appstore_leads.config import get_crawl_settings
from appstore_leads.scraping.engine import AppStoreCrawlEngine
from appstore_leads.scraping.logging_utils import configure_logging
from appstore_leads.scraping.storage import CSVResultStorage, read_first_column


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description="Crawl App Store listings for contact emails.")
    parser.add_argument(
        "--depth",
        type=int,
        default=0,
        help="Rounds of 'customers also bought' discovery after the input URLs.",
    )
    parser.add_argument(
        "--record-first-step",
        dest="record_first_step",
        action=argparse.BooleanOptionalAction,
        default=True,
        help="Write results of the input URLs, not only of discovered apps.",
    )
    parser.add_argument("--input", dest="input_path", default=None, help="CSV of app URLs.")
    parser.add_argument("--ignore", dest="ignore_path", default=None, help="CSV of app IDs to skip.")
    parser.add_argument("--output-dir", dest="output_dir", default=None, help="Directory for result CSVs.")
    return parser


def main(argv: list[str] | None = None) -> int:
    args = build_parser().parse_args(argv)

    settings = get_crawl_settings()
    overrides = {
        key: value
        for key, value in {
            "input_path": args.input_path,
            "ignore_path": args.ignore_path,
            "output_dir": args.output_dir,
        }.items()
        if value
    }
    settings = replace(settings, **overrides)
    configure_logging(settings.log_level)

    storage = CSVResultStorage(
        output_dir=settings.output_dir,
        email_columns=settings.email_columns,
    )
    engine = AppStoreCrawlEngine(settings=settings, storage=storage)
    stats = asyncio.run(
        engine.run(
            urls=read_first_column(settings.input_path),
            ignore_ids=read_first_column(settings.ignore_path),
            depth=max(0, args.depth),
            record_first_step=args.record_first_step,
        )
    )

    print(json.dumps({"output_dir": settings.output_dir, **asdict(stats)}, indent=2))
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
