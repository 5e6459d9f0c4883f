"""Command-line batch runner.

Usage:
    gameprice-scrape --file urls.txt
    gameprice-scrape --url https://www.turkpin.com/pubg-mobile-uc --no-delivery
    gameprice-scrape --file urls.txt --concurrency 2 --json
"""

import argparse
import asyncio
import json
import sys
from typing import List, Optional

from gameprice.config import settings
from gameprice.core.exceptions import RenderingEngineError
from gameprice.core.logging import configure_logging
from gameprice.scrapers.base import BatchReport
from gameprice.scrapers.orchestrator import BatchOrchestrator


def _print_report(report: BatchReport, limit: int = 20) -> None:
    print(f"\n{'='*70}")
    print(f"  Batch {report.batch_id}")
    print(f"{'='*70}")
    print(f"  URLs: {report.requested_url_count}")
    print(f"  Succeeded: {report.succeeded_count}")
    print(f"  Failed: {report.failed_count}")
    print(f"  Items: {report.total_item_count}")
    print(f"{'='*70}\n")

    for i, item in enumerate(report.items[:limit], 1):
        print(f"[{i}] {item.title}")
        print(f"    Price: {item.raw_price_text} ({item.currency.value}, {item.region.value})")
        print(f"    Game: {item.game_category}  Site: {item.site_domain}")

    for outcome in report.failed_outcomes:
        print(f"  FAILED {outcome.url}: {outcome.error_message}")
    print()


async def run(
    file_path: Optional[str],
    urls: List[str],
    concurrency: Optional[int],
    deliver: bool,
    as_json: bool,
) -> int:
    orchestrator = BatchOrchestrator(deliver=deliver, concurrency=concurrency)
    try:
        await orchestrator.initialize()
        if urls:
            report = await orchestrator.scrape_urls(urls)
        else:
            report = await orchestrator.scrape_from_file(file_path or settings.URLS_FILE)
    except OSError as e:
        print(f"Cannot read URL file: {e}", file=sys.stderr)
        return 2
    except RenderingEngineError as e:
        print(f"Browser could not be started: {e}", file=sys.stderr)
        return 3
    finally:
        await orchestrator.close()

    if as_json:
        print(json.dumps(report.to_dict(), ensure_ascii=False, indent=2))
    else:
        _print_report(report)
    return 0 if report.succeeded_count else 1


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="gameprice-scrape",
        description="Scrape game-currency prices from a list of shop URLs",
    )
    parser.add_argument(
        "--file",
        help=f"Newline-delimited URL file (default: {settings.URLS_FILE})",
    )
    parser.add_argument(
        "--url",
        action="append",
        default=[],
        help="URL to scrape; may be repeated and overrides --file",
    )
    parser.add_argument(
        "--concurrency",
        type=int,
        help="URLs in flight at once, 1-8 (default: SCRAPER_CONCURRENCY)",
    )
    parser.add_argument(
        "--no-delivery",
        action="store_true",
        help="Do not post the batch to the n8n webhook",
    )
    parser.add_argument(
        "--json",
        action="store_true",
        help="Print the full batch report as JSON",
    )
    return parser


def main(argv: Optional[List[str]] = None) -> int:
    """Parse arguments and run one batch."""
    args = build_parser().parse_args(argv)
    configure_logging(settings.LOG_LEVEL, settings.LOG_JSON)
    return asyncio.run(
        run(args.file, args.url, args.concurrency, not args.no_delivery, args.json)
    )


if __name__ == "__main__":
    sys.exit(main())
