"""Command-line access to a terminal's store.

Usage:
    python -m cafe_pos [--store PATH] [--offline] {seed,sync,pending,report,history}
"""

import argparse
import asyncio
import sys
from dataclasses import replace
from typing import Optional

from .config import Settings
from .errors import PosError
from .helpers import format_money
from .receipt import format_receipt
from .seed import seed_store
from .terminal import Terminal, configure_logging


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="cafe_pos", description="Café POS terminal tools")
    parser.add_argument("--store", help="JSON store file (overrides POS_STORE_PATH)")
    parser.add_argument(
        "--offline", action="store_true", help="treat the terminal as disconnected"
    )
    sub = parser.add_subparsers(dest="command", required=True)
    sub.add_parser("seed", help="write the initial data if the store is empty")
    sub.add_parser("sync", help="merge queued offline orders")
    sub.add_parser("pending", help="print the number of queued offline orders")
    sub.add_parser("report", help="print dashboard statistics")
    history = sub.add_parser("history", help="print receipts, newest first")
    history.add_argument("--limit", type=int, default=10)
    return parser


async def run(args: argparse.Namespace, settings: Settings) -> int:
    terminal = Terminal(settings, online=not args.offline)
    try:
        if args.command == "seed":
            written = await seed_store(terminal.store)
            print("seeded" if written else "already seeded")
        elif args.command == "sync":
            print(f"synced {await terminal.sync.sync_pending_orders()} order(s)")
        elif args.command == "pending":
            print(await terminal.sync.pending_count())
        elif args.command == "report":
            summary = await terminal.reports.dashboard_summary()
            print(f"Revenue:  {format_money(summary.total_revenue_cents)}")
            print(f"Orders:   {summary.order_count}")
            print(f"Products: {summary.product_count}")
            print(f"Pending:  {summary.pending_count}")
            for name, units in summary.top_products:
                print(f"  {units:>5}  {name}")
        elif args.command == "history":
            for order in (await terminal.reports.order_history())[: args.limit]:
                print(format_receipt(order, settings.redemption_rate_cents))
    finally:
        terminal.close()
    return 0


def main(argv: Optional[list[str]] = None) -> int:
    args = build_parser().parse_args(argv)
    try:
        settings = Settings.from_env()
        if args.store:
            settings = replace(settings, store_path=args.store)
        configure_logging(settings.log_level_number)
        return asyncio.run(run(args, settings))
    except PosError as e:
        print(f"error: {e}", file=sys.stderr)
        return 1


if __name__ == "__main__":
    sys.exit(main())
