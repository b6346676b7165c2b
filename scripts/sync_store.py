#!/usr/bin/env python3
"""CLI script to sync products or orders from Shopify into the local database."""

import argparse
import asyncio
import sys
from datetime import date
from pathlib import Path

# Add src to path
sys.path.insert(0, str(Path(__file__).parent.parent / "src"))

import structlog

from storefront_service.infrastructure.shopify import ShopifyError
from storefront_service.logging_config import configure_logging
from sync_worker.jobs import default_order_window, run_order_sync, run_product_sync

logger = structlog.get_logger()


def parse_args(argv: list[str] | None = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(description=__doc__)
    subparsers = parser.add_subparsers(dest="target", required=True)

    subparsers.add_parser("products", help="Sync the whole product catalog")

    orders = subparsers.add_parser("orders", help="Sync orders for a date range")
    orders.add_argument("--start", type=date.fromisoformat, help="First day (YYYY-MM-DD)")
    orders.add_argument("--end", type=date.fromisoformat, help="Last day (YYYY-MM-DD)")

    return parser.parse_args(argv)


async def main(args: argparse.Namespace) -> dict:
    if args.target == "products":
        return await run_product_sync()

    start_date, end_date = default_order_window(args.start, args.end)
    if start_date > end_date:
        raise SystemExit("--start must not be after --end")
    return await run_order_sync(start_date, end_date)


if __name__ == "__main__":
    configure_logging()
    arguments = parse_args()
    try:
        result = asyncio.run(main(arguments))
    except ShopifyError as e:
        logger.error("Sync failed", target=arguments.target, error=str(e))
        sys.exit(1)
    logger.info("Sync finished", target=arguments.target, **result)
