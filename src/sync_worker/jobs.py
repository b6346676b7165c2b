"""Async sync jobs shared by the Celery tasks and the CLI script."""

from datetime import date, datetime, timedelta, timezone
from typing import Any

import structlog

from storefront_service.config import get_settings
from storefront_service.infrastructure.database.connection import (
    dispose_engine,
    get_db_session,
)
from storefront_service.infrastructure.redis import CacheService, close_redis, get_redis_client
from storefront_service.infrastructure.shopify import ShopifyClient
from storefront_service.services.analytics import invalidate_sales_cache
from storefront_service.services.order_sync import OrderSyncService
from storefront_service.services.product_sync import ProductSyncService

logger = structlog.get_logger()


def default_order_window(
    start_date: date | None = None, end_date: date | None = None
) -> tuple[date, date]:
    """Fill missing bounds with the trailing lookback window ending today."""
    settings = get_settings()
    end_date = end_date or datetime.now(timezone.utc).date()
    start_date = start_date or end_date - timedelta(days=settings.sync_orders_lookback_days)
    return start_date, end_date


async def run_product_sync() -> dict[str, Any]:
    """Sync the full catalog in a fresh session and client."""
    settings = get_settings()
    try:
        async with ShopifyClient.from_settings(settings) as client:
            async with get_db_session() as session:
                service = ProductSyncService(
                    session,
                    client,
                    page_size=settings.sync_page_size,
                    page_delay_seconds=settings.sync_page_delay_seconds,
                )
                return await service.sync_all_products()
    finally:
        # Each asyncio.run gets a new loop; pooled connections must not outlive it
        await dispose_engine()


async def run_order_sync(start_date: date, end_date: date) -> dict[str, Any]:
    """Sync orders for a date range, then drop cached sales analytics."""
    settings = get_settings()
    try:
        async with ShopifyClient.from_settings(settings) as client:
            async with get_db_session() as session:
                service = OrderSyncService(
                    session,
                    client,
                    page_size=settings.sync_page_size,
                    page_delay_seconds=settings.sync_page_delay_seconds,
                )
                summary = await service.sync_orders(start_date, end_date)

        await invalidate_sales_cache(CacheService(await get_redis_client()))
        return summary
    finally:
        await close_redis()
        await dispose_engine()
