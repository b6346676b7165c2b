"""Order synchronization tasks."""

import asyncio
from datetime import date

import structlog
from celery import shared_task

from storefront_service.infrastructure.shopify import ShopifyAPIError
from sync_worker.jobs import default_order_window, run_order_sync

logger = structlog.get_logger()


@shared_task(bind=True, max_retries=3, default_retry_delay=300)
def sync_orders_from_ecommerce(
    self, start_date: str | None = None, end_date: str | None = None
) -> dict:
    """
    Synchronize orders from Shopify.

    Args:
        start_date: ISO date of the first processed day; defaults to the
            start of the lookback window
        end_date: ISO date of the last processed day; defaults to today

    Returns:
        dict: Summary of sync operation
    """
    start, end = default_order_window(
        date.fromisoformat(start_date) if start_date else None,
        date.fromisoformat(end_date) if end_date else None,
    )
    logger.info(
        "Starting order sync task",
        start_date=start.isoformat(),
        end_date=end.isoformat(),
        attempt=self.request.retries + 1,
    )

    try:
        return asyncio.run(run_order_sync(start, end))
    except ShopifyAPIError as e:
        logger.warning("Order sync failed, scheduling retry", error=str(e))
        raise self.retry(exc=e)
