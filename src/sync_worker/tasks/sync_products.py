"""Product synchronization tasks."""

import asyncio

import structlog
from celery import shared_task

from storefront_service.infrastructure.shopify import ShopifyAPIError
from sync_worker.jobs import run_product_sync

logger = structlog.get_logger()


@shared_task(bind=True, max_retries=3, default_retry_delay=300)
def sync_products_from_ecommerce(self) -> dict:
    """
    Synchronize the product catalog from Shopify.

    Fetches every product page, then upserts products, variants and images.
    A failed page fetch retries the whole task; missing credentials do not.

    Returns:
        dict: Summary of sync operation
    """
    logger.info("Starting product sync task", attempt=self.request.retries + 1)

    try:
        return asyncio.run(run_product_sync())
    except ShopifyAPIError as e:
        logger.warning("Product sync failed, scheduling retry", error=str(e))
        raise self.retry(exc=e)
