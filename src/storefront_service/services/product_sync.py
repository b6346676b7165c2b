"""Product synchronization service.

Pulls the full catalog from Shopify and reconciles it into the products,
product_variants and product_images tables by external id.
"""

from datetime import datetime
from typing import Any

import structlog

from shared.constants import SYNC_PRODUCTS
from storefront_service.infrastructure.database.models import (
    Product,
    ProductImage,
    ProductVariant,
)
from storefront_service.services.coercion import (
    money_amount,
    money_currency,
    safe_datetime,
    safe_int,
    safe_number,
    safe_string,
    utcnow,
)
from storefront_service.services.sync_base import BaseSyncService

logger = structlog.get_logger()


class ProductSyncService(BaseSyncService):
    """Service for synchronizing products from Shopify to the local store."""

    sync_id = SYNC_PRODUCTS

    async def sync_all_products(self) -> dict[str, Any]:
        """
        Sync the whole remote catalog.

        Returns:
            Summary with ``count`` (fetched), ``synced_count`` and
            ``database_count`` (products stored after the run).

        Raises:
            ShopifyAPIError: If any page fails to load; nothing is written.
        """
        await self.mark_running()
        logger.info("Starting product sync")

        try:
            products = await self.fetch_all(
                lambda cursor: self.client.fetch_products(first=self.page_size, after=cursor)
            )
        except Exception as e:
            logger.error("Product fetch failed, aborting sync", error=str(e))
            await self.mark_failed(str(e))
            raise

        logger.info("Fetched products from Shopify", count=len(products))

        synced_at = utcnow()
        synced = 0
        try:
            for product in products:
                try:
                    if await self.sync_product(product, synced_at):
                        synced += 1
                except Exception as e:
                    await self.discard_failed_write()
                    logger.error(
                        "Error syncing product, skipping",
                        external_id=product.get("id"),
                        error=str(e),
                    )

            database_count = await self.count_rows(Product)
            await self.mark_finished(synced)
        except Exception as e:
            logger.error("Product sync failed", error=str(e))
            await self.discard_failed_write()
            await self.mark_failed(str(e))
            raise

        summary = {
            "message": f"Successfully synced {synced} of {len(products)} products",
            "count": len(products),
            "synced_count": synced,
            "database_count": database_count,
        }
        logger.info("Product sync completed", **summary)
        return summary

    async def sync_product(self, product: dict[str, Any], synced_at: datetime) -> bool:
        """Upsert one product and its children. Returns False if it was skipped."""
        external_id = product.get("id")
        if not external_id or not product.get("title"):
            logger.warning(
                "Product missing required fields (id, title), skipping",
                external_id=external_id,
            )
            return False

        price_range = product.get("priceRange") or {}
        min_price = price_range.get("minVariantPrice")
        values = {
            "title": product["title"],
            "description": safe_string(product.get("description")),
            "handle": safe_string(product.get("handle")),
            "status": safe_string(product.get("status")),
            "created_at": safe_datetime(product.get("createdAt"), synced_at),
            "updated_at": safe_datetime(product.get("updatedAt"), synced_at),
            "total_inventory": safe_int(product.get("totalInventory")),
            "price_min": money_amount(min_price),
            "price_max": money_amount(price_range.get("maxVariantPrice")),
            "currency_code": money_currency(min_price),
            "synced_at": synced_at,
        }

        try:
            product_id, created = await self.upsert(
                Product, {"external_id": external_id}, values
            )
        except Exception as e:
            await self.discard_failed_write()
            logger.error("Error saving product", external_id=external_id, error=str(e))
            return False

        logger.debug(
            "Inserted product" if created else "Updated product",
            external_id=external_id,
            title=product["title"],
        )

        for variant in product.get("variants") or []:
            await self._sync_variant(product_id, variant, synced_at)
        for image in product.get("images") or []:
            await self._sync_image(product_id, image, synced_at)

        return True

    async def _sync_variant(
        self, product_id: int, variant: dict[str, Any], synced_at: datetime
    ) -> None:
        external_id = variant.get("id")
        if not external_id:
            logger.warning("Variant missing id, skipping", product_id=product_id)
            return

        values = {
            "product_id": product_id,
            "title": safe_string(variant.get("title")),
            "price": money_amount(variant.get("price")),
            "sku": safe_string(variant.get("sku")),
            "inventory_quantity": safe_int(variant.get("inventoryQuantity")),
            "weight": safe_number(variant.get("weight")),
            "weight_unit": safe_string(variant.get("weightUnit")),
            "synced_at": synced_at,
        }
        try:
            await self.upsert(ProductVariant, {"external_id": external_id}, values)
        except Exception as e:
            await self.discard_failed_write()
            logger.error("Error saving variant", external_id=external_id, error=str(e))

    async def _sync_image(
        self, product_id: int, image: dict[str, Any], synced_at: datetime
    ) -> None:
        external_id = image.get("id")
        if not external_id:
            logger.warning("Image missing id, skipping", product_id=product_id)
            return

        values = {
            "product_id": product_id,
            "url": safe_string(image.get("url")),
            "alt_text": safe_string(image.get("altText")),
            "width": safe_int(image.get("width")),
            "height": safe_int(image.get("height")),
            "synced_at": synced_at,
        }
        try:
            await self.upsert(ProductImage, {"external_id": external_id}, values)
        except Exception as e:
            await self.discard_failed_write()
            logger.error("Error saving image", external_id=external_id, error=str(e))
