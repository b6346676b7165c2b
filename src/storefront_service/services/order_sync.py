"""Order synchronization service.

Pulls the orders processed within a date range and reconciles them, together
with their customer, addresses and line items, into the local store. Line
items are linked to previously synced products and variants where possible.
"""

from datetime import date, datetime
from typing import Any

import structlog

from shared.constants import (
    ADDRESS_TYPES,
    DEFAULT_CURRENCY_CODE,
    DEFAULT_ORDER_STATUS,
    SYNC_ORDERS,
)
from storefront_service.infrastructure.database.models import (
    Address,
    Customer,
    LineItem,
    Order,
    Product,
    ProductVariant,
)
from storefront_service.infrastructure.shopify import build_order_date_query
from storefront_service.services.coercion import (
    day_range,
    money_amount,
    money_currency,
    safe_datetime,
    safe_int,
    safe_string,
    utcnow,
)
from storefront_service.services.sync_base import BaseSyncService

logger = structlog.get_logger()

ADDRESS_FIELDS = ("address1", "address2", "city", "province", "zip", "country", "name", "phone")


class OrderSyncService(BaseSyncService):
    """Service for synchronizing orders from Shopify to the local store."""

    sync_id = SYNC_ORDERS

    async def sync_orders(self, start_date: date, end_date: date) -> dict[str, Any]:
        """
        Sync all orders processed between ``start_date`` and ``end_date``.

        Returns:
            Summary with ``count`` (fetched), ``synced_count``,
            ``database_count`` (local orders inside the range after the run)
            and the requested ``period``.

        Raises:
            ShopifyAPIError: If any page fails to load; nothing is written.
        """
        await self.mark_running()
        query = build_order_date_query(start_date, end_date)
        logger.info(
            "Starting order sync",
            start_date=start_date.isoformat(),
            end_date=end_date.isoformat(),
        )

        try:
            orders = await self.fetch_all(
                lambda cursor: self.client.fetch_orders(
                    first=self.page_size, after=cursor, query=query
                )
            )
        except Exception as e:
            logger.error("Order fetch failed, aborting sync", error=str(e))
            await self.mark_failed(str(e))
            raise

        logger.info("Fetched orders from Shopify", count=len(orders))

        synced_at = utcnow()
        synced = 0
        try:
            for order in orders:
                try:
                    if await self.sync_order(order, synced_at):
                        synced += 1
                except Exception as e:
                    await self.discard_failed_write()
                    logger.error(
                        "Error syncing order, skipping",
                        external_id=order.get("id"),
                        error=str(e),
                    )

            lower, upper = day_range(start_date, end_date)
            database_count = await self.count_rows(
                Order, Order.processed_at >= lower, Order.processed_at < upper
            )
            await self.mark_finished(synced)
        except Exception as e:
            logger.error("Order sync failed", error=str(e))
            await self.discard_failed_write()
            await self.mark_failed(str(e))
            raise

        summary = {
            "message": f"Successfully synced {synced} of {len(orders)} orders",
            "count": len(orders),
            "synced_count": synced,
            "database_count": database_count,
            "period": {
                "start_date": start_date.isoformat(),
                "end_date": end_date.isoformat(),
            },
        }
        logger.info("Order sync completed", **summary)
        return summary

    async def sync_order(self, order: dict[str, Any], synced_at: datetime) -> bool:
        """Upsert one order and its children. Returns False if it was skipped."""
        external_id = order.get("id")
        processed_at = safe_datetime(order.get("processedAt"))
        if not external_id or not order.get("name") or processed_at is None:
            logger.warning(
                "Order missing required fields (id, name, processedAt), skipping",
                external_id=external_id,
            )
            return False

        customer_id = await self._sync_customer(order.get("customer"), synced_at)

        total = order.get("totalPrice")
        tags = order.get("tags") or []
        values = {
            "name": order["name"],
            "email": safe_string(order.get("email")),
            "phone": safe_string(order.get("phone")),
            "processed_at": processed_at,
            "total_price": money_amount(total),
            "subtotal_price": money_amount(order.get("subtotalPrice")),
            "tax_price": money_amount(order.get("taxPrice")),
            "shipping_price": money_amount(order.get("totalShippingPrice")),
            "currency_code": money_currency(total, DEFAULT_CURRENCY_CODE),
            "financial_status": safe_string(
                order.get("displayFinancialStatus"), DEFAULT_ORDER_STATUS
            ),
            "fulfillment_status": safe_string(
                order.get("displayFulfillmentStatus"), DEFAULT_ORDER_STATUS
            ),
            "note": safe_string(order.get("note")),
            "tags": (
                ", ".join(str(tag) for tag in tags if tag is not None)
                if isinstance(tags, list)
                else safe_string(tags)
            ),
            "customer_id": customer_id,
            "updated_at": synced_at,
            "synced_at": synced_at,
        }

        try:
            order_id, created = await self.upsert(
                Order,
                {"external_id": external_id},
                values,
                on_insert={"created_at": synced_at},
            )
        except Exception as e:
            await self.discard_failed_write()
            logger.error("Error saving order", external_id=external_id, error=str(e))
            return False

        logger.debug(
            "Inserted order" if created else "Updated order",
            external_id=external_id,
            name=order["name"],
        )

        for address_type, key in ADDRESS_TYPES.items():
            if order.get(key):
                await self._sync_address(order_id, customer_id, address_type, order[key])

        for line_item in order.get("lineItems") or []:
            await self._sync_line_item(
                order_id, line_item, values["currency_code"], synced_at
            )

        return True

    async def _sync_customer(
        self, customer: dict[str, Any] | None, synced_at: datetime
    ) -> int | None:
        if not customer or not customer.get("id"):
            return None

        values = {
            "first_name": safe_string(customer.get("firstName")),
            "last_name": safe_string(customer.get("lastName")),
            "email": safe_string(customer.get("email")),
            "phone": safe_string(customer.get("phone")),
            "synced_at": synced_at,
        }
        try:
            customer_id, _ = await self.upsert(
                Customer, {"external_id": customer["id"]}, values
            )
        except Exception as e:
            await self.discard_failed_write()
            logger.error("Error saving customer", external_id=customer["id"], error=str(e))
            return None
        return customer_id

    async def _sync_address(
        self,
        order_id: int,
        customer_id: int | None,
        address_type: str,
        address: dict[str, Any],
    ) -> None:
        values = {field: safe_string(address.get(field)) for field in ADDRESS_FIELDS}
        values["customer_id"] = customer_id
        try:
            await self.upsert(
                Address, {"order_id": order_id, "address_type": address_type}, values
            )
        except Exception as e:
            await self.discard_failed_write()
            logger.error(
                "Error saving address",
                order_id=order_id,
                address_type=address_type,
                error=str(e),
            )

    async def _sync_line_item(
        self,
        order_id: int,
        line_item: dict[str, Any],
        order_currency: str,
        synced_at: datetime,
    ) -> None:
        external_id = line_item.get("id")
        if not external_id:
            logger.warning("Line item missing id, skipping", order_id=order_id)
            return

        variant = line_item.get("variant") or {}
        remote_product = variant.get("product") or {}
        price = line_item.get("price")

        try:
            product_id = await self.lookup_id(Product, remote_product.get("id"))
            variant_id = await self.lookup_id(ProductVariant, variant.get("id"))
            values = {
                "order_id": order_id,
                "title": safe_string(line_item.get("title")),
                "quantity": safe_int(line_item.get("quantity")),
                "price": money_amount(price),
                "currency_code": money_currency(price, order_currency),
                "product_id": product_id,
                "variant_id": variant_id,
                "synced_at": synced_at,
            }
            await self.upsert(LineItem, {"external_id": external_id}, values)
        except Exception as e:
            await self.discard_failed_write()
            logger.error("Error saving line item", external_id=external_id, error=str(e))
