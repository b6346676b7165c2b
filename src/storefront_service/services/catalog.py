"""Paginated, filterable read views over the synced catalog and orders."""

import math
from datetime import date, datetime
from typing import Any

import structlog
from sqlalchemy import func, or_, select
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import selectinload

from shared.constants import DEFAULT_PAGE_LIMIT
from storefront_service.infrastructure.database.models import (
    Address,
    LineItem,
    Order,
    Product,
    ProductImage,
    ProductVariant,
)
from storefront_service.services.coercion import day_range

logger = structlog.get_logger()

PRODUCT_SORT_COLUMNS = {
    "title": Product.title,
    "created_at": Product.created_at,
    "updated_at": Product.updated_at,
    "price_min": Product.price_min,
    "price_max": Product.price_max,
    "total_inventory": Product.total_inventory,
    "synced_at": Product.synced_at,
}

ORDER_SORT_COLUMNS = {
    "processed_at": Order.processed_at,
    "name": Order.name,
    "total_price": Order.total_price,
    "financial_status": Order.financial_status,
    "fulfillment_status": Order.fulfillment_status,
    "synced_at": Order.synced_at,
}


def _iso(value: datetime | None) -> str | None:
    return value.isoformat() if value else None


def _like_pattern(search: str) -> str:
    """Substring pattern with LIKE wildcards in the search text taken literally."""
    escaped = search.replace("\\", "\\\\").replace("%", "\\%").replace("_", "\\_")
    return f"%{escaped}%"


def _pagination(page: int, limit: int, total: int) -> dict[str, int]:
    return {
        "page": page,
        "limit": limit,
        "total": total,
        "total_pages": math.ceil(total / limit) if total else 0,
    }


class CatalogService:
    """Read-side queries backing the products and orders views."""

    def __init__(self, session: AsyncSession):
        self.session = session

    async def list_products(
        self,
        page: int = 1,
        limit: int = DEFAULT_PAGE_LIMIT,
        search: str | None = None,
        sort: str = "title",
        order: str = "asc",
    ) -> dict[str, Any]:
        """
        List products with their variants and images.

        Args:
            page: 1-based page number
            limit: Page size
            search: Case-insensitive substring matched against the title
            sort: One of ``PRODUCT_SORT_COLUMNS``
            order: ``asc`` or ``desc``

        Raises:
            ValueError: If ``sort`` or ``order`` is not supported
        """
        sort_column = self._resolve_sort(PRODUCT_SORT_COLUMNS, sort, order)

        query = select(Product)
        if search:
            query = query.where(Product.title.ilike(_like_pattern(search), escape="\\"))

        total = await self._count(query)
        result = await self.session.execute(
            query.options(selectinload(Product.variants), selectinload(Product.images))
            .order_by(sort_column, Product.id)
            .offset((page - 1) * limit)
            .limit(limit)
        )
        products = result.scalars().all()

        logger.debug("Listed products", page=page, returned=len(products), total=total)
        return {
            "items": [self._product_dict(p) for p in products],
            "pagination": _pagination(page, limit, total),
        }

    async def list_orders(
        self,
        page: int = 1,
        limit: int = DEFAULT_PAGE_LIMIT,
        search: str | None = None,
        sort: str = "processed_at",
        order: str = "desc",
        start_date: date | None = None,
        end_date: date | None = None,
    ) -> dict[str, Any]:
        """
        List orders with line items, addresses and customer.

        The date filter applies to ``processed_at`` and covers whole days:
        an order processed any time on ``end_date`` is included.

        Raises:
            ValueError: If ``sort`` or ``order`` is not supported
        """
        sort_column = self._resolve_sort(ORDER_SORT_COLUMNS, sort, order)

        query = select(Order)
        if search:
            pattern = _like_pattern(search)
            query = query.where(
                or_(
                    Order.name.ilike(pattern, escape="\\"),
                    Order.email.ilike(pattern, escape="\\"),
                )
            )

        lower, upper = day_range(start_date, end_date)
        if lower is not None:
            query = query.where(Order.processed_at >= lower)
        if upper is not None:
            query = query.where(Order.processed_at < upper)

        total = await self._count(query)
        result = await self.session.execute(
            query.options(
                selectinload(Order.line_items),
                selectinload(Order.addresses),
                selectinload(Order.customer),
            )
            .order_by(sort_column, Order.id)
            .offset((page - 1) * limit)
            .limit(limit)
        )
        orders = result.scalars().all()

        logger.debug("Listed orders", page=page, returned=len(orders), total=total)
        return {
            "items": [self._order_dict(o) for o in orders],
            "pagination": _pagination(page, limit, total),
        }

    # -------------------------------------------------------------------------
    # Helpers
    # -------------------------------------------------------------------------

    @staticmethod
    def _resolve_sort(columns: dict[str, Any], sort: str, order: str) -> Any:
        if sort not in columns:
            raise ValueError(
                f"Unsupported sort field '{sort}'. Use one of: {', '.join(sorted(columns))}"
            )
        if order not in ("asc", "desc"):
            raise ValueError("order must be 'asc' or 'desc'")
        column = columns[sort]
        return column.asc() if order == "asc" else column.desc()

    async def _count(self, query: Any) -> int:
        result = await self.session.execute(
            select(func.count()).select_from(query.order_by(None).subquery())
        )
        return result.scalar() or 0

    @staticmethod
    def _product_dict(product: Product) -> dict[str, Any]:
        return {
            "id": product.id,
            "external_id": product.external_id,
            "title": product.title,
            "description": product.description,
            "handle": product.handle,
            "status": product.status,
            "total_inventory": product.total_inventory,
            "price_min": product.price_min,
            "price_max": product.price_max,
            "currency_code": product.currency_code,
            "created_at": _iso(product.created_at),
            "updated_at": _iso(product.updated_at),
            "synced_at": _iso(product.synced_at),
            "variants": [CatalogService._variant_dict(v) for v in product.variants],
            "images": [CatalogService._image_dict(i) for i in product.images],
        }

    @staticmethod
    def _variant_dict(variant: ProductVariant) -> dict[str, Any]:
        return {
            "id": variant.id,
            "external_id": variant.external_id,
            "title": variant.title,
            "price": variant.price,
            "sku": variant.sku,
            "inventory_quantity": variant.inventory_quantity,
            "weight": variant.weight,
            "weight_unit": variant.weight_unit,
        }

    @staticmethod
    def _image_dict(image: ProductImage) -> dict[str, Any]:
        return {
            "id": image.id,
            "external_id": image.external_id,
            "url": image.url,
            "alt_text": image.alt_text,
            "width": image.width,
            "height": image.height,
        }

    @staticmethod
    def _address_dict(address: Address | None) -> dict[str, Any] | None:
        if address is None:
            return None
        return {
            "id": address.id,
            "address1": address.address1,
            "address2": address.address2,
            "city": address.city,
            "province": address.province,
            "zip": address.zip,
            "country": address.country,
            "name": address.name,
            "phone": address.phone,
        }

    @staticmethod
    def _line_item_dict(item: LineItem) -> dict[str, Any]:
        return {
            "id": item.id,
            "external_id": item.external_id,
            "title": item.title,
            "quantity": item.quantity,
            "price": item.price,
            "currency_code": item.currency_code,
            "product_id": item.product_id,
            "variant_id": item.variant_id,
        }

    @staticmethod
    def _order_dict(order: Order) -> dict[str, Any]:
        addresses = {a.address_type: a for a in order.addresses}
        customer = order.customer
        return {
            "id": order.id,
            "external_id": order.external_id,
            "name": order.name,
            "email": order.email,
            "phone": order.phone,
            "processed_at": _iso(order.processed_at),
            "total_price": order.total_price,
            "subtotal_price": order.subtotal_price,
            "tax_price": order.tax_price,
            "shipping_price": order.shipping_price,
            "currency_code": order.currency_code,
            "financial_status": order.financial_status,
            "fulfillment_status": order.fulfillment_status,
            "note": order.note,
            "tags": [t.strip() for t in order.tags.split(",") if t.strip()] if order.tags else [],
            "synced_at": _iso(order.synced_at),
            "customer": (
                {
                    "id": customer.id,
                    "external_id": customer.external_id,
                    "first_name": customer.first_name,
                    "last_name": customer.last_name,
                    "email": customer.email,
                    "phone": customer.phone,
                }
                if customer
                else None
            ),
            "shipping_address": CatalogService._address_dict(addresses.get("shipping")),
            "billing_address": CatalogService._address_dict(addresses.get("billing")),
            "line_items": [CatalogService._line_item_dict(i) for i in order.line_items],
        }
