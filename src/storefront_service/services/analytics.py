"""Sales analytics computed from synced orders."""

from datetime import date
from typing import Any

import structlog
from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession

from shared.constants import DEFAULT_CURRENCY_CODE
from storefront_service.infrastructure.database.models import LineItem, Order
from storefront_service.infrastructure.redis import CacheService
from storefront_service.services.coercion import day_range

logger = structlog.get_logger()

SALES_CACHE_PREFIX = "analytics:sales:"


async def invalidate_sales_cache(cache: CacheService) -> int:
    """Drop cached sales summaries after orders change."""
    removed = await cache.delete_prefix(SALES_CACHE_PREFIX)
    if removed:
        logger.info("Invalidated sales analytics cache", keys=removed)
    return removed


class AnalyticsService:
    """Aggregate sales metrics over a processed-at date range."""

    def __init__(
        self,
        session: AsyncSession,
        cache: CacheService | None = None,
        cache_ttl_seconds: int = 300,
    ):
        self.session = session
        self.cache = cache
        self.cache_ttl_seconds = cache_ttl_seconds

    async def sales_summary(
        self, start_date: date, end_date: date, top_limit: int = 5
    ) -> dict[str, Any]:
        """
        Total sales, order count, average order value, best sellers and a
        per-day breakdown.

        Amounts are summed as stored, in the currency of the first order of the
        period (USD when there are none); mixed-currency stores are not
        converted.
        """
        cache_key = f"{SALES_CACHE_PREFIX}{start_date.isoformat()}:{end_date.isoformat()}:{top_limit}"
        if self.cache:
            cached = await self.cache.get(cache_key)
            if cached is not None:
                return cached

        lower, upper = day_range(start_date, end_date)
        in_range = (Order.processed_at >= lower, Order.processed_at < upper)

        totals = await self.session.execute(
            select(func.count(Order.id), func.coalesce(func.sum(Order.total_price), 0.0))
            .where(*in_range)
        )
        total_orders, total_sales = totals.one()
        total_sales = float(total_sales or 0.0)

        currency_result = await self.session.execute(
            select(Order.currency_code)
            .where(*in_range)
            .order_by(Order.processed_at, Order.id)
            .limit(1)
        )
        currency_code = currency_result.scalar_one_or_none() or DEFAULT_CURRENCY_CODE

        summary = {
            "total_orders": total_orders,
            "total_sales": round(total_sales, 2),
            "average_order_value": round(total_sales / total_orders, 2) if total_orders else 0.0,
            "currency_code": currency_code,
            "top_products": await self._top_products(in_range, top_limit),
            "sales_by_day": await self._sales_by_day(in_range),
            "period": {
                "start_date": start_date.isoformat(),
                "end_date": end_date.isoformat(),
            },
        }

        if self.cache:
            await self.cache.set(cache_key, summary, ttl_seconds=self.cache_ttl_seconds)
        return summary

    async def _top_products(self, in_range: tuple, limit: int) -> list[dict[str, Any]]:
        total_sold = func.sum(LineItem.quantity).label("total_sold")
        total_revenue = func.sum(LineItem.price * LineItem.quantity).label("total_revenue")
        result = await self.session.execute(
            select(LineItem.product_id, LineItem.title, total_sold, total_revenue)
            .join(Order, LineItem.order_id == Order.id)
            .where(*in_range)
            .group_by(LineItem.product_id, LineItem.title)
            .order_by(total_sold.desc(), LineItem.title)
            .limit(limit)
        )
        return [
            {
                "product_id": row.product_id,
                "title": row.title,
                "total_sold": int(row.total_sold or 0),
                "total_revenue": round(float(row.total_revenue or 0.0), 2),
            }
            for row in result
        ]

    async def _sales_by_day(self, in_range: tuple) -> list[dict[str, Any]]:
        day = func.date(Order.processed_at).label("day")
        result = await self.session.execute(
            select(
                day,
                func.count(Order.id).label("order_count"),
                func.coalesce(func.sum(Order.total_price), 0.0).label("total_sales"),
            )
            .where(*in_range)
            .group_by(day)
            .order_by(day)
        )
        # PostgreSQL returns date objects, SQLite returns ISO strings
        return [
            {
                "date": row.day.isoformat() if isinstance(row.day, date) else str(row.day),
                "order_count": row.order_count,
                "total_sales": round(float(row.total_sales or 0.0), 2),
            }
            for row in result
        ]
