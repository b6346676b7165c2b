"""Sales analytics endpoints."""

from datetime import date, datetime, timedelta, timezone
from typing import Annotated

from fastapi import APIRouter, Depends, HTTPException, Query
from pydantic import BaseModel
from sqlalchemy.ext.asyncio import AsyncSession

from storefront_service.api.v1.sync import Period
from storefront_service.config import get_settings
from storefront_service.infrastructure.database.connection import get_session
from storefront_service.infrastructure.redis import CacheService, get_cache
from storefront_service.services.analytics import AnalyticsService

router = APIRouter()


# =============================================================================
# Response Models
# =============================================================================


class TopProduct(BaseModel):
    """Best seller ranked by units sold."""

    product_id: int | None
    title: str | None
    total_sold: int
    total_revenue: float


class DailySales(BaseModel):
    """Orders and revenue for one processed-at day."""

    date: str
    order_count: int
    total_sales: float


class SalesSummaryResponse(BaseModel):
    """Sales totals over a processed-at range."""

    total_orders: int
    total_sales: float
    average_order_value: float
    currency_code: str
    top_products: list[TopProduct]
    sales_by_day: list[DailySales] = []
    period: Period


# =============================================================================
# Endpoints
# =============================================================================


@router.get("/sales", response_model=SalesSummaryResponse)
async def get_sales_summary(
    session: Annotated[AsyncSession, Depends(get_session)],
    cache: Annotated[CacheService, Depends(get_cache)],
    start_date: Annotated[date | None, Query(description="First day, defaults to 30 days ago")] = None,
    end_date: Annotated[date | None, Query(description="Last day, defaults to today")] = None,
    limit: Annotated[int | None, Query(ge=1, le=50, description="Number of top products")] = None,
) -> SalesSummaryResponse:
    """
    Summarize synced orders for a date range.

    Both days are inclusive. Results are cached until the next order sync
    or the cache TTL expires.
    """
    settings = get_settings()
    end_date = end_date or datetime.now(timezone.utc).date()
    start_date = start_date or end_date - timedelta(days=settings.sync_orders_lookback_days)
    if start_date > end_date:
        raise HTTPException(status_code=400, detail="start_date must not be after end_date")

    service = AnalyticsService(
        session, cache, cache_ttl_seconds=settings.analytics_cache_ttl_seconds
    )
    summary = await service.sales_summary(
        start_date, end_date, top_limit=limit or settings.analytics_top_products_limit
    )
    return SalesSummaryResponse(**summary)
