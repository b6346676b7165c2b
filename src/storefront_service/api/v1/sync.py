"""Endpoints that trigger and inspect Shopify synchronization."""

from datetime import date
from typing import Annotated, Any, AsyncGenerator

import structlog
from fastapi import APIRouter, Depends, HTTPException
from fastapi.responses import JSONResponse
from pydantic import BaseModel, Field
from sqlalchemy import inspect, select
from sqlalchemy.ext.asyncio import AsyncSession

from storefront_service.config import get_settings
from storefront_service.infrastructure.database.connection import get_session
from storefront_service.infrastructure.database.models import SYNCED_TABLES, SyncStatus
from storefront_service.infrastructure.redis import CacheService, get_cache
from storefront_service.infrastructure.shopify import (
    ShopifyAPIError,
    ShopifyClient,
    ShopifyConfigError,
)
from storefront_service.services.analytics import invalidate_sales_cache
from storefront_service.services.order_sync import OrderSyncService
from storefront_service.services.product_sync import ProductSyncService

logger = structlog.get_logger()

router = APIRouter()


# =============================================================================
# Dependencies
# =============================================================================


async def get_shopify_client() -> AsyncGenerator[ShopifyClient, None]:
    """Dependency yielding a Shopify client built from settings."""
    try:
        client = ShopifyClient.from_settings(get_settings())
    except ShopifyConfigError as e:
        raise HTTPException(status_code=503, detail=str(e))
    async with client:
        yield client


# =============================================================================
# Models
# =============================================================================


class OrderSyncRequest(BaseModel):
    """Date range of orders to pull, both days inclusive."""

    start_date: date = Field(..., description="First processed day")
    end_date: date = Field(..., description="Last processed day")


class Period(BaseModel):
    start_date: str
    end_date: str


class SyncResponse(BaseModel):
    """Outcome of a completed sync run."""

    success: bool = True
    message: str
    count: int
    synced_count: int
    database_count: int
    period: Period | None = None


class SyncStatusEntry(BaseModel):
    id: str
    status: str
    records_synced: int
    last_sync_at: str | None
    error_message: str | None
    updated_at: str | None


class SchemaCheckResponse(BaseModel):
    """Which of the expected tables exist in the database."""

    ready: bool
    tables: dict[str, bool]
    missing: list[str]


def _sync_failed(kind: str, error: ShopifyAPIError) -> JSONResponse:
    logger.error("Sync failed", sync=kind, error=str(error), status_code=error.status_code)
    return JSONResponse(
        status_code=502,
        content={
            "success": False,
            "message": f"Failed to sync {kind} from Shopify",
            "error": str(error),
        },
    )


# =============================================================================
# Endpoints
# =============================================================================


@router.post("/products", response_model=SyncResponse)
async def sync_products(
    session: Annotated[AsyncSession, Depends(get_session)],
    client: Annotated[ShopifyClient, Depends(get_shopify_client)],
) -> Any:
    """Pull the whole product catalog and upsert it locally."""
    settings = get_settings()
    service = ProductSyncService(
        session,
        client,
        page_size=settings.sync_page_size,
        page_delay_seconds=settings.sync_page_delay_seconds,
    )
    try:
        summary = await service.sync_all_products()
    except ShopifyAPIError as e:
        return _sync_failed("products", e)
    return SyncResponse(**summary)


@router.post("/orders", response_model=SyncResponse)
async def sync_orders(
    request: OrderSyncRequest,
    session: Annotated[AsyncSession, Depends(get_session)],
    client: Annotated[ShopifyClient, Depends(get_shopify_client)],
    cache: Annotated[CacheService, Depends(get_cache)],
) -> Any:
    """Pull the orders processed within a date range and upsert them locally."""
    if request.start_date > request.end_date:
        raise HTTPException(status_code=400, detail="start_date must not be after end_date")

    settings = get_settings()
    service = OrderSyncService(
        session,
        client,
        page_size=settings.sync_page_size,
        page_delay_seconds=settings.sync_page_delay_seconds,
    )
    try:
        summary = await service.sync_orders(request.start_date, request.end_date)
    except ShopifyAPIError as e:
        return _sync_failed("orders", e)

    await invalidate_sales_cache(cache)
    return SyncResponse(**summary)


@router.get("/status", response_model=list[SyncStatusEntry])
async def get_sync_status(
    session: Annotated[AsyncSession, Depends(get_session)],
) -> list[SyncStatusEntry]:
    """Last run of every sync job."""
    result = await session.execute(select(SyncStatus).order_by(SyncStatus.id))
    return [
        SyncStatusEntry(
            id=row.id,
            status=row.status,
            records_synced=row.records_synced or 0,
            last_sync_at=row.last_sync_at.isoformat() if row.last_sync_at else None,
            error_message=row.error_message,
            updated_at=row.updated_at.isoformat() if row.updated_at else None,
        )
        for row in result.scalars()
    ]


@router.get("/schema", response_model=SchemaCheckResponse)
async def check_schema(
    session: Annotated[AsyncSession, Depends(get_session)],
) -> SchemaCheckResponse:
    """Report whether the tables the sync jobs write to have been created."""
    connection = await session.connection()
    existing = set(
        await connection.run_sync(lambda conn: inspect(conn).get_table_names())
    )
    expected = [*SYNCED_TABLES, SyncStatus.__tablename__]
    tables = {name: name in existing for name in expected}
    missing = [name for name, present in tables.items() if not present]
    if missing:
        logger.warning("Database schema incomplete", missing=missing)
    return SchemaCheckResponse(ready=not missing, tables=tables, missing=missing)
