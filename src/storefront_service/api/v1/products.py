"""Synced product catalog endpoints."""

from typing import Annotated, Literal

from fastapi import APIRouter, Depends, HTTPException, Query
from pydantic import BaseModel
from sqlalchemy.ext.asyncio import AsyncSession

from shared.constants import DEFAULT_PAGE_LIMIT, MAX_PAGE_LIMIT
from storefront_service.infrastructure.database.connection import get_session
from storefront_service.services.catalog import CatalogService

router = APIRouter()


# =============================================================================
# Response Models
# =============================================================================


class Pagination(BaseModel):
    """Page metadata shared by the list endpoints."""

    page: int
    limit: int
    total: int
    total_pages: int


class VariantResponse(BaseModel):
    id: int
    external_id: str
    title: str | None
    price: float
    sku: str | None
    inventory_quantity: int
    weight: float
    weight_unit: str | None


class ImageResponse(BaseModel):
    id: int
    external_id: str
    url: str | None
    alt_text: str | None
    width: int
    height: int


class ProductResponse(BaseModel):
    """A synced product with its variants and images."""

    id: int
    external_id: str
    title: str
    description: str | None
    handle: str | None
    status: str | None
    total_inventory: int
    price_min: float
    price_max: float
    currency_code: str | None
    created_at: str | None
    updated_at: str | None
    synced_at: str | None
    variants: list[VariantResponse]
    images: list[ImageResponse]


class ProductListResponse(BaseModel):
    items: list[ProductResponse]
    pagination: Pagination


# =============================================================================
# Endpoints
# =============================================================================


@router.get("", response_model=ProductListResponse)
async def list_products(
    session: Annotated[AsyncSession, Depends(get_session)],
    page: Annotated[int, Query(ge=1)] = 1,
    limit: Annotated[int, Query(ge=1, le=MAX_PAGE_LIMIT)] = DEFAULT_PAGE_LIMIT,
    search: Annotated[str | None, Query(description="Case-insensitive title search")] = None,
    sort: Annotated[str, Query(description="Column to sort by")] = "title",
    order: Annotated[Literal["asc", "desc"], Query()] = "asc",
) -> ProductListResponse:
    """List synced products, paginated and searchable by title."""
    service = CatalogService(session)
    try:
        result = await service.list_products(
            page=page, limit=limit, search=search, sort=sort, order=order
        )
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e))
    return ProductListResponse(**result)
