"""Synced order endpoints."""

from datetime import date
from typing import Annotated, Literal

from fastapi import APIRouter, Depends, HTTPException, Query
from pydantic import BaseModel
from sqlalchemy.ext.asyncio import AsyncSession

from shared.constants import DEFAULT_PAGE_LIMIT, MAX_PAGE_LIMIT
from storefront_service.api.v1.products import Pagination
from storefront_service.infrastructure.database.connection import get_session
from storefront_service.services.catalog import CatalogService

router = APIRouter()


class CustomerResponse(BaseModel):
    id: int
    external_id: str
    first_name: str | None
    last_name: str | None
    email: str | None
    phone: str | None


class AddressResponse(BaseModel):
    id: int
    address1: str | None
    address2: str | None
    city: str | None
    province: str | None
    zip: str | None
    country: str | None
    name: str | None
    phone: str | None


class LineItemResponse(BaseModel):
    id: int
    external_id: str
    title: str | None
    quantity: int
    price: float
    currency_code: str | None
    product_id: int | None
    variant_id: int | None


class OrderResponse(BaseModel):
    """A synced order with customer, addresses and line items."""

    id: int
    external_id: str
    name: str
    email: str | None
    phone: str | None
    processed_at: str | None
    total_price: float
    subtotal_price: float
    tax_price: float
    shipping_price: float
    currency_code: str
    financial_status: str
    fulfillment_status: str
    note: str | None
    tags: list[str]
    synced_at: str | None
    customer: CustomerResponse | None
    shipping_address: AddressResponse | None
    billing_address: AddressResponse | None
    line_items: list[LineItemResponse]


class OrderListResponse(BaseModel):
    items: list[OrderResponse]
    pagination: Pagination


@router.get("", response_model=OrderListResponse)
async def list_orders(
    session: Annotated[AsyncSession, Depends(get_session)],
    page: Annotated[int, Query(ge=1)] = 1,
    limit: Annotated[int, Query(ge=1, le=MAX_PAGE_LIMIT)] = DEFAULT_PAGE_LIMIT,
    search: Annotated[str | None, Query(description="Search order name or email")] = None,
    sort: Annotated[str, Query(description="Column to sort by")] = "processed_at",
    order: Annotated[Literal["asc", "desc"], Query()] = "desc",
    start_date: Annotated[date | None, Query(description="First processed day")] = None,
    end_date: Annotated[date | None, Query(description="Last processed day, inclusive")] = None,
) -> OrderListResponse:
    """List synced orders, newest first by default."""
    if start_date and end_date and start_date > end_date:
        raise HTTPException(status_code=400, detail="start_date must not be after end_date")

    service = CatalogService(session)
    try:
        result = await service.list_orders(
            page=page,
            limit=limit,
            search=search,
            sort=sort,
            order=order,
            start_date=start_date,
            end_date=end_date,
        )
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e))
    return OrderListResponse(**result)
