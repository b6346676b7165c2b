"""API v1 router that aggregates all endpoint routers."""

from fastapi import APIRouter

from storefront_service.api.v1 import (
    analytics,
    health,
    orders,
    products,
    sync,
)

api_router = APIRouter()

api_router.include_router(
    health.router,
    tags=["Health"],
)

api_router.include_router(
    products.router,
    prefix="/products",
    tags=["Products"],
)

api_router.include_router(
    orders.router,
    prefix="/orders",
    tags=["Orders"],
)

api_router.include_router(
    sync.router,
    prefix="/sync",
    tags=["Sync"],
)

api_router.include_router(
    analytics.router,
    prefix="/analytics",
    tags=["Analytics"],
)
