"""Health check endpoints."""

from datetime import datetime, timezone
from typing import Annotated, Any

import structlog
from fastapi import APIRouter, Depends
from pydantic import BaseModel
from sqlalchemy import text
from sqlalchemy.ext.asyncio import AsyncSession

from storefront_service import __version__
from storefront_service.config import get_settings
from storefront_service.infrastructure.database.connection import get_session
from storefront_service.infrastructure.redis import CacheService, get_cache

logger = structlog.get_logger()

router = APIRouter()


class HealthResponse(BaseModel):
    """Health check response model."""

    status: str
    version: str
    environment: str
    timestamp: str
    dependencies: dict[str, Any]


class ReadinessResponse(BaseModel):
    """Readiness check response model."""

    ready: bool
    checks: dict[str, bool]


@router.get("/health", response_model=HealthResponse)
async def health_check() -> HealthResponse:
    """
    Basic health check endpoint.

    Returns the service status and version information without touching
    any dependency.
    """
    settings = get_settings()

    return HealthResponse(
        status="healthy",
        version=__version__,
        environment=settings.app_env,
        timestamp=datetime.now(timezone.utc).isoformat(),
        dependencies={
            "postgres": "configured",
            "redis": "configured",
            "shopify": "configured" if settings.shopify_shop_name else "missing",
        },
    )


@router.get("/health/ready", response_model=ReadinessResponse)
async def readiness_check(
    session: Annotated[AsyncSession, Depends(get_session)],
    cache: Annotated[CacheService, Depends(get_cache)],
) -> ReadinessResponse:
    """
    Readiness check endpoint.

    Ready means the database answers. Redis is reported but optional, since
    the cache degrades to a no-op without it.
    """
    checks: dict[str, bool] = {}

    try:
        await session.execute(text("SELECT 1"))
        checks["postgres"] = True
    except Exception as e:
        logger.warning("Database readiness check failed", error=str(e))
        checks["postgres"] = False

    checks["redis"] = await cache.health_check()

    return ReadinessResponse(ready=checks["postgres"], checks=checks)


@router.get("/health/live")
async def liveness_check() -> dict[str, str]:
    """Returns 200 while the process is running."""
    return {"status": "alive"}
