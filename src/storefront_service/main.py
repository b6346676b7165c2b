"""FastAPI application entry point."""

from contextlib import asynccontextmanager
from typing import AsyncGenerator

import structlog
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from storefront_service import __version__
from storefront_service.api.v1.router import api_router
from storefront_service.config import get_settings
from storefront_service.infrastructure.database.connection import dispose_engine
from storefront_service.infrastructure.redis import close_redis
from storefront_service.logging_config import configure_logging
from storefront_service.middleware.timing import TimingMiddleware

configure_logging()

logger = structlog.get_logger()


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    """Application lifespan manager for startup and shutdown events."""
    settings = get_settings()
    logger.info(
        "Starting storefront sync service",
        app_env=settings.app_env,
        debug=settings.debug,
        shop=settings.shopify_shop_name or None,
    )

    yield

    await close_redis()
    await dispose_engine()
    logger.info("Shutting down storefront sync service")


def create_app() -> FastAPI:
    """Create and configure the FastAPI application."""
    settings = get_settings()

    app = FastAPI(
        title="Storefront Sync API",
        description="Mirrors a Shopify store's catalog and orders into PostgreSQL and serves them back",
        version=__version__,
        docs_url="/docs",
        redoc_url="/redoc",
        openapi_url="/openapi.json",
        lifespan=lifespan,
    )

    app.add_middleware(TimingMiddleware)
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    app.include_router(api_router, prefix="/api/v1")

    return app


app = create_app()


def run() -> None:
    """Run the application using uvicorn."""
    import uvicorn

    settings = get_settings()
    uvicorn.run(
        "storefront_service.main:app",
        host=settings.api_host,
        port=settings.api_port,
        reload=settings.debug,
        workers=1 if settings.debug else settings.api_workers,
    )


if __name__ == "__main__":
    run()
