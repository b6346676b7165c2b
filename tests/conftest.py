"""Pytest configuration and fixtures."""

from collections.abc import AsyncGenerator
from typing import Any

import pytest
import pytest_asyncio
from fastapi.testclient import TestClient
from httpx import ASGITransport, AsyncClient
from sqlalchemy.ext.asyncio import AsyncEngine, AsyncSession, async_sessionmaker, create_async_engine
from sqlalchemy.pool import StaticPool

from storefront_service.api.v1.sync import get_shopify_client
from storefront_service.config import Settings, get_settings
from storefront_service.infrastructure.database.connection import (
    create_session_factory,
    get_session,
)
from storefront_service.infrastructure.database.models import Base
from storefront_service.infrastructure.redis import CacheService, get_cache
from storefront_service.main import create_app

from fakes import FakeShopifyClient, MemoryCache


@pytest.fixture
def test_settings() -> Settings:
    """Get test settings with overrides."""
    return Settings(
        app_env="test",
        debug=True,
        postgres_host="localhost",
        postgres_port=5432,
        postgres_user="test",
        postgres_password="test",
        postgres_db="test_db",
        redis_host="localhost",
        redis_port=6379,
        shopify_shop_name="https://test-shop.myshopify.com/",
        shopify_access_token="shpat_test",
    )


# =============================================================================
# Database
# =============================================================================


@pytest_asyncio.fixture
async def engine() -> AsyncGenerator[AsyncEngine, None]:
    """In-memory SQLite engine with the full schema created."""
    engine = create_async_engine(
        "sqlite+aiosqlite://",
        poolclass=StaticPool,
        connect_args={"check_same_thread": False},
    )
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    yield engine
    await engine.dispose()


@pytest.fixture
def session_factory(engine: AsyncEngine) -> async_sessionmaker[AsyncSession]:
    return create_session_factory(engine)


@pytest_asyncio.fixture
async def session(
    session_factory: async_sessionmaker[AsyncSession],
) -> AsyncGenerator[AsyncSession, None]:
    async with session_factory() as session:
        yield session


# =============================================================================
# Remote data
# =============================================================================


@pytest.fixture
def fake_client() -> FakeShopifyClient:
    return FakeShopifyClient()


@pytest.fixture
def memory_cache() -> MemoryCache:
    return MemoryCache()


@pytest.fixture
def sample_product() -> dict:
    """A product record as returned by ShopifyClient.fetch_products."""
    return {
        "id": "gid://shopify/Product/1001",
        "title": "Linen Shirt",
        "description": "Breathable summer shirt",
        "handle": "linen-shirt",
        "status": "ACTIVE",
        "createdAt": "2024-03-01T10:00:00Z",
        "updatedAt": "2024-03-05T12:30:00Z",
        "totalInventory": 12,
        "priceRange": {
            "minVariantPrice": {"amount": "39.0", "currencyCode": "EUR"},
            "maxVariantPrice": {"amount": "45.5", "currencyCode": "EUR"},
        },
        "variants": [
            {
                "id": "gid://shopify/ProductVariant/2001",
                "title": "S",
                "price": {"amount": "39.0", "currencyCode": "EUR"},
                "sku": "LS-S",
                "inventoryQuantity": 5,
                "weight": 0.3,
                "weightUnit": "KILOGRAMS",
            },
            {
                "id": "gid://shopify/ProductVariant/2002",
                "title": "M",
                "price": {"amount": "45.5", "currencyCode": "EUR"},
                "sku": "LS-M",
                "inventoryQuantity": 7,
                "weight": 0.35,
                "weightUnit": "KILOGRAMS",
            },
        ],
        "images": [
            {
                "id": "gid://shopify/ProductImage/3001",
                "url": "https://cdn.example.com/linen.jpg",
                "altText": "Front view",
                "width": 800,
                "height": 1200,
            }
        ],
    }


@pytest.fixture
def sample_order() -> dict:
    """An order record as returned by ShopifyClient.fetch_orders."""
    return {
        "id": "gid://shopify/Order/5001",
        "name": "#1001",
        "email": "ada@example.com",
        "phone": None,
        "processedAt": "2024-03-10T15:45:00Z",
        "totalPrice": {"amount": "84.5", "currencyCode": "EUR"},
        "subtotalPrice": {"amount": "78.0", "currencyCode": "EUR"},
        "taxPrice": {"amount": "6.5", "currencyCode": "EUR"},
        "totalShippingPrice": {"amount": "0.0", "currencyCode": "EUR"},
        "displayFinancialStatus": "PAID",
        "displayFulfillmentStatus": "FULFILLED",
        "note": None,
        "tags": ["vip", "spring"],
        "customer": {
            "id": "gid://shopify/Customer/7001",
            "firstName": "Ada",
            "lastName": "Lovelace",
            "email": "ada@example.com",
            "phone": None,
        },
        "shippingAddress": {
            "address1": "12 Analytical St",
            "address2": None,
            "city": "London",
            "province": None,
            "zip": "N1 9GU",
            "country": "United Kingdom",
            "name": "Ada Lovelace",
            "phone": None,
        },
        "billingAddress": None,
        "lineItems": [
            {
                "id": "gid://shopify/LineItem/6001",
                "title": "Linen Shirt",
                "quantity": 2,
                "price": {"amount": "39.0", "currencyCode": "EUR"},
                "variant": {
                    "id": "gid://shopify/ProductVariant/2001",
                    "title": "S",
                    "product": {"id": "gid://shopify/Product/1001", "title": "Linen Shirt"},
                },
            }
        ],
    }


# =============================================================================
# Application
# =============================================================================


@pytest.fixture
def app(
    test_settings: Settings,
    session_factory: async_sessionmaker[AsyncSession],
    fake_client: FakeShopifyClient,
    memory_cache: MemoryCache,
) -> Any:
    """Create test application wired to the in-memory database and fakes."""

    def get_test_settings() -> Settings:
        return test_settings

    async def get_test_session() -> AsyncGenerator[AsyncSession, None]:
        async with session_factory() as session:
            yield session
            await session.commit()

    async def get_test_client() -> FakeShopifyClient:
        return fake_client

    async def get_test_cache() -> CacheService:
        return memory_cache

    app = create_app()
    app.dependency_overrides[get_settings] = get_test_settings
    app.dependency_overrides[get_session] = get_test_session
    app.dependency_overrides[get_shopify_client] = get_test_client
    app.dependency_overrides[get_cache] = get_test_cache
    return app


@pytest.fixture
def client() -> TestClient:
    """Synchronous test client for endpoints that touch no dependency."""
    return TestClient(create_app())


@pytest_asyncio.fixture
async def async_client(app: Any) -> AsyncGenerator[AsyncClient, None]:
    """Create asynchronous test client."""
    async with AsyncClient(transport=ASGITransport(app=app), base_url="http://test") as ac:
        yield ac
