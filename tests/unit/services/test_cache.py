"""Unit tests for Redis cache service."""

import pytest

from storefront_service.infrastructure.redis import CacheService
from storefront_service.services.analytics import SALES_CACHE_PREFIX, invalidate_sales_cache


class TestCacheServiceGracefulDegradation:
    """CacheService should no-op safely when Redis is unavailable."""

    @pytest.fixture
    def cache(self) -> CacheService:
        return CacheService(None)

    @pytest.mark.asyncio
    async def test_get_returns_none(self, cache: CacheService) -> None:
        assert await cache.get("any-key") is None

    @pytest.mark.asyncio
    async def test_set_is_noop(self, cache: CacheService) -> None:
        await cache.set("key", {"data": "value"})  # should not raise

    @pytest.mark.asyncio
    async def test_delete_prefix_removes_nothing(self, cache: CacheService) -> None:
        assert await cache.delete_prefix("analytics:") == 0

    @pytest.mark.asyncio
    async def test_health_check_returns_false(self, cache: CacheService) -> None:
        assert await cache.health_check() is False


class FailingRedis:
    """Redis double whose every call raises."""

    async def get(self, key):
        raise ConnectionError("redis down")

    async def set(self, key, value, ex=None):
        raise ConnectionError("redis down")

    async def ping(self):
        raise ConnectionError("redis down")

    async def scan_iter(self, match=None):
        raise ConnectionError("redis down")
        yield  # pragma: no cover


class TestCacheServiceErrors:
    """Redis errors are logged and swallowed by the cache."""

    @pytest.fixture
    def cache(self) -> CacheService:
        return CacheService(FailingRedis())

    @pytest.mark.asyncio
    async def test_get_returns_none(self, cache: CacheService) -> None:
        assert await cache.get("key") is None

    @pytest.mark.asyncio
    async def test_set_does_not_raise(self, cache: CacheService) -> None:
        await cache.set("key", [1, 2, 3])

    @pytest.mark.asyncio
    async def test_delete_prefix_returns_zero(self, cache: CacheService) -> None:
        assert await cache.delete_prefix("analytics:") == 0

    @pytest.mark.asyncio
    async def test_health_check_false(self, cache: CacheService) -> None:
        assert await cache.health_check() is False


@pytest.mark.asyncio
async def test_invalidate_sales_cache_only_drops_sales_keys(memory_cache) -> None:
    await memory_cache.set(f"{SALES_CACHE_PREFIX}2024-01-01:2024-01-31:5", {"total_orders": 1})
    await memory_cache.set(f"{SALES_CACHE_PREFIX}2024-02-01:2024-02-28:5", {"total_orders": 2})
    await memory_cache.set("other:key", "keep")

    assert await invalidate_sales_cache(memory_cache) == 2
    assert list(memory_cache.store) == ["other:key"]
