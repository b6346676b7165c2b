"""Test doubles for the remote API and the cache."""

import copy
from typing import Any

from storefront_service.infrastructure.redis import CacheService
from storefront_service.infrastructure.shopify import RemotePage


class FakeShopifyClient:
    """In-memory stand-in for ShopifyClient serving canned pages."""

    def __init__(
        self,
        product_pages: list[RemotePage] | None = None,
        order_pages: list[RemotePage] | None = None,
        error: Exception | None = None,
    ):
        self.product_pages = product_pages or [RemotePage()]
        self.order_pages = order_pages or [RemotePage()]
        self.error = error
        self.product_calls: list[dict[str, Any]] = []
        self.order_calls: list[dict[str, Any]] = []

    async def fetch_products(self, first: int = 50, after: str | None = None) -> RemotePage:
        self.product_calls.append({"first": first, "after": after})
        if self.error:
            raise self.error
        return copy.deepcopy(self.product_pages[len(self.product_calls) - 1])

    async def fetch_orders(
        self, first: int = 50, after: str | None = None, query: str | None = None
    ) -> RemotePage:
        self.order_calls.append({"first": first, "after": after, "query": query})
        if self.error:
            raise self.error
        return copy.deepcopy(self.order_pages[len(self.order_calls) - 1])


class MemoryCache(CacheService):
    """CacheService backed by a dict instead of Redis."""

    def __init__(self) -> None:
        super().__init__(None)
        self.store: dict[str, Any] = {}

    async def get(self, key: str) -> Any | None:
        return copy.deepcopy(self.store.get(key))

    async def set(self, key: str, value: Any, ttl_seconds: int = 300) -> None:
        self.store[key] = copy.deepcopy(value)

    async def delete_prefix(self, prefix: str) -> int:
        keys = [key for key in self.store if key.startswith(prefix)]
        for key in keys:
            del self.store[key]
        return len(keys)
