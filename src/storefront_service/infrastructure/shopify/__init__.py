"""Shopify Admin API integration."""

from storefront_service.infrastructure.shopify.client import (
    RemotePage,
    ShopifyClient,
    build_order_date_query,
)
from storefront_service.infrastructure.shopify.exceptions import (
    ShopifyAPIError,
    ShopifyConfigError,
    ShopifyError,
)

__all__ = [
    "RemotePage",
    "ShopifyAPIError",
    "ShopifyClient",
    "ShopifyConfigError",
    "ShopifyError",
    "build_order_date_query",
]
