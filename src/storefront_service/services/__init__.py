"""Business logic services."""

from storefront_service.services.analytics import AnalyticsService
from storefront_service.services.catalog import CatalogService
from storefront_service.services.order_sync import OrderSyncService
from storefront_service.services.product_sync import ProductSyncService

__all__ = [
    "AnalyticsService",
    "CatalogService",
    "OrderSyncService",
    "ProductSyncService",
]
