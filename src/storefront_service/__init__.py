"""Storefront sync service: mirrors a Shopify store into PostgreSQL."""

__version__ = "1.0.0"
