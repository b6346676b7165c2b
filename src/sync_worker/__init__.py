"""Celery worker running the scheduled Shopify sync jobs."""
