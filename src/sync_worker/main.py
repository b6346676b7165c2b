"""Celery application for sync worker."""

from celery import Celery
from celery.schedules import crontab

from storefront_service.config import get_settings
from storefront_service.logging_config import configure_logging

configure_logging()

settings = get_settings()

app = Celery(
    "sync_worker",
    broker=settings.celery_broker,
    backend=settings.celery_backend,
    include=[
        "sync_worker.tasks.sync_products",
        "sync_worker.tasks.sync_orders",
    ],
)

app.conf.update(
    task_serializer="json",
    accept_content=["json"],
    result_serializer="json",
    timezone="UTC",
    enable_utc=True,
    task_track_started=True,
    task_time_limit=1800,  # 30 minutes
    task_soft_time_limit=1740,
    worker_prefetch_multiplier=1,
    task_acks_late=True,
    task_reject_on_worker_lost=True,
    task_default_queue="sync",
    task_routes={
        "sync_worker.tasks.*": {"queue": "sync"},
    },
)

app.conf.beat_schedule = {
    "sync-products": {
        "task": "sync_worker.tasks.sync_products.sync_products_from_ecommerce",
        "schedule": crontab(minute=0),  # Every hour at :00
    },
    # Default lookback window
    "sync-orders": {
        "task": "sync_worker.tasks.sync_orders.sync_orders_from_ecommerce",
        "schedule": crontab(minute="*/30"),
    },
}


def run() -> None:
    """Run the Celery worker."""
    app.worker_main(["worker", "--loglevel=info", "-Q", "sync"])


if __name__ == "__main__":
    run()
