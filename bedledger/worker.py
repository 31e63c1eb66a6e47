"""Celery worker configuration.

Runs the periodic inventory reconciliation that repairs drifted room and
property counters and records the inventory health check.
"""

from celery import Celery
from celery.schedules import crontab

from bedledger.config import settings

celery_app = Celery(
    "bedledger_tasks",
    broker=settings.redis_url,
    backend=settings.redis_url,
    include=["bedledger.tasks"],
)

celery_app.conf.update(
    # Task settings
    task_serializer="json",
    accept_content=["json"],
    result_serializer="json",
    timezone="UTC",
    enable_utc=True,

    # Task execution settings
    task_acks_late=True,
    task_reject_on_worker_lost=True,
    task_time_limit=300,  # 5 minutes max
    task_soft_time_limit=240,

    # Worker settings
    worker_prefetch_multiplier=1,

    result_expires=3600,

    # Retry settings
    task_default_retry_delay=60,
    task_max_retries=3,

    beat_schedule={
        "reconcile-inventory": {
            "task": "bedledger.tasks.reconcile_inventory",
            "schedule": crontab(minute=f"*/{settings.reconcile_interval_minutes}"),
        },
    },
)


if __name__ == "__main__":
    celery_app.start()
