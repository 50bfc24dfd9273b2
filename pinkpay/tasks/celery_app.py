"""Celery configuration.

Usage:
    # Worker
    celery -A pinkpay.tasks.celery_app worker -Q rates -l info

    # Beat scheduler
    celery -A pinkpay.tasks.celery_app beat -l info
"""

from celery import Celery

from pinkpay.core.config import get_settings

settings = get_settings()

celery_app = Celery(
    "pinkpay_tasks",
    broker=settings.redis_url,
    backend=settings.redis_url,
    include=[
        "pinkpay.tasks.rates",
    ],
)

celery_app.conf.update(
    task_serializer="json",
    accept_content=["json"],
    result_serializer="json",
    timezone="UTC",
    enable_utc=True,
    task_acks_late=True,
    task_reject_on_worker_lost=True,
    worker_prefetch_multiplier=1,
    result_expires=3600,
    task_routes={
        "rates.*": {"queue": "rates"},
    },
    beat_schedule={
        "refresh-rates": {
            "task": "rates.refresh",
            "schedule": settings.rate_poll_interval,
        },
    },
)
