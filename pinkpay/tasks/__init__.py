"""PinkPay Tasks Module."""

from pinkpay.tasks.celery_app import celery_app
from pinkpay.tasks.rates import refresh_rates

__all__ = [
    "celery_app",
    "refresh_rates",
]
