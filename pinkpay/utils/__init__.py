"""PinkPay Utility Functions.

Amount parsing, rounding, date helpers and the payout submission guard.
"""

from pinkpay.utils.helpers import (
    ensure_utc,
    field_errors,
    first_of_month,
    require_positive,
    round_fiat,
    to_decimal,
)
from pinkpay.utils.idempotency import (
    MemorySubmissionGuard,
    RedisSubmissionGuard,
    SubmissionGuard,
)

__all__ = [
    "MemorySubmissionGuard",
    "RedisSubmissionGuard",
    "SubmissionGuard",
    "ensure_utc",
    "field_errors",
    "first_of_month",
    "require_positive",
    "round_fiat",
    "to_decimal",
]
