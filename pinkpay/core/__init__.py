"""Core module - configuration and exceptions."""

from pinkpay.core.config import Settings, get_settings
from pinkpay.core.exceptions import (
    AlreadyResolvedError,
    DuplicateSubmissionError,
    InvalidAmountError,
    InvalidTransitionError,
    KYCIncompleteError,
    KYCRequiredError,
    NotFoundError,
    PersistenceUnavailableError,
    PinkPayError,
    RateUnavailableError,
    TransactionNotFoundError,
    UnknownCategoryError,
    UnknownPayoutMethodError,
    ValidationError,
)

__all__ = [
    # Config
    "Settings",
    "get_settings",
    # Exceptions
    "PinkPayError",
    "ValidationError",
    "InvalidAmountError",
    "UnknownCategoryError",
    "UnknownPayoutMethodError",
    "RateUnavailableError",
    "InvalidTransitionError",
    "AlreadyResolvedError",
    "DuplicateSubmissionError",
    "NotFoundError",
    "TransactionNotFoundError",
    "KYCIncompleteError",
    "KYCRequiredError",
    "PersistenceUnavailableError",
]
