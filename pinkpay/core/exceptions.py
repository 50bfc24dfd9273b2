"""PinkPay Offramp - Custom exceptions."""

from typing import Any


class PinkPayError(Exception):
    """Base exception for all PinkPay errors."""

    code = "pinkpay_error"

    def __init__(self, message: str, details: dict[str, Any] | None = None) -> None:
        self.message = message
        self.details = details or {}
        super().__init__(message)


class ValidationError(PinkPayError):
    """Input validation failed."""

    code = "validation_error"


class InvalidAmountError(ValidationError):
    """Monetary input is non-numeric or not positive."""

    code = "invalid_amount"


class UnknownCategoryError(ValidationError):
    """Budget or expense category is not recognized."""

    code = "unknown_category"

    def __init__(self, category: str) -> None:
        super().__init__(f"Unknown category: {category}", {"category": category})


class UnknownPayoutMethodError(ValidationError):
    """Payout method does not exist, is unavailable, or does not pay out in the currency."""

    code = "unknown_payout_method"


class RateUnavailableError(PinkPayError):
    """No exchange rate for the requested asset pair."""

    code = "rate_unavailable"

    def __init__(self, from_asset: str, to_currency: str) -> None:
        super().__init__(
            f"No exchange rate available for {from_asset}/{to_currency}",
            {"from_asset": from_asset, "to_currency": to_currency},
        )


class InvalidTransitionError(PinkPayError):
    """Illegal lifecycle transition attempted."""

    code = "invalid_transition"

    def __init__(self, entity: str, current: str, target: str) -> None:
        super().__init__(
            f"Cannot move {entity} from {current} to {target}",
            {"entity": entity, "current": current, "target": target},
        )


class AlreadyResolvedError(PinkPayError):
    """A settlement was completed or cancelled more than once."""

    code = "already_resolved"


class DuplicateSubmissionError(PinkPayError):
    """The same payout intent is already being processed."""

    code = "duplicate_submission"


class NotFoundError(PinkPayError):
    """Requested record does not exist."""

    code = "not_found"


class TransactionNotFoundError(NotFoundError):
    """Transaction id is not in the ledger."""

    code = "transaction_not_found"

    def __init__(self, transaction_id: str) -> None:
        super().__init__(
            f"Transaction {transaction_id} not found", {"transaction_id": transaction_id}
        )


class KYCIncompleteError(ValidationError):
    """KYC application does not meet the submission gate."""

    code = "kyc_incomplete"

    def __init__(self, missing_steps: list[str]) -> None:
        super().__init__(
            "KYC application is incomplete: " + ", ".join(missing_steps),
            {"missing_steps": missing_steps},
        )


class KYCRequiredError(PinkPayError):
    """Payout blocked until the account's KYC is verified."""

    code = "kyc_required"

    def __init__(self, status: str, message: str) -> None:
        super().__init__(message, {"kyc_status": status})


class PersistenceUnavailableError(PinkPayError):
    """The persistence store could not be read or written."""

    code = "persistence_unavailable"
