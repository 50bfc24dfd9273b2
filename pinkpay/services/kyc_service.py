"""PinkPay Offramp - KYC Service.

Handles step updates, the submission gate, verifier decisions and the
payout gate for one account's KYC application.
"""

import logging
from datetime import UTC, datetime
from typing import Any

from pydantic import ValidationError as PydanticValidationError

from pinkpay.core.exceptions import (
    InvalidTransitionError,
    KYCIncompleteError,
    KYCRequiredError,
    ValidationError,
)
from pinkpay.db.store import EntityKind, PersistenceStore
from pinkpay.models.kyc import KYCApplication, KYCStatus, KYCStep, SubmissionPolicy
from pinkpay.utils.helpers import field_errors

logger = logging.getLogger(__name__)

DOCUMENT_FIELDS = ("id_front_ref", "id_back_ref", "selfie_ref")

PAYOUT_BLOCKED_MESSAGES = {
    KYCStatus.UNSUBMITTED: "Complete and submit identity verification to enable payouts.",
    KYCStatus.PENDING: "Your identity verification is under review. Payouts unlock once it is approved.",
    KYCStatus.REJECTED: "Your identity verification was rejected. Start a new application to enable payouts.",
}


def missing_for_submission(application: KYCApplication, policy: SubmissionPolicy) -> list[KYCStep]:
    """Steps that block submission under ``policy``."""
    if policy == SubmissionPolicy.COMPLIANCE_ONLY:
        steps = [KYCStep.COMPLIANCE]
    else:
        steps = list(KYCStep)
    return [step for step in steps if not application.is_step_complete(step)]


class KYCService:
    """Service for KYC application workflow."""

    def __init__(
        self,
        store: PersistenceStore,
        policy: SubmissionPolicy = SubmissionPolicy.ALL_STEPS,
    ) -> None:
        self.store = store
        self.policy = policy

    def get_application(self, account_id: str) -> KYCApplication:
        return self.store.load(EntityKind.KYC, account_id, default=None) or KYCApplication()

    def _save(self, account_id: str, application: KYCApplication) -> KYCApplication:
        self.store.save(EntityKind.KYC, account_id, application)
        return application

    # ==================== Steps ====================

    def update_step(self, account_id: str, step: KYCStep, changes: dict[str, Any]) -> KYCApplication:
        """Merge field changes into one step.

        Raises:
            InvalidTransitionError: If the application is no longer editable
            ValidationError: If a field does not belong to the step or has the wrong type
        """
        with self.store.lock(account_id):
            application = self.get_application(account_id)
            if application.status != KYCStatus.UNSUBMITTED:
                raise InvalidTransitionError("kyc application", application.status.value, "edited")

            current = application.step_data(step)
            unknown = set(changes) - set(type(current).model_fields)
            if unknown:
                raise ValidationError(
                    f"Unknown fields for {step.value}: {', '.join(sorted(unknown))}",
                    {"step": step.value, "fields": sorted(unknown)},
                )

            try:
                updated = type(current).model_validate({**current.model_dump(), **changes})
            except PydanticValidationError as e:
                raise ValidationError(
                    f"Invalid values for {step.value}",
                    {"step": step.value, "errors": field_errors(e)},
                ) from e
            application = application.model_copy(update={step.value: updated})
            return self._save(account_id, application)

    def attach_document(self, account_id: str, field: str, reference: str | None) -> KYCApplication:
        """Store an opaque document-store reference (ID front/back, selfie)."""
        if field not in DOCUMENT_FIELDS:
            raise ValidationError(f"Unknown document field: {field}", {"field": field})
        return self.update_step(account_id, KYCStep.ID_VERIFICATION, {field: reference})

    # ==================== Lifecycle ====================

    def submit(self, account_id: str, now: datetime | None = None) -> KYCApplication:
        """Submit for review: unsubmitted -> pending.

        Raises:
            InvalidTransitionError: If already submitted
            KYCIncompleteError: If the submission gate is not met
        """
        with self.store.lock(account_id):
            application = self.get_application(account_id)
            if application.status != KYCStatus.UNSUBMITTED:
                raise InvalidTransitionError(
                    "kyc application", application.status.value, KYCStatus.PENDING.value
                )

            missing = missing_for_submission(application, self.policy)
            if missing:
                logger.info("KYC submit blocked for %s: missing %s", account_id, missing)
                raise KYCIncompleteError([step.value for step in missing])

            application = application.model_copy(
                update={"status": KYCStatus.PENDING, "submitted_at": now or datetime.now(UTC)}
            )
            logger.info("KYC submitted for %s", account_id)
            return self._save(account_id, application)

    def approve(self, account_id: str, now: datetime | None = None) -> KYCApplication:
        """Verifier decision: pending -> verified."""
        return self._review(account_id, KYCStatus.VERIFIED, None, now)

    def reject(self, account_id: str, reason: str, now: datetime | None = None) -> KYCApplication:
        """Verifier decision: pending -> rejected."""
        return self._review(account_id, KYCStatus.REJECTED, reason, now)

    def _review(
        self,
        account_id: str,
        outcome: KYCStatus,
        reason: str | None,
        now: datetime | None,
    ) -> KYCApplication:
        with self.store.lock(account_id):
            application = self.get_application(account_id)
            if application.status != KYCStatus.PENDING:
                raise InvalidTransitionError("kyc application", application.status.value, outcome.value)

            application = application.model_copy(
                update={
                    "status": outcome,
                    "reviewed_at": now or datetime.now(UTC),
                    "rejection_reason": reason,
                }
            )
            logger.info("KYC %s for %s", outcome.value, account_id)
            return self._save(account_id, application)

    def start_new_application(self, account_id: str) -> KYCApplication:
        """Replace a rejected application with a blank one."""
        with self.store.lock(account_id):
            application = self.get_application(account_id)
            if application.status != KYCStatus.REJECTED:
                raise InvalidTransitionError(
                    "kyc application", application.status.value, KYCStatus.UNSUBMITTED.value
                )
            return self._save(account_id, KYCApplication())

    # ==================== Gate ====================

    def is_verified(self, account_id: str) -> bool:
        return self.get_application(account_id).status == KYCStatus.VERIFIED

    def require_verified(self, account_id: str) -> None:
        """Block payouts until verified.

        Raises:
            KYCRequiredError: With a status-specific explanation
        """
        status = self.get_application(account_id).status
        if status != KYCStatus.VERIFIED:
            raise KYCRequiredError(status.value, PAYOUT_BLOCKED_MESSAGES[status])
