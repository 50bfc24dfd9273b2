"""Tests for the KYC workflow."""

import pytest

from pinkpay.core.exceptions import (
    InvalidTransitionError,
    KYCIncompleteError,
    KYCRequiredError,
    ValidationError,
)
from pinkpay.models.kyc import KYCApplication, KYCStatus, KYCStep, SubmissionPolicy
from pinkpay.services.kyc_service import KYCService
from tests.conftest import COMPLETE_KYC_STEPS


class TestApplicationProgress:
    def test_empty_application_is_zero_percent(self):
        application = KYCApplication()

        assert application.progress() == 0
        assert application.completed_steps() == []

    def test_all_steps_filled_is_hundred_percent(self, kyc, fill_kyc, account_id):
        fill_kyc(kyc, account_id)
        application = kyc.get_application(account_id)

        assert application.progress() == 100
        assert application.completed_steps() == list(KYCStep)

    def test_step_with_blank_required_field_is_incomplete(self, kyc, account_id):
        fields = dict(COMPLETE_KYC_STEPS[KYCStep.PERSONAL_INFO], email="   ")
        kyc.update_step(account_id, KYCStep.PERSONAL_INFO, fields)

        assert not kyc.get_application(account_id).is_step_complete(KYCStep.PERSONAL_INFO)

    def test_optional_fields_do_not_block_completion(self, kyc, account_id):
        kyc.update_step(account_id, KYCStep.ID_VERIFICATION, COMPLETE_KYC_STEPS[KYCStep.ID_VERIFICATION])

        application = kyc.get_application(account_id)
        assert application.id_verification.id_back_ref is None
        assert application.is_step_complete(KYCStep.ID_VERIFICATION)

    def test_compliance_needs_both_acceptances(self, kyc, account_id):
        kyc.update_step(account_id, KYCStep.COMPLIANCE, {"terms_accepted": True})

        assert not kyc.get_application(account_id).is_step_complete(KYCStep.COMPLIANCE)


class TestStepUpdates:
    def test_updates_merge(self, kyc, account_id):
        kyc.update_step(account_id, KYCStep.PERSONAL_INFO, {"first_name": "Amina"})
        kyc.update_step(account_id, KYCStep.PERSONAL_INFO, {"last_name": "Otieno"})

        info = kyc.get_application(account_id).personal_info
        assert (info.first_name, info.last_name) == ("Amina", "Otieno")

    def test_unknown_field_rejected_without_change(self, kyc, account_id):
        with pytest.raises(ValidationError):
            kyc.update_step(account_id, KYCStep.PERSONAL_INFO, {"first_name": "A", "shoe_size": 9})

        assert kyc.get_application(account_id).personal_info.first_name == ""

    def test_wrong_type_rejected_without_change(self, kyc, account_id):
        with pytest.raises(ValidationError) as exc:
            kyc.update_step(account_id, KYCStep.PERSONAL_INFO, {"first_name": 123})

        assert exc.value.details["errors"] == ["first_name: Input should be a valid string"]
        assert kyc.get_application(account_id).personal_info.first_name == ""

    def test_documents_are_opaque_references(self, kyc, account_id):
        kyc.attach_document(account_id, "id_back_ref", "s3://bucket/any-bytes")

        assert kyc.get_application(account_id).id_verification.id_back_ref == "s3://bucket/any-bytes"

    def test_unknown_document_field(self, kyc, account_id):
        with pytest.raises(ValidationError):
            kyc.attach_document(account_id, "passport_scan", "ref")

    def test_no_edits_after_submit(self, kyc, fill_kyc, account_id):
        fill_kyc(kyc, account_id)
        kyc.submit(account_id)

        with pytest.raises(InvalidTransitionError):
            kyc.update_step(account_id, KYCStep.PERSONAL_INFO, {"first_name": "Changed"})


class TestSubmissionGate:
    """Submit with only the compliance step filled, under both policies."""

    @pytest.fixture
    def compliance_only_filled(self, store, account_id):
        KYCService(store).update_step(
            account_id, KYCStep.COMPLIANCE, COMPLETE_KYC_STEPS[KYCStep.COMPLIANCE]
        )
        return account_id

    def test_all_steps_policy_rejects(self, store, compliance_only_filled):
        service = KYCService(store, SubmissionPolicy.ALL_STEPS)

        with pytest.raises(KYCIncompleteError) as exc_info:
            service.submit(compliance_only_filled)

        assert exc_info.value.details["missing_steps"] == [
            "personal_info",
            "id_verification",
            "financial_info",
        ]
        assert service.get_application(compliance_only_filled).status == KYCStatus.UNSUBMITTED

    def test_compliance_only_policy_accepts(self, store, compliance_only_filled, now):
        service = KYCService(store, SubmissionPolicy.COMPLIANCE_ONLY)

        application = service.submit(compliance_only_filled, now=now)

        assert application.status == KYCStatus.PENDING
        assert application.submitted_at == now

    def test_compliance_only_policy_still_requires_compliance(self, store, account_id):
        service = KYCService(store, SubmissionPolicy.COMPLIANCE_ONLY)

        with pytest.raises(KYCIncompleteError):
            service.submit(account_id)

    def test_double_submit_rejected(self, kyc, fill_kyc, account_id):
        fill_kyc(kyc, account_id)
        kyc.submit(account_id)

        with pytest.raises(InvalidTransitionError):
            kyc.submit(account_id)


class TestReview:
    @pytest.fixture
    def pending(self, kyc, fill_kyc, account_id):
        fill_kyc(kyc, account_id)
        kyc.submit(account_id)
        return account_id

    def test_approve(self, kyc, pending):
        assert kyc.approve(pending).status == KYCStatus.VERIFIED
        assert kyc.is_verified(pending)

    def test_reject_records_reason(self, kyc, pending):
        application = kyc.reject(pending, "Document unreadable")

        assert application.status == KYCStatus.REJECTED
        assert application.rejection_reason == "Document unreadable"

    def test_review_requires_pending(self, kyc, account_id):
        with pytest.raises(InvalidTransitionError):
            kyc.approve(account_id)

    def test_decision_is_final(self, kyc, pending):
        kyc.approve(pending)

        with pytest.raises(InvalidTransitionError):
            kyc.reject(pending, "late")

    def test_rejected_cannot_resubmit(self, kyc, pending):
        kyc.reject(pending, "blurry")

        with pytest.raises(InvalidTransitionError):
            kyc.submit(pending)

    def test_start_new_application_after_rejection(self, kyc, pending):
        kyc.reject(pending, "blurry")

        application = kyc.start_new_application(pending)

        assert application.status == KYCStatus.UNSUBMITTED
        assert application.progress() == 0

    def test_start_new_application_only_when_rejected(self, kyc, pending):
        with pytest.raises(InvalidTransitionError):
            kyc.start_new_application(pending)


class TestPayoutGate:
    @pytest.mark.parametrize(
        "status",
        [KYCStatus.UNSUBMITTED, KYCStatus.PENDING, KYCStatus.REJECTED],
    )
    def test_blocked_unless_verified(self, kyc, fill_kyc, account_id, status):
        if status != KYCStatus.UNSUBMITTED:
            fill_kyc(kyc, account_id)
            kyc.submit(account_id)
        if status == KYCStatus.REJECTED:
            kyc.reject(account_id, "mismatch")

        with pytest.raises(KYCRequiredError) as exc_info:
            kyc.require_verified(account_id)

        assert exc_info.value.details == {"kyc_status": status.value}
        assert exc_info.value.message

    def test_verified_passes(self, kyc, verified_account):
        kyc.require_verified(verified_account)
