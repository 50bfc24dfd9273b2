"""PinkPay Offramp - KYC endpoints.

Applicants edit steps and submit. Review decisions come from an external
verifier through the /kyc/review routes.
"""

from fastapi import APIRouter

from pinkpay.api.deps import KYC, AccountId
from pinkpay.models.kyc import KYCApplication, KYCStep
from pinkpay.schemas.kyc import (
    DocumentAttachRequest,
    KYCApplicationResponse,
    KYCRejectRequest,
    KYCStepUpdate,
)

router = APIRouter(prefix="/kyc", tags=["KYC"])


def _to_response(application: KYCApplication) -> KYCApplicationResponse:
    return KYCApplicationResponse(
        **application.model_dump(),
        completed_steps=application.completed_steps(),
        progress=application.progress(),
    )


@router.get("", response_model=KYCApplicationResponse)
def get_application(account_id: AccountId, kyc: KYC) -> KYCApplicationResponse:
    return _to_response(kyc.get_application(account_id))


@router.patch("/steps/{step}", response_model=KYCApplicationResponse)
def update_step(
    step: KYCStep,
    data: KYCStepUpdate,
    account_id: AccountId,
    kyc: KYC,
) -> KYCApplicationResponse:
    """Merge field values into one step. Only while unsubmitted."""
    return _to_response(kyc.update_step(account_id, step, data.fields))


@router.post("/documents", response_model=KYCApplicationResponse)
def attach_document(
    data: DocumentAttachRequest,
    account_id: AccountId,
    kyc: KYC,
) -> KYCApplicationResponse:
    return _to_response(kyc.attach_document(account_id, data.field, data.reference))


@router.post("/submit", response_model=KYCApplicationResponse)
def submit_application(account_id: AccountId, kyc: KYC) -> KYCApplicationResponse:
    return _to_response(kyc.submit(account_id))


@router.post("/restart", response_model=KYCApplicationResponse)
def start_new_application(account_id: AccountId, kyc: KYC) -> KYCApplicationResponse:
    """Replace a rejected application with a blank one."""
    return _to_response(kyc.start_new_application(account_id))


# ============ Verifier ============


@router.post("/review/{target_account_id}/approve", response_model=KYCApplicationResponse)
def approve_application(target_account_id: str, kyc: KYC) -> KYCApplicationResponse:
    return _to_response(kyc.approve(target_account_id))


@router.post("/review/{target_account_id}/reject", response_model=KYCApplicationResponse)
def reject_application(
    target_account_id: str,
    data: KYCRejectRequest,
    kyc: KYC,
) -> KYCApplicationResponse:
    return _to_response(kyc.reject(target_account_id, data.reason))
