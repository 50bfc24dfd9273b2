"""PinkPay Offramp - KYC schemas."""

from datetime import datetime
from typing import Any

from pydantic import BaseModel, Field

from pinkpay.models.kyc import (
    Compliance,
    FinancialInfo,
    IdVerification,
    KYCStatus,
    KYCStep,
    PersonalInfo,
)


class KYCStepUpdate(BaseModel):
    """Partial field update for one step."""

    fields: dict[str, Any] = Field(..., description="Field name -> value")


class DocumentAttachRequest(BaseModel):
    field: str = Field(..., description="id_front_ref, id_back_ref or selfie_ref")
    reference: str = Field(..., min_length=1, max_length=256, description="Document store reference")


class KYCRejectRequest(BaseModel):
    reason: str = Field(..., min_length=1, max_length=500)


class KYCApplicationResponse(BaseModel):
    status: KYCStatus
    personal_info: PersonalInfo
    id_verification: IdVerification
    financial_info: FinancialInfo
    compliance: Compliance
    completed_steps: list[KYCStep]
    progress: float
    submitted_at: datetime | None
    reviewed_at: datetime | None
    rejection_reason: str | None
