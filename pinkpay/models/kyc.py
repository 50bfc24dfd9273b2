"""PinkPay Offramp - KYC application model.

A KYC application is four independent steps plus an overall review status:

    steps:   personal_info, id_verification, financial_info, compliance
    status:  unsubmitted -> pending -> verified / rejected

Each step is complete iff every required field in it is filled. Document
fields hold opaque references from the document store and are never
inspected.
"""

from datetime import datetime
from enum import Enum

from pydantic import BaseModel, Field


class KYCStatus(str, Enum):
    """Overall application status."""

    UNSUBMITTED = "unsubmitted"
    PENDING = "pending"  # submitted, waiting for the verifier
    VERIFIED = "verified"
    REJECTED = "rejected"


class KYCStep(str, Enum):
    """Application steps, in form order."""

    PERSONAL_INFO = "personal_info"
    ID_VERIFICATION = "id_verification"
    FINANCIAL_INFO = "financial_info"
    COMPLIANCE = "compliance"


class SubmissionPolicy(str, Enum):
    """Gate applied by submit()."""

    ALL_STEPS = "all_steps"
    COMPLIANCE_ONLY = "compliance_only"


class PersonalInfo(BaseModel):
    first_name: str = ""
    last_name: str = ""
    date_of_birth: str = ""
    nationality: str = ""
    phone_number: str = ""
    email: str = ""
    address: str = ""
    city: str = ""
    postal_code: str = ""


class IdVerification(BaseModel):
    id_type: str = ""
    id_number: str = ""
    id_front_ref: str | None = None
    id_back_ref: str | None = None
    selfie_ref: str | None = None


class FinancialInfo(BaseModel):
    occupation: str = ""
    employer: str = ""
    monthly_income: str = ""
    source_of_funds: str = ""
    expected_volume: str = ""


class Compliance(BaseModel):
    pep_declared: bool = False
    sanctions_declared: bool = False
    terms_accepted: bool = False
    privacy_accepted: bool = False


REQUIRED_FIELDS: dict[KYCStep, tuple[str, ...]] = {
    KYCStep.PERSONAL_INFO: (
        "first_name",
        "last_name",
        "date_of_birth",
        "nationality",
        "phone_number",
        "email",
    ),
    KYCStep.ID_VERIFICATION: ("id_type", "id_number", "id_front_ref", "selfie_ref"),
    KYCStep.FINANCIAL_INFO: ("occupation", "monthly_income", "source_of_funds"),
    KYCStep.COMPLIANCE: ("terms_accepted", "privacy_accepted"),
}


class KYCApplication(BaseModel):
    """KYC application owned by one account."""

    personal_info: PersonalInfo = Field(default_factory=PersonalInfo)
    id_verification: IdVerification = Field(default_factory=IdVerification)
    financial_info: FinancialInfo = Field(default_factory=FinancialInfo)
    compliance: Compliance = Field(default_factory=Compliance)
    status: KYCStatus = KYCStatus.UNSUBMITTED
    submitted_at: datetime | None = None
    reviewed_at: datetime | None = None
    rejection_reason: str | None = None

    def step_data(self, step: KYCStep) -> BaseModel:
        return getattr(self, step.value)

    def is_step_complete(self, step: KYCStep) -> bool:
        data = self.step_data(step)
        for field in REQUIRED_FIELDS[step]:
            value = getattr(data, field)
            if isinstance(value, str):
                value = value.strip()
            if not value:
                return False
        return True

    def completed_steps(self) -> list[KYCStep]:
        return [step for step in KYCStep if self.is_step_complete(step)]

    def missing_steps(self) -> list[KYCStep]:
        return [step for step in KYCStep if not self.is_step_complete(step)]

    def progress(self) -> float:
        """Percentage of completed steps (0-100)."""
        return len(self.completed_steps()) / len(KYCStep) * 100
