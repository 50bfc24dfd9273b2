"""Shared fixtures for PinkPay tests."""

from datetime import UTC, datetime

import pytest

from pinkpay.db.store import MemoryStore
from pinkpay.models.kyc import KYCStep
from pinkpay.services.budget_service import BudgetService
from pinkpay.services.conversion_service import ConversionService
from pinkpay.services.kyc_service import KYCService
from pinkpay.services.ledger_service import LedgerService
from pinkpay.services.rate_service import RateProvider, StaticRateSource
from pinkpay.services.reward_service import RewardService

ACCOUNT_ID = "0xA11CE"

COMPLETE_KYC_STEPS = {
    KYCStep.PERSONAL_INFO: {
        "first_name": "Amina",
        "last_name": "Otieno",
        "date_of_birth": "1995-04-12",
        "nationality": "KE",
        "phone_number": "+254700000001",
        "email": "amina@example.com",
    },
    KYCStep.ID_VERIFICATION: {
        "id_type": "national_id",
        "id_number": "12345678",
        "id_front_ref": "doc://front/1",
        "selfie_ref": "doc://selfie/1",
    },
    KYCStep.FINANCIAL_INFO: {
        "occupation": "Designer",
        "monthly_income": "50000-100000",
        "source_of_funds": "employment",
    },
    KYCStep.COMPLIANCE: {
        "terms_accepted": True,
        "privacy_accepted": True,
    },
}


class FakeRedis:
    """In-process stand-in for the redis-py calls the app makes."""

    def __init__(self):
        self.data: dict[str, str] = {}

    def get(self, name):
        return self.data.get(name)

    def set(self, name, value, nx=False, ex=None):
        if nx and name in self.data:
            return None
        self.data[name] = value
        return True

    def delete(self, *names):
        return sum(1 for name in names if self.data.pop(name, None) is not None)


@pytest.fixture
def account_id() -> str:
    return ACCOUNT_ID


@pytest.fixture
def now() -> datetime:
    return datetime(2024, 1, 15, 10, 30, tzinfo=UTC)


@pytest.fixture
def fake_redis() -> FakeRedis:
    return FakeRedis()


@pytest.fixture
def store() -> MemoryStore:
    return MemoryStore()


@pytest.fixture
def rate_provider() -> RateProvider:
    provider = RateProvider(StaticRateSource())
    provider.refresh()
    return provider


@pytest.fixture
def conversion(rate_provider) -> ConversionService:
    return ConversionService(rate_provider)


@pytest.fixture
def kyc(store) -> KYCService:
    return KYCService(store)


@pytest.fixture
def ledger(store) -> LedgerService:
    return LedgerService(store)


@pytest.fixture
def rewards(store) -> RewardService:
    return RewardService(store)


@pytest.fixture
def budgets(store) -> BudgetService:
    return BudgetService(store)


@pytest.fixture
def fill_kyc():
    """Fill every KYC step for an account."""

    def _fill(service: KYCService, account: str) -> None:
        for step, fields in COMPLETE_KYC_STEPS.items():
            service.update_step(account, step, fields)

    return _fill


@pytest.fixture
def verified_account(kyc, fill_kyc, account_id) -> str:
    fill_kyc(kyc, account_id)
    kyc.submit(account_id)
    kyc.approve(account_id)
    return account_id
