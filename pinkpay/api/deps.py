"""Common FastAPI dependencies for API endpoints.

Shared collaborators (store, rate provider, settlement scheduler, submission
guard) live on ``app.state`` and are created once by the app factory.
Services are cheap wrappers and are built per request.
"""

import random
from typing import Annotated

from fastapi import Depends, Header, HTTPException, Request, status

from pinkpay.core.config import Settings
from pinkpay.db.store import PersistenceStore
from pinkpay.models.kyc import SubmissionPolicy
from pinkpay.services.budget_service import BudgetService
from pinkpay.services.conversion_service import ConversionService
from pinkpay.services.game_service import GameService
from pinkpay.services.kyc_service import KYCService
from pinkpay.services.ledger_service import LedgerService
from pinkpay.services.offramp_service import OfframpService
from pinkpay.services.preference_service import PreferenceService
from pinkpay.services.rate_service import RateProvider
from pinkpay.services.reward_service import RewardService
from pinkpay.services.settlement_service import SettlementScheduler
from pinkpay.utils.idempotency import SubmissionGuard


async def get_account_id(
    x_account_id: Annotated[str | None, Header(alias="X-Account-Id")] = None,
) -> str:
    """Account identity supplied by the wallet/session layer in front of the API."""
    account_id = (x_account_id or "").strip()
    if not account_id:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Missing X-Account-Id header",
        )
    return account_id


def get_app_settings(request: Request) -> Settings:
    return request.app.state.settings


def get_store(request: Request) -> PersistenceStore:
    return request.app.state.store


def get_rate_provider(request: Request) -> RateProvider:
    return request.app.state.rate_provider


def get_scheduler(request: Request) -> SettlementScheduler:
    return request.app.state.scheduler


def get_guard(request: Request) -> SubmissionGuard:
    return request.app.state.guard


def get_rng(request: Request) -> random.Random:
    return request.app.state.rng


AccountId = Annotated[str, Depends(get_account_id)]
AppSettings = Annotated[Settings, Depends(get_app_settings)]
Store = Annotated[PersistenceStore, Depends(get_store)]
Rates = Annotated[RateProvider, Depends(get_rate_provider)]


# ============ Service factories ============


def get_conversion_service(rates: Rates) -> ConversionService:
    return ConversionService(rates)


def get_kyc_service(store: Store, settings: AppSettings) -> KYCService:
    return KYCService(store, SubmissionPolicy(settings.kyc_submission_policy))


def get_ledger_service(store: Store) -> LedgerService:
    return LedgerService(store)


def get_reward_service(store: Store) -> RewardService:
    return RewardService(store)


def get_budget_service(store: Store) -> BudgetService:
    return BudgetService(store)


def get_game_service(
    store: Store,
    rewards: Annotated[RewardService, Depends(get_reward_service)],
) -> GameService:
    return GameService(store, rewards)


def get_preference_service(store: Store) -> PreferenceService:
    return PreferenceService(store)


def get_offramp_service(
    conversion: Annotated[ConversionService, Depends(get_conversion_service)],
    kyc: Annotated[KYCService, Depends(get_kyc_service)],
    ledger: Annotated[LedgerService, Depends(get_ledger_service)],
    rewards: Annotated[RewardService, Depends(get_reward_service)],
    scheduler: Annotated[SettlementScheduler, Depends(get_scheduler)],
    guard: Annotated[SubmissionGuard, Depends(get_guard)],
    rng: Annotated[random.Random, Depends(get_rng)],
) -> OfframpService:
    return OfframpService(conversion, kyc, ledger, rewards, scheduler, guard, rng)


Conversion = Annotated[ConversionService, Depends(get_conversion_service)]
KYC = Annotated[KYCService, Depends(get_kyc_service)]
Ledger = Annotated[LedgerService, Depends(get_ledger_service)]
Rewards = Annotated[RewardService, Depends(get_reward_service)]
Budgets = Annotated[BudgetService, Depends(get_budget_service)]
Game = Annotated[GameService, Depends(get_game_service)]
Preferences = Annotated[PreferenceService, Depends(get_preference_service)]
Offramp = Annotated[OfframpService, Depends(get_offramp_service)]
