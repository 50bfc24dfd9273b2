"""Schemas module - Pydantic DTOs for request/response."""

from pinkpay.schemas.budget import (
    BudgetOverviewResponse,
    BudgetResponse,
    ContributionRequest,
    ExpenseCreate,
    SavingsGoalCreate,
    SavingsGoalResponse,
    SetBudgetRequest,
)
from pinkpay.schemas.kyc import (
    DocumentAttachRequest,
    KYCApplicationResponse,
    KYCRejectRequest,
    KYCStepUpdate,
)
from pinkpay.schemas.offramp import (
    ExchangeRateResponse,
    LedgerSummaryResponse,
    PayoutRequest,
    QuoteRequest,
    QuoteResponse,
    RateTableResponse,
    TransactionResponse,
)
from pinkpay.schemas.preferences import LanguagePreference
from pinkpay.schemas.rewards import (
    GameStatsResponse,
    QuizAnswerRequest,
    QuizAnswerResponse,
    QuizQuestionResponse,
    RewardStatusResponse,
)

__all__: list[str] = [
    # Offramp
    "ExchangeRateResponse",
    "RateTableResponse",
    "QuoteRequest",
    "QuoteResponse",
    "PayoutRequest",
    "TransactionResponse",
    "LedgerSummaryResponse",
    # KYC
    "KYCStepUpdate",
    "DocumentAttachRequest",
    "KYCRejectRequest",
    "KYCApplicationResponse",
    # Rewards & quiz
    "RewardStatusResponse",
    "QuizQuestionResponse",
    "QuizAnswerRequest",
    "QuizAnswerResponse",
    "GameStatsResponse",
    # Budget
    "BudgetResponse",
    "SetBudgetRequest",
    "ExpenseCreate",
    "BudgetOverviewResponse",
    "SavingsGoalCreate",
    "ContributionRequest",
    "SavingsGoalResponse",
    # Preferences
    "LanguagePreference",
]
