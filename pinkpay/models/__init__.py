"""Models module - domain entities and the SQLModel key-value table."""

from pinkpay.models.budget import EXPENSE_CATEGORIES, Budget, Expense, SavingsGoal
from pinkpay.models.exchange_rate import (
    CRYPTOCURRENCIES,
    DEFAULT_RATES,
    FIAT_CURRENCIES,
    PAYOUT_METHODS,
    ExchangeRate,
    PayoutMethod,
    PayoutMethodKind,
)
from pinkpay.models.game import QUIZ_QUESTIONS, Difficulty, GameStats, QuizQuestion
from pinkpay.models.kyc import (
    Compliance,
    FinancialInfo,
    IdVerification,
    KYCApplication,
    KYCStatus,
    KYCStep,
    PersonalInfo,
    SubmissionPolicy,
)
from pinkpay.models.payout import (
    BANKS,
    MOBILE_CHANNELS,
    SUPPORTED_CHAINS,
    Chain,
    MobileChannel,
    PayoutDestination,
)
from pinkpay.models.reward import REWARD_TIERS, RewardTier, UserRewardState
from pinkpay.models.stored_entity import StoredEntity
from pinkpay.models.transaction import Transaction, TransactionStatus, TransactionType

__all__ = [
    # Exchange Rate
    "ExchangeRate",
    "PayoutMethod",
    "PayoutMethodKind",
    "CRYPTOCURRENCIES",
    "FIAT_CURRENCIES",
    "DEFAULT_RATES",
    "PAYOUT_METHODS",
    # Payout
    "Chain",
    "MobileChannel",
    "PayoutDestination",
    "SUPPORTED_CHAINS",
    "MOBILE_CHANNELS",
    "BANKS",
    # Transaction
    "Transaction",
    "TransactionStatus",
    "TransactionType",
    # KYC
    "KYCApplication",
    "KYCStatus",
    "KYCStep",
    "SubmissionPolicy",
    "PersonalInfo",
    "IdVerification",
    "FinancialInfo",
    "Compliance",
    # Rewards
    "RewardTier",
    "UserRewardState",
    "REWARD_TIERS",
    # Budget
    "Expense",
    "Budget",
    "SavingsGoal",
    "EXPENSE_CATEGORIES",
    # Game
    "QuizQuestion",
    "GameStats",
    "Difficulty",
    "QUIZ_QUESTIONS",
    # Storage
    "StoredEntity",
]
