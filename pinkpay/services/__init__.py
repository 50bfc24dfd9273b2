"""PinkPay Service Layer.

Domain engine services for the offramp: conversion, KYC, ledger, rewards,
budgets, the quiz game, settlement and payout orchestration.
Each service is constructed with its collaborators and takes the account id
explicitly on every call.
"""

from pinkpay.services.budget_service import BudgetService
from pinkpay.services.conversion_service import ConversionResult, ConversionService, Quote, convert
from pinkpay.services.game_service import AnswerResult, GameService
from pinkpay.services.kyc_service import KYCService
from pinkpay.services.ledger_service import LedgerService, LedgerSummary, TransactionFilter
from pinkpay.services.offramp_service import OfframpService
from pinkpay.services.preference_service import PreferenceService
from pinkpay.services.rate_service import (
    HttpRateSource,
    RateProvider,
    RateSource,
    RateTable,
    RedisRateSource,
    StaticRateSource,
)
from pinkpay.services.reward_service import RewardOutcome, RewardService
from pinkpay.services.settlement_service import (
    SettlementHandle,
    SettlementOutcome,
    SettlementResult,
    SettlementScheduler,
)

__all__ = [
    "AnswerResult",
    "BudgetService",
    "ConversionResult",
    "ConversionService",
    "GameService",
    "HttpRateSource",
    "KYCService",
    "LedgerService",
    "LedgerSummary",
    "OfframpService",
    "PreferenceService",
    "Quote",
    "RateProvider",
    "RateSource",
    "RateTable",
    "RedisRateSource",
    "RewardOutcome",
    "RewardService",
    "SettlementHandle",
    "SettlementOutcome",
    "SettlementResult",
    "SettlementScheduler",
    "StaticRateSource",
    "TransactionFilter",
    "convert",
]
