"""PinkPay Offramp - Reward Service.

Loyalty tiers are chosen by completed transaction count. Each completed
payout earns a random base amount scaled by the tier multiplier:

    reward = randint(10, 59) * tier.multiplier
"""

import logging
import random
from dataclasses import dataclass
from decimal import Decimal

from pinkpay.core.exceptions import InvalidAmountError
from pinkpay.db.store import EntityKind, PersistenceStore
from pinkpay.models.reward import REWARD_TIERS, RewardTier, UserRewardState
from pinkpay.utils.helpers import to_decimal

logger = logging.getLogger(__name__)

BASE_REWARD_MIN = 10
BASE_REWARD_MAX = 59


@dataclass(frozen=True)
class RewardOutcome:
    state: UserRewardState
    amount: Decimal
    tier_before: RewardTier
    tier_after: RewardTier

    @property
    def tier_up(self) -> bool:
        return self.tier_after.name != self.tier_before.name


class RewardService:
    """Service for loyalty tiers and token balances."""

    def __init__(self, store: PersistenceStore, tiers: list[RewardTier] | None = None) -> None:
        self.store = store
        self.tiers = sorted(
            REWARD_TIERS if tiers is None else tiers, key=lambda t: t.min_transactions
        )

    # ==================== Tiers ====================

    def tier_for(self, transaction_count: int) -> RewardTier:
        """Highest tier whose threshold is <= transaction_count."""
        current = self.tiers[0]
        for tier in self.tiers:
            if tier.min_transactions <= transaction_count:
                current = tier
        return current

    def next_tier(self, transaction_count: int) -> RewardTier | None:
        return next(
            (t for t in self.tiers if t.min_transactions > transaction_count),
            None,
        )

    def progress_to_next_tier(self, transaction_count: int) -> Decimal:
        """Percent of the way from the current tier to the next, 100 at the top tier."""
        upcoming = self.next_tier(transaction_count)
        if upcoming is None:
            return Decimal("100")
        current = self.tier_for(transaction_count)
        span = upcoming.min_transactions - current.min_transactions
        done = transaction_count - current.min_transactions
        return Decimal(done) / Decimal(span) * 100

    def reward(self, tier: RewardTier, rng: random.Random) -> Decimal:
        return rng.randint(BASE_REWARD_MIN, BASE_REWARD_MAX) * tier.multiplier

    # ==================== State ====================

    def get_state(self, account_id: str) -> UserRewardState:
        return self.store.load(EntityKind.REWARDS, account_id, default=None) or UserRewardState(
            account_id=account_id
        )

    def record_event(self, account_id: str, amount: Decimal) -> RewardOutcome:
        """Count one completed transaction and credit its reward in one write."""
        amount = to_decimal(amount, "amount")
        if amount < 0:
            raise InvalidAmountError("Reward amount must not be negative", {"amount": str(amount)})

        with self.store.lock(account_id):
            state = self.get_state(account_id)
            tier_before = self.tier_for(state.transaction_count)
            state = state.model_copy(
                update={
                    "transaction_count": state.transaction_count + 1,
                    "token_balance": state.token_balance + amount,
                }
            )
            self.store.save(EntityKind.REWARDS, account_id, state)
        tier_after = self.tier_for(state.transaction_count)

        if tier_after.name != tier_before.name:
            logger.info("Account %s reached tier %s", account_id, tier_after.name)
        return RewardOutcome(
            state=state, amount=amount, tier_before=tier_before, tier_after=tier_after
        )

    def credit_tokens(self, account_id: str, amount: Decimal) -> UserRewardState:
        """Add tokens without counting a transaction."""
        amount = to_decimal(amount, "amount")
        if amount < 0:
            raise InvalidAmountError("Token credit must not be negative", {"amount": str(amount)})
        with self.store.lock(account_id):
            state = self.get_state(account_id)
            state = state.model_copy(update={"token_balance": state.token_balance + amount})
            self.store.save(EntityKind.REWARDS, account_id, state)
        return state
