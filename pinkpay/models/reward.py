"""PinkPay Offramp - Loyalty reward models."""

from decimal import Decimal

from pydantic import BaseModel, Field


class RewardTier(BaseModel):
    """Loyalty tier.

    Tier selection: the tier with the greatest min_transactions that is
    <= the account's transaction count.
    """

    name: str
    min_transactions: int = Field(ge=0)
    multiplier: Decimal = Field(gt=0)
    perks: list[str] = Field(default_factory=list)


class UserRewardState(BaseModel):
    """Per-account loyalty counters. Both fields change together."""

    account_id: str
    transaction_count: int = Field(default=0, ge=0)
    token_balance: Decimal = Field(default=Decimal("0"), ge=0)


REWARD_TIERS: list[RewardTier] = [
    RewardTier(
        name="Rookie Baddie",
        min_transactions=0,
        multiplier=Decimal("1"),
        perks=["1x $THECRYPTOBADDIE per transaction", "Basic rewards"],
    ),
    RewardTier(
        name="Pro Baddie",
        min_transactions=10,
        multiplier=Decimal("1.5"),
        perks=["1.5x $THECRYPTOBADDIE per transaction", "Priority support"],
    ),
    RewardTier(
        name="Elite Baddie",
        min_transactions=50,
        multiplier=Decimal("2"),
        perks=["2x $THECRYPTOBADDIE per transaction", "Exclusive features", "VIP support"],
    ),
    RewardTier(
        name="Crypto Baddie Legend",
        min_transactions=100,
        multiplier=Decimal("3"),
        perks=[
            "3x $THECRYPTOBADDIE per transaction",
            "All exclusive features",
            "Direct line to team",
        ],
    ),
]
