"""PinkPay Offramp - Budget, expense and savings goal models."""

import math
import secrets
from datetime import UTC, datetime
from decimal import Decimal

from pydantic import BaseModel, Field

# category code -> display label
EXPENSE_CATEGORIES: dict[str, str] = {
    "food": "Food & Dining",
    "transport": "Transport",
    "entertainment": "Entertainment",
    "shopping": "Shopping",
    "bills": "Bills & Utilities",
    "healthcare": "Healthcare",
    "education": "Education",
    "crypto": "Crypto Trading",
    "savings": "Savings",
    "other": "Other",
}

MS_PER_DAY = 86_400_000


def generate_entry_id() -> str:
    """Random 16-hex-digit id, e.g. '9f3c2a7b1d04e6f8'."""
    return secrets.token_hex(8)


class Expense(BaseModel):
    id: str = Field(default_factory=generate_entry_id)
    category: str
    description: str = ""
    amount: Decimal = Field(gt=0)
    date: datetime = Field(default_factory=lambda: datetime.now(UTC))


class Budget(BaseModel):
    """Category budget. `spent` is the running sum of the category's expenses."""

    category: str
    budgeted: Decimal = Field(default=Decimal("0"), ge=0)
    spent: Decimal = Field(default=Decimal("0"), ge=0)

    @property
    def is_over_budget(self) -> bool:
        return self.spent > self.budgeted

    @property
    def overage(self) -> Decimal:
        """Amount spent beyond the budget, 0 when within budget."""
        return max(self.spent - self.budgeted, Decimal("0"))


class SavingsGoal(BaseModel):
    """Savings goal. Overdue status is derived from the deadline."""

    id: str = Field(default_factory=generate_entry_id)
    title: str
    target: Decimal = Field(gt=0)
    current: Decimal = Field(default=Decimal("0"), ge=0)
    deadline: datetime

    def progress(self) -> Decimal:
        return self.current / self.target * 100

    def days_left(self, now: datetime) -> int:
        delta_ms = (self.deadline - now).total_seconds() * 1000
        return math.ceil(delta_ms / MS_PER_DAY)

    def is_overdue(self, now: datetime) -> bool:
        return self.days_left(now) <= 0
