"""PinkPay Offramp - Budget Service.

Category budgets, expenses and savings goals for one account.
"""

import logging
from datetime import UTC, datetime
from decimal import Decimal
from typing import Any

from pinkpay.core.exceptions import InvalidAmountError, NotFoundError, UnknownCategoryError
from pinkpay.db.store import EntityKind, PersistenceStore
from pinkpay.models.budget import EXPENSE_CATEGORIES, Budget, Expense, SavingsGoal
from pinkpay.utils.helpers import ensure_utc, first_of_month, require_positive, to_decimal

logger = logging.getLogger(__name__)


def default_budgets() -> list[Budget]:
    """One zero budget per known category."""
    return [Budget(category=code) for code in EXPENSE_CATEGORIES]


def _check_category(category: str) -> str:
    if category not in EXPENSE_CATEGORIES:
        raise UnknownCategoryError(category)
    return category


class BudgetService:
    """Service for budgets, expenses and savings goals."""

    def __init__(self, store: PersistenceStore) -> None:
        self.store = store

    # ==================== Budgets ====================

    def list_budgets(self, account_id: str) -> list[Budget]:
        return self.store.load(EntityKind.BUDGETS, account_id, default=None) or default_budgets()

    def get_budget(self, account_id: str, category: str) -> Budget:
        _check_category(category)
        for budget in self.list_budgets(account_id):
            if budget.category == category:
                return budget
        return Budget(category=category)

    def set_budget(self, account_id: str, category: str, amount: Any) -> Budget:
        """Overwrite the budgeted amount; spent is preserved.

        Raises:
            UnknownCategoryError: If category is not recognized
            InvalidAmountError: If amount is negative or non-numeric
        """
        _check_category(category)
        amount = to_decimal(amount, "amount")
        if amount < 0:
            raise InvalidAmountError("Budget must not be negative", {"amount": str(amount)})

        with self.store.lock(account_id):
            budgets = self.list_budgets(account_id)
            updated = None
            for index, budget in enumerate(budgets):
                if budget.category == category:
                    updated = budget.model_copy(update={"budgeted": amount})
                    budgets[index] = updated
                    break
            if updated is None:
                updated = Budget(category=category, budgeted=amount)
                budgets.append(updated)

            self.store.save(EntityKind.BUDGETS, account_id, budgets)
        return updated

    def total_budgeted(self, account_id: str) -> Decimal:
        return sum((b.budgeted for b in self.list_budgets(account_id)), Decimal("0"))

    def total_spent(self, account_id: str) -> Decimal:
        return sum((b.spent for b in self.list_budgets(account_id)), Decimal("0"))

    def over_budget(self, account_id: str) -> list[Budget]:
        return [b for b in self.list_budgets(account_id) if b.is_over_budget]

    # ==================== Expenses ====================

    def list_expenses(self, account_id: str) -> list[Expense]:
        return self.store.load(EntityKind.EXPENSES, account_id, default=None) or []

    def add_expense(
        self,
        account_id: str,
        category: str,
        amount: Any,
        date: datetime | None = None,
        description: str = "",
    ) -> Expense:
        """Record an expense and add it to the category's spent total.

        Both checks run before anything is written.

        Raises:
            InvalidAmountError: If amount is not a positive number
            UnknownCategoryError: If category is not recognized
        """
        amount = require_positive(amount, "amount")
        _check_category(category)

        expense = Expense(
            category=category,
            description=description,
            amount=amount,
            date=ensure_utc(date) if date else datetime.now(UTC),
        )
        with self.store.lock(account_id):
            expenses = self.list_expenses(account_id)
            expenses.append(expense)

            budgets = self.list_budgets(account_id)
            for index, budget in enumerate(budgets):
                if budget.category == category:
                    budgets[index] = budget.model_copy(update={"spent": budget.spent + amount})
                    break
            else:
                budgets.append(Budget(category=category, spent=amount))

            self.store.save(EntityKind.EXPENSES, account_id, expenses)
            self.store.save(EntityKind.BUDGETS, account_id, budgets)
        logger.debug("Expense %s recorded for %s: %s %s", expense.id, account_id, category, amount)
        return expense

    def monthly_expenses(self, account_id: str, now: datetime | None = None) -> list[Expense]:
        """Expenses dated on or after the first of ``now``'s month."""
        start = first_of_month(ensure_utc(now) if now else datetime.now(UTC))
        return [e for e in self.list_expenses(account_id) if e.date >= start]

    def monthly_total(self, account_id: str, now: datetime | None = None) -> Decimal:
        return sum((e.amount for e in self.monthly_expenses(account_id, now)), Decimal("0"))

    def remaining(self, account_id: str, now: datetime | None = None) -> Decimal:
        """Total budgeted minus this month's spending. Negative when over."""
        return self.total_budgeted(account_id) - self.monthly_total(account_id, now)

    # ==================== Savings goals ====================

    def list_goals(self, account_id: str) -> list[SavingsGoal]:
        return self.store.load(EntityKind.GOALS, account_id, default=None) or []

    def add_goal(self, account_id: str, title: str, target: Any, deadline: datetime) -> SavingsGoal:
        target = require_positive(target, "target")
        goal = SavingsGoal(title=title, target=target, deadline=ensure_utc(deadline))
        with self.store.lock(account_id):
            goals = self.list_goals(account_id)
            goals.append(goal)
            self.store.save(EntityKind.GOALS, account_id, goals)
        logger.info("Savings goal %s created for %s", goal.id, account_id)
        return goal

    def contribute(self, account_id: str, goal_id: str, amount: Any) -> SavingsGoal:
        """Add money towards a goal.

        Raises:
            InvalidAmountError: If amount is not a positive number
            NotFoundError: If the goal does not exist
        """
        amount = require_positive(amount, "amount")
        with self.store.lock(account_id):
            goals = self.list_goals(account_id)
            for index, goal in enumerate(goals):
                if goal.id == goal_id:
                    updated = goal.model_copy(update={"current": goal.current + amount})
                    goals[index] = updated
                    self.store.save(EntityKind.GOALS, account_id, goals)
                    return updated
        raise NotFoundError(f"Savings goal {goal_id} not found", {"goal_id": goal_id})
