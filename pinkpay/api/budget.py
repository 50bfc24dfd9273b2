"""PinkPay Offramp - Budget planner endpoints."""

from datetime import UTC, datetime

from fastapi import APIRouter, status

from pinkpay.api.deps import AccountId, Budgets
from pinkpay.models.budget import EXPENSE_CATEGORIES, Budget, Expense, SavingsGoal
from pinkpay.schemas.budget import (
    BudgetOverviewResponse,
    BudgetResponse,
    ContributionRequest,
    ExpenseCreate,
    SavingsGoalCreate,
    SavingsGoalResponse,
    SetBudgetRequest,
)

router = APIRouter(prefix="/budget", tags=["Budget"])


def _budget_response(budget: Budget) -> BudgetResponse:
    return BudgetResponse(
        category=budget.category,
        label=EXPENSE_CATEGORIES.get(budget.category, budget.category),
        budgeted=budget.budgeted,
        spent=budget.spent,
        is_over_budget=budget.is_over_budget,
        overage=budget.overage,
    )


def _goal_response(goal: SavingsGoal, now: datetime) -> SavingsGoalResponse:
    return SavingsGoalResponse(
        **goal.model_dump(),
        progress=goal.progress(),
        days_left=goal.days_left(now),
        is_overdue=goal.is_overdue(now),
    )


@router.get("/categories")
def list_categories() -> dict[str, str]:
    return EXPENSE_CATEGORIES


@router.get("/overview", response_model=BudgetOverviewResponse)
def get_overview(account_id: AccountId, budgets: Budgets) -> BudgetOverviewResponse:
    """Totals for the current month."""
    now = datetime.now(UTC)
    return BudgetOverviewResponse(
        total_budgeted=budgets.total_budgeted(account_id),
        monthly_total=budgets.monthly_total(account_id, now),
        remaining=budgets.remaining(account_id, now),
        total_spent=budgets.total_spent(account_id),
    )


@router.get("/budgets", response_model=list[BudgetResponse])
def list_budgets(account_id: AccountId, budgets: Budgets) -> list[BudgetResponse]:
    return [_budget_response(b) for b in budgets.list_budgets(account_id)]


@router.put("/budgets/{category}", response_model=BudgetResponse)
def set_budget(
    category: str,
    data: SetBudgetRequest,
    account_id: AccountId,
    budgets: Budgets,
) -> BudgetResponse:
    return _budget_response(budgets.set_budget(account_id, category, data.amount))


@router.get("/expenses", response_model=list[Expense])
def list_expenses(account_id: AccountId, budgets: Budgets, month_only: bool = False) -> list[Expense]:
    if month_only:
        return budgets.monthly_expenses(account_id)
    return budgets.list_expenses(account_id)


@router.post("/expenses", response_model=Expense, status_code=status.HTTP_201_CREATED)
def add_expense(data: ExpenseCreate, account_id: AccountId, budgets: Budgets) -> Expense:
    return budgets.add_expense(
        account_id,
        data.category,
        data.amount,
        date=data.date,
        description=data.description,
    )


@router.get("/goals", response_model=list[SavingsGoalResponse])
def list_goals(account_id: AccountId, budgets: Budgets) -> list[SavingsGoalResponse]:
    now = datetime.now(UTC)
    return [_goal_response(g, now) for g in budgets.list_goals(account_id)]


@router.post("/goals", response_model=SavingsGoalResponse, status_code=status.HTTP_201_CREATED)
def add_goal(data: SavingsGoalCreate, account_id: AccountId, budgets: Budgets) -> SavingsGoalResponse:
    goal = budgets.add_goal(account_id, data.title, data.target, data.deadline)
    return _goal_response(goal, datetime.now(UTC))


@router.post("/goals/{goal_id}/contribute", response_model=SavingsGoalResponse)
def contribute_to_goal(
    goal_id: str,
    data: ContributionRequest,
    account_id: AccountId,
    budgets: Budgets,
) -> SavingsGoalResponse:
    goal = budgets.contribute(account_id, goal_id, data.amount)
    return _goal_response(goal, datetime.now(UTC))
