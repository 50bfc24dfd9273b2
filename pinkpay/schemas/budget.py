"""PinkPay Offramp - Budget planner schemas."""

from datetime import datetime
from decimal import Decimal

from pydantic import BaseModel, Field


class BudgetResponse(BaseModel):
    category: str
    label: str
    budgeted: Decimal
    spent: Decimal
    is_over_budget: bool
    overage: Decimal


class SetBudgetRequest(BaseModel):
    amount: Decimal


class ExpenseCreate(BaseModel):
    category: str
    amount: Decimal
    description: str = Field(default="", max_length=200)
    date: datetime | None = None


class BudgetOverviewResponse(BaseModel):
    total_budgeted: Decimal
    monthly_total: Decimal
    remaining: Decimal
    total_spent: Decimal


class SavingsGoalCreate(BaseModel):
    title: str = Field(..., min_length=1, max_length=100)
    target: Decimal
    deadline: datetime


class ContributionRequest(BaseModel):
    amount: Decimal


class SavingsGoalResponse(BaseModel):
    id: str
    title: str
    target: Decimal
    current: Decimal
    deadline: datetime
    progress: Decimal
    days_left: int
    is_overdue: bool
