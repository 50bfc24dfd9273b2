"""PinkPay Offramp - Reward and quiz schemas."""

from decimal import Decimal

from pydantic import BaseModel, Field

from pinkpay.models.game import Difficulty
from pinkpay.models.reward import RewardTier


class RewardStatusResponse(BaseModel):
    transaction_count: int
    token_balance: Decimal
    tier: RewardTier
    next_tier: RewardTier | None
    progress_to_next_tier: Decimal


class QuizQuestionResponse(BaseModel):
    """Question without its answer."""

    id: int
    question: str
    options: list[str]
    difficulty: Difficulty
    reward: Decimal


class QuizAnswerRequest(BaseModel):
    question_id: int
    answer: int = Field(..., ge=0)


class QuizAnswerResponse(BaseModel):
    correct: bool
    correct_answer: int
    earned: Decimal


class GameStatsResponse(BaseModel):
    total_questions: int
    correct_answers: int
    total_earned: Decimal
    streak: int
    best_streak: int
    accuracy: int
