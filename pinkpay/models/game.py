"""PinkPay Offramp - Quiz game models and question bank."""

from decimal import Decimal
from enum import Enum

from pydantic import BaseModel, Field


class Difficulty(str, Enum):
    EASY = "easy"
    MEDIUM = "medium"
    HARD = "hard"


class QuizQuestion(BaseModel):
    id: int
    question: str
    options: list[str]
    correct_answer: int = Field(ge=0)
    difficulty: Difficulty
    reward: Decimal = Field(gt=0)


class GameStats(BaseModel):
    """Per-account quiz statistics.

    answered_ids tracks the questions already drawn from the current pool.
    current_question_id is the drawn question awaiting an answer; only it can be scored.
    """

    total_questions: int = 0
    correct_answers: int = 0
    total_earned: Decimal = Decimal("0")
    streak: int = 0
    best_streak: int = 0
    answered_ids: list[int] = Field(default_factory=list)
    current_question_id: int | None = None

    def accuracy(self) -> int:
        if self.total_questions == 0:
            return 0
        return round(self.correct_answers / self.total_questions * 100)


QUIZ_QUESTIONS: list[QuizQuestion] = [
    QuizQuestion(
        id=1,
        question="What is a stablecoin?",
        options=[
            "A cryptocurrency that maintains a stable value relative to a reference asset",
            "A coin that never changes in price",
            "A physical coin made of stable materials",
            "A cryptocurrency only for stable people",
        ],
        correct_answer=0,
        difficulty=Difficulty.EASY,
        reward=Decimal("10"),
    ),
    QuizQuestion(
        id=2,
        question="Which of the following is NOT a popular stablecoin?",
        options=["USDC", "USDT", "DAI", "DOGE"],
        correct_answer=3,
        difficulty=Difficulty.EASY,
        reward=Decimal("15"),
    ),
    QuizQuestion(
        id=3,
        question="What does 'offramping' mean in crypto?",
        options=[
            "Buying more cryptocurrency",
            "Converting cryptocurrency to traditional fiat currency",
            "Mining cryptocurrency",
            "Staking cryptocurrency",
        ],
        correct_answer=1,
        difficulty=Difficulty.MEDIUM,
        reward=Decimal("25"),
    ),
    QuizQuestion(
        id=4,
        question="Which blockchain network is known for low transaction fees and fast processing?",
        options=["Bitcoin", "Ethereum", "Base", "Litecoin"],
        correct_answer=2,
        difficulty=Difficulty.MEDIUM,
        reward=Decimal("30"),
    ),
    QuizQuestion(
        id=5,
        question="What is the main advantage of using M-Pesa for crypto offramping in Africa?",
        options=[
            "It's the cheapest option globally",
            "It provides wide accessibility and instant transfers in local currencies",
            "It only works with Bitcoin",
            "It doesn't require any verification",
        ],
        correct_answer=1,
        difficulty=Difficulty.HARD,
        reward=Decimal("50"),
    ),
    QuizQuestion(
        id=6,
        question="Which regulatory compliance is most important for crypto-fiat services in Kenya?",
        options=["SEC regulations", "KYC/AML compliance", "GDPR compliance", "ISO certification"],
        correct_answer=1,
        difficulty=Difficulty.HARD,
        reward=Decimal("45"),
    ),
]
