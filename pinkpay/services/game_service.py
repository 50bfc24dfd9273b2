"""PinkPay Offramp - Quiz Game Service."""

import logging
import random
from dataclasses import dataclass
from decimal import Decimal

from pinkpay.core.exceptions import InvalidTransitionError, NotFoundError, ValidationError
from pinkpay.db.store import EntityKind, PersistenceStore
from pinkpay.models.game import QUIZ_QUESTIONS, GameStats, QuizQuestion
from pinkpay.services.reward_service import RewardService

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class AnswerResult:
    correct: bool
    correct_answer: int
    earned: Decimal
    stats: GameStats


class GameService:
    """Service for the crypto quiz. Correct answers credit the token balance."""

    def __init__(
        self,
        store: PersistenceStore,
        rewards: RewardService,
        questions: list[QuizQuestion] | None = None,
    ) -> None:
        self.store = store
        self.rewards = rewards
        self.questions = QUIZ_QUESTIONS if questions is None else questions

    def get_stats(self, account_id: str) -> GameStats:
        return self.store.load(EntityKind.GAME_STATS, account_id, default=None) or GameStats()

    def get_question(self, question_id: int) -> QuizQuestion:
        for question in self.questions:
            if question.id == question_id:
                return question
        raise NotFoundError(f"Question {question_id} not found", {"question_id": question_id})

    def next_question(self, account_id: str, rng: random.Random) -> QuizQuestion:
        """Random question not yet drawn; the pool resets once exhausted.

        The drawn question becomes the only one submit_answer will score.
        """
        with self.store.lock(account_id):
            stats = self.get_stats(account_id)
            pool = [q for q in self.questions if q.id not in stats.answered_ids]
            if not pool:
                pool = list(self.questions)
                stats = stats.model_copy(update={"answered_ids": []})

            question = rng.choice(pool)
            stats = stats.model_copy(
                update={
                    "answered_ids": [*stats.answered_ids, question.id],
                    "current_question_id": question.id,
                }
            )
            self.store.save(EntityKind.GAME_STATS, account_id, stats)
        return question

    def submit_answer(self, account_id: str, question_id: int, answer: int) -> AnswerResult:
        """Score the answer to the currently drawn question.

        Raises:
            NotFoundError: If the question does not exist
            ValidationError: If the answer index is out of range
            InvalidTransitionError: If question_id is not the drawn, unanswered question
        """
        question = self.get_question(question_id)
        if not 0 <= answer < len(question.options):
            raise ValidationError(
                f"Answer must be between 0 and {len(question.options) - 1}",
                {"answer": answer},
            )

        with self.store.lock(account_id):
            stats = self.get_stats(account_id)
            if stats.current_question_id != question_id:
                logger.warning(
                    "Quiz answer for %s rejected: question %s is not pending (pending=%s)",
                    account_id,
                    question_id,
                    stats.current_question_id,
                )
                raise InvalidTransitionError(f"quiz question {question_id}", "not pending", "answered")

            correct = answer == question.correct_answer
            earned = question.reward if correct else Decimal("0")
            streak = stats.streak + 1 if correct else 0
            stats = stats.model_copy(
                update={
                    "total_questions": stats.total_questions + 1,
                    "correct_answers": stats.correct_answers + (1 if correct else 0),
                    "total_earned": stats.total_earned + earned,
                    "streak": streak,
                    "best_streak": max(stats.best_streak, streak),
                    "current_question_id": None,
                }
            )
            self.store.save(EntityKind.GAME_STATS, account_id, stats)
            if correct:
                self.rewards.credit_tokens(account_id, earned)

        logger.debug("Quiz answer %s for %s: correct=%s", question_id, account_id, correct)
        return AnswerResult(
            correct=correct,
            correct_answer=question.correct_answer,
            earned=earned,
            stats=stats,
        )
