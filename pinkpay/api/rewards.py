"""PinkPay Offramp - Loyalty rewards and quiz endpoints."""

from fastapi import APIRouter, Request

from pinkpay.api.deps import AccountId, Game, Rewards
from pinkpay.models.reward import RewardTier
from pinkpay.schemas.rewards import (
    GameStatsResponse,
    QuizAnswerRequest,
    QuizAnswerResponse,
    QuizQuestionResponse,
    RewardStatusResponse,
)

router = APIRouter(tags=["Rewards"])


@router.get("/rewards", response_model=RewardStatusResponse)
def get_reward_status(account_id: AccountId, rewards: Rewards) -> RewardStatusResponse:
    state = rewards.get_state(account_id)
    count = state.transaction_count
    return RewardStatusResponse(
        transaction_count=count,
        token_balance=state.token_balance,
        tier=rewards.tier_for(count),
        next_tier=rewards.next_tier(count),
        progress_to_next_tier=rewards.progress_to_next_tier(count),
    )


@router.get("/rewards/tiers", response_model=list[RewardTier])
def list_tiers(rewards: Rewards) -> list[RewardTier]:
    return rewards.tiers


# ============ Quiz ============


@router.get("/quiz/question", response_model=QuizQuestionResponse)
def next_question(request: Request, account_id: AccountId, game: Game) -> QuizQuestionResponse:
    """Draw a question not yet seen in the current round."""
    question = game.next_question(account_id, request.app.state.rng)
    return QuizQuestionResponse.model_validate(question.model_dump())


@router.post("/quiz/answer", response_model=QuizAnswerResponse)
def answer_question(
    data: QuizAnswerRequest,
    account_id: AccountId,
    game: Game,
) -> QuizAnswerResponse:
    result = game.submit_answer(account_id, data.question_id, data.answer)
    return QuizAnswerResponse(
        correct=result.correct,
        correct_answer=result.correct_answer,
        earned=result.earned,
    )


@router.get("/quiz/stats", response_model=GameStatsResponse)
def get_quiz_stats(account_id: AccountId, game: Game) -> GameStatsResponse:
    stats = game.get_stats(account_id)
    return GameStatsResponse(
        **stats.model_dump(exclude={"answered_ids", "current_question_id"}),
        accuracy=stats.accuracy(),
    )
