"""API module - route handlers and common dependencies."""

from fastapi import FastAPI

from pinkpay.api.deps import AccountId, get_account_id
from pinkpay.api.errors import register_exception_handlers

__all__ = [
    "AccountId",
    "get_account_id",
    "register_exception_handlers",
    "register_routers",
]


def register_routers(app: FastAPI) -> None:
    """Register all API routers to the application.

    Args:
        app: FastAPI application instance
    """
    # Conversion & payouts
    from pinkpay.api.offramp import router as offramp_router
    from pinkpay.api.transactions import router as transactions_router

    app.include_router(offramp_router, prefix="/api")
    app.include_router(transactions_router, prefix="/api")

    # Identity verification
    from pinkpay.api.kyc import router as kyc_router

    app.include_router(kyc_router, prefix="/api")

    # Loyalty & quiz
    from pinkpay.api.rewards import router as rewards_router

    app.include_router(rewards_router, prefix="/api")

    # Budget planner
    from pinkpay.api.budget import router as budget_router

    app.include_router(budget_router, prefix="/api")

    # Preferences
    from pinkpay.api.preferences import router as preferences_router

    app.include_router(preferences_router, prefix="/api")
