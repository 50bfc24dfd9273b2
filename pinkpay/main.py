"""PinkPay Offramp - FastAPI Application."""

import asyncio
import logging
import random
from collections.abc import AsyncGenerator
from contextlib import asynccontextmanager, suppress

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from pinkpay.api import register_exception_handlers, register_routers
from pinkpay.core.config import Settings, get_settings
from pinkpay.core.redis import close_redis, get_redis
from pinkpay.db import MemoryStore, PersistenceStore, RedisStore, SQLStore, build_engine, init_db
from pinkpay.services.rate_service import RateProvider, build_rate_source
from pinkpay.services.settlement_service import SettlementScheduler
from pinkpay.utils.idempotency import (
    MemorySubmissionGuard,
    RedisSubmissionGuard,
    SubmissionGuard,
)

logger = logging.getLogger(__name__)


def build_store(app: FastAPI, settings: Settings) -> PersistenceStore:
    if settings.persistence_backend == "memory":
        return MemoryStore()
    if settings.persistence_backend == "redis":
        return RedisStore(get_redis())
    app.state.engine = build_engine(settings.database_url, echo=settings.debug)
    return SQLStore(app.state.engine)


def build_guard(settings: Settings) -> SubmissionGuard:
    if settings.persistence_backend == "redis":
        return RedisSubmissionGuard(get_redis(), ttl_seconds=settings.idempotency_ttl_seconds)
    return MemorySubmissionGuard(ttl_seconds=settings.idempotency_ttl_seconds)


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    """Application lifespan handler.

    Startup: Create tables, load the rate table, start the rate poller
    Shutdown: Stop the poller, cancel in-flight settlements, close connections
    """
    settings: Settings = app.state.settings
    engine = getattr(app.state, "engine", None)

    # Startup
    if engine is not None:
        init_db(engine)
    provider: RateProvider = app.state.rate_provider
    if not await asyncio.to_thread(provider.refresh):
        logger.warning("Starting without exchange rates from %s", provider.source.name)
    poller = asyncio.create_task(provider.poll(settings.rate_poll_interval))

    yield

    # Shutdown
    poller.cancel()
    with suppress(asyncio.CancelledError):
        await poller
    await app.state.scheduler.shutdown()
    if engine is not None:
        engine.dispose()
    close_redis()


def create_app(settings: Settings | None = None) -> FastAPI:
    """Application factory.

    Args:
        settings: Overrides the environment settings (tests)

    Returns:
        Configured FastAPI application instance
    """
    settings = settings or get_settings()

    app = FastAPI(
        title=settings.app_name,
        description="Crypto to fiat offramp API",
        version="0.1.0",
        docs_url="/docs",
        redoc_url="/redoc",
        lifespan=lifespan,
    )

    # CORS middleware
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    # Shared collaborators
    app.state.settings = settings
    app.state.store = build_store(app, settings)
    app.state.rate_provider = RateProvider(
        build_rate_source(
            settings.rate_source,
            url=settings.rate_source_url,
            response_path=settings.rate_response_path,
            timeout=settings.rate_http_timeout,
            client=get_redis() if settings.rate_source == "redis" else None,
        )
    )
    app.state.scheduler = SettlementScheduler(
        delay=settings.settlement_delay_seconds,
        timeout=settings.settlement_timeout_seconds,
    )
    app.state.guard = build_guard(settings)
    app.state.rng = random.Random()

    register_exception_handlers(app)
    register_routers(app)

    @app.get("/health")
    async def health_check() -> dict[str, str]:
        """Health check endpoint."""
        return {"status": "healthy"}

    return app


# Application instance
app = create_app()
