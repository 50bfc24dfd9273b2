"""Redis connection management for PinkPay."""

import redis

from pinkpay.core.config import get_settings

# Shared client (initialized lazily or in lifespan)
_redis_client: redis.Redis | None = None


def init_redis() -> redis.Redis:
    """Initialize the Redis client.

    Call this during application or worker startup.
    """
    global _redis_client
    settings = get_settings()
    _redis_client = redis.from_url(
        settings.redis_url,
        encoding="utf-8",
        decode_responses=True,
    )
    return _redis_client


def close_redis() -> None:
    """Close the Redis client.

    Call this during application shutdown.
    """
    global _redis_client
    if _redis_client is not None:
        _redis_client.close()
        _redis_client = None


def get_redis() -> redis.Redis:
    """Get Redis client, initializing it on first use."""
    if _redis_client is None:
        return init_redis()
    return _redis_client
