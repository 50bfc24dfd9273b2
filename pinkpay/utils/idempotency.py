"""Submission guard - rejects a payout intent while an identical one is in flight."""

import logging
import threading
import time
from abc import ABC, abstractmethod

import redis

from pinkpay.core.exceptions import PersistenceUnavailableError

logger = logging.getLogger(__name__)


class SubmissionGuard(ABC):
    """Short-lived reservation of (account, idempotency key)."""

    def __init__(self, ttl_seconds: int = 300) -> None:
        self.ttl_seconds = ttl_seconds

    @abstractmethod
    def reserve(self, account_id: str, key: str) -> bool:
        """Return False if the key is already reserved."""

    @abstractmethod
    def release(self, account_id: str, key: str) -> None: ...


class MemorySubmissionGuard(SubmissionGuard):
    def __init__(self, ttl_seconds: int = 300) -> None:
        super().__init__(ttl_seconds)
        self._expires: dict[tuple[str, str], float] = {}
        self._lock = threading.Lock()

    def reserve(self, account_id: str, key: str) -> bool:
        now = time.monotonic()
        slot = (account_id, key)
        with self._lock:
            expires_at = self._expires.get(slot)
            if expires_at is not None and expires_at > now:
                return False
            self._expires[slot] = now + self.ttl_seconds
        return True

    def release(self, account_id: str, key: str) -> None:
        with self._lock:
            self._expires.pop((account_id, key), None)


class RedisSubmissionGuard(SubmissionGuard):
    """Reservation via SET NX EX, shared across API workers."""

    def __init__(self, client: redis.Redis, ttl_seconds: int = 300, prefix: str = "pinkpay:submit:"):
        super().__init__(ttl_seconds)
        self._client = client
        self._prefix = prefix

    def _key(self, account_id: str, key: str) -> str:
        return f"{self._prefix}{account_id}:{key}"

    def reserve(self, account_id: str, key: str) -> bool:
        try:
            return bool(self._client.set(self._key(account_id, key), "1", nx=True, ex=self.ttl_seconds))
        except redis.RedisError as e:
            logger.error("Failed to reserve submission key %s: %s", key, e)
            raise PersistenceUnavailableError("Submission guard unavailable", {"key": key}) from e

    def release(self, account_id: str, key: str) -> None:
        try:
            self._client.delete(self._key(account_id, key))
        except redis.RedisError as e:
            logger.error("Failed to release submission key %s: %s", key, e)
            raise PersistenceUnavailableError("Submission guard unavailable", {"key": key}) from e
