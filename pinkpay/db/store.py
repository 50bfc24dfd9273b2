"""PinkPay Offramp - Per-account persistence store.

Every entity collection is stored under ``{entity_kind}_{account_id}`` as a
JSON document. Three backends share one interface:

- MemoryStore: process-local dict (tests, single-session use)
- SQLStore: ``stored_entities`` table via SQLModel
- RedisStore: one Redis string per key

Within one process, `lock(account_id)` serializes an account's
read-modify-write cycles. Writers in separate processes are not
synchronized; the last write wins.
"""

import logging
import threading
from abc import ABC, abstractmethod
from enum import Enum
from typing import Any

import redis
from pydantic import TypeAdapter
from pydantic import ValidationError as PydanticValidationError
from sqlalchemy import Engine
from sqlalchemy.exc import SQLAlchemyError

from pinkpay.core.exceptions import PersistenceUnavailableError
from pinkpay.db.engine import get_session
from pinkpay.models.budget import Budget, Expense, SavingsGoal
from pinkpay.models.game import GameStats
from pinkpay.models.kyc import KYCApplication
from pinkpay.models.reward import UserRewardState
from pinkpay.models.stored_entity import StoredEntity
from pinkpay.models.transaction import Transaction

logger = logging.getLogger(__name__)


class EntityKind(str, Enum):
    """Entity collections persisted per account."""

    EXPENSES = "expenses"
    BUDGETS = "budgets"
    GOALS = "goals"
    TRANSACTIONS = "transactions"
    REWARDS = "rewards"
    KYC = "kyc"
    GAME_STATS = "game_stats"
    LANGUAGE = "language"


ENTITY_ADAPTERS: dict[EntityKind, TypeAdapter[Any]] = {
    EntityKind.EXPENSES: TypeAdapter(list[Expense]),
    EntityKind.BUDGETS: TypeAdapter(list[Budget]),
    EntityKind.GOALS: TypeAdapter(list[SavingsGoal]),
    EntityKind.TRANSACTIONS: TypeAdapter(list[Transaction]),
    EntityKind.REWARDS: TypeAdapter(UserRewardState),
    EntityKind.KYC: TypeAdapter(KYCApplication),
    EntityKind.GAME_STATS: TypeAdapter(GameStats),
    EntityKind.LANGUAGE: TypeAdapter(str),
}


def storage_key(kind: EntityKind, account_id: str) -> str:
    """Build the storage key, e.g. 'expenses_0xabc'."""
    return f"{kind.value}_{account_id}"


class PersistenceStore(ABC):
    """Typed key-value store parameterized by entity kind and account."""

    def __init__(self) -> None:
        self._locks: dict[str, threading.RLock] = {}
        self._locks_guard = threading.Lock()

    def lock(self, account_id: str) -> threading.RLock:
        """Re-entrant lock for one account. Hold it across load -> modify -> save."""
        with self._locks_guard:
            return self._locks.setdefault(account_id, threading.RLock())

    def load(self, kind: EntityKind, account_id: str, default: Any = None) -> Any:
        """Return the last written value, or ``default`` when absent."""
        key = storage_key(kind, account_id)
        raw = self._read(key)
        if raw is None:
            return default
        try:
            return ENTITY_ADAPTERS[kind].validate_json(raw)
        except PydanticValidationError as e:
            logger.error("Corrupt entry %s: %s", key, e)
            raise PersistenceUnavailableError(
                f"Stored value for {key} could not be decoded", {"key": key}
            ) from e

    def save(self, kind: EntityKind, account_id: str, value: Any) -> None:
        key = storage_key(kind, account_id)
        raw = ENTITY_ADAPTERS[kind].dump_json(value).decode("utf-8")
        self._write(key, raw)

    @abstractmethod
    def _read(self, key: str) -> str | None: ...

    @abstractmethod
    def _write(self, key: str, raw: str) -> None: ...


class MemoryStore(PersistenceStore):
    """Dict-backed store."""

    def __init__(self) -> None:
        super().__init__()
        self._data: dict[str, str] = {}

    def _read(self, key: str) -> str | None:
        return self._data.get(key)

    def _write(self, key: str, raw: str) -> None:
        self._data[key] = raw


class SQLStore(PersistenceStore):
    """Store backed by the ``stored_entities`` table."""

    def __init__(self, bind: Engine | None = None) -> None:
        super().__init__()
        self._bind = bind

    def _read(self, key: str) -> str | None:
        try:
            with get_session(self._bind) as session:
                entity = session.get(StoredEntity, key)
                return entity.value if entity else None
        except SQLAlchemyError as e:
            logger.error("Failed to read %s: %s", key, e)
            raise PersistenceUnavailableError(f"Failed to read {key}", {"key": key}) from e

    def _write(self, key: str, raw: str) -> None:
        try:
            with get_session(self._bind) as session:
                entity = session.get(StoredEntity, key)
                if entity:
                    entity.value = raw
                else:
                    entity = StoredEntity(key=key, value=raw)
                session.add(entity)
        except SQLAlchemyError as e:
            logger.error("Failed to write %s: %s", key, e)
            raise PersistenceUnavailableError(f"Failed to write {key}", {"key": key}) from e


class RedisStore(PersistenceStore):
    """Store backed by Redis strings under a key prefix."""

    def __init__(self, client: redis.Redis, prefix: str = "pinkpay:") -> None:
        super().__init__()
        self._client = client
        self._prefix = prefix

    def _read(self, key: str) -> str | None:
        try:
            return self._client.get(f"{self._prefix}{key}")
        except redis.RedisError as e:
            logger.error("Failed to read %s: %s", key, e)
            raise PersistenceUnavailableError(f"Failed to read {key}", {"key": key}) from e

    def _write(self, key: str, raw: str) -> None:
        try:
            self._client.set(f"{self._prefix}{key}", raw)
        except redis.RedisError as e:
            logger.error("Failed to write %s: %s", key, e)
            raise PersistenceUnavailableError(f"Failed to write {key}", {"key": key}) from e
