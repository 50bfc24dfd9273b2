"""Tests for the persistence backends."""

from decimal import Decimal

import pytest
import redis
from sqlalchemy.pool import StaticPool
from sqlmodel import create_engine

from pinkpay.core.exceptions import PersistenceUnavailableError
from pinkpay.db.engine import init_db
from pinkpay.db.store import EntityKind, MemoryStore, RedisStore, SQLStore, storage_key
from pinkpay.models.budget import Expense
from pinkpay.models.kyc import KYCApplication, KYCStatus


@pytest.fixture
def sqlite_engine():
    engine = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    init_db(engine)
    yield engine
    engine.dispose()


@pytest.fixture(params=["memory", "sql", "redis"])
def backend(request, fake_redis):
    if request.param == "memory":
        return MemoryStore()
    if request.param == "sql":
        return SQLStore(request.getfixturevalue("sqlite_engine"))
    return RedisStore(fake_redis)


def test_storage_key():
    assert storage_key(EntityKind.EXPENSES, "0xabc") == "expenses_0xabc"


def test_missing_value_returns_default(backend):
    assert backend.load(EntityKind.TRANSACTIONS, "0xabc", default=[]) == []
    assert backend.load(EntityKind.LANGUAGE, "0xabc", default="en") == "en"


def test_last_write_wins(backend):
    backend.save(EntityKind.LANGUAGE, "0xabc", "sw")
    backend.save(EntityKind.LANGUAGE, "0xabc", "yo")

    assert backend.load(EntityKind.LANGUAGE, "0xabc") == "yo"


def test_collections_keep_types(backend):
    expenses = [Expense(category="food", amount=Decimal("12.34"), description="Lunch")]
    backend.save(EntityKind.EXPENSES, "0xabc", expenses)

    loaded = backend.load(EntityKind.EXPENSES, "0xabc")

    assert loaded[0].amount == Decimal("12.34")
    assert loaded[0].category == "food"


def test_accounts_are_isolated(backend):
    backend.save(EntityKind.KYC, "0xabc", KYCApplication(status=KYCStatus.PENDING))

    assert backend.load(EntityKind.KYC, "0xdef") is None


def test_corrupt_value_raises_persistence_error():
    store = MemoryStore()
    store._write(storage_key(EntityKind.EXPENSES, "0xabc"), "{not json")

    with pytest.raises(PersistenceUnavailableError):
        store.load(EntityKind.EXPENSES, "0xabc")


def test_redis_failure_raises_persistence_error():
    class DownRedis:
        def get(self, name):
            raise redis.ConnectionError("refused")

        def set(self, name, value):
            raise redis.ConnectionError("refused")

    store = RedisStore(DownRedis())

    with pytest.raises(PersistenceUnavailableError):
        store.load(EntityKind.LANGUAGE, "0xabc")
    with pytest.raises(PersistenceUnavailableError):
        store.save(EntityKind.LANGUAGE, "0xabc", "en")


def test_sql_failure_raises_persistence_error():
    engine = create_engine("sqlite://", poolclass=StaticPool)  # no tables created
    store = SQLStore(engine)

    with pytest.raises(PersistenceUnavailableError):
        store.load(EntityKind.LANGUAGE, "0xabc")


def test_lock_is_per_account_and_reentrant():
    store = MemoryStore()

    lock = store.lock("0xabc")

    assert store.lock("0xabc") is lock
    assert store.lock("0xdef") is not lock
    with lock:
        # Same thread may re-acquire while holding it
        assert store.lock("0xabc").acquire(blocking=False)
        lock.release()
