"""Database module - SQL engine and per-account persistence store."""

from pinkpay.db.engine import (
    build_engine,
    engine,
    get_session,
    init_db,
)
from pinkpay.db.store import (
    EntityKind,
    MemoryStore,
    PersistenceStore,
    RedisStore,
    SQLStore,
    storage_key,
)

__all__ = [
    "engine",
    "build_engine",
    "init_db",
    "get_session",
    "EntityKind",
    "PersistenceStore",
    "MemoryStore",
    "SQLStore",
    "RedisStore",
    "storage_key",
]
