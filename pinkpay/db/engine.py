"""PinkPay Offramp - SQL database engine."""

from collections.abc import Generator
from contextlib import contextmanager

from sqlalchemy import Engine
from sqlmodel import Session, SQLModel, create_engine

from pinkpay.core.config import get_settings


def build_engine(database_url: str, echo: bool = False) -> Engine:
    """Create an engine for the given URL.

    SQLite needs check_same_thread disabled because FastAPI serves sync
    endpoints from a thread pool.
    """
    connect_args = {"check_same_thread": False} if database_url.startswith("sqlite") else {}
    return create_engine(
        database_url,
        echo=echo,
        pool_pre_ping=True,
        connect_args=connect_args,
    )


engine = build_engine(get_settings().database_url, echo=get_settings().debug)


def init_db(bind: Engine | None = None) -> None:
    """Initialize database - create all tables.

    Call this on application startup.
    """
    # Register table models with SQLModel.metadata
    from pinkpay.models.stored_entity import StoredEntity  # noqa: F401

    SQLModel.metadata.create_all(bind or engine)


@contextmanager
def get_session(bind: Engine | None = None) -> Generator[Session, None, None]:
    """Get a database session.

    Usage:
        with get_session() as session:
            entity = session.get(StoredEntity, key)
    """
    with Session(bind or engine, expire_on_commit=False) as session:
        try:
            yield session
            session.commit()
        except Exception:
            session.rollback()
            raise
