"""PinkPay Offramp - Key-value entity table backing the SQL store."""

from datetime import UTC, datetime

import sqlalchemy as sa
from sqlmodel import Field, SQLModel


class StoredEntity(SQLModel, table=True):
    """Serialized entity collection for one account.

    Attributes:
        key: '{entity_kind}_{account_id}', e.g. 'expenses_0xabc'
        value: JSON document
        updated_at: Last write time
    """

    __tablename__ = "stored_entities"

    key: str = Field(primary_key=True, max_length=255)
    value: str = Field(sa_column=sa.Column(sa.Text, nullable=False))
    updated_at: datetime = Field(
        default_factory=lambda: datetime.now(UTC),
        sa_column_kwargs={"onupdate": lambda: datetime.now(UTC)},
    )
