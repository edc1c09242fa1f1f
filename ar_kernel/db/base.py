"""
Declarative base for the AR store tables.

Every table gets a uuid4 primary key stored as a 36-char string, so the same
schema runs on SQLite and PostgreSQL.  Weekly figures are pre-aggregated
analytics values and map to double-precision ``Float``; counts map to
``Integer``.  ``TrackedBase`` adds server-side created/updated timestamps.

Nothing here imports models, selectors or services.
"""

from datetime import date, datetime
from typing import ClassVar
from uuid import UUID, uuid4

from sqlalchemy import Date, DateTime, Float, Integer, String, func
from sqlalchemy.orm import DeclarativeBase, Mapped, mapped_column
from sqlalchemy.types import TypeDecorator


class UUIDString(TypeDecorator):
    """UUID in Python, String(36) in the database."""

    impl = String(36)
    cache_ok = True

    def process_bind_param(self, value, dialect):
        return None if value is None else str(value)

    def process_result_value(self, value, dialect):
        return None if value is None else UUID(value)


class Base(DeclarativeBase):
    # Annotated Python types -> column types for Mapped[...] declarations
    type_annotation_map: ClassVar[dict] = {
        float: Float(precision=53),
        int: Integer,
        date: Date,
        datetime: DateTime(timezone=True),
        UUID: UUIDString(),
    }

    id: Mapped[UUID] = mapped_column(UUIDString(), primary_key=True, default=uuid4)


class TrackedBase(Base):
    """Abstract base adding ``created_at`` and ``updated_at`` (set by the database)."""

    __abstract__ = True

    created_at: Mapped[datetime] = mapped_column(server_default=func.now(), nullable=False)
    updated_at: Mapped[datetime] = mapped_column(
        server_default=func.now(),
        onupdate=func.now(),
        nullable=False,
    )
