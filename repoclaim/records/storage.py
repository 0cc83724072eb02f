"""Persistence model for per-owner repository records.

Models keep to portable SQLAlchemy types so the same code works with SQLite
in tests and PostgreSQL in production.
"""

from __future__ import annotations

import datetime as dt  # noqa: TC003
import typing as typ
import uuid

from sqlalchemy import DateTime, Integer, String, Text, UniqueConstraint
from sqlalchemy.orm import DeclarativeBase, Mapped, mapped_column

from repoclaim.common.time import utcnow

if typ.TYPE_CHECKING:
    from sqlalchemy.ext.asyncio import AsyncEngine


class RecordBase(DeclarativeBase):
    """Base declarative class for repository record tables."""

    metadata: typ.Any


class RepositoryRecord(RecordBase):
    """Repository claimed by one owner, as last fetched from its source."""

    __tablename__ = "repository_records"
    __table_args__ = (
        UniqueConstraint(
            "owner_id",
            "machine_name",
            "source_id",
            name="uq_repository_record_owner_source_key",
        ),
    )

    id: Mapped[str] = mapped_column(
        String(36), primary_key=True, default=lambda: str(uuid.uuid4())
    )
    owner_id: Mapped[str] = mapped_column(String(255), index=True)
    machine_name: Mapped[str] = mapped_column(String(255))
    source_id: Mapped[str] = mapped_column(String(64))
    title: Mapped[str] = mapped_column(String(255))
    description: Mapped[str] = mapped_column(Text(), default="")
    open_issue_count: Mapped[int] = mapped_column(Integer, default=0)
    canonical_url: Mapped[str] = mapped_column(String(2048), index=True)
    content_hash: Mapped[str] = mapped_column(String(32))
    created_at: Mapped[dt.datetime] = mapped_column(
        DateTime(timezone=True), default=utcnow
    )
    updated_at: Mapped[dt.datetime] = mapped_column(
        DateTime(timezone=True), default=utcnow, onupdate=utcnow
    )


async def init_record_storage(engine: AsyncEngine) -> None:
    """Create repository record tables if they do not already exist.

    Examples
    --------
    >>> from sqlalchemy.ext.asyncio import create_async_engine
    >>> engine = create_async_engine("sqlite+aiosqlite:///repoclaim.db")
    >>> await init_record_storage(engine)

    """
    async with engine.begin() as conn:
        await conn.run_sync(RecordBase.metadata.create_all)
