"""Persistence model for durable repoclaim settings."""

from __future__ import annotations

import datetime as dt  # noqa: TC003
import typing as typ

from sqlalchemy import JSON, DateTime, String
from sqlalchemy.orm import DeclarativeBase, Mapped, mapped_column

from repoclaim.common.time import utcnow

if typ.TYPE_CHECKING:
    from sqlalchemy.ext.asyncio import AsyncEngine


class SettingsBase(DeclarativeBase):
    """Base declarative class for settings tables."""

    metadata: typ.Any


class ProviderSetting(SettingsBase):
    """Key/value row holding a JSON-encoded setting."""

    __tablename__ = "repoclaim_settings"

    key: Mapped[str] = mapped_column(String(128), primary_key=True)
    value: Mapped[typ.Any] = mapped_column(JSON, default=None)
    updated_at: Mapped[dt.datetime] = mapped_column(
        DateTime(timezone=True), default=utcnow, onupdate=utcnow
    )


async def init_settings_storage(engine: AsyncEngine) -> None:
    """Create the settings table if it does not already exist."""
    async with engine.begin() as conn:
        await conn.run_sync(SettingsBase.metadata.create_all)
