"""Unit-test fixtures for repository synchronisation."""

from __future__ import annotations

import typing as typ

import pytest
from sqlalchemy import select

from repoclaim.records import RepositoryRecord, sql_store_factory
from repoclaim.sync import OwnerLocks

if typ.TYPE_CHECKING:
    import collections.abc as cabc

    from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

    from repoclaim.records import RecordStoreFactory


class FetchRecordsFn(typ.Protocol):
    """Callable fixture returning an owner's stored records."""

    def __call__(self, owner_id: str) -> cabc.Awaitable[list[RepositoryRecord]]:
        """Fetch records for ``owner_id`` ordered by machine name."""
        ...


@pytest.fixture
def store_factory(
    session_factory: async_sessionmaker[AsyncSession],
) -> RecordStoreFactory:
    """Return the SQL record store factory bound to the test database."""
    return sql_store_factory(session_factory)


@pytest.fixture
def owner_locks() -> OwnerLocks:
    """Return a lock table private to the test."""
    return OwnerLocks()


@pytest.fixture
def fetch_records(
    session_factory: async_sessionmaker[AsyncSession],
) -> FetchRecordsFn:
    """Return a helper that reads an owner's records."""

    async def _fetch(owner_id: str) -> list[RepositoryRecord]:
        async with session_factory() as session:
            records = await session.scalars(
                select(RepositoryRecord)
                .where(RepositoryRecord.owner_id == owner_id)
                .order_by(RepositoryRecord.machine_name)
            )
            return list(records)

    return _fetch
