"""Record store capability consumed by the synchronisation engine.

The engine depends only on :class:`RecordStore`. :class:`SqlRecordStore`
implements it over an SQLAlchemy ``AsyncSession`` and
:func:`sql_store_factory` opens one transactional store per operation.
:class:`DryRunRecordStore` answers reads from a wrapped store and discards
every write.
"""

from __future__ import annotations

import contextlib
import dataclasses
import typing as typ

from sqlalchemy import select
from sqlalchemy.exc import SQLAlchemyError

from .errors import RecordStoreError
from .storage import RepositoryRecord

if typ.TYPE_CHECKING:
    import collections.abc as cabc

    from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

    type SessionFactory = async_sessionmaker[AsyncSession]


@dataclasses.dataclass(frozen=True, slots=True)
class RecordFields:
    """Writable fields of a repository record."""

    owner_id: str
    machine_name: str
    source_id: str
    title: str
    description: str
    open_issue_count: int
    canonical_url: str
    content_hash: str


@dataclasses.dataclass(frozen=True, slots=True)
class RecordFilter:
    """Conditions for :meth:`RecordStore.find_records`, combined with AND.

    ``None`` leaves a condition out. An empty ``machine_name_not_in`` also
    leaves its condition out, so it excludes nothing.
    """

    owner_id: str | None = None
    exclude_owner_id: str | None = None
    canonical_url: str | None = None
    machine_name_not_in: frozenset[str] | None = None


class RecordStore(typ.Protocol):
    """Query and mutate repository records."""

    async def find_record(
        self, owner_id: str, machine_name: str, source_id: str
    ) -> RepositoryRecord | None:
        """Return the owner's record for a machine name and source."""
        ...

    async def find_records(self, record_filter: RecordFilter) -> list[RepositoryRecord]:
        """Return every record matching ``record_filter``."""
        ...

    async def create(self, fields: RecordFields) -> RepositoryRecord:
        """Create a record from ``fields``."""
        ...

    async def update(self, record: RepositoryRecord, fields: RecordFields) -> None:
        """Overwrite ``record`` with ``fields``."""
        ...

    async def delete(self, record: RepositoryRecord) -> None:
        """Delete ``record``."""
        ...


type RecordStoreFactory = cabc.Callable[
    [], contextlib.AbstractAsyncContextManager[RecordStore]
]


@contextlib.contextmanager
def _store_operation(operation: str) -> typ.Iterator[None]:
    try:
        yield
    except SQLAlchemyError as exc:
        raise RecordStoreError(operation) from exc


class SqlRecordStore:
    """:class:`RecordStore` backed by an SQLAlchemy async session.

    The caller owns the session and its transaction; mutations are flushed
    immediately so constraint violations surface at the offending call.
    """

    def __init__(self, session: AsyncSession) -> None:
        """Bind the store to ``session``."""
        self._session = session

    async def find_record(
        self, owner_id: str, machine_name: str, source_id: str
    ) -> RepositoryRecord | None:
        """Return the owner's record for a machine name and source."""
        with _store_operation("find_record"):
            return await self._session.scalar(
                select(RepositoryRecord).where(
                    RepositoryRecord.owner_id == owner_id,
                    RepositoryRecord.machine_name == machine_name,
                    RepositoryRecord.source_id == source_id,
                )
            )

    async def find_records(self, record_filter: RecordFilter) -> list[RepositoryRecord]:
        """Return every record matching ``record_filter``, oldest first."""
        query = select(RepositoryRecord)
        if record_filter.owner_id is not None:
            query = query.where(RepositoryRecord.owner_id == record_filter.owner_id)
        if record_filter.exclude_owner_id is not None:
            query = query.where(
                RepositoryRecord.owner_id != record_filter.exclude_owner_id
            )
        if record_filter.canonical_url is not None:
            query = query.where(
                RepositoryRecord.canonical_url == record_filter.canonical_url
            )
        if record_filter.machine_name_not_in:
            query = query.where(
                RepositoryRecord.machine_name.not_in(
                    sorted(record_filter.machine_name_not_in)
                )
            )
        query = query.order_by(RepositoryRecord.created_at, RepositoryRecord.id)

        with _store_operation("find_records"):
            return list(await self._session.scalars(query))

    async def create(self, fields: RecordFields) -> RepositoryRecord:
        """Insert a record built from ``fields``."""
        record = RepositoryRecord(**dataclasses.asdict(fields))
        with _store_operation("create"):
            self._session.add(record)
            await self._session.flush()
        return record

    async def update(self, record: RepositoryRecord, fields: RecordFields) -> None:
        """Copy ``fields`` onto ``record`` and flush."""
        for name, value in dataclasses.asdict(fields).items():
            setattr(record, name, value)
        with _store_operation("update"):
            await self._session.flush()

    async def delete(self, record: RepositoryRecord) -> None:
        """Delete ``record`` and flush."""
        with _store_operation("delete"):
            await self._session.delete(record)
            await self._session.flush()


class DryRunRecordStore:
    """Read-through view of a store whose mutations are discarded.

    ``create`` returns a transient record that is never attached to a
    session; ``update`` and ``delete`` leave the record untouched.
    """

    def __init__(self, store: RecordStore) -> None:
        """Wrap ``store`` for reads."""
        self._store = store

    async def find_record(
        self, owner_id: str, machine_name: str, source_id: str
    ) -> RepositoryRecord | None:
        """Delegate to the wrapped store."""
        return await self._store.find_record(owner_id, machine_name, source_id)

    async def find_records(self, record_filter: RecordFilter) -> list[RepositoryRecord]:
        """Delegate to the wrapped store."""
        return await self._store.find_records(record_filter)

    async def create(self, fields: RecordFields) -> RepositoryRecord:
        """Return an unsaved record built from ``fields``."""
        return RepositoryRecord(**dataclasses.asdict(fields))

    async def update(self, record: RepositoryRecord, fields: RecordFields) -> None:
        """Discard the update."""
        del record, fields

    async def delete(self, record: RepositoryRecord) -> None:
        """Discard the deletion."""
        del record


def sql_store_factory(session_factory: SessionFactory) -> RecordStoreFactory:
    """Return a factory opening one transactional :class:`SqlRecordStore`.

    The transaction commits when the ``async with`` block exits normally and
    rolls back when it raises. Database errors, including commit failures,
    are raised as :class:`RecordStoreError`.

    Examples
    --------
    >>> open_store = sql_store_factory(session_factory)
    >>> async with open_store() as store:
    ...     records = await store.find_records(RecordFilter(owner_id="owner-1"))

    """

    @contextlib.asynccontextmanager
    async def _open_store() -> typ.AsyncIterator[RecordStore]:
        try:
            async with session_factory() as session, session.begin():
                yield SqlRecordStore(session)
        except SQLAlchemyError as exc:
            raise RecordStoreError.transaction_failed() from exc

    return _open_store
