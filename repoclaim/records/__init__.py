"""Per-owner repository records and the store used to reconcile them.

Each :class:`RepositoryRecord` belongs to exactly one owner and is keyed by
``(owner_id, machine_name, source_id)``. ``content_hash`` summarises the
mutable fields so unchanged repositories can be skipped without comparing
every column.
"""

from __future__ import annotations

from .errors import RecordStoreError
from .storage import RecordBase, RepositoryRecord, init_record_storage
from .store import (
    DryRunRecordStore,
    RecordFields,
    RecordFilter,
    RecordStore,
    RecordStoreFactory,
    SqlRecordStore,
    sql_store_factory,
)

__all__ = [
    "DryRunRecordStore",
    "RecordBase",
    "RecordFields",
    "RecordFilter",
    "RecordStore",
    "RecordStoreError",
    "RecordStoreFactory",
    "RepositoryRecord",
    "SqlRecordStore",
    "init_record_storage",
    "sql_store_factory",
]
