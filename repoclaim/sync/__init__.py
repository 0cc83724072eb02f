"""Reconciliation of owner-submitted repositories with stored records.

:class:`RepositorySyncService` is the entry point. It validates submitted
URLs against the enabled providers and synchronises each owner's
repository records with the metadata those providers return.

Quick examples
--------------

Build a service over SQLite and synchronise one owner::

    >>> import httpx
    >>> from repoclaim.sync import build_sync_service, init_storage
    >>> from repoclaim.sync import session_factory_for
    >>> engine, session_factory = session_factory_for(
    ...     "sqlite+aiosqlite:///repoclaim.db"
    ... )
    >>> await init_storage(engine)
    >>> async with httpx.AsyncClient() as client:
    ...     service = build_sync_service(session_factory, client)
    ...     result = await service.synchronize(
    ...         "owner-1", ["https://github.com/example/widgets"]
    ...     )

Queue the same run on a Dramatiq worker. Importing :mod:`repoclaim.sync.jobs`
registers the actor and requires a configured broker::

    >>> from repoclaim.sync.jobs import sync_owner_job
    >>> sync_owner_job.send(
    ...     "owner-1",
    ...     ["https://github.com/example/widgets"],
    ...     "sqlite+aiosqlite:///repoclaim.db",
    ... )
"""

from __future__ import annotations

from .config import SyncConfig
from .factory import build_sync_service, init_storage, session_factory_for
from .hashing import content_hash
from .locks import DEFAULT_OWNER_LOCKS, OwnerLocks
from .models import SyncResult
from .observability import SyncEventLogger, SyncEventType
from .service import (
    NO_PROVIDERS_MESSAGE,
    RepositorySyncService,
    claimed_message,
    invalid_url_message,
    not_found_message,
)

__all__ = [
    "DEFAULT_OWNER_LOCKS",
    "NO_PROVIDERS_MESSAGE",
    "OwnerLocks",
    "RepositorySyncService",
    "SyncConfig",
    "SyncEventLogger",
    "SyncEventType",
    "SyncResult",
    "build_sync_service",
    "claimed_message",
    "content_hash",
    "init_storage",
    "invalid_url_message",
    "not_found_message",
    "session_factory_for",
]
