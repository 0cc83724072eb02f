"""Dramatiq actor for background repository synchronisation.

Usage
-----
Queue a run for one owner:

>>> sync_owner_job.send(
...     "owner-1",
...     ["https://github.com/example/widgets"],
...     "sqlite+aiosqlite:///repoclaim.db",
... )

"""

from __future__ import annotations

import asyncio
import collections.abc as cabc

import dramatiq
import httpx

from repoclaim.logging import get_logger, log_error
from repoclaim.providers.errors import GitHubConfigError
from repoclaim.records.errors import RecordStoreError
from repoclaim.settings.errors import SettingsStoreError

from ._broker import ensure_broker_configured
from .factory import build_sync_service, init_storage, session_factory_for
from .locks import DEFAULT_OWNER_LOCKS
from .service import DEFAULT_FETCH_TIMEOUT_S

logger = get_logger(__name__)


async def run_owner_sync(
    owner_id: str,
    urls: cabc.Sequence[str],
    database_url: str,
    *,
    dry_run: bool = False,
    fetch_timeout_s: float = DEFAULT_FETCH_TIMEOUT_S,
    transport: httpx.AsyncBaseTransport | None = None,
) -> bool:
    """Synchronise one owner against ``database_url`` and report success.

    Store faults and invalid provider configuration are logged and reported
    as ``False`` so a worker can retry the owner later; the owner's records
    are left as they were.
    """
    engine, session_factory = session_factory_for(database_url)
    try:
        await init_storage(engine)
        async with httpx.AsyncClient(transport=transport) as client:
            service = build_sync_service(
                session_factory,
                client,
                dry_run=dry_run,
                fetch_timeout_s=fetch_timeout_s,
            )
            await service.synchronize(owner_id, urls)
    except (RecordStoreError, SettingsStoreError, GitHubConfigError) as exc:
        log_error(
            logger,
            "Repository sync for owner %s failed: %s",
            owner_id,
            exc,
        )
        return False
    finally:
        await engine.dispose()
    return True


# The actor registers with the current broker when decorated.
ensure_broker_configured()


@dramatiq.actor
def sync_owner_job(
    owner_id: str,
    urls: list[str],
    database_url: str,
    *,
    dry_run: bool = False,
) -> bool:
    """Dramatiq actor reconciling one owner's repository records.

    Worker threads syncing the same owner run one after the other.
    """
    ensure_broker_configured()
    with DEFAULT_OWNER_LOCKS.hold_blocking(owner_id):
        return asyncio.run(
            run_owner_sync(owner_id, urls, database_url, dry_run=dry_run)
        )
