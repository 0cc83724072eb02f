"""Wiring helpers that assemble a ready-to-use synchronisation service."""

from __future__ import annotations

import typing as typ

from sqlalchemy.ext.asyncio import async_sessionmaker, create_async_engine

from repoclaim.providers.registry import build_default_registry
from repoclaim.records.storage import init_record_storage
from repoclaim.records.store import sql_store_factory
from repoclaim.settings.service import DatabaseProviderSettings
from repoclaim.settings.storage import init_settings_storage

from .service import DEFAULT_FETCH_TIMEOUT_S, RepositorySyncService

if typ.TYPE_CHECKING:
    import httpx
    from sqlalchemy.ext.asyncio import AsyncEngine, AsyncSession

    from repoclaim.providers.github import GitHubProviderConfig
    from repoclaim.settings.service import EnabledProviderSettings

    from .locks import OwnerLocks

    type SessionFactory = async_sessionmaker[AsyncSession]


async def init_storage(engine: AsyncEngine) -> None:
    """Create the settings and repository record tables when missing."""
    await init_settings_storage(engine)
    await init_record_storage(engine)


def session_factory_for(database_url: str) -> tuple[AsyncEngine, SessionFactory]:
    """Return an async engine and session factory for ``database_url``."""
    engine = create_async_engine(database_url, future=True)
    return engine, async_sessionmaker(engine, expire_on_commit=False)


def build_sync_service(  # noqa: PLR0913 - mirrors the service's keyword options
    session_factory: SessionFactory,
    http_client: httpx.AsyncClient,
    *,
    settings: EnabledProviderSettings | None = None,
    github_config: GitHubProviderConfig | None = None,
    dry_run: bool = False,
    fetch_timeout_s: float = DEFAULT_FETCH_TIMEOUT_S,
    owner_locks: OwnerLocks | None = None,
) -> RepositorySyncService:
    """Build a service using the built-in providers and the SQL record store.

    Parameters
    ----------
    session_factory
        Session factory for both the record store and, unless ``settings``
        is given, the enabled provider list.
    http_client
        Client shared by every provider instance. The caller closes it.
    settings
        Alternative source of the enabled provider list.
    github_config
        GitHub API settings; read from the environment when omitted.
    dry_run
        Build a service that never writes records.
    fetch_timeout_s
        Upper bound on a single provider fetch.
    owner_locks
        Per-owner lock table; the process-wide table is used when omitted.

    """
    registry = build_default_registry(
        settings or DatabaseProviderSettings(session_factory),
        http_client=http_client,
        github_config=github_config,
    )
    return RepositorySyncService(
        registry,
        sql_store_factory(session_factory),
        dry_run=dry_run,
        owner_locks=owner_locks,
        fetch_timeout_s=fetch_timeout_s,
    )
