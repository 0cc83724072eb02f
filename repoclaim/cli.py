"""Command-line interface for provider settings, validation and sync."""

from __future__ import annotations

import argparse
import asyncio
import typing as typ

import httpx

from repoclaim.logging import configure_logging, get_logger, log_warning
from repoclaim.providers.errors import GitHubConfigError, ProviderNotFoundError
from repoclaim.providers.registry import build_default_registry
from repoclaim.records.errors import RecordStoreError
from repoclaim.settings.errors import SettingsStoreError
from repoclaim.settings.service import DatabaseProviderSettings
from repoclaim.sync.config import SyncConfig
from repoclaim.sync.factory import (
    build_sync_service,
    init_storage,
    session_factory_for,
)

if typ.TYPE_CHECKING:
    from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

    from repoclaim.sync.service import RepositorySyncService

    type SessionFactory = async_sessionmaker[AsyncSession]

logger = get_logger(__name__)


def _build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="repoclaim",
        description="Validate and synchronise owner-claimed repositories.",
    )
    parser.add_argument(
        "--database-url",
        default=None,
        help="SQLAlchemy async URL (defaults to REPOCLAIM_DATABASE_URL)",
    )
    commands = parser.add_subparsers(dest="command", required=True)

    commands.add_parser("providers", help="List known providers")

    enable = commands.add_parser("enable", help="Set the enabled provider list")
    enable.add_argument("provider_ids", nargs="+", help="Provider ids in order")

    commands.add_parser("help-text", help="Print accepted URL formats")

    validate = commands.add_parser("validate", help="Validate repository URLs")
    validate.add_argument("--owner", required=True, help="Owner submitting URLs")
    validate.add_argument("urls", nargs="*", help="Repository URLs")

    sync = commands.add_parser("sync", help="Synchronise an owner's records")
    sync.add_argument("--owner", required=True, help="Owner to synchronise")
    sync.add_argument(
        "--dry-run",
        action="store_true",
        default=None,
        help="Report planned changes without writing them",
    )
    sync.add_argument("urls", nargs="*", help="Repository URLs")
    return parser


async def _list_providers(
    session_factory: SessionFactory, client: httpx.AsyncClient
) -> int:
    registry = build_default_registry(
        DatabaseProviderSettings(session_factory), http_client=client
    )
    enabled = await registry.enabled_ids()
    for definition in registry.definitions():
        marker = "*" if definition.provider_id in enabled else " "
        print(
            f"{marker} {definition.provider_id}\t{definition.label}"
            f"\t{definition.description}"
        )
    return 0


async def _enable_providers(
    session_factory: SessionFactory,
    client: httpx.AsyncClient,
    provider_ids: list[str],
) -> int:
    settings = DatabaseProviderSettings(session_factory)
    registry = build_default_registry(settings, http_client=client)
    unknown = [pid for pid in provider_ids if pid.strip() not in registry]
    if unknown:
        print(f"unknown provider ids: {', '.join(unknown)}")
        return 1
    stored = await settings.set_enabled_provider_ids(provider_ids)
    print(f"enabled providers: {', '.join(stored)}")
    return 0


async def _validate(
    service: RepositorySyncService, owner_id: str, urls: list[str]
) -> int:
    messages = await service.validate_repository_urls(urls, owner_id)
    if messages:
        print(messages)
        return 1
    print("all repository urls are valid")
    return 0


async def _sync(service: RepositorySyncService, owner_id: str, urls: list[str]) -> int:
    result = await service.synchronize(owner_id, urls)
    prefix = "dry run: " if result.dry_run else ""
    print(
        f"{prefix}created={result.repositories_created} "
        f"updated={result.repositories_updated} "
        f"unchanged={result.repositories_unchanged} "
        f"deleted={result.repositories_deleted}"
    )
    return 0


async def _run(args: argparse.Namespace, config: SyncConfig) -> int:
    engine, session_factory = session_factory_for(
        args.database_url or config.database_url
    )
    try:
        await init_storage(engine)
        async with httpx.AsyncClient() as client:
            if args.command == "providers":
                return await _list_providers(session_factory, client)
            if args.command == "enable":
                return await _enable_providers(
                    session_factory, client, args.provider_ids
                )

            dry_run = getattr(args, "dry_run", None)
            service = build_sync_service(
                session_factory,
                client,
                dry_run=config.dry_run if dry_run is None else dry_run,
                fetch_timeout_s=config.fetch_timeout_s,
            )
            if args.command == "help-text":
                print(await service.validator_help_text())
                return 0
            if args.command == "validate":
                return await _validate(service, args.owner, args.urls)
            return await _sync(service, args.owner, args.urls)
    finally:
        await engine.dispose()


def main(argv: list[str] | None = None) -> int:
    """Run the ``repoclaim`` command.

    Parameters
    ----------
    argv : list[str] | None, optional
        Command-line arguments. ``None`` defaults to ``sys.argv``.

    Returns
    -------
    int
        Exit code: 0 on success, 1 when validation reports problems or a
        store or configuration fault occurs.

    """
    args = _build_parser().parse_args(argv)
    try:
        config = SyncConfig.from_env()
    except ValueError as exc:
        print(f"invalid configuration: {exc}")
        return 1

    configure_logging(config.log_level)
    try:
        return asyncio.run(_run(args, config))
    except GitHubConfigError as exc:
        log_warning(logger, "repoclaim %s failed: %s", args.command, exc)
        print(f"invalid configuration: {exc}")
        return 1
    except (RecordStoreError, SettingsStoreError, ProviderNotFoundError) as exc:
        log_warning(logger, "repoclaim %s failed: %s", args.command, exc)
        print(f"error: {exc}")
        return 1


if __name__ == "__main__":
    raise SystemExit(main())
