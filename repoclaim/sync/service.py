"""Repository synchronisation service.

The service reconciles the repositories an owner has submitted (as URLs)
against that owner's stored repository records. For each enabled provider,
in configured order, it validates and fetches the URLs the provider claims,
then:

1. creates a record for every fetched machine name without one,
2. updates records whose content hash no longer matches,
3. deletes the owner's records whose machine name was not fetched.

It also validates submitted URLs interactively, reporting invalid URLs,
repositories that cannot be found, and repositories already claimed by a
different owner. Business findings are returned as message text; store
faults are raised as :class:`~repoclaim.records.RecordStoreError`.
"""

from __future__ import annotations

import asyncio
import typing as typ

from repoclaim.providers.errors import MetadataUnavailableError
from repoclaim.records.store import DryRunRecordStore, RecordFields, RecordFilter

from .hashing import content_hash
from .locks import DEFAULT_OWNER_LOCKS, OwnerLocks
from .models import SyncResult
from .observability import SyncEventLogger, SyncEventType

if typ.TYPE_CHECKING:
    import collections.abc as cabc

    from repoclaim.providers.base import RepositoryProvider
    from repoclaim.providers.models import RepoMetadata, RepoMetadataMap
    from repoclaim.providers.registry import ProviderRegistry
    from repoclaim.records.store import RecordStore, RecordStoreFactory

NO_PROVIDERS_MESSAGE = "there are no enabled repository plugins"
DEFAULT_FETCH_TIMEOUT_S = 30.0


def invalid_url_message(uri: str) -> str:
    """Return the message for a URL no enabled provider accepts."""
    return f"{uri} is not valid"


def not_found_message(uri: str) -> str:
    """Return the message for a URL whose repository could not be fetched."""
    return f"the repository at {uri} was not found"


def claimed_message(uri: str) -> str:
    """Return the message for a repository another owner already claims."""
    return f"the repository at {uri} has been added by another user"


def _submitted_uris(urls: cabc.Iterable[str]) -> list[str]:
    return [uri for uri in (url.strip() for url in urls) if uri]


def _first_acceptor(
    providers: cabc.Sequence[RepositoryProvider], uri: str
) -> RepositoryProvider | None:
    return next((provider for provider in providers if provider.validate(uri)), None)


def _record_fields(owner_id: str, metadata: RepoMetadata, digest: str) -> RecordFields:
    return RecordFields(
        owner_id=owner_id,
        machine_name=metadata.machine_name,
        source_id=metadata.source_id,
        title=metadata.label,
        description=metadata.description,
        open_issue_count=metadata.open_issue_count,
        canonical_url=metadata.canonical_url,
        content_hash=digest,
    )


class RepositorySyncService:
    """Reconciles provider metadata with per-owner repository records.

    Parameters
    ----------
    registry:
        Resolves the enabled providers; read on every call.
    store_factory:
        Opens one transactional record store per operation.
    dry_run:
        When True, every comparison runs but no record is created, updated
        or deleted. Fixed for the lifetime of the service.
    owner_locks:
        Serialises :meth:`synchronize` per owner. Defaults to a process-wide
        table shared by all services.
    fetch_timeout_s:
        Upper bound on a single provider fetch.
    event_logger:
        Structured event sink; defaults to :class:`SyncEventLogger`.

    """

    def __init__(  # noqa: PLR0913 - collaborators are injected explicitly
        self,
        registry: ProviderRegistry,
        store_factory: RecordStoreFactory,
        *,
        dry_run: bool = False,
        owner_locks: OwnerLocks | None = None,
        fetch_timeout_s: float = DEFAULT_FETCH_TIMEOUT_S,
        event_logger: SyncEventLogger | None = None,
    ) -> None:
        """Configure the service with its collaborators."""
        if fetch_timeout_s <= 0:
            msg = f"fetch_timeout_s must be positive, got {fetch_timeout_s}"
            raise ValueError(msg)
        self._registry = registry
        self._store_factory = store_factory
        self._dry_run = dry_run
        self._owner_locks = owner_locks or DEFAULT_OWNER_LOCKS
        self._fetch_timeout_s = fetch_timeout_s
        self._events = event_logger or SyncEventLogger()

    @property
    def dry_run(self) -> bool:
        """Return True when the service suppresses all record mutations."""
        return self._dry_run

    async def enabled_provider_ids(self) -> list[str]:
        """Return enabled provider identifiers in configured order."""
        return await self._registry.enabled_ids()

    async def validator_help_text(self) -> str:
        """Return every enabled provider's help text, space-joined.

        Returns an empty string when no provider is enabled.

        Raises
        ------
        ProviderNotFoundError
            If an enabled identifier is not registered.

        """
        providers = await self._enabled_providers()
        return " ".join(provider.help_text() for provider in providers)

    async def validate_repository_urls(
        self, urls: cabc.Iterable[str], owner_id: str
    ) -> str:
        """Check submitted URLs and return space-joined error messages.

        Blank entries are skipped. Each remaining URL is handled by the
        first enabled provider that accepts it; later providers are not
        consulted. The store is only read.

        Parameters
        ----------
        urls:
            URLs submitted by the owner.
        owner_id:
            Owner submitting the URLs; their own records never count as a
            competing claim.

        Returns
        -------
        str
            ``""`` when every URL is valid, :data:`NO_PROVIDERS_MESSAGE` when
            no provider is enabled, otherwise the messages in URL order.

        Raises
        ------
        ProviderNotFoundError
            If an enabled identifier is not registered.
        RecordStoreError
            If the uniqueness check cannot read the store.

        """
        providers = await self._enabled_providers()
        if not providers:
            return NO_PROVIDERS_MESSAGE

        errors: list[str] = []
        async with self._store_factory() as store:
            for uri in _submitted_uris(urls):
                message = await self._validate_uri(store, providers, uri, owner_id)
                if message is not None:
                    errors.append(message)
        return " ".join(errors)

    async def synchronize(self, owner_id: str, urls: cabc.Iterable[str]) -> SyncResult:
        """Reconcile the owner's records with the repositories behind ``urls``.

        All fetching completes before the first write, and all writes for
        the owner happen in one store transaction. Runs for the same owner
        are serialised; runs for different owners proceed independently.
        A URL whose metadata cannot be fetched contributes nothing, which
        deletes any record previously stored for it. An empty ``urls``
        deletes every record the owner has.

        Returns
        -------
        SyncResult
            Counters for the run (planned changes when in dry-run mode).

        Raises
        ------
        ProviderNotFoundError
            If an enabled identifier is not registered. Nothing is written.
        RecordStoreError
            If the store fails; the owner's transaction is rolled back.

        """
        submitted = _submitted_uris(urls)
        async with self._owner_locks.lock_for(owner_id):
            self._events.log_sync_started(
                owner_id=owner_id, url_count=len(submitted), dry_run=self._dry_run
            )
            fetched = await self._fetch_owner_metadata(submitted)
            result = SyncResult(owner_id=owner_id, dry_run=self._dry_run)
            try:
                async with self._store_factory() as store:
                    writer = DryRunRecordStore(store) if self._dry_run else store
                    await self._upsert_records(writer, owner_id, fetched, result)
                    await self._delete_missing_records(
                        writer, owner_id, fetched, result
                    )
            except Exception as exc:
                self._events.log_sync_failed(owner_id=owner_id, error=exc)
                raise

            self._events.log_sync_completed(result)
            return result

    async def _enabled_providers(self) -> list[RepositoryProvider]:
        return [
            self._registry.instantiate(provider_id)
            for provider_id in await self._registry.enabled_ids()
        ]

    async def _validate_uri(
        self,
        store: RecordStore,
        providers: cabc.Sequence[RepositoryProvider],
        uri: str,
        owner_id: str,
    ) -> str | None:
        provider = _first_acceptor(providers, uri)
        if provider is None:
            return invalid_url_message(uri)

        metadata = await self._fetch(provider, uri)
        if not metadata:
            return not_found_message(uri)

        if not await self._is_unique(store, metadata, owner_id):
            return claimed_message(uri)
        return None

    async def _is_unique(
        self, store: RecordStore, metadata: RepoMetadataMap, owner_id: str
    ) -> bool:
        """Return True when no other owner has a record at the same URL."""
        for entry in metadata.values():
            claims = await store.find_records(
                RecordFilter(
                    canonical_url=entry.canonical_url, exclude_owner_id=owner_id
                )
            )
            if claims:
                return False
        return True

    async def _fetch(
        self, provider: RepositoryProvider, uri: str
    ) -> RepoMetadataMap | None:
        """Fetch metadata, turning unavailability and timeouts into ``None``."""
        try:
            async with asyncio.timeout(self._fetch_timeout_s):
                return await provider.fetch(uri)
        except MetadataUnavailableError as exc:
            self._events.log_fetch_unavailable(
                provider_id=provider.provider_id, error=exc
            )
        except TimeoutError:
            self._events.log_fetch_unavailable(
                provider_id=provider.provider_id,
                error=MetadataUnavailableError.unreachable(
                    uri, f"fetch timed out after {self._fetch_timeout_s}s"
                ),
            )
        return None

    async def _fetch_owner_metadata(self, uris: list[str]) -> RepoMetadataMap:
        """Fetch metadata for every URL an enabled provider claims.

        Each URL belongs to the first enabled provider that accepts it.
        Providers are visited in configured order and, within a provider,
        URLs in submission order; the first metadata fetched for a machine
        name wins.
        """
        providers = await self._enabled_providers()
        claims: dict[int, list[str]] = {}
        for uri in uris:
            provider = _first_acceptor(providers, uri)
            if provider is not None:
                claims.setdefault(id(provider), []).append(uri)

        fetched: RepoMetadataMap = {}
        for provider in providers:
            for uri in claims.get(id(provider), []):
                metadata = await self._fetch(provider, uri)
                if metadata:
                    self._merge(fetched, metadata)
        return fetched

    def _merge(self, fetched: RepoMetadataMap, metadata: RepoMetadataMap) -> None:
        for machine_name, entry in metadata.items():
            kept = fetched.setdefault(machine_name, entry)
            if kept is not entry:
                self._events.log_machine_name_collision(
                    machine_name=machine_name,
                    kept_source_id=kept.source_id,
                    dropped_source_id=entry.source_id,
                )

    async def _upsert_records(
        self,
        store: RecordStore,
        owner_id: str,
        fetched: RepoMetadataMap,
        result: SyncResult,
    ) -> None:
        """Create missing records and refresh records whose hash changed."""
        for machine_name, metadata in fetched.items():
            digest = content_hash(metadata)
            record = await store.find_record(
                owner_id, machine_name, metadata.source_id
            )
            if record is not None and record.content_hash == digest:
                result.repositories_unchanged += 1
                continue

            fields = _record_fields(owner_id, metadata, digest)
            if record is None:
                await store.create(fields)
                result.repositories_created += 1
                event = SyncEventType.RECORD_CREATED
            else:
                await store.update(record, fields)
                result.repositories_updated += 1
                event = SyncEventType.RECORD_UPDATED

            self._events.log_record_changed(
                event,
                owner_id=owner_id,
                machine_name=machine_name,
                source_id=metadata.source_id,
                dry_run=self._dry_run,
            )

    async def _delete_missing_records(
        self,
        store: RecordStore,
        owner_id: str,
        fetched: RepoMetadataMap,
        result: SyncResult,
    ) -> None:
        """Delete the owner's records whose machine name was not fetched."""
        stale = await store.find_records(
            RecordFilter(owner_id=owner_id, machine_name_not_in=frozenset(fetched))
        )
        for record in stale:
            await store.delete(record)
            result.repositories_deleted += 1
            self._events.log_record_changed(
                SyncEventType.RECORD_DELETED,
                owner_id=owner_id,
                machine_name=record.machine_name,
                source_id=record.source_id,
                dry_run=self._dry_run,
            )
