"""In-memory providers and settings for synchronisation tests."""

from __future__ import annotations

import asyncio
import collections.abc as cabc
import dataclasses
import typing as typ

from repoclaim.providers import (
    MetadataUnavailableError,
    ProviderDefinition,
    ProviderRegistry,
    RepoMetadata,
)

if typ.TYPE_CHECKING:
    from repoclaim.providers import RepoMetadataMap


def make_metadata(  # noqa: PLR0913 - mirrors RepoMetadata fields
    machine_name: str,
    *,
    label: str | None = None,
    description: str = "",
    open_issue_count: int = 0,
    source_id: str = "fake",
    canonical_url: str | None = None,
) -> RepoMetadata:
    """Build metadata with sensible defaults for tests."""
    return RepoMetadata(
        machine_name=machine_name,
        label=label or machine_name,
        description=description,
        open_issue_count=open_issue_count,
        source_id=source_id,
        canonical_url=canonical_url or f"https://fake.test/{machine_name}",
    )


@dataclasses.dataclass
class FakeProvider:
    """Provider that accepts URLs with a prefix and serves canned metadata.

    ``responses`` maps URLs to metadata maps; a URL without a response
    raises ``not_found``. ``delay_s`` simulates a slow remote.
    """

    provider_id: str
    prefix: str
    responses: dict[str, RepoMetadataMap] = dataclasses.field(default_factory=dict)
    failures: dict[str, Exception] = dataclasses.field(default_factory=dict)
    delay_s: float = 0.0
    fetched: list[str] = dataclasses.field(default_factory=list)

    def validate(self, uri: str) -> bool:
        """Accept URLs starting with the configured prefix."""
        return uri.startswith(self.prefix)

    def help_text(self) -> str:
        """Return a recognisable help string."""
        return f"{self.prefix}..."

    async def fetch(self, uri: str) -> RepoMetadataMap:
        """Return the canned response for ``uri``."""
        self.fetched.append(uri)
        if self.delay_s:
            await asyncio.sleep(self.delay_s)
        if uri in self.failures:
            raise self.failures[uri]
        if uri not in self.responses:
            raise MetadataUnavailableError.not_found(uri)
        return self.responses[uri]


class InMemoryProviderSettings:
    """Mutable enabled provider list for tests."""

    def __init__(self, provider_ids: cabc.Iterable[str] = ()) -> None:
        """Start with ``provider_ids`` enabled."""
        self.provider_ids = list(provider_ids)
        self.reads = 0

    async def get_enabled_provider_ids(self) -> list[str]:
        """Return a copy of the current list."""
        self.reads += 1
        return list(self.provider_ids)


def make_registry(
    providers: cabc.Iterable[FakeProvider],
    *,
    enabled: cabc.Iterable[str] | None = None,
) -> tuple[ProviderRegistry, InMemoryProviderSettings]:
    """Return a registry serving the given provider instances.

    Every provider is enabled, in the given order, unless ``enabled`` says
    otherwise.
    """
    providers = list(providers)
    settings = InMemoryProviderSettings(
        [p.provider_id for p in providers] if enabled is None else enabled
    )

    def _definition(provider: FakeProvider) -> ProviderDefinition:
        return ProviderDefinition(
            provider_id=provider.provider_id,
            label=provider.provider_id.title(),
            description=f"Fake provider {provider.provider_id}",
            factory=lambda: provider,
        )

    return ProviderRegistry(settings, [_definition(p) for p in providers]), settings
