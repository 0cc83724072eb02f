"""Capability contract shared by all repository providers."""

from __future__ import annotations

import collections.abc as cabc
import dataclasses
import typing as typ

if typ.TYPE_CHECKING:
    from .models import RepoMetadataMap


class RepositoryProvider(typ.Protocol):
    """Adapter for one kind of external repository source.

    ``validate`` and ``help_text`` must be pure and cheap: the engine calls
    ``validate`` speculatively against every enabled provider. ``fetch`` is
    only called for URLs the same provider accepted, and raises
    :class:`~repoclaim.providers.errors.MetadataUnavailableError` for every
    retrieval failure instead of leaking transport errors.
    """

    provider_id: str

    def validate(self, uri: str) -> bool:
        """Return True when ``uri`` has a shape this provider can fetch."""
        ...

    def help_text(self) -> str:
        """Describe the URL shape this provider accepts."""
        ...

    async def fetch(self, uri: str) -> RepoMetadataMap:
        """Return metadata keyed by machine name for a validated URL."""
        ...


type ProviderFactory = cabc.Callable[[], RepositoryProvider]


@dataclasses.dataclass(frozen=True, slots=True)
class ProviderDefinition:
    """Registry entry describing how to build a provider."""

    provider_id: str
    label: str
    description: str
    factory: ProviderFactory
