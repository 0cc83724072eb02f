"""Registry resolving enabled provider identifiers to provider instances."""

from __future__ import annotations

import typing as typ

from repoclaim.settings.service import clean_provider_ids

from .base import ProviderDefinition
from .errors import ProviderNotFoundError
from .github import GitHubProvider, GitHubProviderConfig
from .manifest import YamlManifestProvider

if typ.TYPE_CHECKING:
    import collections.abc as cabc

    import httpx

    from repoclaim.settings.service import EnabledProviderSettings

    from .base import RepositoryProvider


class ProviderRegistry:
    """Maps provider identifiers to factories and reports which are enabled.

    Parameters
    ----------
    settings:
        Source of the ordered enabled provider list. It is consulted on every
        call to :meth:`enabled_ids`.
    definitions:
        Providers known to this registry.

    """

    def __init__(
        self,
        settings: EnabledProviderSettings,
        definitions: cabc.Iterable[ProviderDefinition],
    ) -> None:
        """Index the provider definitions by identifier."""
        self._settings = settings
        self._definitions: dict[str, ProviderDefinition] = {}
        for definition in definitions:
            if definition.provider_id in self._definitions:
                msg = f"Duplicate provider identifier: {definition.provider_id!r}"
                raise ValueError(msg)
            self._definitions[definition.provider_id] = definition

    def __contains__(self, provider_id: object) -> bool:
        """Return True when ``provider_id`` names a known provider."""
        return provider_id in self._definitions

    async def enabled_ids(self) -> list[str]:
        """Return enabled provider identifiers in configured order.

        Blank entries are dropped; an unconfigured list yields ``[]``.
        Identifiers are not checked against the known definitions here, so a
        stale identifier surfaces as :class:`ProviderNotFoundError` when it
        is instantiated.
        """
        return clean_provider_ids(await self._settings.get_enabled_provider_ids())

    def instantiate(self, provider_id: str) -> RepositoryProvider:
        """Build a fresh provider instance.

        Raises
        ------
        ProviderNotFoundError
            If ``provider_id`` is not registered.

        """
        definition = self._definitions.get(provider_id)
        if definition is None:
            raise ProviderNotFoundError(provider_id)
        return definition.factory()

    def definitions(self) -> list[ProviderDefinition]:
        """Return all known providers ordered case-insensitively by label."""
        return sorted(
            self._definitions.values(),
            key=lambda item: (item.label.casefold(), item.provider_id),
        )


def build_default_registry(
    settings: EnabledProviderSettings,
    *,
    http_client: httpx.AsyncClient,
    github_config: GitHubProviderConfig | None = None,
) -> ProviderRegistry:
    """Return a registry with the GitHub and YAML manifest providers.

    Providers share ``http_client``; its owner is responsible for closing it.
    When ``github_config`` is omitted the GitHub configuration is read from
    the environment each time the provider is instantiated.
    """

    def _github() -> RepositoryProvider:
        return GitHubProvider(
            github_config or GitHubProviderConfig.from_env(),
            http_client=http_client,
        )

    def _manifest() -> RepositoryProvider:
        return YamlManifestProvider(http_client=http_client)

    return ProviderRegistry(
        settings,
        [
            ProviderDefinition(
                provider_id=GitHubProvider.provider_id,
                label=GitHubProvider.label,
                description=GitHubProvider.description,
                factory=_github,
            ),
            ProviderDefinition(
                provider_id=YamlManifestProvider.provider_id,
                label=YamlManifestProvider.label,
                description=YamlManifestProvider.description,
                factory=_manifest,
            ),
        ],
    )
