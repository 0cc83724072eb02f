"""Repository providers and the registry that enables them.

A provider adapts one kind of external repository source. It validates URL
shapes, explains which shapes it accepts, and fetches normalized
:class:`RepoMetadata` for a URL it accepted.

Built-in providers:

- ``github``: ``https://github.com/{owner}/{name}`` via the GitHub REST API.
- ``yml_remote``: any HTTP(S) URL ending in ``.yml``/``.yaml`` whose
  document has a single top-level key naming the repository.

Usage
-----
::

    import httpx

    from repoclaim.providers import build_default_registry
    from repoclaim.settings import EnvProviderSettings

    async with httpx.AsyncClient() as client:
        registry = build_default_registry(EnvProviderSettings(), http_client=client)
        for provider_id in await registry.enabled_ids():
            provider = registry.instantiate(provider_id)

"""

from __future__ import annotations

from .base import ProviderDefinition, ProviderFactory, RepositoryProvider
from .errors import (
    GitHubConfigError,
    MetadataUnavailableError,
    ProviderError,
    ProviderNotFoundError,
    UnavailableReason,
)
from .github import GitHubProvider, GitHubProviderConfig
from .manifest import ManifestEntry, YamlManifestProvider, parse_manifest
from .models import RepoMetadata, RepoMetadataMap
from .registry import ProviderRegistry, build_default_registry

__all__ = [
    "GitHubConfigError",
    "GitHubProvider",
    "GitHubProviderConfig",
    "ManifestEntry",
    "MetadataUnavailableError",
    "ProviderDefinition",
    "ProviderError",
    "ProviderFactory",
    "ProviderNotFoundError",
    "ProviderRegistry",
    "RepoMetadata",
    "RepoMetadataMap",
    "RepositoryProvider",
    "UnavailableReason",
    "YamlManifestProvider",
    "build_default_registry",
    "parse_manifest",
]
