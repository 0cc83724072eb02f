"""Remote YAML manifest provider.

A manifest is a small YAML document published at any HTTP(S) URL ending in
``.yml`` or ``.yaml``. Its single top-level key is the repository's machine
name::

    batman-repo:
      label: The Batman repository
      description: This is where Batman keeps all his crime-fighting code.
      num_open_issues: 6

The manifest's own URL is the repository's canonical URL.
"""

from __future__ import annotations

import re
import typing as typ

import httpx
import msgspec
from ruamel.yaml import YAML
from ruamel.yaml.error import YAMLError

from .errors import MetadataUnavailableError
from .models import RepoMetadata

if typ.TYPE_CHECKING:
    from .models import RepoMetadataMap

YAML_VERSION = (1, 2)
MANIFEST_SOURCE_ID = "yml_remote"

_MANIFEST_URL_PATTERN = re.compile(
    r"^https?://[A-Za-z0-9.\-]+/[A-Za-z0-9_\-.%/]+\.ya?ml$"
)
_HTTP_NOT_FOUND = 404
_HTTP_ERROR_STATUS_THRESHOLD = 400


class ManifestEntry(msgspec.Struct, kw_only=True):
    """Repository description stored under the manifest's top-level key.

    Attributes
    ----------
    label : str
        Human-readable repository title.
    description : str
        Free-form description.
    num_open_issues : int
        Open issue count; must not be negative.

    """

    label: str
    description: str
    num_open_issues: typ.Annotated[int, msgspec.Meta(ge=0)]


def parse_manifest(
    content: bytes | str, uri: str, *, source_id: str = MANIFEST_SOURCE_ID
) -> RepoMetadataMap:
    """Decode a manifest document into normalized metadata.

    Parameters
    ----------
    content
        Raw manifest bytes or text.
    uri
        URL the manifest was read from; becomes the canonical URL.
    source_id
        Source identifier recorded on the metadata.

    Raises
    ------
    MetadataUnavailableError
        With reason ``malformed`` when the document is not valid YAML, does
        not have exactly one top-level key, or the entry lacks required
        fields.

    """
    text = content.decode("utf-8") if isinstance(content, bytes) else content
    try:
        loaded = _yaml().load(text)
    except YAMLError as exc:
        raise MetadataUnavailableError.malformed(uri, f"invalid YAML: {exc}") from exc

    if not isinstance(loaded, dict) or len(loaded) != 1:
        raise MetadataUnavailableError.malformed(
            uri, "manifest must be a mapping with exactly one top-level key"
        )

    ((machine_name, raw_entry),) = loaded.items()
    if not isinstance(machine_name, str) or not machine_name.strip():
        raise MetadataUnavailableError.malformed(
            uri, "manifest key must be a non-empty string"
        )

    try:
        entry = msgspec.convert(raw_entry, type=ManifestEntry)
    except msgspec.ValidationError as exc:
        raise MetadataUnavailableError.malformed(
            uri, f"schema validation failed: {exc}"
        ) from exc

    metadata = RepoMetadata(
        machine_name=machine_name,
        label=entry.label,
        description=entry.description,
        open_issue_count=entry.num_open_issues,
        source_id=source_id,
        canonical_url=uri,
    )
    return {machine_name: metadata}


class YamlManifestProvider:
    """Provider for repositories described by a remote YAML manifest."""

    provider_id = "yml_remote"
    source_id = MANIFEST_SOURCE_ID
    label = "Remote .yml file"
    description = "Remote .yml file that includes repository metadata."

    def __init__(
        self,
        *,
        http_client: httpx.AsyncClient | None = None,
        timeout_s: float = 20.0,
    ) -> None:
        """Initialise the provider, optionally sharing an HTTP client."""
        self._owns_client = http_client is None
        self._client = http_client or httpx.AsyncClient(timeout=timeout_s)

    async def aclose(self) -> None:
        """Close any owned HTTP resources."""
        if self._owns_client:
            await self._client.aclose()

    def validate(self, uri: str) -> bool:
        """Return True for HTTP(S) URLs ending in ``.yml`` or ``.yaml``."""
        return _MANIFEST_URL_PATTERN.match(uri) is not None

    def help_text(self) -> str:
        """Describe the accepted URL shape."""
        return 'https://anything.anything/anything/anything.yml (or "http")'

    async def fetch(self, uri: str) -> RepoMetadataMap:
        """Download and decode the manifest at ``uri``.

        Raises
        ------
        MetadataUnavailableError
            If the file is missing, the host cannot be reached, or the
            document is malformed.

        """
        try:
            response = await self._client.get(uri, follow_redirects=True)
        except httpx.HTTPError as exc:
            raise MetadataUnavailableError.unreachable(uri, str(exc)) from exc

        if response.status_code == _HTTP_NOT_FOUND:
            raise MetadataUnavailableError.not_found(uri)
        if response.status_code >= _HTTP_ERROR_STATUS_THRESHOLD:
            raise MetadataUnavailableError.unreachable(
                uri, f"HTTP {response.status_code}"
            )

        try:
            return parse_manifest(response.content, uri, source_id=self.source_id)
        except UnicodeDecodeError as exc:
            raise MetadataUnavailableError.malformed(
                uri, "manifest is not UTF-8 text"
            ) from exc


def _yaml() -> YAML:
    yaml = YAML(typ="safe")
    yaml.version = YAML_VERSION
    yaml.allow_duplicate_keys = False
    return yaml


__all__ = [
    "MANIFEST_SOURCE_ID",
    "ManifestEntry",
    "YamlManifestProvider",
    "parse_manifest",
]
