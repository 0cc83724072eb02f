"""GitHub-hosted repository provider.

Accepts ``https://github.com/{owner}/{name}`` URLs and reads repository
metadata from the GitHub REST API.

Usage
-----
>>> import httpx
>>> async with httpx.AsyncClient() as client:
...     provider = GitHubProvider(GitHubProviderConfig.from_env(), http_client=client)
...     metadata = await provider.fetch("https://github.com/vendor/widget")

"""

from __future__ import annotations

import dataclasses
import os
import re
import typing as typ

import httpx
import msgspec

from repoclaim.common.slug import parse_repo_slug, repo_slug

from .errors import GitHubConfigError, MetadataUnavailableError
from .models import RepoMetadata

if typ.TYPE_CHECKING:
    from .models import RepoMetadataMap

_GITHUB_URL_PATTERN = re.compile(
    r"^https://(?:www\.)?github\.com/"
    r"(?P<slug>[A-Za-z0-9_-]+/[A-Za-z0-9_.-]+?)"
    r"(?:\.git)?(?:[/?#].*)?$"
)
_HTTP_NOT_FOUND = 404
_HTTP_ERROR_STATUS_THRESHOLD = 400
_API_VERSION = "2022-11-28"


@dataclasses.dataclass(frozen=True, slots=True)
class GitHubProviderConfig:
    """Configuration for the GitHub REST API."""

    token: str | None = None
    api_url: str = "https://api.github.com"
    timeout_s: float = 20.0
    user_agent: str = "repoclaim/0.1"

    def __post_init__(self) -> None:
        """Validate the API base URL."""
        if not self.api_url.startswith(("http://", "https://")):
            raise GitHubConfigError.invalid_api_url(self.api_url)

    @classmethod
    def from_env(cls) -> GitHubProviderConfig:
        """Build configuration from ``REPOCLAIM_GITHUB_*`` variables.

        ``REPOCLAIM_GITHUB_TOKEN`` is optional; without it requests are
        anonymous and subject to GitHub's lower rate limit.
        """
        token = os.environ.get("REPOCLAIM_GITHUB_TOKEN", "").strip() or None
        api_url = (
            os.environ.get("REPOCLAIM_GITHUB_API_URL", "").strip()
            or "https://api.github.com"
        )
        raw_timeout = os.environ.get("REPOCLAIM_HTTP_TIMEOUT_S", "").strip()
        timeout_s = 20.0
        if raw_timeout:
            try:
                timeout_s = float(raw_timeout)
            except ValueError as exc:
                raise GitHubConfigError.invalid_timeout(raw_timeout) from exc
            if timeout_s <= 0:
                raise GitHubConfigError.invalid_timeout(raw_timeout)
        return cls(token=token, api_url=api_url.rstrip("/"), timeout_s=timeout_s)

    def headers(self) -> dict[str, str]:
        """Return request headers, including authorisation when configured."""
        headers = {
            "Accept": "application/vnd.github+json",
            "User-Agent": self.user_agent,
            "X-GitHub-Api-Version": _API_VERSION,
        }
        if self.token:
            headers["Authorization"] = f"Bearer {self.token}"
        return headers


class _GitHubRepository(msgspec.Struct, kw_only=True):
    """Fields of the GitHub ``GET /repos/{owner}/{repo}`` response we map."""

    full_name: str
    name: str
    html_url: str
    description: str | None = None
    open_issues_count: typ.Annotated[int, msgspec.Meta(ge=0)] = 0


class GitHubProvider:
    """Provider for repositories hosted on github.com."""

    provider_id = "github"
    source_id = "github"
    label = "GitHub"
    description = "Repositories hosted on github.com."

    def __init__(
        self,
        config: GitHubProviderConfig | None = None,
        *,
        http_client: httpx.AsyncClient | None = None,
    ) -> None:
        """Initialise the provider, optionally sharing an HTTP client."""
        self._config = config or GitHubProviderConfig()
        self._owns_client = http_client is None
        self._client = http_client or httpx.AsyncClient(
            timeout=self._config.timeout_s
        )

    async def aclose(self) -> None:
        """Close any owned HTTP resources."""
        if self._owns_client:
            await self._client.aclose()

    def validate(self, uri: str) -> bool:
        """Return True for ``https://github.com/{owner}/{name}`` URLs."""
        return _GITHUB_URL_PATTERN.match(uri) is not None

    def help_text(self) -> str:
        """Describe the accepted URL shape."""
        return "https://github.com/vendor/name"

    async def fetch(self, uri: str) -> RepoMetadataMap:
        """Fetch repository metadata from the GitHub REST API.

        Raises
        ------
        MetadataUnavailableError
            If the URL does not name a repository, the repository does not
            exist, GitHub cannot be reached, or the response is malformed.

        """
        owner, name = self._parse_uri(uri)
        url = f"{self._config.api_url}/repos/{repo_slug(owner, name)}"
        try:
            response = await self._client.get(url, headers=self._config.headers())
        except httpx.HTTPError as exc:
            raise MetadataUnavailableError.unreachable(uri, str(exc)) from exc

        if response.status_code == _HTTP_NOT_FOUND:
            raise MetadataUnavailableError.not_found(uri)
        if response.status_code >= _HTTP_ERROR_STATUS_THRESHOLD:
            raise MetadataUnavailableError.unreachable(
                uri, f"GitHub API HTTP {response.status_code}"
            )

        try:
            payload = msgspec.json.decode(response.content, type=_GitHubRepository)
        except msgspec.DecodeError as exc:
            raise MetadataUnavailableError.malformed(uri, str(exc)) from exc

        metadata = self._to_metadata(payload)
        return {metadata.machine_name: metadata}

    def _parse_uri(self, uri: str) -> tuple[str, str]:
        match = _GITHUB_URL_PATTERN.match(uri)
        if match is None:
            raise MetadataUnavailableError.not_found(
                uri, "URL does not name a GitHub repository"
            )
        try:
            return parse_repo_slug(match.group("slug"))
        except ValueError as exc:
            raise MetadataUnavailableError.not_found(uri, str(exc)) from exc

    def _to_metadata(self, payload: _GitHubRepository) -> RepoMetadata:
        return RepoMetadata(
            machine_name=payload.full_name,
            label=payload.name,
            description=payload.description or "",
            open_issue_count=payload.open_issues_count,
            source_id=self.source_id,
            canonical_url=payload.html_url,
        )


__all__ = ["GitHubProvider", "GitHubProviderConfig"]
