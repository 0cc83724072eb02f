"""Unit tests for the GitHub repository provider."""

from __future__ import annotations

import secrets
import typing as typ

import httpx
import pytest

from repoclaim.providers import (
    GitHubConfigError,
    GitHubProvider,
    GitHubProviderConfig,
    MetadataUnavailableError,
    UnavailableReason,
)

_TOKEN = secrets.token_hex(8)
_HTTP_SERVER_ERROR = 502

_REPO_PAYLOAD: dict[str, typ.Any] = {
    "id": 1296269,
    "full_name": "octo/reef",
    "name": "reef",
    "html_url": "https://github.com/octo/reef",
    "description": "Coral catalogue",
    "open_issues_count": 4,
    "private": False,
}


def _make_provider(
    handler: typ.Callable[[httpx.Request], httpx.Response],
    *,
    token: str | None = _TOKEN,
) -> tuple[GitHubProvider, list[httpx.Request]]:
    requests: list[httpx.Request] = []

    def _record(request: httpx.Request) -> httpx.Response:
        requests.append(request)
        return handler(request)

    http_client = httpx.AsyncClient(transport=httpx.MockTransport(_record))
    provider = GitHubProvider(
        GitHubProviderConfig(token=token, api_url="https://api.example.test"),
        http_client=http_client,
    )
    return provider, requests


@pytest.mark.parametrize(
    ("uri", "expected"),
    [
        ("https://github.com/octo/reef", True),
        ("https://www.github.com/octo/reef", True),
        ("https://github.com/octo/reef.git", True),
        ("https://github.com/octo/reef/issues", True),
        ("https://github.com/octo", False),
        ("http://github.com/octo/reef", False),
        ("https://gitlab.com/octo/reef", False),
        ("https://example.test/octo/reef.yml", False),
        ("github.com/octo/reef", False),
    ],
)
def test_validate_accepts_github_repository_urls(uri: str, *, expected: bool) -> None:
    """Only HTTPS github.com owner/name URLs are accepted."""
    assert GitHubProvider().validate(uri) is expected


def test_help_text_describes_url_shape() -> None:
    """Help text shows the accepted URL format."""
    assert GitHubProvider().help_text() == "https://github.com/vendor/name"


@pytest.mark.asyncio
async def test_fetch_maps_rest_payload_to_metadata() -> None:
    """A repository response becomes one metadata entry keyed by full name."""
    provider, requests = _make_provider(
        lambda _request: httpx.Response(200, json=_REPO_PAYLOAD)
    )

    metadata = await provider.fetch("https://github.com/octo/reef.git")

    assert list(metadata) == ["octo/reef"]
    entry = metadata["octo/reef"]
    assert entry.label == "reef"
    assert entry.description == "Coral catalogue"
    assert entry.open_issue_count == 4
    assert entry.source_id == "github"
    assert entry.canonical_url == "https://github.com/octo/reef"

    (request,) = requests
    assert str(request.url) == "https://api.example.test/repos/octo/reef"
    assert request.headers["Authorization"] == f"Bearer {_TOKEN}"
    assert request.headers["Accept"] == "application/vnd.github+json"


@pytest.mark.asyncio
async def test_fetch_without_token_is_anonymous() -> None:
    """No Authorization header is sent without a token."""
    provider, requests = _make_provider(
        lambda _request: httpx.Response(200, json=_REPO_PAYLOAD), token=None
    )

    await provider.fetch("https://github.com/octo/reef")

    assert "Authorization" not in requests[0].headers


@pytest.mark.asyncio
async def test_fetch_treats_null_description_as_empty() -> None:
    """GitHub returns null for repositories without a description."""
    payload = {**_REPO_PAYLOAD, "description": None}
    provider, _ = _make_provider(lambda _request: httpx.Response(200, json=payload))

    metadata = await provider.fetch("https://github.com/octo/reef")

    assert metadata["octo/reef"].description == ""


@pytest.mark.parametrize(
    ("response", "reason"),
    [
        (
            httpx.Response(404, json={"message": "Not Found"}),
            UnavailableReason.NOT_FOUND,
        ),
        (
            httpx.Response(_HTTP_SERVER_ERROR, text="bad gateway"),
            UnavailableReason.UNREACHABLE,
        ),
        (httpx.Response(200, text="<html>"), UnavailableReason.MALFORMED),
        (
            httpx.Response(200, json={"full_name": "octo/reef"}),
            UnavailableReason.MALFORMED,
        ),
    ],
)
@pytest.mark.asyncio
async def test_fetch_failures_raise_metadata_unavailable(
    response: httpx.Response, reason: UnavailableReason
) -> None:
    """HTTP and payload failures surface as MetadataUnavailableError."""
    provider, _ = _make_provider(lambda _request: response)

    with pytest.raises(MetadataUnavailableError) as exc_info:
        await provider.fetch("https://github.com/octo/reef")

    assert exc_info.value.reason is reason
    assert exc_info.value.uri == "https://github.com/octo/reef"


@pytest.mark.asyncio
async def test_fetch_transport_error_is_unreachable() -> None:
    """Connection failures do not leak httpx exceptions."""

    def _refuse(request: httpx.Request) -> httpx.Response:
        msg = "connection refused"
        raise httpx.ConnectError(msg, request=request)

    provider, _ = _make_provider(_refuse)

    with pytest.raises(MetadataUnavailableError) as exc_info:
        await provider.fetch("https://github.com/octo/reef")

    assert exc_info.value.reason is UnavailableReason.UNREACHABLE


def test_config_from_env(monkeypatch: pytest.MonkeyPatch) -> None:
    """Environment variables configure token, API URL and timeout."""
    monkeypatch.setenv("REPOCLAIM_GITHUB_TOKEN", _TOKEN)
    monkeypatch.setenv("REPOCLAIM_GITHUB_API_URL", "https://ghe.example.test/api/v3/")
    monkeypatch.setenv("REPOCLAIM_HTTP_TIMEOUT_S", "5")

    config = GitHubProviderConfig.from_env()

    assert config.token == _TOKEN
    assert config.api_url == "https://ghe.example.test/api/v3"
    assert config.timeout_s == pytest.approx(5.0)


def test_config_from_env_defaults(monkeypatch: pytest.MonkeyPatch) -> None:
    """Unset variables fall back to anonymous public GitHub."""
    for name in (
        "REPOCLAIM_GITHUB_TOKEN",
        "REPOCLAIM_GITHUB_API_URL",
        "REPOCLAIM_HTTP_TIMEOUT_S",
    ):
        monkeypatch.delenv(name, raising=False)

    config = GitHubProviderConfig.from_env()

    assert config.token is None
    assert config.api_url == "https://api.github.com"


@pytest.mark.parametrize("raw", ["soon", "0", "-1"])
def test_config_rejects_invalid_timeout(
    monkeypatch: pytest.MonkeyPatch, raw: str
) -> None:
    """Non-positive or non-numeric timeouts are configuration errors."""
    monkeypatch.setenv("REPOCLAIM_HTTP_TIMEOUT_S", raw)

    with pytest.raises(GitHubConfigError, match="REPOCLAIM_HTTP_TIMEOUT_S"):
        GitHubProviderConfig.from_env()


def test_config_rejects_non_http_api_url() -> None:
    """The API URL must be HTTP(S)."""
    with pytest.raises(GitHubConfigError, match="must start with"):
        GitHubProviderConfig(api_url="ftp://api.example.test")


def test_env_api_url_error_is_a_value_error(monkeypatch: pytest.MonkeyPatch) -> None:
    """Configuration errors are ValueErrors naming the variable."""
    monkeypatch.setenv("REPOCLAIM_GITHUB_API_URL", "ftp://x")

    with pytest.raises(ValueError, match="REPOCLAIM_GITHUB_API_URL") as exc_info:
        GitHubProviderConfig.from_env()

    assert isinstance(exc_info.value, GitHubConfigError)
