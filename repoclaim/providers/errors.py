"""Errors raised by repository providers and the provider registry."""

from __future__ import annotations

import enum


class ProviderError(Exception):
    """Base class for provider errors."""


class ProviderNotFoundError(ProviderError):
    """Raised when the registry is asked for an unknown provider identifier."""

    def __init__(self, provider_id: str) -> None:
        """Initialise with the identifier that could not be resolved."""
        self.provider_id = provider_id
        super().__init__(f"Repository provider not found: {provider_id!r}")


class UnavailableReason(enum.StrEnum):
    """Why a provider could not produce metadata for a URL."""

    NOT_FOUND = "not_found"
    UNREACHABLE = "unreachable"
    MALFORMED = "malformed"


class MetadataUnavailableError(ProviderError):
    """Raised when a validated URL yields no usable repository metadata.

    Callers treat this as a normal outcome: the URL contributes nothing to
    the fetched metadata set and, during validation, produces a "not found"
    message. ``reason`` keeps "missing" distinguishable from "unreachable".
    """

    def __init__(
        self, uri: str, reason: UnavailableReason, detail: str | None = None
    ) -> None:
        """Initialise with the URL, the failure category and optional detail."""
        self.uri = uri
        self.reason = reason
        self.detail = detail
        message = f"Repository metadata unavailable ({reason}) for {uri}"
        if detail:
            message = f"{message}: {detail}"
        super().__init__(message)

    @classmethod
    def not_found(
        cls, uri: str, detail: str | None = None
    ) -> MetadataUnavailableError:
        """Return an error for a repository or file that does not exist."""
        return cls(uri, UnavailableReason.NOT_FOUND, detail)

    @classmethod
    def unreachable(
        cls, uri: str, detail: str | None = None
    ) -> MetadataUnavailableError:
        """Return an error for transport failures and error responses."""
        return cls(uri, UnavailableReason.UNREACHABLE, detail)

    @classmethod
    def malformed(
        cls, uri: str, detail: str | None = None
    ) -> MetadataUnavailableError:
        """Return an error for payloads that cannot be decoded or mapped."""
        return cls(uri, UnavailableReason.MALFORMED, detail)


class GitHubConfigError(ProviderError, ValueError):
    """Raised when GitHub provider configuration is invalid.

    Messages name the environment variable that holds the offending value.
    """

    @classmethod
    def invalid_api_url(cls, api_url: str) -> GitHubConfigError:
        """Return an error for a non-HTTP(S) API base URL."""
        return cls(
            "REPOCLAIM_GITHUB_API_URL must start with http:// or https://, "
            f"got: {api_url!r}"
        )

    @classmethod
    def invalid_timeout(cls, raw: str) -> GitHubConfigError:
        """Return an error for a timeout that is not a positive number."""
        return cls(f"REPOCLAIM_HTTP_TIMEOUT_S must be a positive number, got: {raw!r}")
