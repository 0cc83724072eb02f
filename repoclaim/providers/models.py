"""Normalized repository metadata produced by providers."""

from __future__ import annotations

import dataclasses


@dataclasses.dataclass(frozen=True, slots=True)
class RepoMetadata:
    """Provider-independent description of one repository.

    ``machine_name`` is unique within one provider's namespace only; two
    providers may legitimately report the same machine name for different
    repositories. ``canonical_url`` is what identifies a repository across
    owners.
    """

    machine_name: str
    label: str
    description: str
    open_issue_count: int
    source_id: str
    canonical_url: str

    def __post_init__(self) -> None:
        """Reject metadata that cannot be stored as a repository record."""
        if not self.machine_name.strip():
            msg = "machine_name must be non-empty"
            raise ValueError(msg)
        if self.open_issue_count < 0:
            msg = f"open_issue_count must be >= 0, got {self.open_issue_count}"
            raise ValueError(msg)


type RepoMetadataMap = dict[str, RepoMetadata]
