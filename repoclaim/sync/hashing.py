"""Change-detection digest for repository metadata."""

from __future__ import annotations

import hashlib
import typing as typ

import msgspec

if typ.TYPE_CHECKING:
    from repoclaim.providers.models import RepoMetadata


def content_hash(metadata: RepoMetadata) -> str:
    """Return a stable digest over the stored, mutable metadata fields.

    Field order is fixed: title, description, open issue count, source,
    canonical URL. The machine name is not included because it is part of
    the record's key. MD5 is used for cheap equality checks only.

    Examples
    --------
    >>> from repoclaim.providers.models import RepoMetadata
    >>> digest = content_hash(
    ...     RepoMetadata(
    ...         "batman-repo", "Batman", "", 6, "yml_remote", "https://x/b.yml"
    ...     )
    ... )
    >>> len(digest)
    32

    """
    material = msgspec.json.encode(
        [
            metadata.label,
            metadata.description,
            metadata.open_issue_count,
            metadata.source_id,
            metadata.canonical_url,
        ]
    )
    return hashlib.md5(material, usedforsecurity=False).hexdigest()
