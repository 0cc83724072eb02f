"""Unit tests for the repository content hash."""

from __future__ import annotations

import dataclasses
import typing as typ

import pytest

from repoclaim.sync import content_hash
from tests.helpers.providers import make_metadata

if typ.TYPE_CHECKING:
    from repoclaim.providers import RepoMetadata


def _base() -> RepoMetadata:
    return make_metadata(
        "batman-repo",
        label="Batman",
        description="This is a batman repo",
        open_issue_count=6,
        source_id="yml_remote",
        canonical_url="https://example.test/batman-repo.yml",
    )


def test_content_hash_is_stable_hex_digest() -> None:
    """Equal metadata hashes to the same 32-character digest."""
    digest = content_hash(_base())

    assert digest == content_hash(_base())
    assert len(digest) == 32
    assert all(char in "0123456789abcdef" for char in digest)


@pytest.mark.parametrize(
    ("field", "value"),
    [
        ("label", "Robin"),
        ("description", "This is a robin repo"),
        ("open_issue_count", 7),
        ("source_id", "github"),
        ("canonical_url", "https://example.test/robin-repo.yml"),
    ],
)
def test_content_hash_changes_with_each_stored_field(field: str, value: object) -> None:
    """Changing any hashed field changes the digest."""
    changed = dataclasses.replace(_base(), **{field: value})

    assert content_hash(changed) != content_hash(_base())


def test_content_hash_ignores_machine_name() -> None:
    """The machine name is part of the record key, not the content."""
    renamed = dataclasses.replace(_base(), machine_name="robin-repo")

    assert content_hash(renamed) == content_hash(_base())


def test_content_hash_separates_adjacent_fields() -> None:
    """Moving text between fields does not collide."""
    first = dataclasses.replace(_base(), label="ab", description="c")
    second = dataclasses.replace(_base(), label="a", description="bc")

    assert content_hash(first) != content_hash(second)
