"""Hosted repository slug utilities.

Slugs identify a repository on a hosting platform in ``owner/name`` form.
They use ``/`` as a separator but are not filesystem paths, so build and
split them with these helpers rather than ``pathlib``.
"""

from __future__ import annotations

import re

_SEGMENT_PATTERN = re.compile(r"^[A-Za-z0-9_.-]+$")
_GIT_SUFFIX = ".git"


def repo_slug(owner: str, name: str) -> str:
    """Build an ``owner/name`` slug.

    Examples
    --------
    >>> repo_slug("vendor", "widget")
    'vendor/widget'

    """
    return f"{owner}/{name}"


def parse_repo_slug(slug: str) -> tuple[str, str]:
    """Split an ``owner/name`` slug into its parts.

    A trailing ``.git`` on the name is dropped, matching the clone URLs
    users tend to paste.

    Raises
    ------
    ValueError
        If the slug does not have exactly two non-empty segments made of
        letters, digits, ``_``, ``.`` or ``-``.

    Examples
    --------
    >>> parse_repo_slug("vendor/widget.git")
    ('vendor', 'widget')

    """
    parts = slug.strip("/").split("/")
    if len(parts) != 2:  # noqa: PLR2004 - owner and name
        msg = f"Invalid repository slug: expected 'owner/name', got {slug!r}"
        raise ValueError(msg)

    owner, name = parts
    name = name.removesuffix(_GIT_SUFFIX)
    if not all(_SEGMENT_PATTERN.match(segment) for segment in (owner, name)):
        msg = f"Invalid repository slug: expected 'owner/name', got {slug!r}"
        raise ValueError(msg)

    return owner, name
