"""Timestamp helpers shared by the persistence layers."""

from __future__ import annotations

import datetime as dt


def utcnow() -> dt.datetime:
    """Return the current time as an aware UTC datetime.

    Used as the default and ``onupdate`` callable for record timestamps so
    SQLite and PostgreSQL both receive timezone-aware values.
    """
    return dt.datetime.now(dt.UTC)
