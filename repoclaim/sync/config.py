"""Configuration for synchronisation runs.

Usage
-----
>>> import os
>>> os.environ["REPOCLAIM_DRY_RUN"] = "true"
>>> config = SyncConfig.from_env()
>>> config.dry_run
True

"""

from __future__ import annotations

import dataclasses as dc
import os

from repoclaim.logging import DEFAULT_LOG_LEVEL, LogLevel, normalize_log_level

DEFAULT_DATABASE_URL = "sqlite+aiosqlite:///repoclaim.db"
DEFAULT_FETCH_TIMEOUT_S = 30.0

_TRUTHY = frozenset({"1", "true", "yes", "on"})
_FALSY = frozenset({"0", "false", "no", "off"})


def _parse_bool(env_var: str, *, default: bool) -> bool:
    raw = os.environ.get(env_var, "").strip().lower()
    if not raw:
        return default
    if raw in _TRUTHY:
        return True
    if raw in _FALSY:
        return False
    msg = f"{env_var} must be a boolean flag, got: {raw!r}"
    raise ValueError(msg)


def _parse_positive_float(env_var: str, default: float) -> float:
    raw = os.environ.get(env_var, "")
    if not raw.strip():
        return default
    try:
        value = float(raw)
    except ValueError as exc:
        msg = f"{env_var} must be a number, got: {raw!r}"
        raise ValueError(msg) from exc
    if value <= 0:
        msg = f"{env_var} must be positive, got: {value}"
        raise ValueError(msg)
    return value


@dc.dataclass(frozen=True, slots=True)
class SyncConfig:
    """Runtime settings for the synchronisation service and CLI.

    Attributes
    ----------
    database_url
        SQLAlchemy async URL for records and settings.
    dry_run
        When True, runs report planned changes without writing them.
    fetch_timeout_s
        Upper bound on a single provider fetch, in seconds.
    log_level
        Level passed to :func:`repoclaim.logging.configure_logging`.

    """

    database_url: str = DEFAULT_DATABASE_URL
    dry_run: bool = False
    fetch_timeout_s: float = DEFAULT_FETCH_TIMEOUT_S
    log_level: LogLevel = DEFAULT_LOG_LEVEL

    @classmethod
    def from_env(cls) -> SyncConfig:
        """Create configuration from environment variables.

        Reads ``REPOCLAIM_DATABASE_URL``, ``REPOCLAIM_DRY_RUN``,
        ``REPOCLAIM_FETCH_TIMEOUT_S`` and ``REPOCLAIM_LOG_LEVEL``; unset or
        blank variables keep their defaults.

        Raises
        ------
        ValueError
            If a variable is set to a value that cannot be parsed. The
            message names the variable.

        """
        database_url = (
            os.environ.get("REPOCLAIM_DATABASE_URL", "").strip()
            or DEFAULT_DATABASE_URL
        )
        raw_level = os.environ.get("REPOCLAIM_LOG_LEVEL", "").strip()
        log_level = DEFAULT_LOG_LEVEL
        if raw_level:
            normalized, invalid = normalize_log_level(raw_level)
            if invalid:
                msg = f"REPOCLAIM_LOG_LEVEL is not a log level, got: {raw_level!r}"
                raise ValueError(msg)
            log_level = LogLevel(normalized)

        return cls(
            database_url=database_url,
            dry_run=_parse_bool("REPOCLAIM_DRY_RUN", default=False),
            fetch_timeout_s=_parse_positive_float(
                "REPOCLAIM_FETCH_TIMEOUT_S", DEFAULT_FETCH_TIMEOUT_S
            ),
            log_level=log_level,
        )
