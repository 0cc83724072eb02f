"""Sources for the ordered list of enabled repository providers.

Every implementation reads fresh on each call; nothing here caches, so a
settings change takes effect on the very next validation or sync.
"""

from __future__ import annotations

import os
import typing as typ

from sqlalchemy.exc import SQLAlchemyError

from .errors import SettingsStoreError
from .storage import ProviderSetting

if typ.TYPE_CHECKING:
    import collections.abc as cabc

    from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

    type SessionFactory = async_sessionmaker[AsyncSession]

ENABLED_PROVIDERS_KEY = "enabled_providers"
ENABLED_PROVIDERS_ENV = "REPOCLAIM_ENABLED_PROVIDERS"


class EnabledProviderSettings(typ.Protocol):
    """Read access to the configured provider identifiers."""

    async def get_enabled_provider_ids(self) -> list[str]:
        """Return the enabled provider identifiers in configured order."""
        ...


def clean_provider_ids(provider_ids: cabc.Iterable[object]) -> list[str]:
    """Strip identifiers, drop blanks and repeats, and keep the first order.

    Examples
    --------
    >>> clean_provider_ids(["yml_remote", "", " github ", "yml_remote"])
    ['yml_remote', 'github']

    """
    cleaned: list[str] = []
    for raw in provider_ids:
        if not isinstance(raw, str):
            continue
        provider_id = raw.strip()
        if provider_id and provider_id not in cleaned:
            cleaned.append(provider_id)
    return cleaned


class DatabaseProviderSettings:
    """Enabled provider list stored in the ``repoclaim_settings`` table."""

    def __init__(self, session_factory: SessionFactory) -> None:
        """Configure the settings store with an async session factory."""
        self._session_factory = session_factory

    async def get_enabled_provider_ids(self) -> list[str]:
        """Return the stored provider identifiers, or an empty list.

        Raises
        ------
        SettingsStoreError
            If the settings table cannot be read.

        """
        try:
            async with self._session_factory() as session:
                setting = await session.get(ProviderSetting, ENABLED_PROVIDERS_KEY)
        except SQLAlchemyError as exc:
            raise SettingsStoreError.read_failed(ENABLED_PROVIDERS_KEY) from exc

        if setting is None or not isinstance(setting.value, list):
            return []
        return clean_provider_ids(setting.value)

    async def set_enabled_provider_ids(
        self, provider_ids: cabc.Iterable[str]
    ) -> list[str]:
        """Persist the provider identifiers and return the cleaned list.

        Raises
        ------
        SettingsStoreError
            If the settings table cannot be written.

        """
        cleaned = clean_provider_ids(provider_ids)
        try:
            async with self._session_factory() as session, session.begin():
                setting = await session.get(ProviderSetting, ENABLED_PROVIDERS_KEY)
                if setting is None:
                    session.add(
                        ProviderSetting(key=ENABLED_PROVIDERS_KEY, value=cleaned)
                    )
                else:
                    setting.value = cleaned
        except SQLAlchemyError as exc:
            raise SettingsStoreError.write_failed(ENABLED_PROVIDERS_KEY) from exc
        return cleaned


class EnvProviderSettings:
    """Enabled provider list read from ``REPOCLAIM_ENABLED_PROVIDERS``.

    The variable holds comma-separated identifiers, for example
    ``yml_remote,github``.
    """

    def __init__(self, env_var: str = ENABLED_PROVIDERS_ENV) -> None:
        """Configure which environment variable to read."""
        self._env_var = env_var

    async def get_enabled_provider_ids(self) -> list[str]:
        """Return identifiers parsed from the environment at call time."""
        raw = os.environ.get(self._env_var, "")
        return clean_provider_ids(raw.split(","))
