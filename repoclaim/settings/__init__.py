"""Configuration of which repository providers are enabled.

The enabled provider list is ordered: the first enabled provider that
accepts a URL handles it. Two sources are available:

- :class:`DatabaseProviderSettings` stores the list durably alongside the
  repository records and can be updated at runtime.
- :class:`EnvProviderSettings` reads ``REPOCLAIM_ENABLED_PROVIDERS``.

Both read fresh on every call.
"""

from __future__ import annotations

from .errors import SettingsStoreError
from .service import (
    ENABLED_PROVIDERS_ENV,
    ENABLED_PROVIDERS_KEY,
    DatabaseProviderSettings,
    EnabledProviderSettings,
    EnvProviderSettings,
    clean_provider_ids,
)
from .storage import ProviderSetting, init_settings_storage

__all__ = [
    "ENABLED_PROVIDERS_ENV",
    "ENABLED_PROVIDERS_KEY",
    "DatabaseProviderSettings",
    "EnabledProviderSettings",
    "EnvProviderSettings",
    "ProviderSetting",
    "SettingsStoreError",
    "clean_provider_ids",
    "init_settings_storage",
]
