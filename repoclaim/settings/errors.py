"""Errors raised by the provider settings store."""

from __future__ import annotations


class SettingsStoreError(RuntimeError):
    """Raised when provider settings cannot be read or written."""

    def __init__(self, key: str, operation: str) -> None:
        """Initialise with the settings key and the failed operation."""
        self.key = key
        self.operation = operation
        super().__init__(f"Failed to {operation} setting {key!r}")

    @classmethod
    def read_failed(cls, key: str) -> SettingsStoreError:
        """Return an error for a failed settings read."""
        return cls(key, "read")

    @classmethod
    def write_failed(cls, key: str) -> SettingsStoreError:
        """Return an error for a failed settings write."""
        return cls(key, "write")
