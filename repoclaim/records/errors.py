"""Errors raised by the repository record store."""

from __future__ import annotations


class RecordStoreError(RuntimeError):
    """Raised when the underlying persistence layer fails.

    Store faults are infrastructure failures: they abort the current owner's
    operation and propagate to the caller rather than being reported as
    business messages.
    """

    def __init__(self, operation: str) -> None:
        """Initialise with the store operation that failed."""
        self.operation = operation
        super().__init__(f"Repository record store failed during {operation}")

    @classmethod
    def transaction_failed(cls) -> RecordStoreError:
        """Return an error for a failed commit or transaction setup."""
        return cls("transaction")
