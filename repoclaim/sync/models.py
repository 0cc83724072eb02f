"""Data transfer objects for repository synchronisation."""

from __future__ import annotations

import dataclasses


@dataclasses.dataclass(slots=True)
class SyncResult:
    """Summary of one owner's synchronisation run.

    In dry-run mode the counters describe the changes the run would have
    made; nothing was written.
    """

    owner_id: str
    dry_run: bool = False
    repositories_created: int = 0
    repositories_updated: int = 0
    repositories_unchanged: int = 0
    repositories_deleted: int = 0

    @property
    def changed(self) -> bool:
        """Return True when the run created, updated or deleted a record."""
        return bool(
            self.repositories_created
            or self.repositories_updated
            or self.repositories_deleted
        )
