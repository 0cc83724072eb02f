"""Structured log events for repository synchronisation.

Usage
-----
>>> event_logger = SyncEventLogger()
>>> event_logger.log_sync_started(owner_id="owner-1", url_count=2, dry_run=False)

"""

from __future__ import annotations

import enum
import typing as typ

from repoclaim.logging import get_logger, log_exception, log_info, log_warning

if typ.TYPE_CHECKING:
    from repoclaim.providers.errors import MetadataUnavailableError

    from .models import SyncResult

logger = get_logger(__name__)


class SyncEventType(enum.StrEnum):
    """Structured log event types for synchronisation runs."""

    SYNC_STARTED = "sync.run.started"
    SYNC_COMPLETED = "sync.run.completed"
    SYNC_FAILED = "sync.run.failed"
    RECORD_CREATED = "sync.record.created"
    RECORD_UPDATED = "sync.record.updated"
    RECORD_DELETED = "sync.record.deleted"
    FETCH_UNAVAILABLE = "sync.fetch.unavailable"
    MACHINE_NAME_COLLISION = "sync.fetch.collision"


class SyncEventLogger:
    """Emit structured synchronisation events via femtologging."""

    def log_sync_started(self, *, owner_id: str, url_count: int, dry_run: bool) -> None:
        """Log the start of one owner's run."""
        log_info(
            logger,
            "[%s] owner_id=%s url_count=%d dry_run=%s",
            SyncEventType.SYNC_STARTED,
            owner_id,
            url_count,
            dry_run,
        )

    def log_sync_completed(self, result: SyncResult) -> None:
        """Log a finished run with its counters."""
        log_info(
            logger,
            "[%s] owner_id=%s dry_run=%s created=%d updated=%d unchanged=%d "
            "deleted=%d",
            SyncEventType.SYNC_COMPLETED,
            result.owner_id,
            result.dry_run,
            result.repositories_created,
            result.repositories_updated,
            result.repositories_unchanged,
            result.repositories_deleted,
        )

    def log_sync_failed(self, *, owner_id: str, error: BaseException) -> None:
        """Log a run aborted by an infrastructure fault."""
        log_exception(
            logger,
            f"[{SyncEventType.SYNC_FAILED}] owner_id={owner_id} "
            f"error_type={type(error).__name__} error={error}",
            error,
        )

    def log_record_changed(
        self,
        event: SyncEventType,
        *,
        owner_id: str,
        machine_name: str,
        source_id: str,
        dry_run: bool,
    ) -> None:
        """Log a created, updated or deleted record."""
        log_info(
            logger,
            "[%s] owner_id=%s machine_name=%s source_id=%s dry_run=%s",
            event,
            owner_id,
            machine_name,
            source_id,
            dry_run,
        )

    def log_fetch_unavailable(
        self, *, provider_id: str, error: MetadataUnavailableError
    ) -> None:
        """Log a URL that produced no metadata."""
        log_warning(
            logger,
            "[%s] provider_id=%s uri=%s reason=%s detail=%s",
            SyncEventType.FETCH_UNAVAILABLE,
            provider_id,
            error.uri,
            error.reason,
            error.detail,
        )

    def log_machine_name_collision(
        self, *, machine_name: str, kept_source_id: str, dropped_source_id: str
    ) -> None:
        """Log metadata dropped because its machine name was already fetched."""
        log_warning(
            logger,
            "[%s] machine_name=%s kept_source_id=%s dropped_source_id=%s",
            SyncEventType.MACHINE_NAME_COLLISION,
            machine_name,
            kept_source_id,
            dropped_source_id,
        )
