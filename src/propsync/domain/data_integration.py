"""Application services for synchronizing market transaction sources."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Any

from propsync.domain.ingest_pipeline.context import RunStatistics
from propsync.domain.ingest_pipeline.orchestrator import SourceSynchronizer, SyncState
from propsync.domain.time_windows import utcnow

if TYPE_CHECKING:
    from collections.abc import Callable
    from datetime import date, datetime

    from propsync.domain.classification import TransactionClassifier
    from propsync.domain.ingest_pipeline.orchestrator import SyncSettings
    from propsync.domain.ports.fetching import TransactionPageFetcher
    from propsync.domain.ports.geocoding import Geocoder
    from propsync.domain.ports.unit_of_work import SyncUnitOfWork
    from propsync.domain.time_windows import Clock


@dataclass(slots=True)
class SyncSourceResult:
    """Outcome of one source sync, complete or partial."""

    source_id: str
    state: SyncState
    statistics: RunStatistics = field(default_factory=RunStatistics)
    last_synced_date: date | None = None
    total_records_synced: int = 0
    last_sync_at: datetime | None = None
    error: str | None = None

    @property
    def succeeded(self) -> bool:
        return self.state is SyncState.COMPLETED

    def as_dict(self) -> dict[str, Any]:
        return {
            "source_id": self.source_id,
            "state": self.state.value,
            "statistics": self.statistics.as_dict(),
            "cursor": {
                "last_synced_date": (
                    self.last_synced_date.isoformat() if self.last_synced_date else None
                ),
                "total_records_synced": self.total_records_synced,
                "last_sync_at": self.last_sync_at.isoformat() if self.last_sync_at else None,
            },
            "error": self.error,
        }


class SourceSyncError(RuntimeError):
    """Raised after a failed run has checkpointed; carries the partial result."""

    def __init__(self, message: str, *, result: SyncSourceResult) -> None:
        super().__init__(message)
        self.result = result


def _result_from(synchronizer: SourceSynchronizer, *, error: str | None = None) -> SyncSourceResult:
    context = synchronizer.context
    cursor = synchronizer.cursor
    return SyncSourceResult(
        source_id=synchronizer.source_id,
        state=SyncState.FAILED if error is not None else synchronizer.state,
        statistics=context.stats if context is not None else RunStatistics(),
        last_synced_date=cursor.last_synced_date if cursor is not None else None,
        total_records_synced=cursor.total_records_synced if cursor is not None else 0,
        last_sync_at=cursor.last_sync_at if cursor is not None else None,
        error=error,
    )


def sync_source(
    *,
    source_id: str,
    fetcher: TransactionPageFetcher,
    unit_of_work_factory: Callable[[], SyncUnitOfWork],
    settings: SyncSettings,
    classifier: TransactionClassifier | None = None,
    geocoder: Geocoder | None = None,
    today: date | None = None,
    clock: Clock = utcnow,
    label: str | None = None,
) -> SyncSourceResult:
    """Run one resumable sync for ``source_id`` and summarise it.

    Raises ``SourceSyncError`` when the run fails; progress made before the
    failure has already been checkpointed.
    """

    with unit_of_work_factory() as uow:
        synchronizer = SourceSynchronizer(
            source_id=source_id,
            fetcher=fetcher,
            unit_of_work=uow,
            settings=settings,
            classifier=classifier,
            geocoder=geocoder,
            clock=clock,
            label=label,
        )
        try:
            synchronizer.run(today=today)
        except Exception as exc:
            result = _result_from(synchronizer, error=str(exc) or type(exc).__name__)
            raise SourceSyncError(f"Sync failed for {source_id}: {exc}", result=result) from exc
        return _result_from(synchronizer)


__all__ = ["SourceSyncError", "SyncSourceResult", "sync_source"]
