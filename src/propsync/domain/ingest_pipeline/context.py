"""Run-scoped state threaded through the fetch/classify/merge loop."""

from __future__ import annotations

from collections import Counter
from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Any

from propsync.domain.ingest_pipeline.outcomes import (
    EXCLUSION_REASONS,
    MERGE_SKIP_REASONS,
    MergeCounters,
    RecordResult,
    SkipReason,
)
from propsync.domain.time_windows import DateRange

if TYPE_CHECKING:
    from datetime import date

    from propsync.domain.model import SortOrder


@dataclass(slots=True)
class RunStatistics:
    """Aggregate counters for one source run.

    ``inserted``, ``updated`` and ``failed`` mirror the merge engine's durable
    counters; the remaining fields are tallied from per-record results.
    """

    date_range: DateRange | None = None
    pages: int = 0
    fetched: int = 0
    rejected: int = 0
    processed: int = 0
    inserted: int = 0
    updated: int = 0
    skipped: int = 0
    invalid: int = 0
    excluded: int = 0
    failed: int = 0
    new_entities: int = 0
    skip_reasons: Counter[SkipReason] = field(default_factory=Counter[SkipReason])

    def as_dict(self) -> dict[str, Any]:
        return {
            "date_range": self.date_range.as_dict() if self.date_range else None,
            "pages": self.pages,
            "fetched": self.fetched,
            "rejected": self.rejected,
            "processed": self.processed,
            "inserted": self.inserted,
            "updated": self.updated,
            "skipped": self.skipped,
            "invalid": self.invalid,
            "excluded": self.excluded,
            "failed": self.failed,
            "new_entities": self.new_entities,
            "skip_reasons": {reason.value: count for reason, count in self.skip_reasons.items()},
        }


@dataclass(slots=True, kw_only=True)
class RunContext:
    """Everything one ``SourceSynchronizer`` run mutates, passed explicitly."""

    source_id: str
    window: DateRange
    sort: SortOrder
    previous_date: date | None
    previous_total: int
    stats: RunStatistics = field(default_factory=RunStatistics)
    latest_observed: date | None = None
    merges_since_checkpoint: int = 0
    unmerged_failures: int = 0

    def __post_init__(self) -> None:
        if self.stats.date_range is None:
            self.stats.date_range = self.window

    def observe_date(self, value: date | None) -> None:
        if value is None:
            return
        if self.latest_observed is None or value > self.latest_observed:
            self.latest_observed = value

    def record(self, result: RecordResult) -> None:
        stats = self.stats
        stats.new_entities += result.new_entities
        if result.reached_merge:
            stats.processed += 1
            if result.accepted:
                self.merges_since_checkpoint += 1
        reason = result.skip_reason
        if reason is None:
            return
        stats.skip_reasons[reason] += 1
        if reason is SkipReason.INVALID:
            stats.invalid += 1
        elif reason in EXCLUSION_REASONS:
            stats.excluded += 1
        elif reason in MERGE_SKIP_REASONS:
            stats.skipped += 1
        elif not result.reached_merge:
            # failures inside the merge engine are counted there
            self.unmerged_failures += 1
            stats.failed += 1

    def apply_merge_counters(self, counters: MergeCounters) -> None:
        self.stats.inserted = counters.inserted
        self.stats.updated = counters.updated
        self.stats.failed = counters.failed + self.unmerged_failures

    def checkpoint_due(self, every: int) -> bool:
        return self.merges_since_checkpoint >= every

    def mark_checkpointed(self) -> None:
        self.merges_since_checkpoint = 0


__all__ = ["DateRange", "RunContext", "RunStatistics"]
