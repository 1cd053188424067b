"""Per-record results produced by the ingest loop."""

from __future__ import annotations

from dataclasses import dataclass
from enum import StrEnum
from typing import Final


class MergeOutcome(StrEnum):
    INSERTED = "inserted"  # queued in the insert batch; durable once flushed
    UPDATED = "updated"
    SKIPPED = "skipped"


class SkipReason(StrEnum):
    # validation
    INVALID = "invalid"
    # classification exclusions
    NEW_CONSTRUCTION = "new_construction"
    NOT_FLAGGED = "not_flagged"
    MISSING_PARTY = "missing_party"
    TRUST = "trust"
    NOT_CORPORATE = "not_corporate"
    EXCLUDED = "excluded"
    # merge
    STALE = "stale"
    DUPLICATE = "duplicate"
    MERGE_FAILED = "merge_failed"


EXCLUSION_REASONS: Final[frozenset[SkipReason]] = frozenset(
    {
        SkipReason.NEW_CONSTRUCTION,
        SkipReason.NOT_FLAGGED,
        SkipReason.MISSING_PARTY,
        SkipReason.TRUST,
        SkipReason.NOT_CORPORATE,
        SkipReason.EXCLUDED,
    }
)
MERGE_SKIP_REASONS: Final[frozenset[SkipReason]] = frozenset(
    {SkipReason.STALE, SkipReason.DUPLICATE}
)


@dataclass(frozen=True, slots=True)
class MergeResult:
    outcome: MergeOutcome
    skip_reason: SkipReason | None = None

    @classmethod
    def skipped(cls, reason: SkipReason) -> MergeResult:
        return cls(outcome=MergeOutcome.SKIPPED, skip_reason=reason)


@dataclass(frozen=True, slots=True)
class RecordResult:
    """Either a merge outcome or the reason the record never reached the store."""

    outcome: MergeOutcome | None = None
    skip_reason: SkipReason | None = None
    new_entities: int = 0

    def __post_init__(self) -> None:
        if self.outcome is None and self.skip_reason is None:
            raise ValueError("RecordResult requires an outcome or a skip reason")

    @classmethod
    def skipped(cls, reason: SkipReason) -> RecordResult:
        return cls(skip_reason=reason)

    @classmethod
    def from_merge(cls, result: MergeResult, *, new_entities: int = 0) -> RecordResult:
        return cls(
            outcome=result.outcome,
            skip_reason=result.skip_reason,
            new_entities=new_entities,
        )

    @property
    def reached_merge(self) -> bool:
        return self.outcome is not None

    @property
    def accepted(self) -> bool:
        return self.outcome in {MergeOutcome.INSERTED, MergeOutcome.UPDATED}


@dataclass(slots=True)
class MergeCounters:
    """Durable write counts kept by the merge engine."""

    inserted: int = 0
    updated: int = 0
    failed: int = 0


__all__ = [
    "EXCLUSION_REASONS",
    "MERGE_SKIP_REASONS",
    "MergeCounters",
    "MergeOutcome",
    "MergeResult",
    "RecordResult",
    "SkipReason",
]
