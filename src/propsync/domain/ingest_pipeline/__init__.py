"""Ingest pipeline for market-source synchronization.

The loop itself lives in ``orchestrator``; this package surface exposes the
run-scoped values it threads through each record so callers and tests can
inspect a run without importing the engine.
"""

from __future__ import annotations

from .context import DateRange, RunContext, RunStatistics
from .cursor import Checkpoint, compute_checkpoint
from .outcomes import MergeCounters, MergeOutcome, MergeResult, RecordResult, SkipReason
from .validation import ValidationFailure, validate_transaction

__all__ = [
    "Checkpoint",
    "DateRange",
    "MergeCounters",
    "MergeOutcome",
    "MergeResult",
    "RecordResult",
    "RunContext",
    "RunStatistics",
    "SkipReason",
    "ValidationFailure",
    "compute_checkpoint",
    "validate_transaction",
]
