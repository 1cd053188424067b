"""Checkpoint arithmetic for per-source sync cursors.

The upstream date filter is non-inclusive, so the stored watermark is the
latest observed recording date minus one day. Re-reading that boundary day on
the next run is harmless: the merge engine only updates strictly newer rows.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import timedelta
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from datetime import date

BOUNDARY_OVERLAP = timedelta(days=1)


@dataclass(frozen=True, slots=True)
class Checkpoint:
    synced_date: date | None
    total_records_synced: int


def compute_checkpoint(
    *,
    previous_date: date | None,
    previous_total: int,
    latest_observed: date | None,
    processed: int,
    advance_date: bool = True,
) -> Checkpoint:
    """Return the cursor values to persist.

    ``total_records_synced`` is always recomputed from the run's starting total,
    so checkpointing repeatedly within one run never double counts.
    """

    synced_date = previous_date
    if advance_date and latest_observed is not None:
        candidate = latest_observed - BOUNDARY_OVERLAP
        if synced_date is None or candidate > synced_date:
            synced_date = candidate
    return Checkpoint(
        synced_date=synced_date,
        total_records_synced=previous_total + max(processed, 0),
    )


__all__ = ["BOUNDARY_OVERLAP", "Checkpoint", "compute_checkpoint"]
