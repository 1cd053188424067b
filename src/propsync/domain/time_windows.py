"""Utilities for constraining sync operations to recording-date windows."""

from __future__ import annotations

from dataclasses import dataclass
from datetime import UTC, date, datetime
from typing import Protocol


class Clock(Protocol):
    def __call__(self) -> datetime: ...


def utcnow() -> datetime:
    return datetime.now(UTC)


@dataclass(frozen=True, slots=True)
class DateRange:
    """Inclusive recording-date bounds for one sync run."""

    start: date
    end: date

    def __post_init__(self) -> None:
        if self.start > self.end:
            raise ValueError("Date range start must not be after end")

    def contains(self, value: date) -> bool:
        return self.start <= value <= self.end

    def as_dict(self) -> dict[str, str]:
        return {"from": self.start.isoformat(), "to": self.end.isoformat()}


def resolve_sync_window(
    last_synced_date: date | None,
    *,
    default_start: date,
    today: date | None = None,
    clock: Clock = utcnow,
) -> DateRange:
    """Derive the run window from a cursor watermark.

    The window starts at the stored watermark (or ``default_start`` before the
    first checkpoint) and ends at ``today``. A watermark ahead of today yields
    an empty single-day window on the watermark rather than an inverted range.
    """

    end = today or clock().date()
    start = last_synced_date or default_start
    if start > end:
        end = start
    return DateRange(start=start, end=end)


__all__ = ["Clock", "DateRange", "resolve_sync_window", "utcnow"]
