"""Per-source resumable watermark."""

from __future__ import annotations

from dataclasses import dataclass
from typing import TYPE_CHECKING, ClassVar

from propsync.domain.model.entity import Entity
from propsync.domain.model.enums import EntityType

if TYPE_CHECKING:
    from datetime import date, datetime


@dataclass(eq=False, kw_only=True)
class SyncCursor(Entity):
    """Watermark for one source.

    ``last_synced_date`` is stored one day behind the latest observed recording
    date, so the next run re-reads the boundary day. It never moves backward.
    """

    ENTITY_TYPE: ClassVar[EntityType] = EntityType.SYNC_CURSOR

    source_id: str
    last_synced_date: date | None = None
    total_records_synced: int = 0
    last_sync_at: datetime | None = None

    def advance(self, *, synced_date: date | None, total: int, at: datetime) -> None:
        """Move the watermark forward; an older or missing date keeps the stored one."""
        if synced_date is not None and (
            self.last_synced_date is None or synced_date > self.last_synced_date
        ):
            self.last_synced_date = synced_date
        self.total_records_synced = max(total, 0)
        self.last_sync_at = at
