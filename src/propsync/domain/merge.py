"""Upsert of candidate property rows into the property store."""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

from propsync.domain.ingest_pipeline.outcomes import (
    MergeCounters,
    MergeOutcome,
    MergeResult,
    SkipReason,
)
from propsync.domain.ports.persistence import PersistenceError

if TYPE_CHECKING:
    from collections.abc import Callable, Iterable

    from propsync.domain.model import PropertyRecord
    from propsync.domain.ports.geocoding import Geocoder
    from propsync.domain.ports.persistence import PropertyRepository

log = logging.getLogger(__name__)

DEFAULT_INSERT_BATCH_SIZE = 50


def _match_keys(record: PropertyRecord) -> Iterable[tuple[str, str]]:
    # precedence: provider property id, provider record id, address key
    if record.provider_property_id:
        yield ("provider_property_id", record.provider_property_id)
    if record.provider_record_id:
        yield ("provider_record_id", record.provider_record_id)
    if record.address_key:
        yield ("address_key", record.address_key)


def _carry_coordinates(target: PropertyRecord, candidate: PropertyRecord) -> None:
    if candidate.latitude is None or candidate.longitude is None:
        candidate.latitude = target.latitude
        candidate.longitude = target.longitude


class MergeEngine:
    """Match, update or queue candidates; inserts are written in batches.

    ``merge`` reports ``INSERTED`` when a candidate is queued. Durable insert,
    update and failure counts live on ``counters`` and are final after ``flush``.
    """

    def __init__(
        self,
        repository: PropertyRepository,
        *,
        batch_size: int = DEFAULT_INSERT_BATCH_SIZE,
        geocoder: Geocoder | None = None,
    ) -> None:
        if batch_size < 1:
            raise ValueError("batch_size must be positive")
        self._repository = repository
        self._batch_size = batch_size
        self._geocoder = geocoder
        self._pending: list[PropertyRecord] = []
        self.counters = MergeCounters()

    @property
    def pending_count(self) -> int:
        return len(self._pending)

    def merge(self, candidate: PropertyRecord) -> MergeResult:
        queued = self._find_pending(candidate)
        if queued is not None:
            if queued.is_superseded_by(candidate):
                _carry_coordinates(queued, candidate)
                queued.apply_update(candidate)
            return MergeResult.skipped(SkipReason.DUPLICATE)

        existing = self._find_existing(candidate)
        if existing is not None:
            return self._update(existing, candidate)

        self._geocode(candidate)
        self._pending.append(candidate)
        if len(self._pending) >= self._batch_size:
            self.flush()
        return MergeResult(outcome=MergeOutcome.INSERTED)

    def flush(self) -> int:
        """Write the queued inserts; returns how many became durable."""
        if not self._pending:
            return 0
        batch, self._pending = self._pending, []
        try:
            self._repository.add_many(batch)
            inserted = len(batch)
        except PersistenceError:
            log.warning("Batch insert of %d properties failed; retrying one at a time", len(batch))
            inserted = sum(1 for record in batch if self._insert_single(record))
        self.counters.inserted += inserted
        return inserted

    def _insert_single(self, record: PropertyRecord) -> bool:
        try:
            self._repository.add(record)
        except PersistenceError as exc:
            self.counters.failed += 1
            log.warning("Dropping property %s, %s: %s", record.address, record.city, exc)
            return False
        return True

    def _update(self, existing: PropertyRecord, candidate: PropertyRecord) -> MergeResult:
        if not existing.is_superseded_by(candidate):
            return MergeResult.skipped(SkipReason.STALE)
        _carry_coordinates(existing, candidate)
        try:
            self._repository.update(existing, candidate)
        except PersistenceError as exc:
            self.counters.failed += 1
            log.warning("Dropping update of property %s: %s", existing.address, exc)
            return MergeResult.skipped(SkipReason.MERGE_FAILED)
        self.counters.updated += 1
        return MergeResult(outcome=MergeOutcome.UPDATED)

    def _find_pending(self, candidate: PropertyRecord) -> PropertyRecord | None:
        for field_name, value in _match_keys(candidate):
            for queued in self._pending:
                if getattr(queued, field_name) == value:
                    return queued
        return None

    def _find_existing(self, candidate: PropertyRecord) -> PropertyRecord | None:
        lookups: dict[str, Callable[[str], PropertyRecord | None]] = {
            "provider_property_id": self._repository.find_by_provider_property_id,
            "provider_record_id": self._repository.find_by_provider_record_id,
            "address_key": self._repository.find_by_address_key,
        }
        for field_name, value in _match_keys(candidate):
            found = lookups[field_name](value)
            if found is not None:
                return found
        return None

    def _geocode(self, candidate: PropertyRecord) -> None:
        if self._geocoder is None:
            return
        if candidate.latitude is not None and candidate.longitude is not None:
            return
        coordinates = self._geocoder(
            address=candidate.address,
            city=candidate.city,
            state=candidate.state,
            zip_code=candidate.zip_code,
        )
        if coordinates is None:
            log.debug("No coordinates for %s, %s", candidate.address, candidate.city)
            return
        candidate.latitude = coordinates.latitude
        candidate.longitude = coordinates.longitude


__all__ = ["DEFAULT_INSERT_BATCH_SIZE", "MergeEngine"]
