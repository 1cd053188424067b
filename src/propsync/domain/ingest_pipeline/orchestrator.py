"""Resumable, page-by-page synchronization of one market source."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from enum import StrEnum
from typing import TYPE_CHECKING, Final

from propsync.domain.classification import TransactionClassifier
from propsync.domain.entity_resolution import EntityResolver, UnresolvableNameError
from propsync.domain.ingest_pipeline.context import RunContext
from propsync.domain.ingest_pipeline.cursor import compute_checkpoint
from propsync.domain.ingest_pipeline.outcomes import RecordResult, SkipReason
from propsync.domain.ingest_pipeline.validation import validate_transaction
from propsync.domain.merge import DEFAULT_INSERT_BATCH_SIZE, MergeEngine
from propsync.domain.model import PropertyRecord, PropertyStatus, SortOrder
from propsync.domain.normalization import (
    address_key,
    normalize_address,
    normalize_county_name,
    normalize_property_type,
    normalize_zip_code,
)
from propsync.domain.ports.persistence import PersistenceError
from propsync.domain.time_windows import resolve_sync_window, utcnow

if TYPE_CHECKING:
    from datetime import date

    from propsync.domain.classification import Classification
    from propsync.domain.entity_resolution import Resolution
    from propsync.domain.model import CanonicalEntity, SyncCursor, TransactionRecord
    from propsync.domain.ports.fetching import TransactionPageFetcher
    from propsync.domain.ports.geocoding import Geocoder
    from propsync.domain.ports.unit_of_work import SyncUnitOfWork
    from propsync.domain.time_windows import Clock

log = logging.getLogger(__name__)

DEFAULT_PAGE_SIZE = 100
DEFAULT_CHECKPOINT_EVERY = 25

_ON_MARKET_LISTING_STATUSES: Final[frozenset[str]] = frozenset(
    {"active", "for sale", "for_sale", "on-market", "on_market", "on market"}
)


class SyncState(StrEnum):
    IDLE = "idle"
    RUNNING = "running"
    COMPLETED = "completed"
    FAILED = "failed"


@dataclass(frozen=True, slots=True, kw_only=True)
class SyncSettings:
    """Per-source run settings.

    With a descending ``sort`` the watermark date only moves once a run
    completes. A run that fails part way keeps what it merged and counts it,
    but leaves the stored date in place, so the next run repeats its window.
    """

    default_start_date: date
    page_size: int = DEFAULT_PAGE_SIZE
    insert_batch_size: int = DEFAULT_INSERT_BATCH_SIZE
    checkpoint_every: int = DEFAULT_CHECKPOINT_EVERY
    sort: SortOrder = SortOrder.ASCENDING
    excluded_addresses: tuple[str, ...] = ()


def build_candidate(
    record: TransactionRecord,
    *,
    classification: Classification,
    entity: CanonicalEntity,
    source_id: str,
    seller: CanonicalEntity | None = None,
) -> PropertyRecord:
    """Turn a classified transaction into the row the merge engine upserts.

    An exit sale keeps its ``SOLD`` status whatever the listing says.
    """

    city = (record.city or "").strip()
    state = (record.state or "").strip().upper()
    status = classification.status or PropertyStatus.IN_RENOVATION
    listing = (record.listing_status or "").strip().lower()
    if status is PropertyStatus.IN_RENOVATION and listing in _ON_MARKET_LISTING_STATUSES:
        status = PropertyStatus.ON_MARKET

    return PropertyRecord(
        address=normalize_address(record.address) or (record.address or "").strip(),
        city=city,
        state=state,
        zip_code=normalize_zip_code(record.zip_code),
        county=normalize_county_name(record.county),
        address_key=address_key(record.address, city, state, record.zip_code) or "",
        latitude=record.latitude,
        longitude=record.longitude,
        property_type=normalize_property_type(record.property_type),
        bedrooms=record.bedrooms,
        bathrooms=record.bathrooms,
        square_feet=record.square_feet,
        year_built=record.year_built,
        sale_price=record.sale_price,
        sale_date=record.sale_date,
        recording_date=record.recording_date,
        status=status,
        entity_id=entity.id,
        seller_entity_id=seller.id if seller is not None else None,
        provider_property_id=record.provider_property_id,
        provider_record_id=record.provider_record_id,
        source_id=source_id,
    )


class SourceSynchronizer:
    """State machine ``IDLE -> RUNNING -> COMPLETED | FAILED`` for one source.

    Records are processed strictly in order: each resolution may add to the
    entity cache the next record consults. Both terminal states flush the
    insert batch and checkpoint before returning or re-raising.
    """

    def __init__(
        self,
        *,
        source_id: str,
        fetcher: TransactionPageFetcher,
        unit_of_work: SyncUnitOfWork,
        settings: SyncSettings,
        classifier: TransactionClassifier | None = None,
        geocoder: Geocoder | None = None,
        clock: Clock = utcnow,
        label: str | None = None,
    ) -> None:
        self.source_id = source_id
        self.label = label or source_id
        self.settings = settings
        self.state = SyncState.IDLE
        self.context: RunContext | None = None
        self.cursor: SyncCursor | None = None
        self._fetcher = fetcher
        self._uow = unit_of_work
        self._classifier = classifier or TransactionClassifier()
        self._geocoder = geocoder
        self._clock = clock
        self._resolver: EntityResolver | None = None
        self._engine: MergeEngine | None = None

    def run(self, *, today: date | None = None) -> RunContext:
        if self.state is not SyncState.IDLE:
            raise RuntimeError(f"Synchronizer for {self.source_id} already ran ({self.state})")

        repositories = self._uow.repositories
        cursor = repositories.cursors.get_or_create(self.source_id)
        window = resolve_sync_window(
            cursor.last_synced_date,
            default_start=self.settings.default_start_date,
            today=today,
            clock=self._clock,
        )
        context = RunContext(
            source_id=self.source_id,
            window=window,
            sort=self.settings.sort,
            previous_date=cursor.last_synced_date,
            previous_total=cursor.total_records_synced,
        )
        self.cursor = cursor
        self.context = context
        self._resolver = EntityResolver(repositories.entities)
        loaded = self._resolver.load()
        self._engine = MergeEngine(
            repositories.properties,
            batch_size=self.settings.insert_batch_size,
            geocoder=self._geocoder,
        )
        log.info(
            "[%s] Starting sync from %s to %s (%d entities cached)",
            self.label,
            window.start,
            window.end,
            loaded,
        )

        self.state = SyncState.RUNNING
        try:
            self._run_pages(context)
        except Exception:
            self.state = SyncState.FAILED
            self._final_checkpoint_after_failure(context)
            raise

        self.state = SyncState.COMPLETED
        self._checkpoint(context)
        log.info(
            "[%s] Sync complete: %d processed, %d inserted, %d updated, %d new entities",
            self.label,
            context.stats.processed,
            context.stats.inserted,
            context.stats.updated,
            context.stats.new_entities,
        )
        return context

    def _run_pages(self, context: RunContext) -> None:
        settings = self.settings
        page_number = 1
        while True:
            page = self._fetcher(
                source_id=self.source_id,
                window=context.window,
                page=page_number,
                page_size=settings.page_size,
                sort=settings.sort,
            )
            context.stats.pages += 1
            context.stats.fetched += page.raw_count
            context.stats.rejected += page.rejected
            log.info(
                "[%s] Page %d: %d records (%d rejected)",
                self.label,
                page_number,
                page.raw_count,
                page.rejected,
            )

            for record in page.records:
                context.record(self._process(record, context))
                if context.checkpoint_due(settings.checkpoint_every):
                    self._checkpoint(context)

            if page.is_last or page.raw_count < settings.page_size:
                return
            page_number += 1

    def _process(self, record: TransactionRecord, context: RunContext) -> RecordResult:
        # exclusions still move the watermark forward
        context.observe_date(record.recording_date)

        failure = validate_transaction(record, excluded_addresses=self.settings.excluded_addresses)
        if failure is not None:
            log.debug("[%s] Skipping record: %s", self.label, failure.detail)
            return RecordResult.skipped(failure.reason)

        classification = self._classifier.classify(record)
        if classification.skip_reason is not None:
            return RecordResult.skipped(classification.skip_reason)

        if self._resolver is None or self._engine is None:
            raise RuntimeError("Synchronizer used before run() initialised it")

        county = normalize_county_name(record.county)
        seller: Resolution | None = None
        try:
            credited = self._resolver.resolve(classification.party_name or "", county)
            if classification.seller_name:
                seller = self._resolver.resolve(classification.seller_name, county)
        except UnresolvableNameError:
            return RecordResult.skipped(SkipReason.MISSING_PARTY)
        except PersistenceError as exc:
            log.warning("[%s] Could not store entity for %s: %s", self.label, record.address, exc)
            return RecordResult.skipped(SkipReason.MERGE_FAILED)

        candidate = build_candidate(
            record,
            classification=classification,
            entity=credited.entity,
            seller=seller.entity if seller is not None else None,
            source_id=self.source_id,
        )
        merged = self._engine.merge(candidate)
        created = sum(1 for item in (credited, seller) if item is not None and item.created)
        return RecordResult.from_merge(merged, new_entities=created)

    def _checkpoint(self, context: RunContext) -> None:
        if self._engine is None or self.cursor is None:
            return
        self._engine.flush()
        context.apply_merge_counters(self._engine.counters)

        # a descending run only knows its upper bound is safe once it finishes
        advance = not context.sort.is_descending or self.state is SyncState.COMPLETED
        checkpoint = compute_checkpoint(
            previous_date=context.previous_date,
            previous_total=context.previous_total,
            latest_observed=context.latest_observed,
            processed=context.stats.processed,
            advance_date=advance,
        )
        self._uow.repositories.cursors.advance(
            self.cursor,
            synced_date=checkpoint.synced_date,
            total=checkpoint.total_records_synced,
            at=self._clock(),
        )
        self._uow.commit()
        context.mark_checkpointed()
        log.info(
            "[%s] Checkpoint: last_synced_date=%s total_records_synced=%d",
            self.label,
            self.cursor.last_synced_date,
            self.cursor.total_records_synced,
        )

    def _final_checkpoint_after_failure(self, context: RunContext) -> None:
        try:
            self._checkpoint(context)
        except Exception:
            # the original failure is re-raised by the caller
            log.exception("[%s] Checkpoint after failure did not persist", self.label)
            self._uow.rollback()


__all__ = [
    "DEFAULT_CHECKPOINT_EVERY",
    "DEFAULT_PAGE_SIZE",
    "SourceSynchronizer",
    "SyncSettings",
    "SyncState",
    "build_candidate",
]
