"""Reusable fakes and builders for sync-engine tests."""

from __future__ import annotations

from dataclasses import replace
from datetime import date, timedelta
from typing import TYPE_CHECKING, Literal

from propsync.domain.model import Coordinates, SyncCursor, TransactionRecord
from propsync.domain.ports.fetching import SourceFetchError, TransactionPage
from propsync.domain.ports.persistence import DuplicateEntityError, PersistenceError
from propsync.domain.ports.unit_of_work import SyncRepositories

if TYPE_CHECKING:
    from collections.abc import Iterable, Sequence
    from datetime import datetime
    from types import TracebackType

    from propsync.domain.model import CanonicalEntity, PropertyRecord, SortOrder
    from propsync.domain.time_windows import DateRange


def make_transaction(**overrides: object) -> TransactionRecord:
    """A transaction the default ruleset accepts: corporate buyer, valid address."""

    record = TransactionRecord(
        provider_property_id="P-1",
        provider_record_id="R-1",
        address="123 Main Street",
        city="San Diego",
        state="CA",
        zip_code="92101",
        county="San Diego County, California",
        buyer_name="Bright Horizon Capital LLC",
        seller_name="Jane Homeowner",
        buyer_corporate=True,
        sale_price=750_000.0,
        sale_date=date(2025, 12, 1),
        recording_date=date(2025, 12, 5),
        latitude=32.7157,
        longitude=-117.1611,
        property_type="Single Family Residence",
    )
    return replace(record, **overrides)  # type: ignore[arg-type]


def make_transactions(count: int, *, start: date, **overrides: object) -> list[TransactionRecord]:
    """``count`` distinct accepted transactions, one recording day apart."""

    return [
        make_transaction(
            provider_property_id=f"P-{index}",
            provider_record_id=f"R-{index}",
            address=f"{100 + index} Main Street",
            recording_date=start + timedelta(days=index),
            **overrides,
        )
        for index in range(count)
    ]


class FakeTransactionSource:
    """In-memory provider honouring the window, sort order and page size."""

    def __init__(
        self,
        records: Iterable[TransactionRecord] = (),
        *,
        fail_on_page: int | None = None,
        rejected_per_page: int = 0,
    ) -> None:
        self.records = list(records)
        self.fail_on_page = fail_on_page
        self.rejected_per_page = rejected_per_page
        self.calls: list[dict[str, object]] = []

    def __call__(
        self,
        *,
        source_id: str,
        window: DateRange,
        page: int,
        page_size: int,
        sort: SortOrder,
    ) -> TransactionPage:
        self.calls.append(
            {
                "source_id": source_id,
                "window": window,
                "page": page,
                "page_size": page_size,
                "sort": sort,
            }
        )
        if self.fail_on_page is not None and page == self.fail_on_page:
            raise SourceFetchError(
                f"upstream returned 503 on page {page}",
                source_id=source_id,
                page=page,
                status_code=503,
            )

        matching = [
            record
            for record in self.records
            if record.recording_date is None or window.contains(record.recording_date)
        ]
        matching.sort(key=lambda r: r.recording_date or date.min, reverse=sort.is_descending)
        offset = (page - 1) * page_size
        chunk = matching[offset : offset + page_size]
        return TransactionPage(
            page=page,
            records=chunk,
            raw_count=len(chunk) + self.rejected_per_page if chunk else 0,
            rejected=self.rejected_per_page if chunk else 0,
            is_last=offset + page_size >= len(matching),
        )


class InMemoryCursorRepository:
    def __init__(self, cursors: Iterable[SyncCursor] = ()) -> None:
        self.cursors: dict[str, SyncCursor] = {cursor.source_id: cursor for cursor in cursors}
        self.saved: list[tuple[date | None, int]] = []

    def get_or_create(self, source_id: str) -> SyncCursor:
        cursor = self.cursors.get(source_id)
        if cursor is None:
            cursor = SyncCursor(source_id=source_id)
            self.cursors[source_id] = cursor
        return cursor

    def advance(
        self,
        cursor: SyncCursor,
        *,
        synced_date: date | None,
        total: int,
        at: datetime,
    ) -> None:
        cursor.advance(synced_date=synced_date, total=total, at=at)
        self.cursors[cursor.source_id] = cursor
        self.saved.append((cursor.last_synced_date, cursor.total_records_synced))

    def list_all(self) -> Sequence[SyncCursor]:
        return sorted(self.cursors.values(), key=lambda cursor: cursor.source_id)


class InMemoryEntityRepository:
    """Entity store; ``hidden`` entities collide on insert but are not bulk-listed."""

    def __init__(
        self,
        entities: Iterable[CanonicalEntity] = (),
        *,
        hidden: Iterable[CanonicalEntity] = (),
    ) -> None:
        self.entities: dict[str, CanonicalEntity] = {e.name_key: e for e in entities}
        self._hidden: dict[str, CanonicalEntity] = {e.name_key: e for e in hidden}
        self.saved: list[CanonicalEntity] = []
        self.add_calls = 0

    def add(self, entity: CanonicalEntity) -> None:
        self.add_calls += 1
        if entity.name_key in self.entities or entity.name_key in self._hidden:
            raise DuplicateEntityError(entity.name_key)
        self.entities[entity.name_key] = entity

    def list_all(self) -> Sequence[CanonicalEntity]:
        return list(self.entities.values())

    def get_by_name_key(self, name_key: str) -> CanonicalEntity | None:
        return self.entities.get(name_key) or self._hidden.get(name_key)

    def add_jurisdiction(self, entity: CanonicalEntity, county: str) -> None:
        if entity.add_jurisdiction(county):
            self.saved.append(entity)


class InMemoryPropertyRepository:
    """Property store that can be told to reject specific addresses or whole batches."""

    def __init__(
        self,
        records: Iterable[PropertyRecord] = (),
        *,
        failing_addresses: Iterable[str] = (),
        fail_batches: bool = False,
        fail_updates: bool = False,
    ) -> None:
        self.records: list[PropertyRecord] = list(records)
        self.failing_addresses = set(failing_addresses)
        self.fail_batches = fail_batches
        self.fail_updates = fail_updates
        self.batches: list[int] = []
        self.updates: list[PropertyRecord] = []

    def _find(
        self,
        attribute: Literal["provider_property_id", "provider_record_id", "address_key"],
        value: str,
    ) -> PropertyRecord | None:
        return next((r for r in self.records if getattr(r, attribute) == value), None)

    def find_by_provider_property_id(self, provider_property_id: str) -> PropertyRecord | None:
        return self._find("provider_property_id", provider_property_id)

    def find_by_provider_record_id(self, provider_record_id: str) -> PropertyRecord | None:
        return self._find("provider_record_id", provider_record_id)

    def find_by_address_key(self, address_key: str) -> PropertyRecord | None:
        return self._find("address_key", address_key)

    def add(self, entity: PropertyRecord) -> None:
        if entity.address in self.failing_addresses:
            raise PersistenceError(f"constraint violation for {entity.address}")
        self.records.append(entity)

    def add_many(self, records: Iterable[PropertyRecord]) -> None:
        batch = list(records)
        if self.fail_batches or any(r.address in self.failing_addresses for r in batch):
            raise PersistenceError("batch insert failed")
        self.batches.append(len(batch))
        self.records.extend(batch)

    def update(self, record: PropertyRecord, incoming: PropertyRecord) -> None:
        if self.fail_updates:
            raise PersistenceError(f"update failed for {record.address}")
        record.apply_update(incoming)
        self.updates.append(record)


class FakeUnitOfWork:
    def __init__(
        self,
        *,
        cursors: InMemoryCursorRepository | None = None,
        entities: InMemoryEntityRepository | None = None,
        properties: InMemoryPropertyRepository | None = None,
    ) -> None:
        self._repositories = SyncRepositories(
            cursors=cursors or InMemoryCursorRepository(),
            entities=entities or InMemoryEntityRepository(),
            properties=properties or InMemoryPropertyRepository(),
        )
        self.commits = 0
        self.rollbacks = 0

    @property
    def repositories(self) -> SyncRepositories:
        return self._repositories

    @property
    def cursors(self) -> InMemoryCursorRepository:
        return self._repositories.cursors  # type: ignore[return-value]

    @property
    def entities(self) -> InMemoryEntityRepository:
        return self._repositories.entities  # type: ignore[return-value]

    @property
    def properties(self) -> InMemoryPropertyRepository:
        return self._repositories.properties  # type: ignore[return-value]

    def __enter__(self) -> FakeUnitOfWork:
        return self

    def __exit__(
        self,
        exc_type: type[BaseException] | None,
        exc_value: BaseException | None,
        traceback: TracebackType | None,
    ) -> bool:
        if exc_type is not None:
            self.rollback()
        return False

    def commit(self) -> None:
        self.commits += 1

    def rollback(self) -> None:
        self.rollbacks += 1


class FakeGeocoder:
    def __init__(self, coordinates: Coordinates | None = None) -> None:
        self.coordinates = coordinates or Coordinates(latitude=39.7392, longitude=-104.9903)
        self.calls: list[str] = []

    def __call__(
        self,
        *,
        address: str,
        city: str,
        state: str,
        zip_code: str | None = None,
    ) -> Coordinates | None:
        self.calls.append(f"{address}, {city}, {state} {zip_code or ''}".strip())
        return self.coordinates
