from __future__ import annotations

from datetime import UTC, date, datetime
from typing import TYPE_CHECKING

import pytest

from propsync.domain.data_integration import SourceSyncError, SyncSourceResult, sync_source
from propsync.domain.ingest_pipeline.orchestrator import SyncSettings
from propsync.domain.ingest_pipeline.outcomes import SkipReason
from propsync.domain.model import PropertyStatus
from tests.helpers.transactions import (
    FakeGeocoder,
    FakeTransactionSource,
    make_transaction,
    make_transactions,
)

if TYPE_CHECKING:
    from collections.abc import Callable

    from propsync.adapters.sqlalchemy.unit_of_work import SqlAlchemySyncUnitOfWork

SOURCE = "San Diego-Chula Vista-Carlsbad, CA"
TODAY = date(2025, 12, 31)
SETTINGS = SyncSettings(default_start_date=date(2025, 12, 3), page_size=2, checkpoint_every=1)

type UnitOfWorkFactory = Callable[[], SqlAlchemySyncUnitOfWork]


def _run(
    factory: UnitOfWorkFactory,
    fetcher: FakeTransactionSource,
    **kwargs: object,
) -> SyncSourceResult:
    return sync_source(
        source_id=SOURCE,
        fetcher=fetcher,
        unit_of_work_factory=factory,
        settings=SETTINGS,
        today=TODAY,
        clock=lambda: datetime(2026, 1, 1, tzinfo=UTC),
        **kwargs,  # type: ignore[arg-type]
    )


def test_sync_persists_properties_entities_and_cursor(
    sqlite_unit_of_work: UnitOfWorkFactory,
) -> None:
    fetcher = FakeTransactionSource(make_transactions(5, start=date(2025, 12, 5)))

    result = _run(sqlite_unit_of_work, fetcher)

    assert result.succeeded
    assert result.statistics.inserted == 5
    with sqlite_unit_of_work() as uow:
        [entity] = uow.repositories.entities.list_all()
        assert entity.name == "Bright Horizon Capital LLC"
        stored = uow.repositories.properties.find_by_provider_property_id("P-3")
        assert stored is not None
        assert stored.entity_id == entity.id
        assert stored.status is PropertyStatus.IN_RENOVATION
        [cursor] = uow.repositories.cursors.list_all()
        assert cursor.last_synced_date == date(2025, 12, 8)
        assert cursor.total_records_synced == 5
        assert cursor.last_sync_at == datetime(2026, 1, 1, tzinfo=UTC)


def test_rerun_is_idempotent_against_the_database(
    sqlite_unit_of_work: UnitOfWorkFactory,
) -> None:
    fetcher = FakeTransactionSource(make_transactions(5, start=date(2025, 12, 5)))
    _run(sqlite_unit_of_work, fetcher)

    second = _run(sqlite_unit_of_work, fetcher)

    assert second.succeeded
    assert second.statistics.inserted == 0
    assert second.statistics.updated == 0
    assert second.statistics.skip_reasons[SkipReason.STALE] == 2
    with sqlite_unit_of_work() as uow:
        assert uow.repositories.properties.count() == 5  # type: ignore[attr-defined]
        assert len(uow.repositories.entities.list_all()) == 1


def test_newer_transaction_updates_the_stored_property(
    sqlite_unit_of_work: UnitOfWorkFactory,
) -> None:
    _run(sqlite_unit_of_work, FakeTransactionSource([make_transaction()]))
    geocoder = FakeGeocoder()
    newer = make_transaction(
        recording_date=date(2025, 12, 20),
        sale_date=date(2025, 12, 18),
        sale_price=910_000,
        latitude=None,
        longitude=None,
    )

    result = _run(sqlite_unit_of_work, FakeTransactionSource([newer]), geocoder=geocoder)

    assert result.statistics.updated == 1
    assert geocoder.calls == []
    with sqlite_unit_of_work() as uow:
        stored = uow.repositories.properties.find_by_provider_record_id("R-1")
        assert stored is not None
        assert stored.sale_price == 910_000
        assert stored.recording_date == date(2025, 12, 20)
        assert stored.latitude is not None


def test_failed_fetch_keeps_checkpointed_progress(
    sqlite_unit_of_work: UnitOfWorkFactory,
) -> None:
    fetcher = FakeTransactionSource(make_transactions(5, start=date(2025, 12, 5)), fail_on_page=3)

    with pytest.raises(SourceSyncError) as excinfo:
        _run(sqlite_unit_of_work, fetcher)

    assert excinfo.value.result.total_records_synced == 4
    with sqlite_unit_of_work() as uow:
        assert uow.repositories.properties.count() == 4  # type: ignore[attr-defined]
        [cursor] = uow.repositories.cursors.list_all()
        assert cursor.last_synced_date == date(2025, 12, 7)
        assert cursor.total_records_synced == 4


def test_conflicting_update_is_dropped_and_the_run_continues(
    sqlite_unit_of_work: UnitOfWorkFactory,
) -> None:
    _run(sqlite_unit_of_work, FakeTransactionSource(make_transactions(2, start=date(2025, 12, 5))))
    # matches P-1 but reuses R-0, which another row already holds
    conflicting = make_transaction(
        provider_property_id="P-1",
        provider_record_id="R-0",
        address="101 Main Street",
        recording_date=date(2025, 12, 10),
        sale_price=910_000,
    )
    later = [
        make_transaction(
            provider_property_id=f"P-{index}",
            provider_record_id=f"R-{index}",
            address=f"{200 + index} Oak Avenue",
            recording_date=date(2025, 12, index),
        )
        for index in (12, 13)
    ]

    result = _run(sqlite_unit_of_work, FakeTransactionSource([conflicting, *later]))

    assert result.succeeded
    assert result.statistics.skip_reasons[SkipReason.MERGE_FAILED] == 1
    assert result.statistics.inserted == 2
    assert result.statistics.updated == 0
    with sqlite_unit_of_work() as uow:
        assert uow.repositories.properties.count() == 4  # type: ignore[attr-defined]
        stored = uow.repositories.properties.find_by_provider_property_id("P-1")
        assert stored is not None
        assert stored.provider_record_id == "R-1"
        assert stored.sale_price == 750_000
        [cursor] = uow.repositories.cursors.list_all()
        assert cursor.last_synced_date == date(2025, 12, 12)
        assert cursor.total_records_synced == 5


def test_exit_sale_marks_the_stored_property_sold(
    sqlite_unit_of_work: UnitOfWorkFactory,
) -> None:
    _run(sqlite_unit_of_work, FakeTransactionSource([make_transaction()]))
    exit_sale = make_transaction(
        provider_record_id="R-2",
        buyer_corporate=False,
        buyer_name="Jane Homebuyer",
        seller_corporate=True,
        seller_name="Bright Horizon Capital LLC",
        recording_date=date(2025, 12, 22),
    )

    result = _run(sqlite_unit_of_work, FakeTransactionSource([exit_sale]))

    assert result.statistics.updated == 1
    with sqlite_unit_of_work() as uow:
        [entity] = uow.repositories.entities.list_all()
        stored = uow.repositories.properties.find_by_provider_property_id("P-1")
        assert stored is not None
        assert stored.status is PropertyStatus.SOLD
        assert stored.entity_id == entity.id
        assert stored.seller_entity_id == entity.id
