from __future__ import annotations

from datetime import date

from propsync.domain.ingest_pipeline.outcomes import MergeOutcome, SkipReason
from propsync.domain.merge import MergeEngine
from propsync.domain.model import Coordinates, PropertyRecord, PropertyStatus
from propsync.domain.normalization import address_key
from tests.helpers.transactions import FakeGeocoder, InMemoryPropertyRepository


def _property(address: str = "123 Main St", **overrides: object) -> PropertyRecord:
    values: dict[str, object] = {
        "address": address,
        "city": "San Diego",
        "state": "CA",
        "zip_code": "92101",
        "address_key": address_key(address, "San Diego", "CA", "92101") or "",
        "recording_date": date(2025, 6, 1),
        "latitude": 32.7,
        "longitude": -117.1,
    }
    values.update(overrides)
    return PropertyRecord(**values)  # type: ignore[arg-type]


def test_stale_recording_date_does_not_update() -> None:
    stored = _property(provider_property_id="P-1", sale_price=500_000.0)
    repository = InMemoryPropertyRepository([stored])
    engine = MergeEngine(repository)

    result = engine.merge(
        _property(
            provider_property_id="P-1",
            recording_date=date(2025, 5, 15),
            sale_price=650_000.0,
        )
    )

    assert result.outcome is MergeOutcome.SKIPPED
    assert result.skip_reason is SkipReason.STALE
    assert stored.recording_date == date(2025, 6, 1)
    assert stored.sale_price == 500_000.0
    assert repository.updates == []


def test_equal_recording_date_is_also_stale() -> None:
    stored = _property(provider_property_id="P-1")
    engine = MergeEngine(InMemoryPropertyRepository([stored]))

    result = engine.merge(_property(provider_property_id="P-1"))

    assert result.skip_reason is SkipReason.STALE


def test_newer_recording_date_updates_in_place() -> None:
    stored = _property(provider_property_id="P-1", sale_price=500_000.0)
    repository = InMemoryPropertyRepository([stored])
    engine = MergeEngine(repository)

    result = engine.merge(
        _property(
            provider_property_id="P-1",
            recording_date=date(2025, 7, 1),
            sale_price=725_000.0,
            status=PropertyStatus.ON_MARKET,
            latitude=None,
            longitude=None,
        )
    )

    assert result.outcome is MergeOutcome.UPDATED
    assert repository.updates == [stored]
    assert stored.sale_price == 725_000.0
    assert stored.status is PropertyStatus.ON_MARKET
    assert (stored.latitude, stored.longitude) == (32.7, -117.1)
    assert engine.counters.updated == 1
    assert len(repository.records) == 1


def test_match_precedence_prefers_provider_ids_over_address() -> None:
    by_address = _property("500 Oak Ave")
    by_record = _property("900 Pine St", provider_record_id="R-9")
    repository = InMemoryPropertyRepository([by_address, by_record])
    engine = MergeEngine(repository)

    result = engine.merge(
        _property("500 Oak Ave", provider_record_id="R-9", recording_date=date(2025, 8, 1))
    )

    assert result.outcome is MergeOutcome.UPDATED
    assert repository.updates == [by_record]
    assert by_address.recording_date == date(2025, 6, 1)


def test_address_key_matches_when_provider_ids_are_missing() -> None:
    stored = _property("123 Main St")
    repository = InMemoryPropertyRepository([stored])
    engine = MergeEngine(repository)

    result = engine.merge(_property("123 MAIN STREET", recording_date=date(2025, 9, 1)))

    assert result.outcome is MergeOutcome.UPDATED
    assert stored.recording_date == date(2025, 9, 1)


def test_inserts_are_batched_until_flush() -> None:
    repository = InMemoryPropertyRepository()
    engine = MergeEngine(repository, batch_size=3)

    outcomes = [
        engine.merge(_property(f"{number} Elm St", provider_property_id=f"P-{number}")).outcome
        for number in range(1, 5)
    ]

    assert outcomes == [MergeOutcome.INSERTED] * 4
    assert repository.batches == [3]
    assert engine.pending_count == 1
    assert engine.counters.inserted == 3

    assert engine.flush() == 1
    assert repository.batches == [3, 1]
    assert engine.counters.inserted == 4
    assert engine.flush() == 0


def test_candidate_matching_a_queued_insert_is_a_duplicate() -> None:
    repository = InMemoryPropertyRepository()
    engine = MergeEngine(repository)

    engine.merge(_property(provider_property_id="P-1", sale_price=400_000.0))
    older = engine.merge(_property(provider_property_id="P-1", recording_date=date(2025, 1, 1)))
    newer = engine.merge(
        _property(provider_property_id="P-1", recording_date=date(2025, 6, 20), sale_price=1.0)
    )
    engine.flush()

    assert older.skip_reason is SkipReason.DUPLICATE
    assert newer.skip_reason is SkipReason.DUPLICATE
    assert len(repository.records) == 1
    assert repository.records[0].recording_date == date(2025, 6, 20)
    assert repository.records[0].sale_price == 1.0


def test_failed_batch_is_retried_record_by_record() -> None:
    repository = InMemoryPropertyRepository(failing_addresses={"2 Elm St"})
    engine = MergeEngine(repository, batch_size=10)

    for number in range(1, 4):
        engine.merge(_property(f"{number} Elm St", provider_property_id=f"P-{number}"))
    inserted = engine.flush()

    assert inserted == 2
    assert [record.address for record in repository.records] == ["1 Elm St", "3 Elm St"]
    assert engine.counters.inserted == 2
    assert engine.counters.failed == 1


def test_failed_update_is_reported_and_leaves_stored_row_unchanged() -> None:
    stored = _property(provider_property_id="P-1", sale_price=500_000.0)
    engine = MergeEngine(InMemoryPropertyRepository([stored], fail_updates=True))

    result = engine.merge(
        _property(provider_property_id="P-1", recording_date=date(2025, 7, 1), sale_price=1.0)
    )

    assert result.skip_reason is SkipReason.MERGE_FAILED
    assert engine.counters.failed == 1
    assert engine.counters.updated == 0
    assert stored.sale_price == 500_000.0
    assert stored.recording_date == date(2025, 6, 1)


def test_geocodes_only_new_rows_missing_coordinates() -> None:
    geocoder = FakeGeocoder(Coordinates(latitude=1.5, longitude=2.5))
    repository = InMemoryPropertyRepository()
    engine = MergeEngine(repository, geocoder=geocoder)

    engine.merge(_property("1 Elm St", latitude=None, longitude=None))
    engine.merge(_property("2 Elm St"))
    engine.flush()

    assert geocoder.calls == ["1 Elm St, San Diego, CA 92101"]
    assert (repository.records[0].latitude, repository.records[0].longitude) == (1.5, 2.5)
    assert repository.records[1].latitude == 32.7
