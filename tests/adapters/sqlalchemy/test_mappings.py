from __future__ import annotations

from datetime import UTC, datetime, timedelta, timezone

from sqlalchemy import create_engine, inspect
from sqlalchemy.dialects import sqlite

from propsync.adapters.sqlalchemy.mappings import UTCDateTime, create_all_tables, start_mappers
from propsync.domain.model import PropertyRecord

DIALECT = sqlite.dialect()


def test_utc_datetime_normalises_bound_values() -> None:
    column_type = UTCDateTime()
    pacific = timezone(timedelta(hours=-8))

    bound = column_type.process_bind_param(datetime(2025, 12, 5, 4, 0, tzinfo=pacific), DIALECT)
    naive = column_type.process_bind_param(datetime(2025, 12, 5, 12, 0), DIALECT)

    assert bound == datetime(2025, 12, 5, 12, 0, tzinfo=UTC)
    assert naive == datetime(2025, 12, 5, 12, 0, tzinfo=UTC)
    assert column_type.process_bind_param(None, DIALECT) is None


def test_utc_datetime_marks_loaded_values_as_utc() -> None:
    loaded = UTCDateTime().process_result_value(datetime(2025, 12, 5, 12, 0), DIALECT)

    assert loaded is not None
    assert loaded.tzinfo is UTC


def test_start_mappers_is_idempotent() -> None:
    first = start_mappers()
    second = start_mappers()

    assert first is second
    assert inspect(PropertyRecord).local_table.name == "property"


def test_create_all_tables_builds_schema_without_migrations() -> None:
    engine = create_engine("sqlite+pysqlite:///:memory:", future=True)
    create_all_tables(engine)

    assert {"canonical_entity", "property", "sync_cursor"} <= set(
        inspect(engine).get_table_names()
    )
    engine.dispose()
