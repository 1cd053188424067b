"""Repository implementations backed by SQLAlchemy sessions.

Every write runs inside a SAVEPOINT so a failing row rolls back alone and the
surrounding unit of work stays usable. Changes to rows already in the session
are applied inside that SAVEPOINT too, never before it.
"""

from __future__ import annotations

import logging
from datetime import UTC, datetime
from typing import TYPE_CHECKING

from sqlalchemy import select
from sqlalchemy.dialects.postgresql import insert as postgresql_insert
from sqlalchemy.dialects.sqlite import insert as sqlite_insert
from sqlalchemy.exc import IntegrityError, SQLAlchemyError

from propsync.adapters.sqlalchemy.mappings import (
    canonical_entity_table,
    property_table,
    sync_cursor_table,
)
from propsync.domain.model import CanonicalEntity, PropertyRecord, SyncCursor, new_id
from propsync.domain.ports.persistence import DuplicateEntityError, PersistenceError

if TYPE_CHECKING:
    from collections.abc import Callable, Iterable, Sequence
    from datetime import date

    from sqlalchemy import Column
    from sqlalchemy.orm import Session

log = logging.getLogger(__name__)


def _utcnow() -> datetime:
    return datetime.now(UTC)


def _write(
    session: Session,
    action: Callable[[], None],
    *,
    what: str,
    stale: object | None = None,
) -> None:
    try:
        with session.begin_nested():
            action()
            session.flush()
    except SQLAlchemyError as exc:
        if stale is not None:
            # drop the rejected in-memory values so a later flush cannot resend them
            session.expire(stale)
        raise PersistenceError(f"Failed to write {what}: {exc}") from exc


class SqlAlchemyCursorRepository:
    def __init__(self, session: Session) -> None:
        self.session = session

    def get_or_create(self, source_id: str) -> SyncCursor:
        cursor = self._get(source_id)
        if cursor is not None:
            return cursor
        self._insert_if_absent(source_id)
        cursor = self._get(source_id)
        if cursor is None:
            raise PersistenceError(f"Could not create sync cursor for {source_id}")
        log.info("Created sync cursor for %s", source_id)
        return cursor

    def advance(
        self,
        cursor: SyncCursor,
        *,
        synced_date: date | None,
        total: int,
        at: datetime,
    ) -> None:
        _write(
            self.session,
            lambda: cursor.advance(synced_date=synced_date, total=total, at=at),
            what=f"cursor {cursor.source_id}",
            stale=cursor,
        )

    def list_all(self) -> Sequence[SyncCursor]:
        stmt = select(SyncCursor).order_by(sync_cursor_table.c.source_id)
        return self.session.scalars(stmt).all()

    def _get(self, source_id: str) -> SyncCursor | None:
        stmt = select(SyncCursor).where(sync_cursor_table.c.source_id == source_id).limit(1)
        return self.session.scalars(stmt).first()

    def _insert_if_absent(self, source_id: str) -> None:
        values = {"id": new_id(), "source_id": source_id, "total_records_synced": 0}
        dialect = self.session.get_bind().dialect.name
        if dialect == "sqlite":
            stmt = (
                sqlite_insert(sync_cursor_table)
                .values(**values)
                .on_conflict_do_nothing(index_elements=["source_id"])
            )
        elif dialect == "postgresql":
            stmt = (
                postgresql_insert(sync_cursor_table)
                .values(**values)
                .on_conflict_do_nothing(index_elements=["source_id"])
            )
        else:
            try:
                with self.session.begin_nested():
                    self.session.execute(sync_cursor_table.insert().values(**values))
            except IntegrityError:
                log.debug("Sync cursor for %s was created concurrently", source_id)
            return
        self.session.execute(stmt)


class SqlAlchemyEntityRepository:
    def __init__(self, session: Session) -> None:
        self.session = session

    def add(self, entity: CanonicalEntity) -> None:
        now = _utcnow()
        entity.created_at = entity.created_at or now
        entity.updated_at = entity.updated_at or now
        try:
            with self.session.begin_nested():
                self.session.add(entity)
                self.session.flush()
        except IntegrityError as exc:
            raise DuplicateEntityError(entity.name_key) from exc
        except SQLAlchemyError as exc:
            raise PersistenceError(f"Failed to write entity {entity.name!r}: {exc}") from exc

    def list_all(self) -> Sequence[CanonicalEntity]:
        return self.session.scalars(select(CanonicalEntity)).all()

    def get_by_name_key(self, name_key: str) -> CanonicalEntity | None:
        stmt = (
            select(CanonicalEntity).where(canonical_entity_table.c.name_key == name_key).limit(1)
        )
        return self.session.scalars(stmt).first()

    def add_jurisdiction(self, entity: CanonicalEntity, county: str) -> None:
        def apply() -> None:
            if entity.add_jurisdiction(county):
                entity.updated_at = _utcnow()

        _write(self.session, apply, what=f"entity {entity.name!r}", stale=entity)


class SqlAlchemyPropertyRepository:
    def __init__(self, session: Session) -> None:
        self.session = session

    def find_by_provider_property_id(self, provider_property_id: str) -> PropertyRecord | None:
        return self._find_one(property_table.c.provider_property_id, provider_property_id)

    def find_by_provider_record_id(self, provider_record_id: str) -> PropertyRecord | None:
        return self._find_one(property_table.c.provider_record_id, provider_record_id)

    def find_by_address_key(self, address_key: str) -> PropertyRecord | None:
        return self._find_one(property_table.c.address_key, address_key)

    def add(self, entity: PropertyRecord) -> None:
        self._stamp(entity)
        _write(self.session, lambda: self.session.add(entity), what=f"property {entity.address!r}")

    def add_many(self, records: Iterable[PropertyRecord]) -> None:
        batch = list(records)
        for record in batch:
            self._stamp(record)
        _write(self.session, lambda: self.session.add_all(batch), what=f"{len(batch)} properties")

    def update(self, record: PropertyRecord, incoming: PropertyRecord) -> None:
        def apply() -> None:
            record.apply_update(incoming)
            record.updated_at = _utcnow()

        _write(self.session, apply, what=f"property {record.address!r}", stale=record)

    def count(self) -> int:
        return len(self.session.scalars(select(property_table.c.id)).all())

    def _find_one(self, column: Column[str], value: str) -> PropertyRecord | None:
        stmt = select(PropertyRecord).where(column == value).limit(1)
        return self.session.scalars(stmt).first()

    @staticmethod
    def _stamp(record: PropertyRecord) -> None:
        now = _utcnow()
        record.created_at = record.created_at or now
        record.updated_at = record.updated_at or now


__all__ = [
    "SqlAlchemyCursorRepository",
    "SqlAlchemyEntityRepository",
    "SqlAlchemyPropertyRepository",
]
