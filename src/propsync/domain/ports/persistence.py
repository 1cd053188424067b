"""Ports for persisting domain aggregates."""

from __future__ import annotations

from typing import TYPE_CHECKING, Protocol, runtime_checkable

from propsync.domain.model import CanonicalEntity, PropertyRecord, SyncCursor

if TYPE_CHECKING:
    from collections.abc import Iterable, Sequence
    from datetime import date, datetime


class PersistenceError(RuntimeError):
    """Raised by repositories when rows cannot be written."""


class DuplicateEntityError(PersistenceError):
    """Raised when an entity with the same comparison key already exists."""

    def __init__(self, name_key: str) -> None:
        super().__init__(f"Entity already exists for key {name_key!r}")
        self.name_key = name_key


@runtime_checkable
class Repository[TEntity](Protocol):
    """Minimal repository contract for a persistent aggregate store."""

    def add(self, entity: TEntity) -> None: ...


@runtime_checkable
class SyncCursorRepository(Protocol):
    """Persistence contract for per-source watermarks."""

    def get_or_create(self, source_id: str) -> SyncCursor:
        """Return the cursor for ``source_id``, inserting an empty one if absent."""
        ...

    def advance(
        self,
        cursor: SyncCursor,
        *,
        synced_date: date | None,
        total: int,
        at: datetime,
    ) -> None:
        """Apply ``SyncCursor.advance`` and persist the result."""
        ...

    def list_all(self) -> Sequence[SyncCursor]: ...


@runtime_checkable
class EntityRepository(Repository[CanonicalEntity], Protocol):
    """Persistence contract for canonical entities.

    ``add`` raises ``DuplicateEntityError`` when the key is already taken.
    Mutations of stored entities go through the repository so they are written
    or dropped as a unit.
    """

    def list_all(self) -> Sequence[CanonicalEntity]: ...

    def get_by_name_key(self, name_key: str) -> CanonicalEntity | None: ...

    def add_jurisdiction(self, entity: CanonicalEntity, county: str) -> None: ...


@runtime_checkable
class PropertyRepository(Repository[PropertyRecord], Protocol):
    """Persistence contract for property rows.

    ``add``/``add_many``/``update`` raise ``PersistenceError`` on write failure;
    a failed ``add_many`` writes nothing.
    """

    def find_by_provider_property_id(self, provider_property_id: str) -> PropertyRecord | None: ...

    def find_by_provider_record_id(self, provider_record_id: str) -> PropertyRecord | None: ...

    def find_by_address_key(self, address_key: str) -> PropertyRecord | None: ...

    def add_many(self, records: Iterable[PropertyRecord]) -> None: ...

    def update(self, record: PropertyRecord, incoming: PropertyRecord) -> None:
        """Apply ``incoming`` onto the stored ``record``; a failure leaves it unchanged."""
        ...


__all__ = [
    "DuplicateEntityError",
    "EntityRepository",
    "PersistenceError",
    "PropertyRepository",
    "Repository",
    "SyncCursorRepository",
]
