"""Public domain model surface."""

from __future__ import annotations

from propsync.domain.model.canonical_entity import CanonicalEntity
from propsync.domain.model.entity import Entity, new_id
from propsync.domain.model.enums import CounterpartyRole, EntityType, PropertyStatus, SortOrder
from propsync.domain.model.property import PropertyRecord
from propsync.domain.model.sync_cursor import SyncCursor
from propsync.domain.model.transaction import Coordinates, TransactionRecord

__all__ = [  # noqa: RUF022
    # base
    "Entity",
    "new_id",
    # enums
    "CounterpartyRole",
    "EntityType",
    "PropertyStatus",
    "SortOrder",
    # entities
    "CanonicalEntity",
    "PropertyRecord",
    "SyncCursor",
    # transient
    "Coordinates",
    "TransactionRecord",
]
