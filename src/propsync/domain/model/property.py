"""Persistent property rows produced by the merge engine."""

from __future__ import annotations

from dataclasses import dataclass, fields
from typing import TYPE_CHECKING, ClassVar

from propsync.domain.model.entity import Entity
from propsync.domain.model.enums import EntityType, PropertyStatus

if TYPE_CHECKING:
    from datetime import date, datetime
    from uuid import UUID

# identity and bookkeeping fields that an update never overwrites
_IMMUTABLE_FIELDS = frozenset({"id", "created_at", "updated_at"})


@dataclass(eq=False, kw_only=True)
class PropertyRecord(Entity):
    """One property, updated in place by newer transactions.

    ``entity_id`` is the flipping entity the property is credited to: the
    corporate buyer, or the corporate seller when it exits to a non-corporate
    buyer. ``seller_entity_id`` is the corporate seller of the latest recorded
    transaction, if there was one.
    """

    ENTITY_TYPE: ClassVar[EntityType] = EntityType.PROPERTY

    address: str
    city: str
    state: str
    address_key: str
    zip_code: str | None = None
    county: str | None = None

    latitude: float | None = None
    longitude: float | None = None
    property_type: str | None = None
    bedrooms: int | None = None
    bathrooms: float | None = None
    square_feet: int | None = None
    year_built: int | None = None

    sale_price: float | None = None
    sale_date: date | None = None
    recording_date: date | None = None
    status: PropertyStatus = PropertyStatus.IN_RENOVATION

    entity_id: UUID | None = None
    seller_entity_id: UUID | None = None
    provider_property_id: str | None = None
    provider_record_id: str | None = None
    source_id: str | None = None

    created_at: datetime | None = None
    updated_at: datetime | None = None

    def is_superseded_by(self, incoming: PropertyRecord) -> bool:
        """True when ``incoming`` carries a strictly newer recording date."""
        if incoming.recording_date is None:
            return False
        if self.recording_date is None:
            return True
        return incoming.recording_date > self.recording_date

    def apply_update(self, incoming: PropertyRecord) -> None:
        """Copy the descriptive fields of ``incoming`` onto this row.

        Provider ids already on the row are kept when the incoming record lacks them.
        """
        for item in fields(self):
            name = item.name
            if name in _IMMUTABLE_FIELDS:
                continue
            value = getattr(incoming, name)
            if value is None and name in {"provider_property_id", "provider_record_id"}:
                continue
            setattr(self, name, value)
