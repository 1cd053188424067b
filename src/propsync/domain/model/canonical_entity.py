"""Deduplicated transacting organisations."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import TYPE_CHECKING, ClassVar

from propsync.domain.model.entity import Entity
from propsync.domain.model.enums import EntityType

if TYPE_CHECKING:
    from datetime import datetime


@dataclass(eq=False, kw_only=True)
class CanonicalEntity(Entity):
    """A single organisation, unique by its comparison key.

    ``name`` is the display form; ``name_key`` is what every lookup compares.
    ``jurisdictions`` lists the counties the entity has transacted in, in
    first-seen order and unique case-insensitively.
    """

    ENTITY_TYPE: ClassVar[EntityType] = EntityType.CANONICAL_ENTITY

    name: str
    name_key: str
    contact_name: str | None = None
    contact_email: str | None = None
    phone_number: str | None = None
    jurisdictions: list[str] = field(default_factory=list[str])

    created_at: datetime | None = None
    updated_at: datetime | None = None

    def has_jurisdiction(self, county: str) -> bool:
        wanted = county.strip().lower()
        return any(existing.lower() == wanted for existing in self.jurisdictions)

    def add_jurisdiction(self, county: str | None) -> bool:
        """Record ``county`` if it is new. Returns whether the entity changed."""
        if county is None or not county.strip():
            return False
        if self.has_jurisdiction(county):
            return False
        # rebind rather than append so ORM change tracking sees the new list
        self.jurisdictions = [*self.jurisdictions, county.strip()]
        return True
