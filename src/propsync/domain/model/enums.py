"""Domain enums (pure, dependency-light)."""

from __future__ import annotations

from enum import StrEnum


class EntityType(StrEnum):
    """Discriminator for persisted domain entities."""

    CANONICAL_ENTITY = "canonical_entity"
    PROPERTY = "property"
    SYNC_CURSOR = "sync_cursor"


class PropertyStatus(StrEnum):
    ON_MARKET = "on-market"
    IN_RENOVATION = "in-renovation"
    SOLD = "sold"


class CounterpartyRole(StrEnum):
    """Which side of a transaction a ruleset treats as the flipping entity."""

    BUYER = "buyer"
    SELLER = "seller"


class SortOrder(StrEnum):
    """Upstream ordering of transaction pages by recording date."""

    ASCENDING = "recording_date"
    DESCENDING = "-recording_date"

    @property
    def is_descending(self) -> bool:
        return self is SortOrder.DESCENDING
