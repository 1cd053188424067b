"""Get-or-create resolution of party names to canonical entities."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import TYPE_CHECKING

from propsync.domain.model import CanonicalEntity
from propsync.domain.normalization import canonicalize_name, title_case_for_storage
from propsync.domain.ports.persistence import DuplicateEntityError

if TYPE_CHECKING:
    from collections.abc import MutableMapping

    from propsync.domain.ports.persistence import EntityRepository

log = logging.getLogger(__name__)


class UnresolvableNameError(ValueError):
    """Raised when a party name normalizes to nothing."""


@dataclass(frozen=True, slots=True)
class Resolution:
    entity: CanonicalEntity
    created: bool


class EntityResolver:
    """In-memory cache of canonical entities, keyed by comparison key.

    The cache is bulk-loaded once per run. An entity created by another writer
    after ``load`` stays invisible until it collides on insert, at which point
    the duplicate error triggers a re-read instead of a failure.
    """

    def __init__(
        self,
        repository: EntityRepository,
        cache: MutableMapping[str, CanonicalEntity] | None = None,
    ) -> None:
        self._repository = repository
        self._cache: MutableMapping[str, CanonicalEntity] = cache if cache is not None else {}
        self.created = 0

    def __len__(self) -> int:
        return len(self._cache)

    def __contains__(self, raw_name: object) -> bool:
        key = canonicalize_name(raw_name)
        return key is not None and key in self._cache

    def load(self) -> int:
        for entity in self._repository.list_all():
            self._cache[entity.name_key] = entity
        log.debug("Loaded %d canonical entities into the resolver cache", len(self._cache))
        return len(self._cache)

    def resolve(self, raw_name: str, jurisdiction: str | None = None) -> Resolution:
        # the display form is keyed too so "Acme, LLC." and "ACME LLC" collapse
        display_name = title_case_for_storage(raw_name)
        key = canonicalize_name(display_name)
        if display_name is None or key is None:
            raise UnresolvableNameError(f"Cannot resolve empty entity name {raw_name!r}")

        cached = self._cache.get(key)
        if cached is not None:
            self._add_jurisdiction(cached, jurisdiction)
            return Resolution(entity=cached, created=False)

        entity = CanonicalEntity(
            name=display_name,
            name_key=key,
            jurisdictions=[jurisdiction.strip()] if jurisdiction and jurisdiction.strip() else [],
        )
        try:
            self._repository.add(entity)
        except DuplicateEntityError:
            existing = self._repository.get_by_name_key(key)
            if existing is None:
                raise
            log.info("Entity %r was created concurrently; using the stored row", display_name)
            self._cache[key] = existing
            self._add_jurisdiction(existing, jurisdiction)
            return Resolution(entity=existing, created=False)

        self._cache[key] = entity
        self.created += 1
        log.debug("Created canonical entity %r", display_name)
        return Resolution(entity=entity, created=True)

    def _add_jurisdiction(self, entity: CanonicalEntity, jurisdiction: str | None) -> None:
        if jurisdiction is None or not jurisdiction.strip():
            return
        if not entity.has_jurisdiction(jurisdiction):
            self._repository.add_jurisdiction(entity, jurisdiction)


__all__ = ["EntityResolver", "Resolution", "UnresolvableNameError"]
