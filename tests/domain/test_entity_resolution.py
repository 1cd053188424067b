from __future__ import annotations

import pytest

from propsync.domain.entity_resolution import EntityResolver, UnresolvableNameError
from propsync.domain.model import CanonicalEntity
from tests.helpers.transactions import InMemoryEntityRepository


def _entity(name: str, key: str, *jurisdictions: str) -> CanonicalEntity:
    return CanonicalEntity(name=name, name_key=key, jurisdictions=list(jurisdictions))


def test_resolve_creates_entity_once_per_canonical_key() -> None:
    repository = InMemoryEntityRepository()
    resolver = EntityResolver(repository)
    resolver.load()

    first = resolver.resolve("GRANDFIELD PROPERTIES, LLC.", "San Diego")
    second = resolver.resolve("Grandfield Properties LLC", "San Diego")

    assert first.created
    assert not second.created
    assert second.entity is first.entity
    assert first.entity.name == "Grandfield Properties LLC"
    assert first.entity.name_key == "grandfield properties llc"
    assert list(repository.entities) == ["grandfield properties llc"]
    assert resolver.created == 1
    assert len(resolver) == 1
    assert "grandfield properties llc" in resolver


def test_load_primes_cache_from_repository() -> None:
    existing = _entity("Bright Horizon Capital LLC", "bright horizon capital llc", "Denver")
    repository = InMemoryEntityRepository([existing])
    resolver = EntityResolver(repository)

    assert resolver.load() == 1
    resolution = resolver.resolve("Bright Horizon Capital, LLC", "Denver")

    assert resolution.entity is existing
    assert not resolution.created
    assert repository.add_calls == 0
    assert repository.saved == []


def test_cache_hit_appends_new_jurisdiction_and_saves() -> None:
    existing = _entity("Acme Holdings LLC", "acme holdings llc", "San Diego")
    repository = InMemoryEntityRepository([existing])
    resolver = EntityResolver(repository)
    resolver.load()

    resolver.resolve("Acme Holdings LLC", "Los Angeles")
    resolver.resolve("Acme Holdings LLC", "los angeles")

    assert existing.jurisdictions == ["San Diego", "Los Angeles"]
    assert repository.saved == [existing]


def test_new_entity_starts_with_its_first_jurisdiction() -> None:
    resolver = EntityResolver(InMemoryEntityRepository())

    resolution = resolver.resolve("Westside Ventures", "Denver")
    without = resolver.resolve("Eastside Ventures")

    assert resolution.entity.jurisdictions == ["Denver"]
    assert without.entity.jurisdictions == []


def test_duplicate_on_insert_reuses_the_stored_entity() -> None:
    concurrent = _entity("Acme Holdings LLC", "acme holdings llc", "Denver")
    repository = InMemoryEntityRepository(hidden=[concurrent])
    resolver = EntityResolver(repository)
    resolver.load()

    resolution = resolver.resolve("ACME HOLDINGS LLC", "San Diego")

    assert resolution.entity is concurrent
    assert not resolution.created
    assert concurrent.jurisdictions == ["Denver", "San Diego"]
    assert resolver.created == 0

    again = resolver.resolve("Acme Holdings LLC")
    assert again.entity is concurrent
    assert repository.add_calls == 1


@pytest.mark.parametrize("raw", ["", "   ", ",.;"])
def test_blank_names_cannot_be_resolved(raw: str) -> None:
    resolver = EntityResolver(InMemoryEntityRepository())

    with pytest.raises(UnresolvableNameError):
        resolver.resolve(raw)
