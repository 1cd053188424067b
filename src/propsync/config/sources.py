"""Registry of the metropolitan market sources that are synchronized."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import TYPE_CHECKING

from .errors import UnknownSourceError

if TYPE_CHECKING:
    from collections.abc import Iterable


@dataclass(frozen=True, slots=True)
class SourceConfig:
    """One upstream market (an MSA) and its sync-specific quirks."""

    source_id: str
    code: str
    excluded_addresses: tuple[str, ...] = field(default_factory=tuple)


MARKET_SOURCES: tuple[SourceConfig, ...] = (
    SourceConfig(source_id="San Diego-Chula Vista-Carlsbad, CA", code="SD"),
    SourceConfig(
        source_id="Los Angeles-Long Beach-Anaheim, CA",
        code="LA",
        excluded_addresses=("11011 Huston St",),
    ),
    SourceConfig(source_id="Denver-Aurora-Centennial, CO", code="DEN"),
    SourceConfig(source_id="San Francisco-Oakland-Fremont, CA", code="SF"),
)


def get_source_configs(selectors: Iterable[str] | None = None) -> list[SourceConfig]:
    """Return the configured sources, optionally filtered by id or short code.

    Selectors match either the full source id or its code, case-insensitively.
    Unknown selectors raise ``UnknownSourceError``.
    """

    if selectors is None:
        return list(MARKET_SOURCES)

    by_key: dict[str, SourceConfig] = {}
    for source in MARKET_SOURCES:
        by_key[source.source_id.lower()] = source
        by_key[source.code.lower()] = source

    selected: list[SourceConfig] = []
    for selector in selectors:
        source = by_key.get(selector.strip().lower())
        if source is None:
            raise UnknownSourceError(selector)
        if source not in selected:
            selected.append(source)
    return selected
