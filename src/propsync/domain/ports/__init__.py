"""Domain port definitions for adapters."""

from __future__ import annotations

from .fetching import SourceFetchError, TransactionPage, TransactionPageFetcher
from .geocoding import Geocoder
from .persistence import (
    DuplicateEntityError,
    EntityRepository,
    PersistenceError,
    PropertyRepository,
    Repository,
    SyncCursorRepository,
)
from .unit_of_work import RepositoryCollection, SyncRepositories, SyncUnitOfWork, UnitOfWork

__all__ = [
    "DuplicateEntityError",
    "EntityRepository",
    "Geocoder",
    "PersistenceError",
    "PropertyRepository",
    "Repository",
    "RepositoryCollection",
    "SourceFetchError",
    "SyncCursorRepository",
    "SyncRepositories",
    "SyncUnitOfWork",
    "TransactionPage",
    "TransactionPageFetcher",
    "UnitOfWork",
]
