"""Unit-of-work abstractions for coordinating repositories."""

from __future__ import annotations

from dataclasses import dataclass
from typing import TYPE_CHECKING, Protocol, runtime_checkable

if TYPE_CHECKING:
    from types import TracebackType

    from propsync.domain.ports.persistence import (
        EntityRepository,
        PropertyRepository,
        SyncCursorRepository,
    )


@runtime_checkable
class RepositoryCollection(Protocol):
    """Marker protocol for groups of repositories managed together."""


@runtime_checkable
class UnitOfWork[TRepositories: RepositoryCollection](Protocol):
    """Generic unit-of-work boundary around a repository collection."""

    @property
    def repositories(self) -> TRepositories: ...  # the repo list itself should be immutable

    def __enter__(self) -> UnitOfWork[TRepositories]: ...

    def __exit__(
        self,
        exc_type: type[BaseException] | None,
        exc_value: BaseException | None,
        traceback: TracebackType | None,
    ) -> bool: ...

    def commit(self) -> None: ...

    def rollback(self) -> None: ...


@dataclass(slots=True)
class SyncRepositories(RepositoryCollection):
    """Repositories required to synchronize one market source."""

    cursors: SyncCursorRepository
    entities: EntityRepository
    properties: PropertyRepository


type SyncUnitOfWork = UnitOfWork[SyncRepositories]


__all__ = [
    "RepositoryCollection",
    "SyncRepositories",
    "SyncUnitOfWork",
    "UnitOfWork",
]
