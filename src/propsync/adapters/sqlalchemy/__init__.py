"""SQLAlchemy adapter package for propsync."""

from __future__ import annotations

from .mappings import create_all_tables, mapper_registry, start_mappers
from .repositories import (
    SqlAlchemyCursorRepository,
    SqlAlchemyEntityRepository,
    SqlAlchemyPropertyRepository,
)
from .unit_of_work import (
    SqlAlchemySyncUnitOfWork,
    StartupError,
    configure_sqlite_savepoints,
    shutdown,
    startup,
)

__all__ = [
    "SqlAlchemyCursorRepository",
    "SqlAlchemyEntityRepository",
    "SqlAlchemyPropertyRepository",
    "SqlAlchemySyncUnitOfWork",
    "StartupError",
    "configure_sqlite_savepoints",
    "create_all_tables",
    "mapper_registry",
    "shutdown",
    "start_mappers",
    "startup",
]
