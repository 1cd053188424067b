"""SQLAlchemy-backed units of work for market-source syncs."""

from __future__ import annotations

import logging
from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import TYPE_CHECKING, Any, Literal

from sqlalchemy import create_engine, event
from sqlalchemy.orm import Session, sessionmaker

from propsync.adapters.sqlalchemy.mappings import start_mappers
from propsync.adapters.sqlalchemy.migrations import upgrade_head
from propsync.adapters.sqlalchemy.repositories import (
    SqlAlchemyCursorRepository,
    SqlAlchemyEntityRepository,
    SqlAlchemyPropertyRepository,
)
from propsync.config import get_database_config
from propsync.domain.ports.unit_of_work import RepositoryCollection, SyncRepositories

if TYPE_CHECKING:
    from types import TracebackType

    from sqlalchemy.engine import Connection, Engine

log = logging.getLogger(__name__)


class StartupError(RuntimeError):
    """Raised when a SQLAlchemy unit of work is used before initialisation."""


def _sqlite_on_connect(dbapi_connection: Any, _connection_record: Any) -> None:
    # hand transaction control to SQLAlchemy so SAVEPOINTs nest properly
    dbapi_connection.isolation_level = None


def _sqlite_on_begin(connection: Connection) -> None:
    connection.exec_driver_sql("BEGIN")


def configure_sqlite_savepoints(engine: Engine) -> Engine:
    """Make pysqlite honour ``Session.begin_nested``; must run before first connect."""

    if engine.dialect.name != "sqlite":
        return engine
    if not event.contains(engine, "connect", _sqlite_on_connect):
        event.listen(engine, "connect", _sqlite_on_connect)
    if not event.contains(engine, "begin", _sqlite_on_begin):
        event.listen(engine, "begin", _sqlite_on_begin)
    return engine


@dataclass(slots=True)
class _AdapterState:
    _engine: Engine | None = None
    _session_factory: sessionmaker[Session] | None = None

    @property
    def engine(self) -> Engine | None:
        return self._engine

    @engine.setter
    def engine(self, value: Engine | None) -> None:
        self._session_factory = None
        self._engine = value

    @property
    def session_factory(self) -> sessionmaker[Session]:
        if self._engine is None:
            raise StartupError(
                "SQLAlchemy adapter not initialised. Call propsync.adapters.sqlalchemy."
                "unit_of_work.startup() before requesting a unit of work."
            )
        if self._session_factory is None:
            self._session_factory = sessionmaker(bind=self._engine, expire_on_commit=False)
        return self._session_factory


_STATE = _AdapterState()


def startup(
    *,
    engine: Engine | None = None,
    database_uri: str | None = None,
    force: bool = False,
) -> None:
    """Initialise the engine, run pending migrations and reset the session factory."""

    if _STATE.engine is not None and not force:
        raise StartupError(
            "SQLAlchemy adapter already initialised. Pass force=True to reconfigure."
        )

    resolved_engine = engine or create_engine(
        database_uri or get_database_config().uri,
        future=True,
    )
    configure_sqlite_savepoints(resolved_engine)
    start_mappers()
    upgrade_head(engine=resolved_engine)
    log.debug("SQLAlchemy adapter started on %s", resolved_engine.url.render_as_string())

    _STATE.engine = resolved_engine


def configured_engine() -> Engine | None:
    """Return the engine currently managed by the adapter (if any)."""

    return _STATE.engine


def is_started() -> bool:
    return _STATE.engine is not None


def shutdown() -> None:
    """Dispose the managed engine and reset state (primarily for tests)."""

    if _STATE.engine is not None:
        _STATE.engine.dispose()
    _STATE.engine = None


class BaseSqlAlchemyUnitOfWork[TRepositories: RepositoryCollection](ABC):
    """Generic SQLAlchemy unit of work with pluggable repository collections."""

    def __init__(self) -> None:
        self.session_factory: sessionmaker[Session] = _STATE.session_factory
        self._session: Session | None = None

    @abstractmethod
    def _build_repositories(self, session: Session) -> TRepositories: ...

    def __enter__(self) -> BaseSqlAlchemyUnitOfWork[TRepositories]:
        self.session = self.session_factory()
        self._repositories = self._build_repositories(self.session)
        return self

    def __exit__(
        self,
        exc_type: type[BaseException] | None,
        exc_value: BaseException | None,
        traceback: TracebackType | None,
    ) -> Literal[False]:
        if exc_type is not None:
            self.rollback()
        self.session.close()
        self.session = None
        return False

    def commit(self) -> None:
        self.session.commit()

    def rollback(self) -> None:
        self.session.rollback()

    @property
    def repositories(self) -> TRepositories:
        if self._session is None:
            raise StartupError("Unit of work session not initialised")
        return self._repositories

    @property
    def session(self) -> Session:
        if self._session is None:
            raise StartupError("Unit of work session not initialised")
        return self._session

    @session.setter
    def session(self, session: Session | None) -> None:
        if self._session is not None and session is not None:
            raise StartupError("Unit of work session already initialised")
        self._session = session


class SqlAlchemySyncUnitOfWork(BaseSqlAlchemyUnitOfWork[SyncRepositories]):
    """Unit of work spanning cursors, canonical entities and properties."""

    def _build_repositories(self, session: Session) -> SyncRepositories:
        return SyncRepositories(
            cursors=SqlAlchemyCursorRepository(session),
            entities=SqlAlchemyEntityRepository(session),
            properties=SqlAlchemyPropertyRepository(session),
        )


if TYPE_CHECKING:
    from propsync.domain.ports.unit_of_work import SyncUnitOfWork

    _uow_check: SyncUnitOfWork = SqlAlchemySyncUnitOfWork()
