from __future__ import annotations

import os
from typing import TYPE_CHECKING

import pytest
from sqlalchemy import create_engine
from sqlalchemy.engine import Engine  # noqa: TC002
from sqlalchemy.orm import Session, sessionmaker

from propsync.adapters.sqlalchemy import configure_sqlite_savepoints, start_mappers
from propsync.adapters.sqlalchemy.migrations import upgrade_head
from propsync.adapters.sqlalchemy.unit_of_work import SqlAlchemySyncUnitOfWork, shutdown, startup

os.environ.setdefault("DATABASE_URI", "sqlite+pysqlite:///:memory:")

if TYPE_CHECKING:
    from collections.abc import Callable, Iterator


@pytest.fixture(autouse=True)
def _isolated_data_dir(tmp_path_factory: pytest.TempPathFactory) -> Iterator[None]:
    # keeps the sqlite HTTP cache and default database out of the user's data dir
    data_dir = tmp_path_factory.mktemp("propsync-data")
    with pytest.MonkeyPatch.context() as patch:
        patch.setenv("PROPSYNC_DATA_DIR", str(data_dir))
        yield


@pytest.fixture
def sqlite_engine() -> Iterator[Engine]:
    engine = configure_sqlite_savepoints(create_engine("sqlite+pysqlite:///:memory:", future=True))
    start_mappers()
    upgrade_head(engine=engine)
    try:
        yield engine
    finally:
        engine.dispose()


@pytest.fixture
def sqlite_session(sqlite_engine: Engine) -> Iterator[Session]:
    session_factory = sessionmaker(bind=sqlite_engine, future=True, expire_on_commit=False)
    session = session_factory()
    try:
        yield session
    finally:
        session.close()


@pytest.fixture
def sqlite_unit_of_work(
    sqlite_engine: Engine,
) -> Iterator[Callable[[], SqlAlchemySyncUnitOfWork]]:
    startup(engine=sqlite_engine, force=True)

    def factory() -> SqlAlchemySyncUnitOfWork:
        return SqlAlchemySyncUnitOfWork()

    try:
        yield factory
    finally:
        shutdown()
