"""Locations of the merge-target database and the HTTP response cache.

``DATABASE_URI`` names the database outright. Without it a SQLite file lives in
the data directory (``PROPSYNC_DATA_DIR``, else ``$XDG_DATA_HOME/propsync``)
next to the response cache.
"""

from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path
from typing import Final

from sqlalchemy.engine import make_url
from sqlalchemy.exc import ArgumentError

from .env import optional_env_var
from .errors import ConfigurationError

DATA_DIR_ENV: Final[str] = "PROPSYNC_DATA_DIR"
DATABASE_URI_ENV: Final[str] = "DATABASE_URI"
DATABASE_FILENAME: Final[str] = "propsync.db"
HTTP_CACHE_FILENAME: Final[str] = "http_cache.db"


@dataclass(frozen=True, slots=True)
class StorageConfig:
    """Resolved data directory; the path accessors create it on first use."""

    data_dir: Path

    def sqlite_database_path(self) -> Path:
        return self._child(DATABASE_FILENAME)

    def http_cache_path(self) -> Path:
        return self._child(HTTP_CACHE_FILENAME)

    def _child(self, name: str) -> Path:
        self.data_dir.mkdir(parents=True, exist_ok=True)
        return self.data_dir / name


@dataclass(frozen=True, slots=True)
class DatabaseConfig:
    uri: str


def get_storage_config() -> StorageConfig:
    override = optional_env_var(DATA_DIR_ENV)
    if override is not None:
        return StorageConfig(data_dir=Path(override).expanduser().resolve())
    xdg_data_home = optional_env_var("XDG_DATA_HOME")
    base = Path(xdg_data_home) if xdg_data_home else Path.home() / ".local" / "share"
    return StorageConfig(data_dir=(base / "propsync").expanduser().resolve())


def get_database_config(*, storage: StorageConfig | None = None) -> DatabaseConfig:
    """Resolve the merge-target database, preferring an explicit ``DATABASE_URI``.

    Raises ``ConfigurationError`` when the URI is not one SQLAlchemy can parse.
    """

    explicit = optional_env_var(DATABASE_URI_ENV)
    if explicit is None:
        path = (storage or get_storage_config()).sqlite_database_path()
        return DatabaseConfig(uri=f"sqlite+pysqlite:///{path}")
    try:
        make_url(explicit)
    except ArgumentError as exc:
        raise ConfigurationError(f"{DATABASE_URI_ENV} is not a database URL: {explicit!r}") from exc
    return DatabaseConfig(uri=explicit)
