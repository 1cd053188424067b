"""Alembic environment configuration for propsync."""

from __future__ import annotations

import logging

from alembic import context
from sqlalchemy import create_engine, pool

from propsync.adapters.sqlalchemy.mappings import mapper_registry, start_mappers
from propsync.config import get_database_config

config = context.config

if not logging.getLogger().handlers:
    logging.basicConfig(level=logging.INFO)

log = logging.getLogger("alembic.env")

start_mappers()

target_metadata = mapper_registry.metadata

_CONFIGURE_OPTIONS = {
    "target_metadata": target_metadata,
    "render_as_batch": True,
    "compare_type": True,
    "compare_server_default": True,
}


def _resolve_url() -> str:
    return config.get_main_option("sqlalchemy.url") or get_database_config().uri


def run_migrations_offline() -> None:
    """Emit SQL for the migrations without a live connection."""

    context.configure(url=_resolve_url(), literal_binds=True, **_CONFIGURE_OPTIONS)

    with context.begin_transaction():
        context.run_migrations()


def run_migrations_online() -> None:
    """Run migrations against a connection passed in or one built from config."""

    existing_connection = config.attributes.get("connection")
    if existing_connection is not None:
        context.configure(connection=existing_connection, **_CONFIGURE_OPTIONS)
        with context.begin_transaction():
            context.run_migrations()
        return

    engine = create_engine(_resolve_url(), poolclass=pool.NullPool, future=True)
    try:
        with engine.connect() as connection:
            context.configure(connection=connection, **_CONFIGURE_OPTIONS)
            with context.begin_transaction():
                context.run_migrations()
    finally:
        engine.dispose()


if context.is_offline_mode():
    run_migrations_offline()
else:
    run_migrations_online()
