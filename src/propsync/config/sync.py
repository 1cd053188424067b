"""Synchronization defaults for market-source ingest runs."""

from __future__ import annotations

from dataclasses import dataclass
from datetime import date

from .env import optional_env_date, optional_env_int, optional_env_var
from .errors import ConfigurationError

DEFAULT_PAGE_SIZE = 100
DEFAULT_INSERT_BATCH_SIZE = 50
DEFAULT_CHECKPOINT_EVERY = 25
DEFAULT_START_DATE = date(2025, 12, 3)
DEFAULT_SORT = "recording_date"
DEFAULT_RULESET = "2026.2"

SORT_CHOICES = frozenset({"recording_date", "-recording_date"})


@dataclass(frozen=True, slots=True)
class SyncConfig:
    page_size: int = DEFAULT_PAGE_SIZE
    insert_batch_size: int = DEFAULT_INSERT_BATCH_SIZE
    checkpoint_every: int = DEFAULT_CHECKPOINT_EVERY
    default_start_date: date = DEFAULT_START_DATE
    sort: str = DEFAULT_SORT
    ruleset: str = DEFAULT_RULESET


def get_sync_config() -> SyncConfig:
    sort = optional_env_var("PROPSYNC_SORT") or DEFAULT_SORT
    if sort not in SORT_CHOICES:
        choices = ", ".join(sorted(SORT_CHOICES))
        raise ConfigurationError(f"PROPSYNC_SORT must be one of {choices}, got {sort!r}")
    return SyncConfig(
        page_size=optional_env_int("PROPSYNC_PAGE_SIZE", DEFAULT_PAGE_SIZE),
        insert_batch_size=optional_env_int("PROPSYNC_INSERT_BATCH_SIZE", DEFAULT_INSERT_BATCH_SIZE),
        checkpoint_every=optional_env_int("PROPSYNC_CHECKPOINT_EVERY", DEFAULT_CHECKPOINT_EVERY),
        default_start_date=optional_env_date("PROPSYNC_DEFAULT_START_DATE", DEFAULT_START_DATE),
        sort=sort,
        ruleset=optional_env_var("PROPSYNC_RULESET") or DEFAULT_RULESET,
    )
