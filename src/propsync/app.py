"""Application orchestration entry points."""

from __future__ import annotations

from collections.abc import Callable
from dataclasses import dataclass, field
from logging import getLogger
from typing import TYPE_CHECKING, Any

from propsync.adapters.geocoding import GoogleGeocoder, NullGeocoder
from propsync.adapters.market_data import MarketDataFetcher
from propsync.adapters.sqlalchemy.unit_of_work import SqlAlchemySyncUnitOfWork, is_started, startup
from propsync.config import (
    get_geocoding_config,
    get_market_data_config,
    get_source_configs,
    get_sync_config,
)
from propsync.domain.classification import TransactionClassifier, get_ruleset
from propsync.domain.data_integration import SourceSyncError, SyncSourceResult, sync_source
from propsync.domain.ingest_pipeline.orchestrator import SyncSettings
from propsync.domain.model import SortOrder
from propsync.domain.ports.unit_of_work import SyncUnitOfWork

if TYPE_CHECKING:
    from collections.abc import Iterable, Sequence
    from datetime import date

    from propsync.config import SourceConfig, SyncConfig
    from propsync.domain.model import SyncCursor
    from propsync.domain.ports.fetching import TransactionPageFetcher
    from propsync.domain.ports.geocoding import Geocoder

UnitOfWorkFactory = Callable[[], SyncUnitOfWork]


log = getLogger(__name__)


@dataclass(slots=True)
class SyncReport:
    """Per-source results of one trigger, in the order the sources ran."""

    results: list[SyncSourceResult] = field(default_factory=list)

    @property
    def succeeded(self) -> bool:
        return all(result.succeeded for result in self.results)

    def as_dict(self) -> dict[str, Any]:
        return {
            "succeeded": self.succeeded,
            "sources": [result.as_dict() for result in self.results],
        }


def build_sync_settings(config: SyncConfig, source: SourceConfig) -> SyncSettings:
    return SyncSettings(
        default_start_date=config.default_start_date,
        page_size=config.page_size,
        insert_batch_size=config.insert_batch_size,
        checkpoint_every=config.checkpoint_every,
        sort=SortOrder(config.sort),
        excluded_addresses=source.excluded_addresses,
    )


def build_geocoder() -> Geocoder:
    """Return the Google geocoder when a key is configured, else a no-op."""

    config = get_geocoding_config()
    if config is None:
        log.info("GOOGLE_API_KEY not set; properties are stored without coordinates")
        return NullGeocoder()
    return GoogleGeocoder(config)


def _default_unit_of_work_factory() -> UnitOfWorkFactory:
    if not is_started():
        startup()
    return SqlAlchemySyncUnitOfWork


def sync_market_sources(
    source_ids: Iterable[str] | None = None,
    *,
    today: date | None = None,
    fetcher: TransactionPageFetcher | None = None,
    unit_of_work_factory: UnitOfWorkFactory | None = None,
    geocoder: Geocoder | None = None,
    sync_config: SyncConfig | None = None,
) -> SyncReport:
    """Synchronise the selected market sources one after another.

    A failing source is recorded in the report and does not stop the sources
    after it; its progress up to the failure has already been checkpointed.
    """

    sources = get_source_configs(source_ids)
    config = sync_config or get_sync_config()
    classifier = TransactionClassifier(get_ruleset(config.ruleset))
    effective_uow = unit_of_work_factory or _default_unit_of_work_factory()
    effective_fetcher = fetcher or MarketDataFetcher(get_market_data_config())
    effective_geocoder = geocoder or build_geocoder()

    log.info(
        "Starting market sync for %d source(s): ruleset=%s, sort=%s, page_size=%d",
        len(sources),
        classifier.rules.version,
        config.sort,
        config.page_size,
    )

    report = SyncReport()
    for source in sources:
        try:
            result = sync_source(
                source_id=source.source_id,
                fetcher=effective_fetcher,
                unit_of_work_factory=effective_uow,
                settings=build_sync_settings(config, source),
                classifier=classifier,
                geocoder=effective_geocoder,
                today=today,
                label=source.code,
            )
        except SourceSyncError as exc:
            log.error("[%s] %s", source.code, exc)  # noqa: TRY400
            result = exc.result
        report.results.append(result)

    log.info(
        "Finished market sync: %d/%d source(s) completed",
        sum(1 for result in report.results if result.succeeded),
        len(report.results),
    )
    return report


def list_sync_cursors(
    *,
    unit_of_work_factory: UnitOfWorkFactory | None = None,
) -> Sequence[SyncCursor]:
    """Return every stored sync cursor, ordered by source id."""

    effective_uow = unit_of_work_factory or _default_unit_of_work_factory()
    with effective_uow() as uow:
        return list(uow.repositories.cursors.list_all())


__all__ = [
    "SyncReport",
    "UnitOfWorkFactory",
    "build_geocoder",
    "build_sync_settings",
    "list_sync_cursors",
    "sync_market_sources",
]
