"""HTTP fetcher for the market-data ``/buyers/market`` endpoint.

Structural details (bedrooms, bathrooms, square feet, year built) are read from
the market payload itself. Records that arrive without them are stored without
them; there is no follow-up per-property lookup.
"""

from __future__ import annotations

import asyncio
from dataclasses import dataclass, field
from logging import getLogger
from typing import TYPE_CHECKING, cast

import httpx
from pydantic import ValidationError

from propsync.adapters.http_resilience import ResilientClient
from propsync.domain.ports.fetching import SourceFetchError, TransactionPage

from .schema import RawTransactionRecord
from .translator import translate_transaction

if TYPE_CHECKING:
    from collections.abc import Callable

    from propsync.config.http_resilience import ResilienceConfig
    from propsync.config.market_data import MarketDataConfig
    from propsync.domain.model import SortOrder, TransactionRecord
    from propsync.domain.time_windows import DateRange

log = getLogger(__name__)

_ERROR_BODY_PREVIEW = 200


@dataclass(slots=True)
class MarketDataFetcher:
    """``TransactionPageFetcher`` backed by the market-data HTTP API."""

    config: MarketDataConfig
    client_factory: Callable[[ResilienceConfig], ResilientClient] = field(default=ResilientClient)

    def __call__(
        self,
        *,
        source_id: str,
        window: DateRange,
        page: int,
        page_size: int,
        sort: SortOrder,
    ) -> TransactionPage:
        return asyncio.run(
            self._fetch_page_async(
                source_id=source_id,
                window=window,
                page=page,
                page_size=page_size,
                sort=sort,
            )
        )

    async def _fetch_page_async(
        self,
        *,
        source_id: str,
        window: DateRange,
        page: int,
        page_size: int,
        sort: SortOrder,
    ) -> TransactionPage:
        params: dict[str, str | int] = {
            "msa": source_id,
            "recording_date_min": window.start.isoformat(),
            "recording_date_max": window.end.isoformat(),
            "page": page,
            "page_size": page_size,
            "sort": sort.value,
        }

        async with self.client_factory(self.config.resilience) as client:
            try:
                response = await client.get(self.config.transactions_path, params=params)
            except httpx.HTTPError as exc:
                raise SourceFetchError(
                    f"Transport error fetching page {page} for {source_id}: {exc}",
                    source_id=source_id,
                    page=page,
                ) from exc

        if not response.is_success:
            preview = response.text[:_ERROR_BODY_PREVIEW]
            raise SourceFetchError(
                f"Market data API returned {response.status_code} on page {page}: {preview}",
                source_id=source_id,
                page=page,
                status_code=response.status_code,
            )

        try:
            payload: object = response.json()
        except ValueError as exc:
            raise SourceFetchError(
                f"Market data API returned invalid JSON on page {page}",
                source_id=source_id,
                page=page,
                status_code=response.status_code,
            ) from exc

        return _parse_page(payload, page=page, page_size=page_size)


def _parse_page(payload: object, *, page: int, page_size: int) -> TransactionPage:
    if not isinstance(payload, list) or not payload:
        log.debug("No transaction data on page %d", page)
        return TransactionPage(page=page, is_last=True)

    items = cast(list[object], payload)
    records: list[TransactionRecord] = []
    rejected = 0
    for item in items:
        try:
            raw = RawTransactionRecord.model_validate(item)
        except ValidationError as exc:
            rejected += 1
            log.debug("Rejected malformed transaction on page %d: %s", page, exc)
            continue
        records.append(translate_transaction(raw))

    return TransactionPage(
        page=page,
        records=records,
        raw_count=len(items),
        rejected=rejected,
        is_last=len(items) < page_size,
    )


__all__ = ["MarketDataFetcher"]
