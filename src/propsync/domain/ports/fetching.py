"""Ports for fetching upstream transaction data."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Protocol, runtime_checkable

if TYPE_CHECKING:
    from propsync.domain.model import SortOrder, TransactionRecord
    from propsync.domain.time_windows import DateRange


class SourceFetchError(RuntimeError):
    """Raised when a page cannot be retrieved from the upstream provider.

    Carries the source and page so the orchestrator can report where the run stopped.
    """

    def __init__(
        self,
        message: str,
        *,
        source_id: str,
        page: int,
        status_code: int | None = None,
    ) -> None:
        super().__init__(message)
        self.source_id = source_id
        self.page = page
        self.status_code = status_code


@dataclass(slots=True)
class TransactionPage:
    """One page of upstream transactions.

    ``raw_count`` counts the items the provider returned, including items
    that failed schema parsing and were dropped into ``rejected``.
    """

    page: int
    records: list[TransactionRecord] = field(default_factory=list["TransactionRecord"])
    raw_count: int = 0
    rejected: int = 0
    is_last: bool = False


@runtime_checkable
class TransactionPageFetcher(Protocol):
    """Callable port for retrieving one page of transactions for a source."""

    def __call__(
        self,
        *,
        source_id: str,
        window: DateRange,
        page: int,
        page_size: int,
        sort: SortOrder,
    ) -> TransactionPage: ...


__all__ = ["SourceFetchError", "TransactionPage", "TransactionPageFetcher"]
