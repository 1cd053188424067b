"""Record-level sanity checks run before classification."""

from __future__ import annotations

import re
from dataclasses import dataclass
from typing import TYPE_CHECKING

from propsync.domain.ingest_pipeline.outcomes import SkipReason

if TYPE_CHECKING:
    from collections.abc import Iterable

    from propsync.domain.model import TransactionRecord

_STREET_NUMBER = re.compile(r"^\s*\d+")


@dataclass(frozen=True, slots=True)
class ValidationFailure:
    reason: SkipReason
    detail: str


def _blank(value: str | None) -> bool:
    return value is None or not value.strip()


def is_excluded_address(address: str, excluded_addresses: Iterable[str]) -> bool:
    """Case-insensitive containment in either direction."""
    candidate = address.strip().lower()
    if not candidate:
        return False
    for excluded in excluded_addresses:
        needle = excluded.strip().lower()
        if needle and (needle in candidate or candidate in needle):
            return True
    return False


def validate_transaction(
    record: TransactionRecord,
    *,
    excluded_addresses: Iterable[str] = (),
) -> ValidationFailure | None:
    """Return why ``record`` cannot be merged, or ``None`` when it is usable."""

    missing = [
        name
        for name, value in (
            ("address", record.address),
            ("city", record.city),
            ("state", record.state),
        )
        if _blank(value)
    ]
    if record.recording_date is None:
        missing.append("recording_date")
    if missing:
        return ValidationFailure(SkipReason.INVALID, f"missing {', '.join(missing)}")

    address = record.address or ""
    if not _STREET_NUMBER.match(address):
        return ValidationFailure(SkipReason.INVALID, f"no street number in {address!r}")

    if record.sale_price is not None and record.sale_price <= 0:
        return ValidationFailure(SkipReason.INVALID, f"non-positive price {record.sale_price}")

    if is_excluded_address(address, excluded_addresses):
        return ValidationFailure(SkipReason.EXCLUDED, f"excluded address {address!r}")

    return None


__all__ = ["ValidationFailure", "is_excluded_address", "validate_transaction"]
