"""Transient provider records as they enter the pipeline."""

from __future__ import annotations

from dataclasses import dataclass
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from datetime import date


@dataclass(frozen=True, slots=True)
class Coordinates:
    latitude: float
    longitude: float


@dataclass(frozen=True, slots=True, kw_only=True)
class TransactionRecord:
    """One upstream transaction, parsed but not yet validated or normalized."""

    provider_property_id: str | None = None
    provider_record_id: str | None = None

    address: str | None = None
    city: str | None = None
    state: str | None = None
    zip_code: str | None = None
    county: str | None = None

    buyer_name: str | None = None
    seller_name: str | None = None
    prev_buyer_name: str | None = None
    buyer_ownership_code: str | None = None
    seller_ownership_code: str | None = None
    buyer_corporate: bool = False
    seller_corporate: bool = False
    new_construction: bool = False
    transaction_type: str | None = None

    sale_price: float | None = None
    sale_date: date | None = None
    recording_date: date | None = None

    latitude: float | None = None
    longitude: float | None = None
    property_type: str | None = None
    bedrooms: int | None = None
    bathrooms: float | None = None
    square_feet: int | None = None
    year_built: int | None = None
    listing_status: str | None = None

    @property
    def coordinates(self) -> Coordinates | None:
        if self.latitude is None or self.longitude is None:
            return None
        return Coordinates(latitude=self.latitude, longitude=self.longitude)
