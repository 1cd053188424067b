"""Translate market-data payloads into domain transaction records."""

from __future__ import annotations

from typing import TYPE_CHECKING

from propsync.domain.model import TransactionRecord
from propsync.domain.normalization import parse_flexible_date

if TYPE_CHECKING:
    from .schema import RawTransactionRecord


def translate_transaction(raw: RawTransactionRecord) -> TransactionRecord:
    return TransactionRecord(
        provider_property_id=raw.property_id,
        provider_record_id=raw.record_id,
        address=raw.address,
        city=raw.city,
        state=raw.state,
        zip_code=raw.zip_code,
        county=raw.county,
        buyer_name=raw.buyer_name,
        seller_name=raw.seller_name,
        prev_buyer_name=raw.prev_buyer,
        buyer_ownership_code=raw.buyer_ownership_code,
        seller_ownership_code=raw.seller_ownership_code,
        buyer_corporate=raw.buyer_corp,
        seller_corporate=raw.seller_corp,
        new_construction=raw.is_new_construction,
        transaction_type=raw.transaction_type,
        sale_price=raw.sale_price,
        sale_date=parse_flexible_date(raw.sale_date),
        recording_date=parse_flexible_date(raw.recording_date),
        latitude=raw.latitude,
        longitude=raw.longitude,
        property_type=raw.property_type,
        bedrooms=raw.bedrooms,
        bathrooms=raw.bathrooms,
        square_feet=raw.square_feet,
        year_built=raw.year_built,
        listing_status=raw.listing_status,
    )
