"""Pydantic models describing the market-data transaction payloads."""

from __future__ import annotations

from pydantic import BaseModel, ConfigDict, Field, field_validator


def _blank_to_none(value: object) -> object:
    if isinstance(value, str):
        stripped = value.strip()
        return stripped or None
    return value


def _id_to_str(value: object) -> object:
    if isinstance(value, bool):
        return value
    if isinstance(value, int):
        return str(value)
    return _blank_to_none(value)


def _none_to_false(value: object) -> object:
    value = _blank_to_none(value)
    return False if value is None else value


def _strip_currency(value: object) -> object:
    value = _blank_to_none(value)
    if isinstance(value, str):
        return value.replace("$", "").replace(",", "").strip()
    return value


class MarketDataBaseModel(BaseModel):
    model_config = ConfigDict(extra="ignore", populate_by_name=True)


class RawTransactionRecord(MarketDataBaseModel):
    """One item of the ``/buyers/market`` array.

    Dates stay raw here; the provider mixes ISO strings, US dates and
    spreadsheet serial numbers, which the translator normalizes.
    """

    property_id: str | None = Field(default=None, alias="propertyId")
    record_id: str | None = Field(default=None, alias="recordId")

    address: str | None = None
    city: str | None = None
    state: str | None = None
    zip_code: str | None = Field(default=None, alias="zipCode")
    county: str | None = None

    buyer_name: str | None = Field(default=None, alias="buyerName")
    seller_name: str | None = Field(default=None, alias="sellerName")
    prev_buyer: str | None = Field(default=None, alias="prevBuyer")
    buyer_ownership_code: str | None = Field(default=None, alias="buyerOwnershipCode")
    seller_ownership_code: str | None = Field(default=None, alias="sellerOwnershipCode")
    buyer_corp: bool = Field(default=False, alias="buyerCorp")
    seller_corp: bool = Field(default=False, alias="sellerCorp")
    is_new_construction: bool = Field(default=False, alias="isNewConstruction")
    transaction_type: str | None = Field(default=None, alias="transactionType")

    sale_price: float | None = Field(default=None, alias="salePrice")
    sale_date: str | int | float | None = Field(default=None, alias="saleDate")
    recording_date: str | int | float | None = Field(default=None, alias="recordingDate")

    latitude: float | None = None
    longitude: float | None = None
    property_type: str | None = Field(default=None, alias="propertyType")
    bedrooms: int | None = None
    bathrooms: float | None = None
    square_feet: int | None = Field(default=None, alias="squareFeet")
    year_built: int | None = Field(default=None, alias="yearBuilt")
    listing_status: str | None = Field(default=None, alias="listingStatus")

    _normalize_ids = field_validator("property_id", "record_id", mode="before")(_id_to_str)
    _normalize_zip = field_validator("zip_code", mode="before")(_id_to_str)
    _normalize_text = field_validator(
        "address",
        "city",
        "state",
        "county",
        "buyer_name",
        "seller_name",
        "prev_buyer",
        "buyer_ownership_code",
        "seller_ownership_code",
        "transaction_type",
        "property_type",
        "listing_status",
        "sale_date",
        "recording_date",
        "latitude",
        "longitude",
        "bedrooms",
        "bathrooms",
        "square_feet",
        "year_built",
        mode="before",
    )(_blank_to_none)
    _normalize_flags = field_validator(
        "buyer_corp", "seller_corp", "is_new_construction", mode="before"
    )(_none_to_false)
    _normalize_price = field_validator("sale_price", mode="before")(_strip_currency)
