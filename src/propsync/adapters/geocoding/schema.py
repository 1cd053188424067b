"""Pydantic models for the Google Geocoding API response."""

from __future__ import annotations

from pydantic import BaseModel, ConfigDict, Field

CACHEABLE_STATUSES = frozenset({"OK", "ZERO_RESULTS"})


class GeocodingBaseModel(BaseModel):
    model_config = ConfigDict(extra="ignore", populate_by_name=True)


class LatLng(GeocodingBaseModel):
    lat: float
    lng: float


class Geometry(GeocodingBaseModel):
    location: LatLng


class GeocodeResult(GeocodingBaseModel):
    geometry: Geometry
    formatted_address: str | None = None


class GeocodeResponse(GeocodingBaseModel):
    status: str
    results: list[GeocodeResult] = Field(default_factory=list[GeocodeResult])
    error_message: str | None = None


def should_cache_payload(payload: object) -> bool:
    """Cache definitive answers only; quota and request errors must be retried later."""
    if not isinstance(payload, dict):
        return False
    return payload.get("status") in CACHEABLE_STATUSES
