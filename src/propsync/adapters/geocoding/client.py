"""Google geocoding adapter for the ``Geocoder`` port."""

from __future__ import annotations

import asyncio
from dataclasses import dataclass, field
from logging import getLogger
from typing import TYPE_CHECKING

import httpx
from pydantic import ValidationError

from propsync.adapters.http_resilience import ResilientClient
from propsync.config.geocoding import GOOGLE_GEOCODING_URL
from propsync.domain.model import Coordinates

from .schema import GeocodeResponse, should_cache_payload

if TYPE_CHECKING:
    from collections.abc import Callable

    from propsync.config.geocoding import GeocodingConfig
    from propsync.config.http_resilience import ResilienceConfig

log = getLogger(__name__)


def format_address(*, address: str, city: str, state: str, zip_code: str | None) -> str:
    locality = f"{state} {zip_code}" if zip_code else state
    return f"{address}, {city}, {locality}"


@dataclass(slots=True)
class GoogleGeocoder:
    """Resolve addresses through Google; failures yield ``None`` and are logged."""

    config: GeocodingConfig
    client_factory: Callable[[ResilienceConfig], ResilientClient] = field(default=ResilientClient)

    def __call__(
        self,
        *,
        address: str,
        city: str,
        state: str,
        zip_code: str | None = None,
    ) -> Coordinates | None:
        query = format_address(address=address, city=city, state=state, zip_code=zip_code)
        return asyncio.run(self._geocode_async(query))

    def _resilience(self) -> ResilienceConfig:
        return self.config.resilience.with_cache_filter(should_cache_payload)

    async def _geocode_async(self, query: str) -> Coordinates | None:
        async with self.client_factory(self._resilience()) as client:
            try:
                response = await client.get(
                    GOOGLE_GEOCODING_URL,
                    params={"address": query, "key": self.config.api_key},
                )
                response.raise_for_status()
            except httpx.HTTPError as exc:
                log.warning("Geocoding request failed for %r: %s", query, exc)
                return None

        try:
            payload = GeocodeResponse.model_validate(response.json())
        except (ValueError, ValidationError) as exc:
            log.warning("Unexpected geocoding response for %r: %s", query, exc)
            return None

        if payload.status != "OK" or not payload.results:
            if payload.status != "ZERO_RESULTS":
                log.warning(
                    "Geocoding returned %s for %r: %s",
                    payload.status,
                    query,
                    payload.error_message or "no details",
                )
            return None

        location = payload.results[0].geometry.location
        return Coordinates(latitude=location.lat, longitude=location.lng)


class NullGeocoder:
    """Geocoder used when no API key is configured."""

    def __call__(
        self,
        *,
        address: str,
        city: str,
        state: str,
        zip_code: str | None = None,
    ) -> Coordinates | None:
        _ = (address, city, state, zip_code)
        return None
