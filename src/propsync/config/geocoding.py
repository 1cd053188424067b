"""Geocoding service configuration values."""

from __future__ import annotations

from dataclasses import dataclass

from .env import optional_env_var
from .http_resilience import CacheConfig, RateLimit, ResilienceConfig

GOOGLE_GEOCODING_URL = "https://maps.googleapis.com/maps/api/geocode/json"
GOOGLE_GEOCODING_TIMEOUT_SECONDS = 10.0


@dataclass(frozen=True)
class GeocodingConfig:
    api_key: str
    resilience: ResilienceConfig


def get_geocoding_config(*, resilience: ResilienceConfig | None = None) -> GeocodingConfig | None:
    """Return the Google geocoding configuration, or ``None`` when no key is set.

    Geocoding is optional for a sync run: records without coordinates are still
    merged, so a missing key is not a configuration error.
    """

    api_key = optional_env_var("GOOGLE_API_KEY")
    if api_key is None:
        return None
    return GeocodingConfig(
        api_key=api_key,
        resilience=resilience
        or ResilienceConfig(
            name="google-geocoding",
            timeout_seconds=GOOGLE_GEOCODING_TIMEOUT_SECONDS,
            ratelimit=RateLimit(max_calls=10, per_seconds=1.0),
            cache=CacheConfig(backend="sqlite"),
        ),
    )
