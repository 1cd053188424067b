"""Market-data provider configuration values."""

from __future__ import annotations

from dataclasses import dataclass

from .env import optional_env_var, require_env_vars
from .http_resilience import RateLimit, ResilienceConfig

MARKET_DATA_TIMEOUT_SECONDS = 30.0
MARKET_DATA_TRANSACTIONS_PATH = "/buyers/market"
MARKET_DATA_TOKEN_HEADER = "X-API-TOKEN"


@dataclass(frozen=True)
class MarketDataConfig:
    """Holds the upstream transaction API configuration values."""

    api_key: str
    base_url: str
    transactions_path: str
    resilience: ResilienceConfig


def get_market_data_config(*, resilience: ResilienceConfig | None = None) -> MarketDataConfig:
    values = require_env_vars(("MARKET_DATA_API_KEY", "MARKET_DATA_API_URL"))
    base_url = values["MARKET_DATA_API_URL"].rstrip("/")
    return MarketDataConfig(
        api_key=values["MARKET_DATA_API_KEY"],
        base_url=base_url,
        transactions_path=optional_env_var("MARKET_DATA_TRANSACTIONS_PATH")
        or MARKET_DATA_TRANSACTIONS_PATH,
        resilience=resilience
        or ResilienceConfig(
            name="market-data",
            base_url=base_url,
            timeout_seconds=MARKET_DATA_TIMEOUT_SECONDS,
            ratelimit=RateLimit(max_calls=2, per_seconds=1.0),
            default_headers={MARKET_DATA_TOKEN_HEADER: values["MARKET_DATA_API_KEY"]},
        ),
    )
