from __future__ import annotations

from collections.abc import Callable

import httpx
import pytest

from propsync.adapters.http_resilience import ResilientClient
from propsync.adapters.market_data import MarketDataFetcher
from propsync.config.http_resilience import ResilienceConfig, RetryPolicy
from propsync.config.market_data import MarketDataConfig

type Handler = Callable[[httpx.Request], httpx.Response]


@pytest.fixture
def market_data_config() -> MarketDataConfig:
    return MarketDataConfig(
        api_key="test-token",
        base_url="https://market.example.test",
        transactions_path="/buyers/market",
        resilience=ResilienceConfig(
            name="market-data-test",
            base_url="https://market.example.test",
            retry=RetryPolicy.disabled(),
            default_headers={"X-API-TOKEN": "test-token"},
        ),
    )


@pytest.fixture
def make_fetcher(market_data_config: MarketDataConfig) -> Callable[[Handler], MarketDataFetcher]:
    def factory(handler: Handler) -> MarketDataFetcher:
        def client_factory(resilience: ResilienceConfig) -> ResilientClient:
            return ResilientClient(resilience, transport=httpx.MockTransport(handler))

        return MarketDataFetcher(market_data_config, client_factory=client_factory)

    return factory
