from __future__ import annotations

import asyncio

import httpx
import pytest
from hishel.httpx import AsyncCacheClient

from propsync.adapters.http_resilience import ResilientClient, build_async_client, build_retry
from propsync.config.http_resilience import (
    CacheConfig,
    RateLimit,
    ResilienceConfig,
    RetryPolicy,
)


def test_build_retry_copies_policy() -> None:
    retry = build_retry(RetryPolicy(total=3, backoff_factor=0.25))

    assert retry.total == 3
    assert retry.backoff_factor == 0.25
    assert 503 in retry.status_forcelist
    assert "POST" not in retry.allowed_methods


def test_disabled_policy_sends_once() -> None:
    attempts: list[httpx.Request] = []

    def handler(request: httpx.Request) -> httpx.Response:
        attempts.append(request)
        return httpx.Response(503)

    async def call() -> httpx.Response:
        config = ResilienceConfig(name="test", retry=RetryPolicy.disabled())
        async with ResilientClient(config, transport=httpx.MockTransport(handler)) as client:
            return await client.get("https://example.test/ping")

    response = asyncio.run(call())

    assert response.status_code == 503
    assert len(attempts) == 1


def test_rate_limited_client_still_serves_requests() -> None:
    def handler(_request: httpx.Request) -> httpx.Response:
        return httpx.Response(200, json={"ok": True})

    async def call() -> list[int]:
        config = ResilienceConfig(
            name="test",
            base_url="https://example.test",
            ratelimit=RateLimit(max_calls=5),
        )
        async with ResilientClient(config, transport=httpx.MockTransport(handler)) as client:
            responses = [await client.get("/ping") for _ in range(3)]
        return [response.status_code for response in responses]

    assert asyncio.run(call()) == [200, 200, 200]


@pytest.mark.parametrize(("max_calls", "per_seconds"), [(0, 1.0), (1, 0.0)])
def test_rate_limit_validates_bounds(max_calls: int, per_seconds: float) -> None:
    with pytest.raises(ValueError, match="Invalid rate limit"):
        RateLimit(max_calls=max_calls, per_seconds=per_seconds)


def test_cache_filter_only_applies_to_cached_clients() -> None:
    def predicate(payload: object) -> bool:
        return payload is not None

    uncached = ResilienceConfig(name="plain")
    assert uncached.with_cache_filter(predicate) is uncached

    cached = ResilienceConfig(name="cached", cache=CacheConfig(backend="memory"))
    filtered = cached.with_cache_filter(predicate)
    assert filtered.cache is not None
    assert filtered.cache.should_cache is predicate
    assert filtered.with_cache_filter(lambda _payload: False) is filtered


def test_without_retries_disables_policy() -> None:
    config = ResilienceConfig(name="test").without_retries()

    assert config.retry.total == 0


def test_cache_backed_client_only_when_enabled() -> None:
    async def build(config: ResilienceConfig) -> httpx.AsyncClient:
        client = build_async_client(config)
        await client.aclose()
        return client

    cached = asyncio.run(build(ResilienceConfig(name="c", cache=CacheConfig(backend="memory"))))
    disabled = asyncio.run(
        build(ResilienceConfig(name="d", cache=CacheConfig(backend="memory", enabled=False)))
    )

    assert isinstance(cached, AsyncCacheClient)
    assert not isinstance(disabled, AsyncCacheClient)
