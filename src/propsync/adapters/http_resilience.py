"""Async HTTP client with retries, a shared rate limit and an optional response cache.

Every outbound call of the sync engine goes through ``ResilientClient``. The
layers stack as ``rate limiter -> [cache] -> retry transport -> network``, so a
retried request consumes a single rate-limit slot.
"""

from __future__ import annotations

import json
import logging
from typing import TYPE_CHECKING, TypedDict, Unpack

import httpx
from aiolimiter import AsyncLimiter
from hishel import AsyncSqliteStorage, FilterPolicy
from hishel import Response as HishelCacheResponse
from hishel._policies import BaseFilter
from hishel.httpx import AsyncCacheClient
from httpx_retries import Retry, RetryTransport

from propsync.config.http_resilience import (
    CacheConfig,
    RateLimit,
    ResilienceConfig,
    RetryablePayloadError,
    RetryPolicy,
    ShouldCacheHook,
)
from propsync.config.storage import get_storage_config

if TYPE_CHECKING:
    from types import TracebackType

    from httpx._client import UseClientDefault
    from httpx._types import (
        HeaderTypes,
        QueryParamTypes,
        RequestExtensions,
        TimeoutTypes,
        URLTypes,
    )

log = logging.getLogger(__name__)


class RequestOptions(TypedDict, total=False):
    params: QueryParamTypes | None
    headers: HeaderTypes | None
    follow_redirects: bool | UseClientDefault
    timeout: TimeoutTypes | UseClientDefault
    extensions: RequestExtensions | None


def build_retry(policy: RetryPolicy) -> Retry:
    return Retry(
        total=policy.total,
        backoff_factor=policy.backoff_factor,
        max_backoff_wait=policy.max_backoff_wait,
        backoff_jitter=policy.backoff_jitter,
        respect_retry_after_header=policy.respect_retry_after_header,
        allowed_methods=tuple(policy.allowed_methods),
        status_forcelist=tuple(policy.status_forcelist),
        retry_on_exceptions=policy.retry_on_exceptions,
    )


def build_async_client(
    config: ResilienceConfig,
    *,
    transport: httpx.AsyncBaseTransport | None = None,
) -> httpx.AsyncClient:
    """Assemble the httpx client for ``config``.

    ``transport`` replaces the network layer under the retry transport; tests
    pass an ``httpx.MockTransport`` here.
    """

    retry_transport = RetryTransport(transport=transport, retry=build_retry(config.retry))
    options: dict[str, object] = {
        "timeout": config.timeout_seconds,
        "transport": retry_transport,
    }
    if config.base_url is not None:
        options["base_url"] = config.base_url
    if config.default_headers:
        options["headers"] = dict(config.default_headers)
    if config.response_hooks:
        options["event_hooks"] = {"response": list(config.response_hooks)}

    storage, policy = _build_cache_components(config.cache)
    if storage is None:
        return httpx.AsyncClient(**options)  # type: ignore[arg-type]
    log.debug("HTTP cache enabled for %s (%s)", config.name, config.cache)
    return AsyncCacheClient(**options, storage=storage, policy=policy)  # type: ignore[arg-type]


def _build_limiter(ratelimit: RateLimit | None) -> AsyncLimiter | None:
    if ratelimit is None:
        return None
    return AsyncLimiter(ratelimit.max_calls, ratelimit.per_seconds)


class ResilientClient:
    """Thin wrapper exposing the read-only calls the adapters need."""

    def __init__(
        self,
        config: ResilienceConfig,
        *,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        self.config = config
        self._limiter = _build_limiter(config.ratelimit)
        self._client = build_async_client(config, transport=transport)

    async def __aenter__(self) -> ResilientClient:
        return self

    async def __aexit__(
        self,
        exc_type: type[BaseException] | None,
        exc: BaseException | None,
        tb: TracebackType | None,
    ) -> None:
        await self.aclose()

    async def aclose(self) -> None:
        await self._client.aclose()

    async def get(self, url: URLTypes, **kwargs: Unpack[RequestOptions]) -> httpx.Response:
        if self._limiter is None:
            return await self._client.get(url, **kwargs)
        async with self._limiter:
            return await self._client.get(url, **kwargs)


class _PayloadCacheFilter(BaseFilter[HishelCacheResponse]):
    """Hishel response filter deciding cacheability from the decoded JSON body."""

    def __init__(self, predicate: ShouldCacheHook) -> None:
        self._predicate = predicate

    def needs_body(self) -> bool:
        return True

    def apply(self, item: HishelCacheResponse, body: bytes | None) -> bool:  # noqa: ARG002
        if body is None:
            return False
        try:
            payload = json.loads(body.decode("utf-8"))
        except (UnicodeDecodeError, json.JSONDecodeError):
            return False
        return bool(self._predicate(payload))


def _build_cache_components(
    config: CacheConfig | None,
) -> tuple[AsyncSqliteStorage | None, FilterPolicy | None]:
    if config is None or not config.enabled:
        return None, None

    match config.backend:
        case "sqlite":
            database_path = config.sqlite_path or str(get_storage_config().http_cache_path())
        case "memory":
            database_path = ":memory:"
        case _:
            raise ValueError(f"Unsupported cache backend: {config.backend}")

    storage = AsyncSqliteStorage(
        database_path=database_path,
        default_ttl=config.default_ttl_seconds,
        refresh_ttl_on_access=config.refresh_ttl_on_access,
    )
    policy = (
        FilterPolicy(response_filters=[_PayloadCacheFilter(config.should_cache)])
        if config.should_cache is not None
        else None
    )
    return storage, policy


__all__ = [
    "CacheConfig",
    "RateLimit",
    "ResilienceConfig",
    "ResilientClient",
    "RetryPolicy",
    "RetryablePayloadError",
    "build_async_client",
    "build_retry",
]
