"""Retry, rate-limit and cache settings shared by the outbound HTTP clients."""

from __future__ import annotations

from collections.abc import Awaitable, Callable
from dataclasses import dataclass, field, replace
from typing import TYPE_CHECKING, Literal

import httpx

if TYPE_CHECKING:
    from collections.abc import Mapping

ResponseHook = Callable[[httpx.Response], Awaitable[None] | None]
ShouldCacheHook = Callable[[object], bool]

READ_ONLY_METHODS: frozenset[str] = frozenset({"GET", "HEAD"})
TRANSIENT_STATUSES: frozenset[int] = frozenset({429, 500, 502, 503, 504})


class RetryablePayloadError(httpx.HTTPError):
    """A 200 response whose body signals a transient upstream condition."""

    def __init__(self, message: str, *, response: httpx.Response) -> None:
        super().__init__(message)
        self.response = response


@dataclass(slots=True, frozen=True)
class RetryPolicy:
    """Exponential backoff for idempotent reads.

    ``total`` counts retries after the first attempt, so ``total=0`` sends each
    request exactly once.
    """

    total: int = 4
    backoff_factor: float = 0.5
    max_backoff_wait: float = 60.0
    backoff_jitter: float = 1.0
    respect_retry_after_header: bool = True
    allowed_methods: frozenset[str] = READ_ONLY_METHODS
    status_forcelist: frozenset[int] = TRANSIENT_STATUSES
    retry_on_exceptions: tuple[type[httpx.HTTPError], ...] = (
        httpx.TimeoutException,
        httpx.NetworkError,
        httpx.RemoteProtocolError,
        RetryablePayloadError,
    )

    @classmethod
    def disabled(cls) -> RetryPolicy:
        return cls(total=0, backoff_factor=0.0, backoff_jitter=0.0)


@dataclass(slots=True, frozen=True)
class RateLimit:
    """At most ``max_calls`` requests per ``per_seconds`` window."""

    max_calls: int
    per_seconds: float = 1.0

    def __post_init__(self) -> None:
        if self.max_calls < 1 or self.per_seconds <= 0:
            raise ValueError(f"Invalid rate limit {self.max_calls}/{self.per_seconds}s")


@dataclass(slots=True, frozen=True)
class CacheConfig:
    enabled: bool = True
    backend: Literal["sqlite", "memory"] = "memory"
    sqlite_path: str | None = None
    default_ttl_seconds: float | None = None
    refresh_ttl_on_access: bool = True
    should_cache: ShouldCacheHook | None = None


@dataclass(slots=True, frozen=True)
class ResilienceConfig:
    name: str
    base_url: str | None = None
    timeout_seconds: float = 30.0
    retry: RetryPolicy = field(default_factory=RetryPolicy)
    ratelimit: RateLimit | None = None
    # opt-in per client; transaction pages must never be served from cache
    cache: CacheConfig | None = None
    response_hooks: tuple[ResponseHook, ...] = field(default_factory=tuple)
    default_headers: Mapping[str, str] | None = None

    @property
    def caches_responses(self) -> bool:
        return self.cache is not None and self.cache.enabled

    def with_cache_filter(self, predicate: ShouldCacheHook) -> ResilienceConfig:
        """Return a copy whose cache only stores payloads ``predicate`` accepts.

        A filter that is already configured wins; a config without a cache is
        returned unchanged.
        """

        if self.cache is None or self.cache.should_cache is not None:
            return self
        return replace(self, cache=replace(self.cache, should_cache=predicate))

    def without_retries(self) -> ResilienceConfig:
        return replace(self, retry=RetryPolicy.disabled())
