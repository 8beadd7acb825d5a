"""Resilient HTTP+JSON fetch layer.

Retries, backoff, response caching and in-flight de-duplication. Knows nothing
about weather.
"""

from powdercast.fetch.client import (
    CacheEntry,
    FetchClient,
    FetchStats,
    RetryPolicy,
    build_url,
    clear_fetch_cache,
    fetch_json,
    get_fetch_client,
    parse_retry_after_ms,
    request_key,
    retry_delay_ms,
)
from powdercast.fetch.errors import (
    FetchError,
    HTTPStatusError,
    PayloadError,
    TransportError,
    UpstreamError,
    is_retryable_status,
)

__all__ = [
    "CacheEntry",
    "FetchClient",
    "FetchError",
    "FetchStats",
    "HTTPStatusError",
    "PayloadError",
    "RetryPolicy",
    "TransportError",
    "UpstreamError",
    "build_url",
    "clear_fetch_cache",
    "fetch_json",
    "get_fetch_client",
    "is_retryable_status",
    "parse_retry_after_ms",
    "request_key",
    "retry_delay_ms",
]
