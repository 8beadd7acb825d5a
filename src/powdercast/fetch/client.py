"""Resilient async HTTP+JSON client.

Wraps ``httpx.AsyncClient`` with:

- retries on transport failures, HTTP 429 and 5xx with exponential backoff
  (``Retry-After`` can lengthen a delay, never shorten it)
- a TTL response cache keyed by request identity
- in-flight de-duplication: concurrent identical requests share one task

The cache and in-flight maps are only touched between awaits, so under asyncio
every check-then-insert sequence is atomic with respect to other tasks.

Example:
    >>> async with FetchClient() as client:
    ...     data = await client.fetch_json(url, policy=RetryPolicy(label="Open-Meteo"))
"""

import asyncio
import functools
import json
import logging
import math
import time
from dataclasses import dataclass
from datetime import datetime, timezone
from email.utils import parsedate_to_datetime
from typing import Any, Awaitable, Callable, Optional

import httpx

from powdercast.config import (
    DEFAULT_BASE_DELAY_MS,
    DEFAULT_CACHE_TTL_MS,
    DEFAULT_MAX_DELAY_MS,
    DEFAULT_MAX_RETRIES,
    HTTP_TIMEOUT_S,
    USER_AGENT,
)
from powdercast.fetch.errors import (
    FetchError,
    HTTPStatusError,
    PayloadError,
    TransportError,
    UpstreamError,
)

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class RetryPolicy:
    """Retry, backoff and caching settings for one request.

    Attributes:
        max_retries: Retries after the first attempt (total attempts = max_retries + 1)
        base_delay_ms: Backoff delay for the first retry
        max_delay_ms: Ceiling for the exponential backoff
        label: Name used in log lines and error messages
        cache_ttl_ms: Response cache lifetime; 0 disables caching and de-duplication
    """

    max_retries: int = DEFAULT_MAX_RETRIES
    base_delay_ms: int = DEFAULT_BASE_DELAY_MS
    max_delay_ms: int = DEFAULT_MAX_DELAY_MS
    label: str = "HTTP"
    cache_ttl_ms: int = DEFAULT_CACHE_TTL_MS


@dataclass
class CacheEntry:
    """Cached JSON payload with an absolute expiry on the client's clock."""

    data: Any
    expires_at: float


@dataclass
class FetchStats:
    """Counters for observability and tests."""

    network_attempts: int = 0
    cache_hits: int = 0
    deduplicated: int = 0


def parse_retry_after_ms(value: Optional[str], now: Optional[datetime] = None) -> Optional[int]:
    """Parse a ``Retry-After`` value into milliseconds.

    Accepts delay-seconds (``"120"``, ``"1.5"``) or an absolute timestamp
    (HTTP-date or ISO-8601). Returns None for missing, unparsable or negative
    values. Timestamps in the past yield 0.
    """
    if value is None:
        return None
    value = value.strip()
    if not value:
        return None

    try:
        seconds = float(value)
    except ValueError:
        seconds = None
    if seconds is not None:
        if math.isfinite(seconds) and seconds >= 0:
            return round(seconds * 1000)
        return None

    retry_at = _parse_timestamp(value)
    if retry_at is None:
        return None
    now = now or datetime.now(timezone.utc)
    return max(0, round((retry_at - now).total_seconds() * 1000))


def _parse_timestamp(value: str) -> Optional[datetime]:
    try:
        parsed = parsedate_to_datetime(value)
    except (TypeError, ValueError, IndexError):
        parsed = None
    if parsed is None:
        try:
            parsed = datetime.fromisoformat(value.replace("Z", "+00:00"))
        except ValueError:
            return None
    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=timezone.utc)
    return parsed


def retry_delay_ms(
    attempt: int,
    base_delay_ms: int,
    max_delay_ms: int,
    retry_after: Optional[str] = None,
) -> int:
    """Backoff before retry number ``attempt`` (0-based).

    ``min(base * 2**attempt, max)``, raised to the server hint when the hint
    is larger.
    """
    exponential = min(base_delay_ms * (2 ** attempt), max_delay_ms)
    hint = parse_retry_after_ms(retry_after)
    return max(exponential, hint or 0)


def build_url(url: str, params: Optional[dict] = None) -> str:
    """Full request URL with query parameters merged in."""
    request_url = httpx.URL(url)
    if params:
        request_url = request_url.copy_merge_params(params)
    return str(request_url)


def request_key(method: str, url: str, body: Any = None) -> str:
    """Cache identity of a request: the URL for GET, method+URL+body otherwise."""
    method = method.upper()
    if method == "GET":
        return url
    encoded = json.dumps(body, sort_keys=True, separators=(",", ":")) if body is not None else ""
    return f"{method} {url} {encoded}"


def decode_json(response: httpx.Response, label: str) -> Any:
    """Decode a successful response, rejecting upstream error bodies.

    Raises:
        PayloadError: If the body is not JSON
        UpstreamError: If the body is an ``{"error": true, "reason": ...}`` object
    """
    try:
        data = response.json()
    except ValueError as e:
        raise PayloadError(f"{label}: response is not valid JSON", label) from e

    if isinstance(data, dict) and data.get("error"):
        raise UpstreamError(label, str(data.get("reason") or "unknown error"))
    return data


def _error_detail(response: httpx.Response) -> Optional[str]:
    """Upstream reason text from an error body, when it has one."""
    try:
        body = response.json()
    except ValueError:
        return None
    if isinstance(body, dict) and body.get("reason"):
        return str(body["reason"])
    return None


class FetchClient:
    """Async JSON client with retry, TTL cache and in-flight de-duplication.

    Args:
        client: ``httpx.AsyncClient`` to use. When omitted one is created lazily
            and closed by ``aclose()``.
        clock: Monotonic clock in seconds, used for cache expiry
        sleep: Coroutine used for backoff delays (seconds)
    """

    def __init__(
        self,
        client: Optional[httpx.AsyncClient] = None,
        clock: Callable[[], float] = time.monotonic,
        sleep: Callable[[float], Awaitable[None]] = asyncio.sleep,
    ):
        self._client = client
        self._owns_client = client is None
        self._clock = clock
        self._sleep = sleep
        self._cache: dict[str, CacheEntry] = {}
        self._inflight: dict[str, asyncio.Task] = {}
        self.stats = FetchStats()

    @property
    def client(self) -> httpx.AsyncClient:
        """Underlying HTTP client (created on first use)."""
        if self._client is None:
            self._client = httpx.AsyncClient(
                timeout=HTTP_TIMEOUT_S,
                headers={"User-Agent": USER_AGENT},
                follow_redirects=True,
            )
        return self._client

    async def aclose(self) -> None:
        """Close the HTTP client if this instance created it."""
        if self._owns_client and self._client is not None:
            await self._client.aclose()
            self._client = None

    async def __aenter__(self) -> "FetchClient":
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb) -> None:
        await self.aclose()

    @property
    def cache_size(self) -> int:
        """Number of cached entries (expired ones included until next access)."""
        return len(self._cache)

    @property
    def inflight_count(self) -> int:
        """Number of requests currently on the wire."""
        return len(self._inflight)

    def clear(self) -> None:
        """Drop every cached response.

        In-flight requests are left running; they complete normally and
        populate the emptied cache.
        """
        dropped = len(self._cache)
        self._cache.clear()
        logger.info(f"Cleared {dropped} cached responses")

    async def fetch_json(
        self,
        url: str,
        *,
        method: str = "GET",
        params: Optional[dict] = None,
        json_body: Any = None,
        headers: Optional[dict] = None,
        policy: Optional[RetryPolicy] = None,
    ) -> Any:
        """Fetch and decode a JSON document.

        Args:
            url: Request URL
            method: HTTP method
            params: Query parameters merged into the URL
            json_body: JSON request body for non-GET requests
            headers: Extra request headers
            policy: Retry/cache policy (defaults from config)

        Returns:
            Decoded JSON value

        Raises:
            HTTPStatusError: Non-retryable status, or retries exhausted on an HTTP error
            TransportError: Retries exhausted on a network failure
            PayloadError: Body is not JSON or is an upstream error object
        """
        policy = policy or RetryPolicy()
        request_url = build_url(url, params)

        if policy.cache_ttl_ms <= 0:
            return await self._fetch_with_retry(method, request_url, json_body, headers, policy)

        key = request_key(method, request_url, json_body)

        entry = self._cache.get(key)
        if entry is not None:
            if self._clock() < entry.expires_at:
                self.stats.cache_hits += 1
                logger.debug(f"Cache HIT for {policy.label} ({request_url})")
                return entry.data
            del self._cache[key]
            logger.debug(f"Cache entry expired for {policy.label} ({request_url})")

        task = self._inflight.get(key)
        if task is None:
            task = asyncio.ensure_future(
                self._fetch_with_retry(method, request_url, json_body, headers, policy)
            )
            self._inflight[key] = task
            task.add_done_callback(functools.partial(self._settle, key, policy.cache_ttl_ms))
        else:
            self.stats.deduplicated += 1
            logger.debug(f"Joining in-flight request for {policy.label} ({request_url})")

        # Shielded so one caller giving up does not abort the shared request
        return await asyncio.shield(task)

    def _settle(self, key: str, ttl_ms: int, task: asyncio.Task) -> None:
        """Done-callback: release the in-flight slot and cache a success."""
        if self._inflight.get(key) is task:
            del self._inflight[key]
        if task.cancelled() or task.exception() is not None:
            return
        self._cache[key] = CacheEntry(task.result(), self._clock() + ttl_ms / 1000.0)

    async def _fetch_with_retry(
        self,
        method: str,
        url: str,
        json_body: Any,
        headers: Optional[dict],
        policy: RetryPolicy,
    ) -> Any:
        label = policy.label
        last_error: Optional[FetchError] = None

        for attempt in range(policy.max_retries + 1):
            self.stats.network_attempts += 1
            try:
                response = await self.client.request(method, url, json=json_body, headers=headers)
            except httpx.TransportError as e:
                error = TransportError(f"{label} request failed: {e!r}", label)
                if attempt == policy.max_retries:
                    logger.error(f"{label}: all {attempt + 1} attempts failed: {e!r}")
                    raise error from e
                last_error = error
                delay_ms = retry_delay_ms(attempt, policy.base_delay_ms, policy.max_delay_ms)
                logger.warning(
                    f"{label} attempt {attempt + 1} failed: {e!r}. Retrying in {delay_ms}ms..."
                )
                await self._sleep(delay_ms / 1000.0)
                continue

            if response.is_success:
                return decode_json(response, label)

            error = HTTPStatusError(
                label,
                response.status_code,
                response.reason_phrase,
                retry_after=response.headers.get("Retry-After"),
                detail=_error_detail(response),
            )
            if not error.retryable or attempt == policy.max_retries:
                logger.error(str(error))
                raise error

            last_error = error
            delay_ms = retry_delay_ms(
                attempt, policy.base_delay_ms, policy.max_delay_ms, error.retry_after
            )
            logger.warning(
                f"{label} attempt {attempt + 1} got HTTP {response.status_code}. "
                f"Retrying in {delay_ms}ms..."
            )
            await self._sleep(delay_ms / 1000.0)

        raise last_error or FetchError(f"{label} request failed", label)


# Process-wide client shared by every forecast computation
_default_client: Optional[FetchClient] = None


def get_fetch_client() -> FetchClient:
    """Get or create the shared fetch client."""
    global _default_client
    if _default_client is None:
        _default_client = FetchClient()
    return _default_client


async def fetch_json(url: str, **kwargs) -> Any:
    """``FetchClient.fetch_json`` on the shared client."""
    return await get_fetch_client().fetch_json(url, **kwargs)


def clear_fetch_cache() -> None:
    """Drop every response cached by the shared client."""
    if _default_client is not None:
        _default_client.clear()
