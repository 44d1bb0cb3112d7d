import asyncio
import json
import logging
import random
import time
from typing import Any, Awaitable, Callable, Dict, Optional, Tuple

import httpx

from app.core.config import settings
from app.core.errors import MalformedUpstream, NotFound, UpstreamError, UpstreamUnavailable

logger = logging.getLogger(__name__)

Clock = Callable[[], float]
Sleep = Callable[[float], Awaitable[None]]

RETRYABLE_STATUSES = (429, 503)


class RateLimitedClient:
    """
    Wraps one upstream JSON API with request pacing and a short-TTL in-memory cache.

    - Every network request goes through a single limiter per instance: requests are
      spaced at least `min_interval` seconds apart, in total order, whatever the endpoint.
    - Responses are cached by endpoint + serialized params (default params such as
      API keys are not part of the key). A cache hit skips both the network and the limiter.
    - `fetch()` is soft by default: failures are logged and `None` is returned.
      Pass `strict=True` to get a typed `UpstreamError` instead (NotFound for 404).

    The limiter timestamp and cache are owned by the instance; one instance per
    upstream is shared for the lifetime of the process.
    """

    source = "upstream"

    def __init__(
        self,
        base_url: str,
        *,
        min_interval: float = 0.0,
        cache_ttl: float = 300.0,
        timeout: float = 20.0,
        max_retries: int = 2,
        max_backoff: float = 10.0,
        default_params: Optional[Dict[str, Any]] = None,
        headers: Optional[Dict[str, str]] = None,
        transport: Optional[httpx.AsyncBaseTransport] = None,
        clock: Clock = time.monotonic,
        sleep: Sleep = asyncio.sleep,
    ):
        self.base_url = base_url.rstrip("/")
        self.min_interval = min_interval
        self.cache_ttl = cache_ttl
        self.timeout = timeout
        self.max_retries = max_retries
        self.max_backoff = max_backoff
        self._default_params = dict(default_params or {})
        self._headers = headers or {
            "User-Agent": settings.USER_AGENT,
            "Accept": "application/json",
        }
        self._transport = transport
        self._clock = clock
        self._sleep = sleep

        self._last_request_at: Optional[float] = None
        self._cache: Dict[str, Tuple[float, Any]] = {}
        self._lock = asyncio.Lock()

    # ----- cache -----

    @staticmethod
    def cache_key(endpoint: str, params: Optional[Dict[str, Any]]) -> str:
        return f"{endpoint}?{json.dumps(params or {}, sort_keys=True, default=str)}"

    def _get_cached(self, key: str) -> Optional[Any]:
        entry = self._cache.get(key)
        if entry is None:
            return None
        stored_at, data = entry
        if self._clock() - stored_at >= self.cache_ttl:
            del self._cache[key]
            return None
        logger.debug("[%s] cache hit for %s", self.source, key)
        return data

    def _set_cached(self, key: str, data: Any) -> None:
        now = self._clock()
        # Sweep expired entries on every write.
        expired = [k for k, (stored_at, _) in self._cache.items() if now - stored_at >= self.cache_ttl]
        for k in expired:
            del self._cache[k]
        self._cache[key] = (now, data)

    # ----- pacing -----

    async def _wait_for_slot(self) -> None:
        """Blocks until `min_interval` has passed since the previous request."""
        async with self._lock:
            if self._last_request_at is not None:
                elapsed = self._clock() - self._last_request_at
                if elapsed < self.min_interval:
                    wait = self.min_interval - elapsed
                    logger.debug("[%s] rate limiting: waiting %.3fs", self.source, wait)
                    await self._sleep(wait)
            self._last_request_at = self._clock()

    async def _sleep_for_retry(self, resp: httpx.Response, attempt: int) -> None:
        """
        Respect Retry-After header when present; otherwise exponential backoff with jitter.
        """
        retry_after = resp.headers.get("retry-after")
        if retry_after:
            try:
                wait = max(0.5, min(float(retry_after), self.max_backoff))
                await self._sleep(wait)
                return
            except ValueError:
                pass

        base = min(self.max_backoff, 2 ** attempt)
        await self._sleep(base + random.uniform(0.0, 0.5))

    # ----- requests -----

    async def _request(self, endpoint: str, params: Dict[str, Any]) -> httpx.Response:
        query = {**self._default_params, **params}
        url = f"{self.base_url}/{endpoint.lstrip('/')}"

        async with httpx.AsyncClient(
            timeout=self.timeout,
            headers=self._headers,
            transport=self._transport,
            follow_redirects=True,
        ) as client:
            resp: Optional[httpx.Response] = None
            for attempt in range(self.max_retries + 1):
                await self._wait_for_slot()
                try:
                    resp = await client.get(url, params=query)
                except httpx.HTTPError as e:
                    raise UpstreamUnavailable(
                        self.source, f"{type(e).__name__} calling {endpoint}"
                    ) from e

                if resp.status_code in RETRYABLE_STATUSES and attempt < self.max_retries:
                    logger.warning(
                        "⚠️ [%s] %s returned %s (attempt %d/%d), backing off",
                        self.source, endpoint, resp.status_code, attempt + 1, self.max_retries + 1,
                    )
                    await self._sleep_for_retry(resp, attempt)
                    continue
                break

        if resp is None:
            raise UpstreamUnavailable(self.source, f"No request was issued for {endpoint}")
        return resp

    def _decode(self, endpoint: str, resp: httpx.Response) -> Any:
        if resp.status_code == 404:
            raise NotFound(self.source, f"{endpoint} was not found", status_code=404)
        if resp.status_code < 200 or resp.status_code >= 300:
            raise UpstreamUnavailable(
                self.source,
                f"{endpoint} failed with status {resp.status_code}",
                status_code=resp.status_code,
            )

        content_type = resp.headers.get("content-type", "")
        if "json" not in content_type.lower():
            raise MalformedUpstream(
                self.source,
                f"{endpoint} returned non-JSON content ({content_type or 'no content-type'})",
                status_code=resp.status_code,
            )
        try:
            return resp.json()
        except ValueError as e:
            raise MalformedUpstream(
                self.source, f"{endpoint} returned invalid JSON", status_code=resp.status_code
            ) from e

    async def fetch(
        self,
        endpoint: str,
        params: Optional[Dict[str, Any]] = None,
        *,
        strict: bool = False,
    ) -> Optional[Any]:
        """
        GET `endpoint` (relative to base_url) and return the decoded JSON payload.

        Soft mode returns None on any UpstreamError. Strict mode re-raises it.
        """
        params = {k: v for k, v in (params or {}).items() if v is not None}
        key = self.cache_key(endpoint, params)

        cached = self._get_cached(key)
        if cached is not None:
            return cached

        try:
            resp = await self._request(endpoint, params)
            data = self._decode(endpoint, resp)
        except UpstreamError as e:
            if strict:
                raise
            logger.warning("⚠️ [%s] %s", self.source, e.message)
            return None

        self._set_cached(key, data)
        return data
