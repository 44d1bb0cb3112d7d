"""
Tests for RateLimitedClient.

Tests cover:
- Minimum spacing between requests (fake clock)
- TTL cache hits bypassing network and limiter
- Soft vs strict failure handling (404, non-2xx, non-JSON)
- Retry with backoff on 429
"""
import httpx
import pytest

from app.core.errors import MalformedUpstream, NotFound, UpstreamUnavailable
from app.core.upstream import RateLimitedClient

from conftest import FakeClock, Recorder, json_response


def make_client(routes, clock: FakeClock, **kwargs) -> RateLimitedClient:
    recorder = Recorder(routes, clock)
    client = RateLimitedClient(
        "https://api.example.test/v1",
        transport=httpx.MockTransport(recorder),
        clock=clock,
        sleep=clock.sleep,
        **kwargs,
    )
    client.recorder = recorder
    return client


# =============================================================
# TEST: Pacing
# =============================================================

class TestRateLimiting:
    """Requests through one client are spaced by min_interval."""

    @pytest.mark.asyncio
    async def test_back_to_back_calls_are_spaced(self, clock):
        client = make_client({"items": json_response([1])}, clock, min_interval=2.0, cache_ttl=0)

        await client.fetch("items", {"page": 1})
        await client.fetch("items", {"page": 2})

        first, second = client.recorder.timestamps
        assert second - first >= 2.0
        assert clock.sleeps == [pytest.approx(2.0)]

    @pytest.mark.asyncio
    async def test_no_wait_when_interval_already_elapsed(self, clock):
        client = make_client({"items": json_response([1])}, clock, min_interval=1.0, cache_ttl=0)

        await client.fetch("items", {"page": 1})
        clock.advance(5.0)
        await client.fetch("items", {"page": 2})

        assert clock.sleeps == []

    @pytest.mark.asyncio
    async def test_limiter_is_shared_across_endpoints(self, clock):
        client = make_client(
            {"a": json_response({"a": 1}), "b": json_response({"b": 1})},
            clock,
            min_interval=1.5,
        )

        await client.fetch("a")
        await client.fetch("b")

        first, second = client.recorder.timestamps
        assert second - first >= 1.5

    @pytest.mark.asyncio
    async def test_separate_clients_do_not_share_limiter(self, clock):
        one = make_client({"items": json_response([1])}, clock, min_interval=3.0)
        two = make_client({"items": json_response([1])}, clock, min_interval=3.0)

        await one.fetch("items")
        await two.fetch("items")

        assert clock.sleeps == []


# =============================================================
# TEST: Cache
# =============================================================

class TestCache:
    """TTL cache keyed by endpoint + params."""

    @pytest.mark.asyncio
    async def test_cache_hit_skips_network_and_limiter(self, clock):
        client = make_client({"items": json_response([1, 2])}, clock, min_interval=2.0, cache_ttl=60)

        first = await client.fetch("items", {"page": 1})
        second = await client.fetch("items", {"page": 1})

        assert first == second == [1, 2]
        assert len(client.recorder.requests) == 1
        assert clock.sleeps == []

    @pytest.mark.asyncio
    async def test_different_params_are_separate_entries(self, clock):
        client = make_client({"items": json_response([1])}, clock, cache_ttl=60)

        await client.fetch("items", {"page": 1})
        await client.fetch("items", {"page": 2})

        assert len(client.recorder.requests) == 2

    @pytest.mark.asyncio
    async def test_entry_expires_after_ttl(self, clock):
        client = make_client({"items": json_response([1])}, clock, cache_ttl=300)

        await client.fetch("items")
        clock.advance(301)
        await client.fetch("items")

        assert len(client.recorder.requests) == 2

    @pytest.mark.asyncio
    async def test_write_sweeps_expired_entries(self, clock):
        client = make_client({"items": json_response([1])}, clock, cache_ttl=300)

        await client.fetch("items", {"search": "zelda"})
        clock.advance(301)
        await client.fetch("items", {"search": "mario"})

        assert list(client._cache) == [RateLimitedClient.cache_key("items", {"search": "mario"})]

    def test_cache_key_ignores_param_order(self):
        a = RateLimitedClient.cache_key("deals", {"b": 2, "a": 1})
        b = RateLimitedClient.cache_key("deals", {"a": 1, "b": 2})
        assert a == b

    @pytest.mark.asyncio
    async def test_default_params_sent_but_not_part_of_key(self, clock):
        client = make_client(
            {"items": json_response([1])}, clock, default_params={"key": "secret"}, cache_ttl=60
        )

        await client.fetch("items", {"page": 1})

        request = client.recorder.requests[0]
        assert request.url.params["key"] == "secret"
        assert all("secret" not in k for k in client._cache)


# =============================================================
# TEST: Failures
# =============================================================

class TestFailures:
    """Soft mode returns None; strict mode raises typed errors."""

    @pytest.mark.asyncio
    async def test_no_attempts_is_unavailable(self, clock):
        client = make_client({"items": json_response([1])}, clock, max_retries=-1)

        with pytest.raises(UpstreamUnavailable):
            await client.fetch("items", strict=True)
        assert client.recorder.requests == []

    @pytest.mark.asyncio
    async def test_non_2xx_is_soft_failure(self, clock):
        client = make_client({"items": json_response({"oops": 1}, status=500)}, clock)
        assert await client.fetch("items") is None

    @pytest.mark.asyncio
    async def test_non_json_is_soft_failure(self, clock):
        client = make_client(
            {"items": lambda r: httpx.Response(200, text="<html>maintenance</html>")}, clock
        )
        assert await client.fetch("items") is None

    @pytest.mark.asyncio
    async def test_strict_404_raises_not_found(self, clock):
        client = make_client({"items": json_response({"detail": "gone"}, status=404)}, clock)
        with pytest.raises(NotFound):
            await client.fetch("items", strict=True)

    @pytest.mark.asyncio
    async def test_strict_500_raises_unavailable(self, clock):
        client = make_client({"items": json_response({}, status=502)}, clock)
        with pytest.raises(UpstreamUnavailable) as exc_info:
            await client.fetch("items", strict=True)
        assert exc_info.value.status_code == 502

    @pytest.mark.asyncio
    async def test_strict_non_json_raises_malformed(self, clock):
        client = make_client({"items": lambda r: httpx.Response(200, text="plain")}, clock)
        with pytest.raises(MalformedUpstream):
            await client.fetch("items", strict=True)

    @pytest.mark.asyncio
    async def test_network_error_raises_unavailable(self, clock):
        def boom(request):
            raise httpx.ConnectError("refused", request=request)

        client = make_client({"items": boom}, clock)
        with pytest.raises(UpstreamUnavailable):
            await client.fetch("items", strict=True)
        assert await client.fetch("items") is None

    @pytest.mark.asyncio
    async def test_failures_are_not_cached(self, clock):
        client = make_client({"items": json_response({}, status=500)}, clock, cache_ttl=60)
        await client.fetch("items")
        await client.fetch("items")
        assert len(client.recorder.requests) == 2


# =============================================================
# TEST: Retries
# =============================================================

class TestRetries:
    """429/503 are retried with backoff, each attempt paced again."""

    @pytest.mark.asyncio
    async def test_retry_after_header_is_honoured(self, clock):
        responses = [
            httpx.Response(429, headers={"Retry-After": "3"}, json={}),
            httpx.Response(200, json={"ok": True}),
        ]
        client = make_client({"items": lambda r: responses.pop(0)}, clock, max_retries=2)

        data = await client.fetch("items")

        assert data == {"ok": True}
        assert len(client.recorder.requests) == 2
        assert 3.0 in clock.sleeps

    @pytest.mark.asyncio
    async def test_gives_up_after_max_retries(self, clock):
        client = make_client({"items": json_response({}, status=503)}, clock, max_retries=1)

        assert await client.fetch("items") is None
        assert len(client.recorder.requests) == 2
