"""
Shared fixtures: a fake clock for the rate limiter and helpers that wire
upstream clients to httpx.MockTransport handlers.
"""
from typing import Callable, Dict, List

import httpx
import pytest

from app.core.cheapshark import CheapSharkClient
from app.core.gamespot import GameSpotClient
from app.core.rawg import RawgClient
from app.core.steam_news import SteamNewsClient


class FakeClock:
    """Monotonic clock whose sleep() advances time instead of waiting."""

    def __init__(self, start: float = 1000.0):
        self.now = start
        self.sleeps: List[float] = []

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += seconds

    async def sleep(self, seconds: float) -> None:
        self.sleeps.append(seconds)
        self.now += seconds


class Recorder:
    """MockTransport handler that records requests and routes them by path."""

    def __init__(self, routes: Dict[str, Callable[[httpx.Request], httpx.Response]], clock=None):
        self.routes = routes
        self.clock = clock
        self.requests: List[httpx.Request] = []
        self.timestamps: List[float] = []

    def __call__(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        if self.clock is not None:
            self.timestamps.append(self.clock())
        for suffix, responder in self.routes.items():
            if request.url.path.rstrip("/").endswith(suffix.rstrip("/")):
                return responder(request)
        return httpx.Response(404, json={"detail": "no route"})

    def paths(self) -> List[str]:
        return [r.url.path for r in self.requests]


def json_response(payload, status: int = 200) -> Callable[[httpx.Request], httpx.Response]:
    return lambda request: httpx.Response(status, json=payload)


def client_kwargs(recorder: Recorder, clock: FakeClock) -> dict:
    return {
        "transport": httpx.MockTransport(recorder),
        "clock": clock,
        "sleep": clock.sleep,
        "min_interval": 0.0,
        "max_retries": 0,
    }


@pytest.fixture
def clock() -> FakeClock:
    return FakeClock()


@pytest.fixture
def make_cheapshark(clock):
    def factory(routes, **overrides) -> CheapSharkClient:
        recorder = Recorder(routes, clock)
        kwargs = {**client_kwargs(recorder, clock), **overrides}
        client = CheapSharkClient(**kwargs)
        client.recorder = recorder
        return client
    return factory


@pytest.fixture
def make_rawg(clock):
    def factory(routes, **overrides) -> RawgClient:
        recorder = Recorder(routes, clock)
        kwargs = {**client_kwargs(recorder, clock), **overrides}
        client = RawgClient(api_key="test-key", **kwargs)
        client.recorder = recorder
        return client
    return factory


@pytest.fixture
def make_gamespot(clock):
    def factory(routes, **overrides) -> GameSpotClient:
        recorder = Recorder(routes, clock)
        kwargs = {**client_kwargs(recorder, clock), **overrides}
        client = GameSpotClient(api_key="test-key", **kwargs)
        client.recorder = recorder
        return client
    return factory


@pytest.fixture
def make_steam_news(clock):
    def factory(routes, **overrides) -> SteamNewsClient:
        recorder = Recorder(routes, clock)
        kwargs = {**client_kwargs(recorder, clock), **overrides}
        client = SteamNewsClient(**kwargs)
        client.recorder = recorder
        return client
    return factory
