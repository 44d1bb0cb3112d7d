"""
Process-wide upstream clients.

Each upstream owns one RateLimitedClient (limiter timestamp + cache). Routes get
them through these providers; tests swap them via `app.dependency_overrides`.
"""
from functools import lru_cache

from app.core.cheapshark import CheapSharkClient
from app.core.gamespot import GameSpotClient
from app.core.rawg import RawgClient
from app.core.steam_news import SteamNewsClient


@lru_cache
def get_cheapshark_client() -> CheapSharkClient:
    return CheapSharkClient()


@lru_cache
def get_rawg_client() -> RawgClient:
    return RawgClient()


@lru_cache
def get_gamespot_client() -> GameSpotClient:
    return GameSpotClient()


@lru_cache
def get_steam_news_client() -> SteamNewsClient:
    return SteamNewsClient()
