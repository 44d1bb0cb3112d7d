import logging
from typing import Any, Dict, List, Optional

import httpx

from app.core.config import settings
from app.core.upstream import RateLimitedClient

logger = logging.getLogger(__name__)


class GameSpotClient(RateLimitedClient):
    """
    Reviews + game lookups (key-authenticated, paced client-side).
    GameSpot wraps every payload in {"error": "OK", "results": ...}; anything but
    "OK" is treated as a soft failure.
    """

    source = "gamespot"

    def __init__(
        self,
        api_key: Optional[str] = None,
        transport: Optional[httpx.AsyncBaseTransport] = None,
        **kwargs: Any,
    ):
        key = (api_key if api_key is not None else settings.GAMESPOT_API_KEY).strip()
        if not key:
            logger.warning("GAMESPOT_API_KEY is not set; review requests will likely be rejected")

        kwargs.setdefault("min_interval", settings.GAMESPOT_MIN_INTERVAL_SECONDS)
        kwargs.setdefault("cache_ttl", settings.GAMESPOT_CACHE_TTL_SECONDS)
        kwargs.setdefault("timeout", settings.HTTP_TIMEOUT_SECONDS)
        kwargs.setdefault("max_retries", settings.UPSTREAM_MAX_RETRIES)
        kwargs.setdefault("max_backoff", settings.UPSTREAM_MAX_BACKOFF_SECONDS)
        super().__init__(
            settings.GAMESPOT_BASE_URL,
            default_params={"api_key": key, "format": "json"},
            transport=transport,
            **kwargs,
        )

    def _unwrap(self, what: str, data: Any) -> Optional[Dict[str, Any]]:
        if not isinstance(data, dict):
            return None
        error = data.get("error")
        if error and error != "OK":
            logger.warning("⚠️ [gamespot] %s error: %s", what, error)
            return None
        return data

    async def get_reviews(
        self,
        limit: int = 20,
        offset: int = 0,
        search: Optional[str] = None,
    ) -> Optional[Dict[str, Any]]:
        params = {
            "limit": limit,
            "offset": offset,
            "sort": "publish_date:desc",
            "filter": f"title:{search}" if search else None,
        }
        data = await self.fetch("reviews/", params)
        return self._unwrap("reviews", data)

    async def get_game_details(self, game_id: Any) -> Optional[Dict[str, Any]]:
        data = await self.fetch(
            f"games/{game_id}/",
            {"field_list": "id,name,image,deck,genres,platforms"},
        )
        data = self._unwrap(f"game {game_id}", data)
        if data is None:
            return None
        results = data.get("results")
        return results if isinstance(results, dict) else None

    async def search_games(self, query: str) -> List[Dict[str, Any]]:
        data = await self.fetch(
            "search/",
            {
                "query": query,
                "resources": "game",
                "limit": 10,
                "field_list": "id,name,image,deck",
            },
        )
        data = self._unwrap(f"search '{query}'", data)
        if data is None:
            return []
        results = data.get("results")
        return [r for r in results if isinstance(r, dict)] if isinstance(results, list) else []
