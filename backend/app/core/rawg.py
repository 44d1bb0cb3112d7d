import logging
from typing import Any, Dict, Optional

import httpx

from app.core.config import settings
from app.core.errors import NotFound
from app.core.upstream import RateLimitedClient

logger = logging.getLogger(__name__)

# Platform aliases accepted by /games -> RAWG platform ids
PLATFORM_IDS: Dict[str, str] = {
    "pc": "4",
    "playstation": "187,18,16,15",
    "xbox": "1,186,14",
    "nintendo": "7,8,9,13,83",
}


class RawgClient(RateLimitedClient):
    """Games catalog (key-authenticated)."""

    source = "rawg"

    def __init__(
        self,
        api_key: Optional[str] = None,
        transport: Optional[httpx.AsyncBaseTransport] = None,
        **kwargs: Any,
    ):
        key = (api_key if api_key is not None else settings.RAWG_API_KEY).strip()
        if not key:
            logger.warning("RAWG_API_KEY is not set; catalog requests will likely be rejected")

        kwargs.setdefault("min_interval", settings.RAWG_MIN_INTERVAL_SECONDS)
        kwargs.setdefault("cache_ttl", settings.RAWG_CACHE_TTL_SECONDS)
        kwargs.setdefault("timeout", settings.HTTP_TIMEOUT_SECONDS)
        kwargs.setdefault("max_retries", settings.UPSTREAM_MAX_RETRIES)
        kwargs.setdefault("max_backoff", settings.UPSTREAM_MAX_BACKOFF_SECONDS)
        super().__init__(
            settings.RAWG_BASE_URL,
            default_params={"key": key},
            transport=transport,
            **kwargs,
        )

    async def get_games(
        self,
        search: Optional[str] = None,
        genres: Optional[str] = None,
        platforms: Optional[str] = None,
        page: int = 1,
        page_size: int = 20,
    ) -> Optional[Dict[str, Any]]:
        params = {
            "search": search,
            "genres": genres,
            "platforms": platforms,
            "page": page,
            "page_size": page_size,
        }
        return await self.fetch("games", params)

    async def get_game(self, game_id: str) -> Dict[str, Any]:
        """
        Strict lookup: raises NotFound on 404 or when the payload carries no id,
        other UpstreamErrors propagate.
        """
        try:
            data = await self.fetch(f"games/{game_id}", strict=True)
        except NotFound as e:
            raise NotFound(
                self.source, f"Game with ID {game_id} was not found in our database.", status_code=404
            ) from e
        if not isinstance(data, dict) or not data.get("id"):
            raise NotFound(self.source, f"Game with ID {game_id} was not found or has invalid data.")
        return data

    async def get_game_screenshots(self, game_id: str) -> Dict[str, Any]:
        data = await self.fetch(f"games/{game_id}/screenshots")
        if not isinstance(data, dict):
            logger.warning("Failed to fetch screenshots for game %s", game_id)
            return {"results": []}
        return data
