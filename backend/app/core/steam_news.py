import logging
from typing import Any, Dict, List, Optional

import httpx

from app.core.config import settings
from app.core.upstream import RateLimitedClient

logger = logging.getLogger(__name__)


class SteamNewsClient(RateLimitedClient):
    """Per-app news feeds. No API key; one request per feed identifier."""

    source = "steam_news"

    def __init__(self, transport: Optional[httpx.AsyncBaseTransport] = None, **kwargs: Any):
        kwargs.setdefault("min_interval", settings.STEAM_NEWS_MIN_INTERVAL_SECONDS)
        kwargs.setdefault("cache_ttl", settings.STEAM_NEWS_CACHE_TTL_SECONDS)
        kwargs.setdefault("timeout", settings.HTTP_TIMEOUT_SECONDS)
        kwargs.setdefault("max_retries", settings.UPSTREAM_MAX_RETRIES)
        kwargs.setdefault("max_backoff", settings.UPSTREAM_MAX_BACKOFF_SECONDS)
        super().__init__(settings.STEAM_NEWS_BASE_URL, transport=transport, **kwargs)

    async def get_news_for_app(self, app_id: int, count: int = 15) -> List[Dict[str, Any]]:
        """
        Returns the feed's news items, each tagged with `appid`.
        Raises UpstreamError so the aggregator can count the feed as failed.
        """
        data = await self.fetch(
            "",
            {"appid": app_id, "count": count, "format": "json", "l": "english"},
            strict=True,
        )
        appnews = data.get("appnews") if isinstance(data, dict) else None
        items = appnews.get("newsitems") if isinstance(appnews, dict) else None
        if not isinstance(items, list):
            return []
        return [{**item, "appid": app_id} for item in items if isinstance(item, dict)]
