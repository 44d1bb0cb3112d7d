import logging
from typing import Any, Dict, List, Optional

import httpx

from app.core.config import settings
from app.core.upstream import RateLimitedClient

logger = logging.getLogger(__name__)

CHEAPSHARK_REDIRECT_URL = "https://www.cheapshark.com/redirect?dealID={deal_id}"


class CheapSharkClient(RateLimitedClient):
    """Deals + store directory. No API key required."""

    source = "cheapshark"

    def __init__(self, transport: Optional[httpx.AsyncBaseTransport] = None, **kwargs: Any):
        kwargs.setdefault("min_interval", settings.CHEAPSHARK_MIN_INTERVAL_SECONDS)
        kwargs.setdefault("cache_ttl", settings.CHEAPSHARK_CACHE_TTL_SECONDS)
        kwargs.setdefault("timeout", settings.HTTP_TIMEOUT_SECONDS)
        kwargs.setdefault("max_retries", settings.UPSTREAM_MAX_RETRIES)
        kwargs.setdefault("max_backoff", settings.UPSTREAM_MAX_BACKOFF_SECONDS)
        super().__init__(settings.CHEAPSHARK_BASE_URL, transport=transport, **kwargs)

    async def get_deals(
        self,
        store_id: Optional[str] = None,
        page_number: int = 0,
        page_size: int = 60,
        sort_by: Optional[str] = None,
        desc: bool = True,
        title: Optional[str] = None,
        strict: bool = True,
    ) -> Optional[List[Dict[str, Any]]]:
        params: Dict[str, Any] = {
            "pageNumber": page_number,
            "pageSize": page_size,
            "sortBy": sort_by,
            "desc": 1 if desc else 0,
            "storeID": store_id,
        }
        # Title search allows partial matches
        if title:
            params["title"] = title
            params["exact"] = 0

        return await self.fetch("deals", params, strict=strict)

    async def get_stores(self, strict: bool = True) -> Optional[List[Dict[str, Any]]]:
        return await self.fetch("stores", strict=strict)
