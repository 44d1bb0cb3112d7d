import logging

from fastapi import APIRouter, Depends, Query

from app.core.clients import get_steam_news_client
from app.core.config import settings
from app.core.news import (
    build_articles,
    collect_news,
    find_news_item,
    paginate,
    placeholder_item,
    to_article_detail,
)
from app.core.steam_news import SteamNewsClient
from app.schemas.news import NewsArticleDetail, NewsPage

logger = logging.getLogger(__name__)

router = APIRouter(tags=["news"])


async def _collect(client: SteamNewsClient):
    return await collect_news(
        client,
        settings.NEWS_FEED_IDS,
        batch_size=settings.NEWS_BATCH_SIZE,
        batch_delay=settings.NEWS_BATCH_DELAY_SECONDS,
        per_feed=settings.NEWS_ITEMS_PER_FEED,
    )


@router.get("/news", response_model=NewsPage)
async def news(
    limit: int = Query(50, ge=1, le=500),
    offset: int = Query(0, ge=0),
    client: SteamNewsClient = Depends(get_steam_news_client),
):
    """Merged feed news, newest first, sliced by offset/limit."""
    try:
        articles = build_articles(await _collect(client))
    except Exception:
        logger.error("❌ Error aggregating news", exc_info=True)
        return NewsPage(error="Failed to fetch news")

    page = paginate(articles, offset, limit)
    logger.info("Returning %d news articles (%d total available)", len(page.articles), page.total)
    return page


@router.get("/news/{article_id}", response_model=NewsArticleDetail)
async def news_article(
    article_id: str,
    client: SteamNewsClient = Depends(get_steam_news_client),
):
    """
    Single article by id (exact, string, substring, then list index).
    Falls back to a placeholder article instead of erroring.
    """
    try:
        items = await _collect(client)
    except Exception:
        logger.error("❌ Error aggregating news for article %s", article_id, exc_info=True)
        items = []

    item = find_news_item(items, article_id)
    if item is None:
        logger.info("Article with ID %s not found, returning placeholder", article_id)
        item = placeholder_item(article_id)
    return to_article_detail(item, article_id)
