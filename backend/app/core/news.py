import asyncio
import logging
import math
import re
from datetime import datetime, timezone
from typing import Any, Awaitable, Callable, Iterable, List, Optional, Sequence

from pydantic import ValidationError

from app.core.errors import UpstreamError
from app.core.steam_news import SteamNewsClient
from app.core.text import clean_text, make_excerpt
from app.schemas.news import NewsArticle, NewsArticleDetail, NewsPage
from app.schemas.upstream import SteamNewsItem

logger = logging.getLogger(__name__)

NON_ASCII = re.compile(r"[^\x00-\x7F]")
NON_ASCII_MAX_SHARE = 0.3
BODY_SAMPLE_LENGTH = 500

# First match wins; order matters.
CATEGORY_RULES = (
    ("Update", ("update", "patch", "version")),
    ("Esports", ("tournament", "esports", "championship")),
    ("Event", ("event",)),
    ("Release", ("release", "launch")),
)
DEFAULT_CATEGORY = "News"

PLACEHOLDER_TITLE = "Gaming News Article"
PLACEHOLDER_CONTENT = (
    "This gaming news article could not be loaded. This might be due to API rate limits "
    "or the article no longer being available. Please try again later or browse other news articles."
)
PLACEHOLDER_AUTHOR = "GameHub News"


# ===== filtering + classification =====

def _mostly_non_ascii(sample: str) -> bool:
    return len(NON_ASCII.findall(sample)) > len(sample) * NON_ASCII_MAX_SHARE


def is_probably_english(title: str, body: str) -> bool:
    """
    Heuristic: more than 30% non-ASCII characters in the title, or in the first
    500 characters of the body, means the article is treated as non-English.
    Accented English text and ASCII-only foreign text are misjudged.
    """
    return not (
        _mostly_non_ascii((title or "").lower())
        or _mostly_non_ascii((body or "")[:BODY_SAMPLE_LENGTH].lower())
    )


def classify(title: str, body: str, feed_label: str) -> str:
    """Keyword rules over title then body; a 'community' feed label; else News."""
    title_lower = (title or "").lower()
    body_lower = (body or "").lower()
    for category, keywords in CATEGORY_RULES:
        if any(k in title_lower for k in keywords) or any(k in body_lower for k in keywords):
            return category
    if "community" in (feed_label or "").lower():
        return "Community"
    return DEFAULT_CATEGORY


def filter_and_sort(items: Iterable[SteamNewsItem]) -> List[SteamNewsItem]:
    """Drop empty and non-English items, newest first."""
    kept = [
        item
        for item in items
        if (item.title or item.contents) and is_probably_english(item.title or "", item.contents or "")
    ]
    return sorted(kept, key=lambda i: i.date or 0, reverse=True)


# ===== fan-out =====

async def fetch_feeds(
    client: SteamNewsClient,
    feed_ids: Sequence[int],
    batch_size: int = 5,
    batch_delay: float = 0.1,
    per_feed: int = 15,
    sleep: Callable[[float], Awaitable[None]] = asyncio.sleep,
) -> List[SteamNewsItem]:
    """
    Fetch `feed_ids` in batches of `batch_size` (concurrent within a batch,
    `batch_delay` between batches). A failed feed is logged and skipped.
    """
    items: List[SteamNewsItem] = []
    failed = 0

    for start in range(0, len(feed_ids), batch_size):
        batch = list(feed_ids[start : start + batch_size])
        results = await asyncio.gather(
            *(client.get_news_for_app(app_id, per_feed) for app_id in batch),
            return_exceptions=True,
        )
        for app_id, result in zip(batch, results):
            if isinstance(result, UpstreamError):
                failed += 1
                logger.warning("⚠️ Failed to fetch news for app %s: %s", app_id, result.message)
                continue
            if isinstance(result, BaseException):
                failed += 1
                logger.error("❌ Unexpected error fetching news for app %s", app_id, exc_info=result)
                continue
            for raw in result:
                try:
                    items.append(SteamNewsItem.model_validate(raw))
                except ValidationError as e:
                    logger.warning("Skipping malformed news item from app %s: %s", app_id, e)

        if start + batch_size < len(feed_ids):
            await sleep(batch_delay)

    logger.info(
        "Fetched %d news items from %d feeds (%d failed)", len(items), len(feed_ids), failed
    )
    return items


async def collect_news(
    client: SteamNewsClient,
    feed_ids: Sequence[int],
    batch_size: int = 5,
    batch_delay: float = 0.1,
    per_feed: int = 15,
) -> List[SteamNewsItem]:
    """Merged, filtered, newest-first raw items across all feeds."""
    items = await fetch_feeds(client, feed_ids, batch_size, batch_delay, per_feed)
    english = filter_and_sort(items)
    logger.info("Filtered to %d English articles", len(english))
    return english


# ===== shaping =====

def _publish_date(timestamp: Optional[int]) -> str:
    if timestamp:
        try:
            return datetime.fromtimestamp(timestamp, tz=timezone.utc).date().isoformat()
        except (ValueError, OverflowError, OSError):
            logger.warning("Ignoring out-of-range news timestamp %s", timestamp)
    return datetime.now(tz=timezone.utc).date().isoformat()


def _tags(raw: Any) -> List[str]:
    if isinstance(raw, str):
        return [t.strip() for t in raw.split(",") if t.strip()]
    if isinstance(raw, list):
        return [str(t) for t in raw if t]
    return []


def article_id(item: SteamNewsItem, index: int) -> str:
    return item.gid or f"steam-{item.appid}-{index}"


def to_article(item: SteamNewsItem, index: int) -> Optional[NewsArticle]:
    """None when neither a title nor a usable excerpt survives cleaning."""
    excerpt = make_excerpt(item.contents or "")
    if not excerpt and not item.title:
        return None

    return NewsArticle(
        id=article_id(item, index),
        title=item.title or "",
        excerpt=excerpt,
        content=item.contents or "",
        author=item.author or "",
        publish_date=_publish_date(item.date),
        publish_timestamp=item.date,
        category=classify(item.title or "", excerpt, item.feedlabel or ""),
        tags=_tags(item.tags),
        source_url=item.url,
        feed_label=item.feedlabel,
        feed_name=item.feedname,
        app_id=item.appid,
    )


def build_articles(items: Sequence[SteamNewsItem]) -> List[NewsArticle]:
    articles = (to_article(item, index) for index, item in enumerate(items))
    return [a for a in articles if a is not None]


def paginate(articles: Sequence[NewsArticle], offset: int, limit: int) -> NewsPage:
    page = list(articles[offset : offset + limit])
    return NewsPage(
        articles=page,
        total=len(articles),
        has_more=offset + limit < len(articles),
        next_offset=offset + limit,
    )


# ===== single article =====

def _match_exact(items: Sequence[SteamNewsItem], wanted: str) -> Optional[SteamNewsItem]:
    return next((i for i in items if i.gid == wanted), None)


def _match_as_string(items: Sequence[SteamNewsItem], wanted: str) -> Optional[SteamNewsItem]:
    wanted = str(wanted).strip()
    return next((i for i in items if i.gid is not None and str(i.gid).strip() == wanted), None)


def _match_substring(items: Sequence[SteamNewsItem], wanted: str) -> Optional[SteamNewsItem]:
    return next((i for i in items if i.gid and (wanted in i.gid or i.gid in wanted)), None)


def _match_index(items: Sequence[SteamNewsItem], wanted: str) -> Optional[SteamNewsItem]:
    if not wanted.isdigit():
        return None
    index = int(wanted)
    return items[index] if 0 <= index < len(items) else None


ARTICLE_MATCHERS: Sequence[Callable[[Sequence[SteamNewsItem], str], Optional[SteamNewsItem]]] = (
    _match_exact,
    _match_as_string,
    _match_substring,
    _match_index,
)


def find_news_item(items: Sequence[SteamNewsItem], wanted: str) -> Optional[SteamNewsItem]:
    """First matcher that returns an item wins."""
    for matcher in ARTICLE_MATCHERS:
        found = matcher(items, wanted)
        if found is not None:
            logger.debug("Matched article %s via %s", wanted, matcher.__name__)
            return found
    return None


def placeholder_item(wanted: str) -> SteamNewsItem:
    return SteamNewsItem(
        gid=wanted,
        title=PLACEHOLDER_TITLE,
        contents=PLACEHOLDER_CONTENT,
        author=PLACEHOLDER_AUTHOR,
        date=int(datetime.now(tz=timezone.utc).timestamp()),
        feedname="GameHub",
        feedlabel="News",
    )


def to_article_detail(item: SteamNewsItem, wanted: str) -> NewsArticleDetail:
    raw = item.contents or ""
    content = clean_text(raw)
    excerpt = make_excerpt(raw)
    minutes = max(1, math.ceil(len(raw or item.title or "") / 200))

    return NewsArticleDetail(
        id=item.gid or wanted,
        title=item.title or "Untitled",
        excerpt=excerpt,
        content=content,
        author=item.author or "Steam News",
        publish_date=_publish_date(item.date),
        publish_timestamp=item.date,
        category=classify(item.title or "", excerpt or content, item.feedlabel or ""),
        tags=_tags(item.tags),
        source_url=item.url,
        feed_label=item.feedlabel or "News",
        feed_name=item.feedname or "Steam",
        app_id=item.appid,
        read_time=f"{minutes} min read",
    )
