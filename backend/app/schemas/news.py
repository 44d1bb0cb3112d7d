from typing import List, Optional

from app.schemas.base import CamelModel


class NewsArticle(CamelModel):
    id: str
    title: str = ""
    excerpt: str = ""
    content: str = ""
    author: str = ""
    publish_date: str                 # YYYY-MM-DD
    publish_timestamp: Optional[int] = None
    category: str = "News"
    tags: List[str] = []
    source_url: Optional[str] = None
    feed_label: Optional[str] = None
    feed_name: Optional[str] = None
    app_id: Optional[int] = None


class NewsArticleDetail(NewsArticle):
    read_time: str = "1 min read"


class NewsPage(CamelModel):
    articles: List[NewsArticle] = []
    total: int = 0
    has_more: bool = False
    next_offset: int = 0
    error: Optional[str] = None
