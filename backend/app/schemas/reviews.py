from typing import List, Optional

from app.schemas.base import CamelModel

PLACEHOLDER_REVIEW_IMAGE = "/placeholder.svg?height=200&width=300"
DEFAULT_STAR_RATING = 3.0


class Review(CamelModel):
    id: str
    game_title: Optional[str] = None
    game_image: str = PLACEHOLDER_REVIEW_IMAGE
    rating: float = DEFAULT_STAR_RATING     # 0..5
    original_score: Optional[float] = None  # 0..10, as published
    review_title: str
    excerpt: str
    content: Optional[str] = None
    author: str = "GameSpot Staff"
    publish_date: str
    genre: str = "Game"
    platform: str = "PC"
    verdict: str
    source_url: str
    game_id: Optional[int] = None
    game_name: Optional[str] = None


class ReviewsPage(CamelModel):
    reviews: List[Review] = []
    has_more: bool = False
    total: int = 0
