from typing import List, Optional

from app.schemas.base import CamelModel

PLACEHOLDER_IMAGE = "/placeholder.svg?height=300&width=400"
PLACEHOLDER_DETAIL_IMAGE = "/placeholder.svg?height=400&width=600"


class GameSummary(CamelModel):
    id: int
    title: str = "Unknown Game"
    image: str = PLACEHOLDER_IMAGE
    genre: str = "Unknown"
    platform: str = "Multiple Platforms"
    release_date: str = "Unknown"
    rating: float = 0.0
    players: str = "Unknown"


class GameDetail(CamelModel):
    id: int
    title: str = "Unknown Game"
    genre: str = "Unknown"
    platforms: List[str] = ["PC"]
    rating: float = 0.0
    release_date: str = "Unknown"
    developer: str = "Unknown Developer"
    publisher: str = "Unknown Publisher"
    image: str = PLACEHOLDER_DETAIL_IMAGE
    screenshots: List[str] = []
    description: str = "No description available for this game."
    players: str = "Single-player"
    esrb_rating: str = "Rating Pending"
    metacritic_score: Optional[int] = None
    tags: List[str] = []
