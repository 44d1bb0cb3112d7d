from typing import Optional

from fastapi import APIRouter, Depends, Query

from app.core.clients import get_gamespot_client
from app.core.gamespot import GameSpotClient
from app.core.reviews import list_reviews
from app.schemas.reviews import ReviewsPage

router = APIRouter(tags=["reviews"])


@router.get("/reviews", response_model=ReviewsPage)
async def reviews(
    offset: int = Query(0, ge=0),
    limit: int = Query(20, ge=1, le=100),
    search: Optional[str] = None,
    client: GameSpotClient = Depends(get_gamespot_client),
):
    return await list_reviews(client, offset=offset, limit=limit, search=search)
