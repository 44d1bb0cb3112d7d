import logging
from typing import List, Optional

from fastapi import APIRouter, Depends, Query

from app.core.cheapshark import CheapSharkClient
from app.core.clients import get_cheapshark_client, get_rawg_client
from app.core.deals import pricing_for_title
from app.core.games import get_game_detail, list_games
from app.core.rawg import RawgClient
from app.schemas.base import ErrorResponse
from app.schemas.deals import StorePrice
from app.schemas.games import GameDetail, GameSummary

logger = logging.getLogger(__name__)

router = APIRouter(tags=["games"])


@router.get("/games", response_model=List[GameSummary])
async def games(
    search: Optional[str] = None,
    genres: Optional[str] = None,
    platforms: Optional[str] = None,
    page: int = Query(1, ge=1),
    client: RawgClient = Depends(get_rawg_client),
):
    return await list_games(client, search=search, genres=genres, platforms=platforms, page=page)


@router.get(
    "/games/{game_id}",
    response_model=GameDetail,
    responses={404: {"model": ErrorResponse}, 500: {"model": ErrorResponse}},
)
async def game_detail(game_id: str, client: RawgClient = Depends(get_rawg_client)):
    return await get_game_detail(client, game_id)


@router.get(
    "/games/{game_id}/pricing",
    response_model=List[StorePrice],
    response_model_exclude_none=True,
)
async def game_pricing(
    game_id: str,
    rawg: RawgClient = Depends(get_rawg_client),
    cheapshark: CheapSharkClient = Depends(get_cheapshark_client),
):
    """
    Up to 5 store prices for a catalog game, matched by title.
    Always 200: any failure gives an empty list.
    """
    try:
        game = await rawg.get_game(game_id)
        title = game.get("name")
        if not title:
            return []
        logger.info("Searching for deals for: %s", title)
        rows = await pricing_for_title(cheapshark, title)
        logger.info("Found %d pricing options", len(rows))
        return rows
    except Exception as e:
        logger.error("Error fetching pricing data for game %s: %s", game_id, e)
        return []
