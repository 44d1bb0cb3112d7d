import logging
from typing import Any, Dict, List, Optional

from pydantic import ValidationError

from app.core.rawg import PLATFORM_IDS, RawgClient
from app.schemas.games import PLACEHOLDER_DETAIL_IMAGE, PLACEHOLDER_IMAGE, GameDetail, GameSummary
from app.schemas.upstream import RawgGame, RawgScreenshot

logger = logging.getLogger(__name__)

PAGE_SIZE = 20
MAX_SCREENSHOTS = 3
MAX_TAGS = 5


def _first_name(items: List[Any], default: str) -> str:
    for item in items:
        if item.name:
            return item.name
    return default


def _platform_names(game: RawgGame) -> List[str]:
    return [p.platform.name for p in game.platforms if p.platform and p.platform.name]


def to_summary(game: RawgGame) -> GameSummary:
    platforms = _platform_names(game)
    return GameSummary(
        id=game.id or 0,
        title=game.name or "Unknown Game",
        image=game.background_image or PLACEHOLDER_IMAGE,
        genre=_first_name(game.genres, "Unknown"),
        platform=", ".join(platforms) if platforms else "Multiple Platforms",
        release_date=game.released or "Unknown",
        rating=game.rating or 0.0,
        players=f"{game.playtime}h average" if game.playtime else "Unknown",
    )


def to_detail(game: RawgGame, screenshots: List[str]) -> GameDetail:
    players = next(
        (t.name for t in game.tags if t.name and "player" in t.name.lower()),
        "Single-player",
    )
    return GameDetail(
        id=game.id or 0,
        title=game.name or "Unknown Game",
        genre=_first_name(game.genres, "Unknown"),
        platforms=_platform_names(game) or ["PC"],
        rating=game.rating or 0.0,
        release_date=game.released or "Unknown",
        developer=_first_name(game.developers, "Unknown Developer"),
        publisher=_first_name(game.publishers, "Unknown Publisher"),
        image=game.background_image or PLACEHOLDER_DETAIL_IMAGE,
        screenshots=screenshots[:MAX_SCREENSHOTS],
        description=game.description_raw or game.description or "No description available for this game.",
        players=players,
        esrb_rating=game.esrb_rating.name if game.esrb_rating and game.esrb_rating.name else "Rating Pending",
        metacritic_score=game.metacritic or None,
        tags=[t.name for t in game.tags if t.name][:MAX_TAGS],
    )


def catalog_filters(
    genres: Optional[str], platforms: Optional[str]
) -> Dict[str, Optional[str]]:
    """'all' disables a filter; platform aliases map to RAWG platform ids."""
    out: Dict[str, Optional[str]] = {"genres": None, "platforms": None}
    if genres and genres != "all":
        out["genres"] = genres
    if platforms and platforms != "all":
        out["platforms"] = PLATFORM_IDS.get(platforms, platforms)
    return out


async def list_games(
    client: RawgClient,
    search: Optional[str] = None,
    genres: Optional[str] = None,
    platforms: Optional[str] = None,
    page: int = 1,
) -> List[GameSummary]:
    """Catalog page as GameSummary rows; an unusable upstream response yields []."""
    filters = catalog_filters(genres, platforms)
    data = await client.get_games(
        search=search or None,
        genres=filters["genres"],
        platforms=filters["platforms"],
        page=page,
        page_size=PAGE_SIZE,
    )
    results = data.get("results") if isinstance(data, dict) else None
    if not isinstance(results, list):
        logger.error("Invalid response from RAWG games listing")
        return []

    games: List[GameSummary] = []
    for item in results:
        if not isinstance(item, dict):
            continue
        try:
            game = RawgGame.model_validate(item)
        except ValidationError as e:
            logger.warning("Skipping malformed catalog entry %s: %s", item.get("id"), e)
            continue
        if game.id is None:
            continue
        games.append(to_summary(game))

    logger.info("Returning %d games", len(games))
    return games


async def get_game_detail(client: RawgClient, game_id: str) -> GameDetail:
    """
    Detail + up to 3 screenshots. NotFound / UpstreamError from the detail lookup
    propagate; a screenshot failure only drops the screenshots.
    """
    data = await client.get_game(game_id)
    game = RawgGame.model_validate(data)
    logger.info("Successfully fetched game: %s", game.name)

    shots = await client.get_game_screenshots(game_id)
    raw_shots = shots.get("results") if isinstance(shots.get("results"), list) else []
    screenshots = [
        s.image
        for s in (RawgScreenshot.model_validate(r) for r in raw_shots if isinstance(r, dict))
        if s.image
    ]
    return to_detail(game, screenshots)
