import asyncio
import logging
from datetime import datetime, timezone
from decimal import ROUND_HALF_UP, Decimal
from typing import Awaitable, Callable, List, Optional, Sequence, Tuple

from pydantic import ValidationError

from app.core.errors import UpstreamError
from app.core.gamespot import GameSpotClient
from app.core.text import clean_text, make_excerpt
from app.schemas.reviews import DEFAULT_STAR_RATING, PLACEHOLDER_REVIEW_IMAGE, Review, ReviewsPage
from app.schemas.upstream import GameSpotGame, GameSpotImage, GameSpotReview

logger = logging.getLogger(__name__)

DEFAULT_EXCERPT = "Professional game review from GameSpot."
DEFAULT_VERDICT = "A comprehensive review from GameSpot's expert reviewers."

ImageStrategy = Callable[[GameSpotClient, GameSpotReview], Awaitable[Optional[str]]]


# ===== rating =====

def star_rating(score: Optional[float]) -> Tuple[float, Optional[float]]:
    """
    GameSpot 0-10 score -> (stars 0-5 rounded half-up to one decimal, original score).
    No score gives the default rating and no original score.
    """
    if score is None:
        return DEFAULT_STAR_RATING, None
    stars = (Decimal(str(score)) / 2).quantize(Decimal("0.1"), rounding=ROUND_HALF_UP)
    return max(0.0, min(5.0, float(stars))), score


# ===== image fallback chain =====

def _review_image(image: Optional[GameSpotImage]) -> Optional[str]:
    if image is None:
        return None
    return image.square_small or image.square_tiny or image.original


def _game_image(image: Optional[GameSpotImage]) -> Optional[str]:
    if image is None:
        return None
    return image.medium_url or image.small_url or image.original_url


async def from_review_image(client: GameSpotClient, review: GameSpotReview) -> Optional[str]:
    return _review_image(review.image)


async def from_embedded_game(client: GameSpotClient, review: GameSpotReview) -> Optional[str]:
    return _game_image(review.game.image) if review.game else None


async def from_game_details(client: GameSpotClient, review: GameSpotReview) -> Optional[str]:
    if not review.game or review.game.id is None:
        return None
    details = await client.get_game_details(review.game.id)
    if not details:
        return None
    return _game_image(GameSpotGame.model_validate(details).image)


async def from_name_search(client: GameSpotClient, review: GameSpotReview) -> Optional[str]:
    if not review.game or not review.game.name:
        return None
    results = await client.search_games(review.game.name)
    if not results:
        return None
    return _game_image(GameSpotGame.model_validate(results[0]).image)


IMAGE_STRATEGIES: Sequence[ImageStrategy] = (
    from_review_image,
    from_embedded_game,
    from_game_details,
    from_name_search,
)


async def resolve_review_image(
    client: GameSpotClient,
    review: GameSpotReview,
    strategies: Sequence[ImageStrategy] = IMAGE_STRATEGIES,
) -> str:
    """
    First strategy that yields an image wins. A strategy that fails or finds
    nothing hands over to the next one; the placeholder is the last resort.
    """
    game_name = review.game.name if review.game else None
    for strategy in strategies:
        try:
            image = await strategy(client, review)
        except (UpstreamError, ValidationError) as e:
            logger.warning("⚠️ %s failed for %s: %s", strategy.__name__, game_name, e)
            continue
        if image:
            logger.debug("Using %s image for %s: %s", strategy.__name__, game_name, image)
            return image

    logger.info("No image found for %s, using placeholder", game_name)
    return PLACEHOLDER_REVIEW_IMAGE


# ===== shaping =====

def _publish_date(value: Optional[str]) -> str:
    # GameSpot sends "YYYY-MM-DD HH:MM:SS"
    if value:
        day = value.strip().split(" ")[0].split("T")[0]
        try:
            return datetime.strptime(day, "%Y-%m-%d").date().isoformat()
        except ValueError:
            pass
    return datetime.now(tz=timezone.utc).date().isoformat()


async def to_review(client: GameSpotClient, review: GameSpotReview, index: int) -> Review:
    rating, original_score = star_rating(review.score)
    image = await resolve_review_image(client, review)
    game = review.game or GameSpotGame()
    summary = review.deck or review.lede or ""

    return Review(
        id=str(review.id) if review.id is not None else f"gamespot-{index}",
        game_title=game.name,
        game_image=image,
        rating=rating,
        original_score=original_score,
        review_title=review.title or f"{game.name or 'Game'} Review",
        excerpt=make_excerpt(summary) or clean_text(summary) or DEFAULT_EXCERPT,
        content=review.body or None,
        author=review.authors or "GameSpot Staff",
        publish_date=_publish_date(review.publish_date),
        genre=game.genres[0].name if game.genres and game.genres[0].name else "Game",
        platform=game.platforms[0].name if game.platforms and game.platforms[0].name else "PC",
        verdict=clean_text(summary) or DEFAULT_VERDICT,
        source_url=review.site_detail_url or f"https://www.gamespot.com/reviews/{review.id}/",
        game_id=game.id,
        game_name=game.name,
    )


async def list_reviews(
    client: GameSpotClient,
    offset: int = 0,
    limit: int = 20,
    search: Optional[str] = None,
) -> ReviewsPage:
    """A page of reviews with resolved artwork; upstream failure yields an empty page."""
    search = search.strip() if search else None
    logger.info("Fetching reviews - Offset: %s, Limit: %s, Search: %s", offset, limit, search or "none")

    data = await client.get_reviews(limit=limit, offset=offset, search=search)
    results = data.get("results") if data else None
    if not isinstance(results, list) or not results:
        return ReviewsPage()

    raw_reviews: List[GameSpotReview] = []
    for item in results:
        if not isinstance(item, dict):
            continue
        try:
            raw_reviews.append(GameSpotReview.model_validate(item))
        except ValidationError as e:
            logger.warning("Skipping malformed review %s: %s", item.get("id"), e)

    reviews = await asyncio.gather(
        *(to_review(client, review, index) for index, review in enumerate(raw_reviews))
    )

    try:
        total = int(data.get("number_of_total_results") or 0)
    except (TypeError, ValueError):
        total = 0

    logger.info("Returning %d reviews from GameSpot", len(reviews))
    return ReviewsPage(
        reviews=list(reviews),
        has_more=total > offset + len(reviews),
        total=total,
    )
