"""
Defensive shapes for third-party payloads.

Every field is optional or defaulted: upstream schemas drift, and a missing field
is resolved with a default rather than rejected. Unknown fields are ignored.
"""
import math
from decimal import Decimal, InvalidOperation
from typing import Annotated, Any, List, Optional

from pydantic import BaseModel, BeforeValidator, ConfigDict


def _to_str(v: Any) -> Optional[str]:
    if isinstance(v, bool):
        return None
    if isinstance(v, (int, float, Decimal)):
        return str(v)
    return v if isinstance(v, str) else None


def _to_decimal(v: Any) -> Decimal:
    if v is None or v == "":
        return Decimal("0")
    try:
        d = Decimal(str(v))
    except InvalidOperation:
        return Decimal("0")
    return d if d.is_finite() else Decimal("0")


def _to_int(v: Any) -> Optional[int]:
    if isinstance(v, bool) or v is None:
        return None
    try:
        return int(float(v))
    except (TypeError, ValueError, OverflowError):
        return None


def _to_float(v: Any) -> Optional[float]:
    if isinstance(v, bool) or v is None:
        return None
    try:
        f = float(v)
    except (TypeError, ValueError):
        return None
    return f if math.isfinite(f) else None


def _to_list(v: Any) -> list:
    return [x for x in v if isinstance(x, dict)] if isinstance(v, list) else []


def _to_object(v: Any) -> Any:
    return v if isinstance(v, dict) and v else None


LooseStr = Annotated[Optional[str], BeforeValidator(_to_str)]
LooseInt = Annotated[Optional[int], BeforeValidator(_to_int)]
LooseFloat = Annotated[Optional[float], BeforeValidator(_to_float)]
LooseDecimal = Annotated[Decimal, BeforeValidator(_to_decimal)]


class UpstreamModel(BaseModel):
    model_config = ConfigDict(extra="ignore")


# ===== CheapShark =====

class CheapSharkDeal(UpstreamModel):
    dealID: LooseStr = None
    gameID: LooseStr = None
    title: LooseStr = None
    normalPrice: LooseDecimal = Decimal("0")
    salePrice: LooseDecimal = Decimal("0")
    storeID: LooseStr = None
    thumb: LooseStr = None
    steamRatingPercent: LooseFloat = None


class CheapSharkStore(UpstreamModel):
    storeID: LooseStr = None
    storeName: LooseStr = None


# ===== RAWG =====

class NamedRef(UpstreamModel):
    id: LooseInt = None
    name: LooseStr = None


class RawgPlatformEntry(UpstreamModel):
    platform: Annotated[Optional[NamedRef], BeforeValidator(_to_object)] = None


class RawgGame(UpstreamModel):
    id: LooseInt = None
    name: LooseStr = None
    background_image: LooseStr = None
    released: LooseStr = None
    rating: LooseFloat = None
    playtime: LooseInt = None
    metacritic: LooseInt = None
    description: LooseStr = None
    description_raw: LooseStr = None
    genres: Annotated[List[NamedRef], BeforeValidator(_to_list)] = []
    platforms: Annotated[List[RawgPlatformEntry], BeforeValidator(_to_list)] = []
    developers: Annotated[List[NamedRef], BeforeValidator(_to_list)] = []
    publishers: Annotated[List[NamedRef], BeforeValidator(_to_list)] = []
    tags: Annotated[List[NamedRef], BeforeValidator(_to_list)] = []
    esrb_rating: Annotated[Optional[NamedRef], BeforeValidator(_to_object)] = None


class RawgScreenshot(UpstreamModel):
    image: LooseStr = None


# ===== Steam news =====

class SteamNewsItem(UpstreamModel):
    gid: LooseStr = None
    title: LooseStr = None
    url: LooseStr = None
    author: LooseStr = None
    contents: LooseStr = None
    feedlabel: LooseStr = None
    feedname: LooseStr = None
    date: LooseInt = None
    appid: LooseInt = None
    tags: Any = None


# ===== GameSpot =====

class GameSpotImage(UpstreamModel):
    square_small: LooseStr = None
    square_tiny: LooseStr = None
    original: LooseStr = None
    medium_url: LooseStr = None
    small_url: LooseStr = None
    original_url: LooseStr = None


class GameSpotGame(UpstreamModel):
    id: LooseInt = None
    name: LooseStr = None
    image: Annotated[Optional[GameSpotImage], BeforeValidator(_to_object)] = None
    genres: Annotated[List[NamedRef], BeforeValidator(_to_list)] = []
    platforms: Annotated[List[NamedRef], BeforeValidator(_to_list)] = []


class GameSpotReview(UpstreamModel):
    id: LooseInt = None
    title: LooseStr = None
    deck: LooseStr = None
    lede: LooseStr = None
    body: LooseStr = None
    authors: LooseStr = None
    score: LooseFloat = None
    publish_date: LooseStr = None
    site_detail_url: LooseStr = None
    image: Annotated[Optional[GameSpotImage], BeforeValidator(_to_object)] = None
    game: Annotated[Optional[GameSpotGame], BeforeValidator(_to_object)] = None
