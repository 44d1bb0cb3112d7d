from typing import List, Optional

from app.schemas.base import CamelModel, Money


class Deal(CamelModel):
    """One store listing for one game."""
    deal_id: str
    game_id: Optional[str] = None
    game_identifier: str
    title: str
    original_price: Money
    sale_price: Money
    discount: int                    # 0..100
    store_id: Optional[str] = None
    platform: str                    # store name
    store_url: str
    image: str
    rating: float                    # 0..5, from the Steam rating percent


class AlternativeStore(CamelModel):
    name: str
    price: str                       # e.g. "$9.99"
    original_price: str
    discount: int
    url: str
    store_id: Optional[str] = None


class GameDealGroup(CamelModel):
    """
    All listings sharing a grouping identifier, best (cheapest) deal flattened on top.
    `grouped_by` is "gameId" when the upstream id was used, "title" when the
    normalized title was (a weaker match).
    """
    id: str
    identifier: str
    grouped_by: str
    title: str
    original_price: Money
    sale_price: Money
    discount: int
    platform: str
    store_url: str
    image: str
    rating: float
    genre: str = "Game"
    drm: str
    best_deal: Deal
    alternative_stores: List[AlternativeStore] = []
    total_deals: int


class StorePrice(CamelModel):
    """Row of the per-game pricing widget."""
    name: str
    url: str
    price: str
    original_price: Optional[str] = None
    discount: Optional[int] = None
    icon: str
    color: str
