import asyncio
import logging
import re
from decimal import ROUND_HALF_UP, Decimal
from typing import Any, Dict, Iterable, List, Optional

from pydantic import ValidationError

from app.core.cheapshark import CHEAPSHARK_REDIRECT_URL, CheapSharkClient
from app.core.errors import MalformedUpstream
from app.core.stores import build_store_map, store_color, store_icon, store_name
from app.schemas.deals import AlternativeStore, Deal, GameDealGroup, StorePrice
from app.schemas.games import PLACEHOLDER_IMAGE
from app.schemas.upstream import CheapSharkDeal

logger = logging.getLogger(__name__)

MAX_ALTERNATIVE_STORES = 4
MAX_PRICING_ROWS = 5

SORT_BY_DISCOUNT = ("DealRating", "Savings")
SORT_BY_PRICE = ("Price",)


def discount_percent(original: Decimal, sale: Decimal) -> int:
    """round((original - sale) / original * 100), half-up, never negative."""
    if original <= 0:
        return 0
    pct = ((original - sale) / original * 100).quantize(Decimal("1"), rounding=ROUND_HALF_UP)
    return max(0, int(pct))


def normalize_title(title: str) -> str:
    """
    Lowercase, drop anything that is not a word character or whitespace,
    collapse runs of whitespace.
    """
    cleaned = re.sub(r"[^\w\s]", "", (title or "").lower())
    return re.sub(r"\s+", " ", cleaned).strip()


def upstream_game_id(raw: CheapSharkDeal) -> Optional[str]:
    if raw.gameID and raw.gameID.strip() not in ("", "0"):
        return raw.gameID.strip()
    return None


def grouping_identifier(raw: CheapSharkDeal) -> str:
    """
    The upstream game id when present, else the normalized title.
    Distinct games whose titles normalize identically end up in one group.
    """
    return upstream_game_id(raw) or normalize_title(raw.title or "")


def format_price(value: Decimal) -> str:
    return f"${value.quantize(Decimal('0.01'), rounding=ROUND_HALF_UP)}"


def to_deal(raw: CheapSharkDeal, store_map: Dict[str, str]) -> Deal:
    original = raw.normalPrice
    sale = raw.salePrice
    deal_id = raw.dealID or ""
    rating = round((raw.steamRatingPercent or 0.0) / 20, 1)

    return Deal(
        deal_id=deal_id,
        game_id=upstream_game_id(raw),
        game_identifier=grouping_identifier(raw),
        title=raw.title or "Unknown Game",
        original_price=original,
        sale_price=sale,
        discount=discount_percent(original, sale),
        store_id=raw.storeID,
        platform=store_name(store_map, raw.storeID),
        store_url=CHEAPSHARK_REDIRECT_URL.format(deal_id=deal_id),
        image=raw.thumb or PLACEHOLDER_IMAGE,
        rating=max(0.0, min(5.0, rating)),
    )


def parse_deals(raw_deals: Iterable[Any], store_map: Dict[str, str]) -> List[Deal]:
    deals: List[Deal] = []
    for item in raw_deals:
        if not isinstance(item, dict):
            continue
        try:
            raw = CheapSharkDeal.model_validate(item)
        except ValidationError as e:
            logger.warning("Skipping malformed deal listing %s: %s", item.get("dealID"), e)
            continue
        deals.append(to_deal(raw, store_map))
    return deals


def group_deals(deals: Iterable[Deal]) -> List[GameDealGroup]:
    """
    Group listings by grouping identifier (first-seen order), cheapest first.
    The cheapest listing is the best deal; the next MAX_ALTERNATIVE_STORES are alternatives.
    """
    groups: Dict[str, List[Deal]] = {}
    for deal in deals:
        groups.setdefault(deal.game_identifier, []).append(deal)

    out: List[GameDealGroup] = []
    for identifier, listings in groups.items():
        ordered = sorted(listings, key=lambda d: d.sale_price)
        best = ordered[0]
        alternatives = [
            AlternativeStore(
                name=d.platform,
                price=format_price(d.sale_price),
                original_price=format_price(d.original_price),
                discount=d.discount,
                url=d.store_url,
                store_id=d.store_id,
            )
            for d in ordered[1 : 1 + MAX_ALTERNATIVE_STORES]
        ]
        out.append(
            GameDealGroup(
                id=best.game_id or best.deal_id,
                identifier=identifier,
                grouped_by="gameId" if best.game_id else "title",
                title=best.title,
                original_price=best.original_price,
                sale_price=best.sale_price,
                discount=best.discount,
                platform=best.platform,
                store_url=best.store_url,
                image=best.image,
                rating=best.rating,
                drm=best.platform,
                best_deal=best,
                alternative_stores=alternatives,
                total_deals=len(ordered),
            )
        )
    return out


def sort_groups(groups: List[GameDealGroup], sort_by: Optional[str]) -> List[GameDealGroup]:
    """Biggest discount first, cheapest first, or unchanged for unknown criteria."""
    if sort_by is None or sort_by in SORT_BY_DISCOUNT:
        return sorted(groups, key=lambda g: g.discount, reverse=True)
    if sort_by in SORT_BY_PRICE:
        return sorted(groups, key=lambda g: g.sale_price)
    return list(groups)


async def aggregate_deals(
    client: CheapSharkClient,
    store_id: Optional[str] = None,
    page_number: int = 0,
    sort_by: str = "DealRating",
    page_size: int = 60,
) -> List[GameDealGroup]:
    """
    Fetch listings + store directory together and shape them into GameDealGroups.
    Both upstream calls are required: any UpstreamError propagates.
    """
    if store_id == "all":
        store_id = None

    logger.info(
        "Fetching deals - Store: %s, Sort: %s, Page: %s", store_id or "all", sort_by, page_number
    )
    raw_deals, raw_stores = await asyncio.gather(
        client.get_deals(
            store_id=store_id,
            page_number=page_number,
            page_size=page_size,
            sort_by=sort_by,
            desc=True,
        ),
        client.get_stores(),
    )
    if not isinstance(raw_deals, list) or not isinstance(raw_stores, list):
        raise MalformedUpstream(client.source, "Expected lists of deals and stores")

    store_map = build_store_map(raw_stores)
    deals = parse_deals(raw_deals, store_map)
    groups = sort_groups(group_deals(deals), sort_by)

    logger.info("Grouped %d deals into %d unique games", len(deals), len(groups))
    return groups


async def pricing_for_title(client: CheapSharkClient, title: str) -> List[StorePrice]:
    """
    Up to MAX_PRICING_ROWS store prices for a catalog title, cheapest first.
    Listings whose title does not contain the catalog title are dropped.
    """
    raw_deals, raw_stores = await asyncio.gather(
        client.get_deals(title=title, sort_by="Price", page_size=10, desc=False),
        client.get_stores(),
    )
    if not isinstance(raw_deals, list) or not isinstance(raw_stores, list):
        raise MalformedUpstream(client.source, "Expected lists of deals and stores")

    store_map = build_store_map(raw_stores)
    needle = title.lower()
    rows: List[StorePrice] = []
    for deal in parse_deals(raw_deals, store_map):
        if needle not in deal.title.lower():
            continue
        discounted = deal.discount > 0
        rows.append(
            StorePrice(
                name=deal.platform,
                url=deal.store_url,
                price=format_price(deal.sale_price),
                original_price=format_price(deal.original_price) if discounted else None,
                discount=deal.discount if discounted else None,
                icon=store_icon(deal.platform),
                color=store_color(deal.platform),
            )
        )
        if len(rows) >= MAX_PRICING_ROWS:
            break
    return rows
