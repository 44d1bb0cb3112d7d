from typing import List, Optional

from fastapi import APIRouter, Depends, Query

from app.core.cheapshark import CheapSharkClient
from app.core.clients import get_cheapshark_client
from app.core.config import settings
from app.core.deals import aggregate_deals
from app.schemas.deals import GameDealGroup

router = APIRouter(tags=["deals"])


@router.get("/deals", response_model=List[GameDealGroup])
async def deals(
    store_id: Optional[str] = Query(None, alias="storeID"),
    page_number: int = Query(0, alias="pageNumber", ge=0),
    sort_by: str = Query("DealRating", alias="sortBy"),
    client: CheapSharkClient = Depends(get_cheapshark_client),
):
    """
    One row per game: cheapest listing on top, up to 4 alternative stores.
    Sorted by discount (DealRating/Savings) or price (Price).
    Upstream failures surface as 500 {error, message}.
    """
    return await aggregate_deals(
        client,
        store_id=store_id,
        page_number=page_number,
        sort_by=sort_by,
        page_size=settings.DEALS_PAGE_SIZE,
    )
