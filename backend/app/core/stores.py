from __future__ import annotations

import re
from typing import Any, Dict, Iterable, Optional

from app.schemas.upstream import CheapSharkStore

UNKNOWN_STORE = "Unknown Store"

# Display colours for the pricing widget, keyed by CheapShark store name
STORE_COLORS: Dict[str, str] = {
    "Steam": "bg-blue-600",
    "Epic Games Store": "bg-gray-800",
    "GOG": "bg-purple-600",
    "Origin": "bg-orange-600",
    "Uplay": "bg-blue-800",
    "GamesPlanet": "bg-green-600",
    "Humble Store": "bg-red-600",
    "Fanatical": "bg-yellow-600",
}
DEFAULT_STORE_COLOR = "bg-gray-600"
DEFAULT_STORE_ICON = "store"


def normalize_store_name(name: Optional[str]) -> Optional[str]:
    """
    Collapse whitespace and drop a trailing ".com" so lookups match the table above:
      - "  Humble   Store " => "Humble Store"
      - "GOG.com" => "GOG"
    """
    if not name:
        return name
    s = re.sub(r"\.com$", "", name.strip(), flags=re.IGNORECASE)
    return re.sub(r"\s+", " ", s).strip()


def build_store_map(stores: Iterable[Any]) -> Dict[str, str]:
    """storeID -> storeName from the raw CheapShark store directory."""
    out: Dict[str, str] = {}
    for item in stores or []:
        if not isinstance(item, dict):
            continue
        store = CheapSharkStore.model_validate(item)
        if store.storeID is None or not (store.storeName or "").strip():
            continue
        out[store.storeID] = store.storeName.strip()
    return out


def store_name(store_map: Dict[str, str], store_id: Optional[str]) -> str:
    if store_id is None:
        return UNKNOWN_STORE
    return store_map.get(str(store_id), UNKNOWN_STORE)


def store_color(name: Optional[str]) -> str:
    return STORE_COLORS.get(normalize_store_name(name) or "", DEFAULT_STORE_COLOR)


def store_icon(name: Optional[str]) -> str:
    # Every store uses the generic icon for now; the frontend maps it to a component.
    return DEFAULT_STORE_ICON
