from fastapi import APIRouter, Depends
from typing import List

from tablepos.deps import get_runtime
from tablepos.schemas.common import Ok
from tablepos.schemas.menu import MenuItem, MenuItemIn
from tablepos.services.catalog import ALL_CATEGORIES
from tablepos.services.runtime import PosRuntime

router = APIRouter(prefix="/menu", tags=["menu"])


# ---------- ITEMS (for POS grid etc) ----------

@router.get("/items", response_model=List[MenuItem])
def list_items(
    category: str = ALL_CATEGORIES,
    q: str = "",
    rt: PosRuntime = Depends(get_runtime),
):
    """
    Menu grid for the table view.

    Query params:
      ?category=STARTERS   exact category, or "All" (default)
      ?q=paneer            case-insensitive substring on the item name
    """
    return rt.catalog.filter(category, q)


@router.get("/items/{item_id}", response_model=MenuItem)
def get_item(item_id: str, rt: PosRuntime = Depends(get_runtime)):
    return rt.catalog.get(item_id)


@router.get("/categories", response_model=List[str])
def list_categories(rt: PosRuntime = Depends(get_runtime)):
    # "All" first, then categories in the order they appear on the menu
    return rt.catalog.categories()


@router.post("/items", response_model=MenuItem)
def upsert_item(body: MenuItemIn, rt: PosRuntime = Depends(get_runtime)):
    """Create (no id) or replace (existing id) a menu item. Open carts keep the price they captured."""
    return rt.upsert_menu_item(body)


@router.delete("/items/{item_id}", response_model=Ok)
def delete_item(item_id: str, rt: PosRuntime = Depends(get_runtime)):
    rt.delete_menu_item(item_id)
    return Ok(id=item_id)
