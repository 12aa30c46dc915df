from __future__ import annotations

from typing import Iterable

from tablepos.errors import NotFoundError
from tablepos.schemas.menu import MenuItem

ALL_CATEGORIES = "All"


class MenuCatalog:
    """Read-mostly menu lookup. Snapshots are swapped wholesale on store pushes."""

    def __init__(self, items: Iterable[MenuItem] = ()):
        self._items: dict[str, MenuItem] = {}
        self.replace_all(items)

    def replace_all(self, items: Iterable[MenuItem]) -> None:
        self._items = {i.id: i for i in items}

    def list(self) -> list[MenuItem]:
        return list(self._items.values())

    def get(self, item_id: str) -> MenuItem:
        item = self._items.get(item_id)
        if item is None:
            raise NotFoundError(f"menu item {item_id} not found")
        return item

    def categories(self) -> list[str]:
        seen = dict.fromkeys(i.category for i in self._items.values())
        return [ALL_CATEGORIES, *seen]

    def filter(self, category: str = ALL_CATEGORIES, search_text: str = "") -> list[MenuItem]:
        needle = (search_text or "").lower()
        return [
            i for i in self._items.values()
            if (category == ALL_CATEGORIES or i.category == category)
            and needle in i.name.lower()
        ]
