# Importing the module registers tables with Base for create_all()
from .core import (  # noqa: F401
    MenuItemRow, DiningTableRow, OrderRow, AppSettingsRow, BusinessProfileRow,
)

__all__ = [
    "MenuItemRow", "DiningTableRow", "OrderRow", "AppSettingsRow", "BusinessProfileRow",
]
