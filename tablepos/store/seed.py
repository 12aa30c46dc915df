"""Starter data for an empty store."""
from tablepos.schemas.menu import MenuItem
from tablepos.schemas.settings import AppSettings, BusinessProfile
from tablepos.schemas.tables import Table
from tablepos.store.base import DataStore, Entity, WriteBatch

_MENU = [
    ("1", "Veggie Wrap", "San", 149, "veg"),
    ("2", "Mexican Elote (Cheese Corn Balls)", "STARTERS", 199, "veg"),
    ("3", "Arancini balls", "STARTERS", 249, "veg"),
    ("4", "One Pan Garlic mushroom", "STARTERS", 199, "veg"),
    ("5", "One Pan Garlic chicken", "STARTERS", 299, "non-veg"),
    ("6", "Honey Chili potato", "STARTERS", 309, "veg"),
    ("7", "Melting paneer", "STARTERS", 249, "veg"),
    ("8", "Malaysian mango chicken", "STARTERS", 339, "non-veg"),
    ("9", "Potato Wedges", "STARTERS", 129, "veg"),
    ("10", "Cajun Potato Veggies", "STARTERS", 149, "veg"),
    ("11", "Paneer Popcorn", "STARTERS", 269, "veg"),
    ("12", "Chicken Popcorn", "STARTERS", 220, "non-veg"),
    ("13", "Lemon Garlic chicken", "STARTERS", 310, "non-veg"),
    ("14", "Chicken Florentine", "STARTERS", 349, "non-veg"),
    ("15", "Chicken Demi-Glace", "STARTERS", 310, "non-veg"),
    ("16", "Paneer Chimichurri", "STARTERS", 249, "veg"),
    ("17", "Chicken Chimichurri", "STARTERS", 269, "non-veg"),
    ("18", "Chicken Nuggets", "STARTERS", 149, "non-veg"),
    ("19", "Punjabi Tadka Maggi", "MAGGI", 139, "veg"),
    ("20", "Veggie-Soupy Maggi", "MAGGI", 119, "veg"),
    ("21", "Cheese Corn Maggi", "MAGGI", 119, "veg"),
    ("22", "Chicken Maggi", "MAGGI", 149, "non-veg"),
    ("23", "Double Masala Maggi", "MAGGI", 99, "veg"),
    ("24", "Schezwan Maggi", "MAGGI", 110, "veg"),
    ("25", "Paneer Schezwan Maggi", "MAGGI", 129, "veg"),
]

_TABLES = [
    ("t1", "T1", "Main Floor"), ("t2", "T2", "Main Floor"),
    ("t3", "T3", "Main Floor"), ("t4", "T4", "Main Floor"),
    ("t5", "T5", "Terrace"), ("t6", "T6", "Terrace"),
    ("t7", "T7", "Terrace"), ("t8", "T8", "Terrace"),
    ("c1", "C1", "Lounge"), ("c2", "C2", "Lounge"),
]


def initial_menu() -> list[MenuItem]:
    return [MenuItem(id=i, name=n, category=c, price=p, food_type=f) for i, n, c, p, f in _MENU]


def initial_tables() -> list[Table]:
    return [Table(id=i, name=n, section=s) for i, n, s in _TABLES]


def seed_defaults(store: DataStore) -> bool:
    """Fill whatever is missing. Returns True if anything was written."""
    batch = WriteBatch()
    if not store.read(Entity.MENU):
        batch.put(Entity.MENU, *initial_menu())
    if not store.read(Entity.TABLES):
        batch.put(Entity.TABLES, *initial_tables())
    if store.read(Entity.SETTINGS) is None:
        batch.put(Entity.SETTINGS, AppSettings())
    if store.read(Entity.PROFILE) is None:
        batch.put(Entity.PROFILE, BusinessProfile())
    if not batch.changes:
        return False
    store.commit(batch)
    return True
