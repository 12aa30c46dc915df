from tablepos.config import Settings
from tablepos.store.base import DataStore, Entity, ListenerRegistry, WriteBatch
from tablepos.store.memory import MemoryStore
from tablepos.store.seed import seed_defaults
from tablepos.store.sql import SqlStore

__all__ = [
    "DataStore", "Entity", "ListenerRegistry", "WriteBatch",
    "MemoryStore", "SqlStore", "seed_defaults", "build_store",
]


def build_store(cfg: Settings) -> DataStore:
    if cfg.STORE_BACKEND == "memory":
        store: DataStore = MemoryStore()
    elif cfg.STORE_BACKEND == "sql":
        store = SqlStore(cfg.DB_URL)
        store.bootstrap_schema()
    else:
        raise ValueError(f"unknown STORE_BACKEND {cfg.STORE_BACKEND!r}")
    if cfg.SEED_DEFAULTS:
        seed_defaults(store)
    return store
