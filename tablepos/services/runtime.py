"""Wires the core services to one data store.

`connect()` is the startup handshake: each subscription delivers the current
snapshot immediately, so catalog, registry, order log and settings are
populated before it returns. `close()` drops every registration.
"""
from __future__ import annotations

import logging
import threading
from datetime import timezone, tzinfo
from typing import Optional

from tablepos.errors import NotFoundError
from tablepos.schemas.menu import MenuItem, MenuItemIn
from tablepos.schemas.settings import AppSettings, BusinessProfile
from tablepos.schemas.tables import Table, TableIn
from tablepos.services.cart import Cart
from tablepos.services.catalog import MenuCatalog
from tablepos.services.ids import Clock, IdAllocator, UuidAllocator, utc_now
from tablepos.services.lifecycle import OrderLifecycle
from tablepos.services.registry import TableRegistry
from tablepos.services.reports import OrderLog, ReportIndex
from tablepos.store.base import DataStore, Entity, Unsubscribe

logger = logging.getLogger(__name__)


class PosRuntime:
    def __init__(
        self,
        store: DataStore,
        *,
        ids: IdAllocator | None = None,
        clock: Clock = utc_now,
        misc_rate_per_minute: float = 2.5,
        tz: tzinfo = timezone.utc,
    ):
        self.store = store
        self.ids = ids or UuidAllocator()
        self.clock = clock
        self.catalog = MenuCatalog()
        self.registry = TableRegistry()
        self.orders = OrderLog()
        self.reports = ReportIndex(self.orders, tz=tz)
        self.lifecycle = OrderLifecycle(
            store, self.registry, self.orders,
            ids=self.ids, clock=clock, misc_rate_per_minute=misc_rate_per_minute,
        )
        self.settings: Optional[AppSettings] = None
        self.profile: Optional[BusinessProfile] = None
        self._subscriptions: list[Unsubscribe] = []
        self._sessions: dict[str, Cart] = {}
        self._lock = threading.RLock()

    # ── subscriptions ──────────────────────────────────────────────────────
    def connect(self) -> "PosRuntime":
        if self._subscriptions:
            return self
        handlers = [
            (Entity.MENU, self.catalog.replace_all),
            (Entity.TABLES, self.registry.replace_all),
            (Entity.ORDERS, self.orders.replace_all),
            (Entity.SETTINGS, self._on_settings),
            (Entity.PROFILE, self._on_profile),
        ]
        try:
            for entity, handler in handlers:
                self._subscriptions.append(self.store.subscribe(entity, handler))
        except Exception:
            logger.exception("runtime connect failed; dropping %d subscriptions", len(self._subscriptions))
            self.close()
            raise
        logger.info(
            "runtime connected: %d menu items, %d tables, %d orders",
            len(self.catalog.list()), len(self.registry.list()), len(self.orders.list()),
        )
        return self

    def close(self) -> None:
        for unsubscribe in self._subscriptions:
            unsubscribe()
        self._subscriptions = []
        with self._lock:
            self._sessions.clear()

    def _on_settings(self, value: Optional[AppSettings]) -> None:
        self.settings = value

    def _on_profile(self, value: Optional[BusinessProfile]) -> None:
        self.profile = value

    # ── table sessions (one open cart per table) ───────────────────────────
    def open_session(self, table_id: str) -> Cart:
        with self._lock:
            cart = self._sessions.get(table_id)
            if cart is None:
                cart = self.lifecycle.select_table(table_id)
                self._sessions[table_id] = cart
            return cart

    def session(self, table_id: str) -> Cart:
        with self._lock:
            cart = self._sessions.get(table_id)
        if cart is None:
            raise NotFoundError(f"no open session for table {table_id}")
        return cart

    def close_session(self, table_id: str, confirmed: bool = False) -> None:
        with self._lock:
            cart = self.session(table_id)
            self.lifecycle.exit(cart, confirmed=confirmed)
            del self._sessions[table_id]

    # ── floor & menu management ────────────────────────────────────────────
    def upsert_menu_item(self, body: MenuItemIn) -> MenuItem:
        item = MenuItem(id=body.id or self.ids.new_record_id(), **body.model_dump(exclude={"id"}))
        self.store.write(Entity.MENU, item)
        return item

    def delete_menu_item(self, item_id: str) -> None:
        self.store.delete(Entity.MENU, item_id)

    def upsert_table(self, body: TableIn) -> Table:
        try:
            current = self.registry.get(body.id) if body.id else None
        except NotFoundError:
            current = None
        if current is not None:
            # floor setup renames/moves tables; session fields are left alone
            table = current.model_copy(update={"name": body.name, "section": body.section})
        else:
            table = Table(id=body.id or self.ids.new_record_id(), name=body.name, section=body.section)
        self.store.write(Entity.TABLES, table)
        return table

    def delete_table(self, table_id: str) -> None:
        self.store.delete(Entity.TABLES, table_id)

    def update_settings(self, value: AppSettings) -> AppSettings:
        self.store.write(Entity.SETTINGS, value)
        return value

    def update_profile(self, value: BusinessProfile) -> BusinessProfile:
        self.store.write(Entity.PROFILE, value)
        return value
