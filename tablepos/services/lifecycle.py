"""Table-session state machine.

    vacant --punch--> occupied --bill--> billed --settle--> vacant
                      occupied --punch--> occupied
                      billed   --punch--> occupied   (re-opened bill)
                      any      --clear--> unchanged  (local cart only)

Every transition except clear writes the order and the table in one store
batch. The cart is only touched after the store accepts the write, so a
failed save leaves the draft exactly as it was.
"""
from __future__ import annotations

import logging
import math
from typing import Optional

from tablepos.errors import ConfirmationRequired, ValidationError
from tablepos.schemas.orders import Order
from tablepos.schemas.tables import Table
from tablepos.services.billing import _dec, _money
from tablepos.services.cart import Cart
from tablepos.services.ids import Clock, IdAllocator, UuidAllocator, utc_now
from tablepos.services.registry import TableRegistry
from tablepos.services.reports import OrderLog
from tablepos.store.base import DataStore, Entity, WriteBatch

logger = logging.getLogger(__name__)

PAY_METHODS = ("UPI", "Cash", "Card", "Split")


class OrderLifecycle:
    def __init__(
        self,
        store: DataStore,
        registry: TableRegistry,
        orders: OrderLog,
        *,
        ids: IdAllocator | None = None,
        clock: Clock = utc_now,
        misc_rate_per_minute: float = 2.5,
    ):
        self.store = store
        self.registry = registry
        self.orders = orders
        self.ids = ids or UuidAllocator()
        self.clock = clock
        self.misc_rate_per_minute = misc_rate_per_minute

    # ── session entry / exit ───────────────────────────────────────────────
    def select_table(self, table_id: str) -> Cart:
        table = self.registry.get(table_id)
        cart = Cart.for_table(table, self.orders.list())
        logger.debug("select table=%s status=%s lines=%d", table.id, table.status, len(cart.lines))
        return cart

    def exit(self, cart: Cart, confirmed: bool = False) -> None:
        """Leave the table view. Unsaved, non-empty carts need an explicit confirm."""
        if cart.needs_confirmation() and not confirmed:
            raise ConfirmationRequired("cart has unsaved changes; confirm to discard")
        if cart.needs_confirmation():
            logger.info("discarding unsaved cart for table=%s", cart.table.id)
        cart.clear()

    def apply_misc_charge(self, cart: Cart):
        cart.table = self.registry.get(cart.table.id)
        return cart.apply_misc_charge(self.clock(), self.misc_rate_per_minute)

    # ── transitions ────────────────────────────────────────────────────────
    def punch(self, cart: Cart) -> Order:
        return self._open_transition(cart, order_status="pending", table_status="occupied")

    def bill(self, cart: Cart) -> Order:
        return self._open_transition(cart, order_status="billed", table_status="billed")

    def settle(
        self,
        cart: Cart,
        payment_method: str,
        cash_amount: Optional[float] = None,
        upi_amount: Optional[float] = None,
    ) -> Order:
        self._require_items(cart)
        table = self.registry.get(cart.table.id)
        total = cart.compute_totals().total
        cash, upi = self._payment_split(payment_method, total, cash_amount, upi_amount)

        now = self.clock()
        order_id = table.current_order_id or self.ids.new_order_id()
        order = cart.build_order(
            order_id=order_id, status="paid", created_at=now,
            payment_method=payment_method, cash_amount=cash, upi_amount=upi,
        )
        new_table = table.model_copy(update=dict(
            status="vacant", current_order_id=None, order_value=None, session_start_time=None,
        ))
        self._persist(order, new_table)

        cart.clear()
        cart.table = new_table
        cart.order_id = None
        logger.info("settle table=%s order=%s total=%.2f method=%s", table.id, order.id, order.total, payment_method)
        return order

    def clear(self, cart: Cart, confirmed: bool = False) -> None:
        if not confirmed:
            raise ConfirmationRequired("clearing the order needs confirmation")
        cart.clear()
        logger.info("cleared cart for table=%s (nothing persisted)", cart.table.id)

    # ── internals ──────────────────────────────────────────────────────────
    def _open_transition(self, cart: Cart, *, order_status: str, table_status: str) -> Order:
        self._require_items(cart)
        table = self.registry.get(cart.table.id)
        now = self.clock()
        order_id = table.current_order_id or self.ids.new_order_id()
        order = cart.build_order(order_id=order_id, status=order_status, created_at=now)
        new_table = table.model_copy(update=dict(
            status=table_status,
            current_order_id=order_id,
            order_value=order.total,
            session_start_time=table.session_start_time or now,
        ))
        self._persist(order, new_table)

        cart.table = new_table
        cart.order_id = order_id
        cart.dirty = False
        logger.info("%s table=%s order=%s total=%.2f", order_status, table.id, order.id, order.total)
        return order

    def _persist(self, order: Order, table: Table) -> None:
        self.store.commit(WriteBatch().put(Entity.ORDERS, order).put(Entity.TABLES, table))
        # the store push normally gets here first; this keeps standalone use consistent
        self.registry.apply_update(table.id, **table.model_dump(exclude={"id"}))
        self.orders.upsert(order)

    @staticmethod
    def _require_items(cart: Cart) -> None:
        if cart.is_empty():
            raise ValidationError("cart is empty")

    @staticmethod
    def _payment_split(method: str, total: float, cash_amount, upi_amount) -> tuple[Optional[float], Optional[float]]:
        if method not in PAY_METHODS:
            raise ValidationError(f"unsupported payment method {method!r}")
        if method == "Cash":
            return total, 0.0
        if method == "UPI":
            return 0.0, total
        if method == "Card":
            return None, None
        if not all(math.isfinite(float(v or 0)) for v in (cash_amount, upi_amount)):
            raise ValidationError("split amounts must be finite numbers")
        cash = _money(cash_amount or 0)
        upi = _money(upi_amount or 0)
        if cash < 0 or upi < 0:
            raise ValidationError("split amounts cannot be negative")
        if _dec(cash) + _dec(upi) < _dec(total):
            raise ValidationError(f"split amounts {cash:.2f} + {upi:.2f} do not cover total {total:.2f}")
        return cash, upi
