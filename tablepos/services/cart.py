"""In-progress cart for one selected table.

The cart is plain in-memory state: nothing here touches the store. The
lifecycle turns a cart into an immutable `Order` and persists it.
"""
from __future__ import annotations

import math
from datetime import datetime
from typing import Iterable, Optional

from tablepos.errors import ValidationError
from tablepos.schemas.menu import MenuItem
from tablepos.schemas.orders import (
    LineKindLiteral, Order, OrderItem, TIME_CHARGE_LINE_ID, Totals,
)
from tablepos.schemas.tables import Table
from tablepos.services.billing import compute_totals, time_charge

IN_FLIGHT = ("pending", "billed")


def find_in_flight_order(table: Table, orders: Iterable[Order]) -> Optional[Order]:
    """The table's open order: by current_order_id first, else any pending/billed order on the table."""
    orders = list(orders)
    if table.current_order_id:
        for o in orders:
            if o.id == table.current_order_id:
                return o
    for o in orders:
        if o.table_id == table.id and o.status in IN_FLIGHT:
            return o
    return None


def time_charge_label(minutes: int) -> str:
    return f"MISC Charges ({minutes} min)"


class Cart:
    def __init__(self, table: Table):
        self.table = table
        self._lines: dict[tuple[str, str], OrderItem] = {}
        self.discount: float = 0.0
        self.dirty = False
        self.order_id: Optional[str] = None

    # ── loading ────────────────────────────────────────────────────────────
    @classmethod
    def for_table(cls, table: Table, orders: Iterable[Order]) -> "Cart":
        cart = cls(table)
        if table.status != "vacant":
            order = find_in_flight_order(table, orders)
            if order is not None:
                cart._lines = {l.key: l for l in order.items}
                cart.discount = order.discount
                cart.order_id = order.id
        cart.dirty = False
        return cart

    # ── reads ──────────────────────────────────────────────────────────────
    @property
    def lines(self) -> list[OrderItem]:
        return list(self._lines.values())

    def is_empty(self) -> bool:
        return not self._lines

    def needs_confirmation(self) -> bool:
        return self.dirty and not self.is_empty()

    def compute_totals(self) -> Totals:
        return compute_totals(self._lines.values(), self.discount)

    # ── mutations ──────────────────────────────────────────────────────────
    def add_item(self, item: MenuItem | OrderItem) -> OrderItem:
        if isinstance(item, MenuItem):
            line = OrderItem(id=item.id, name=item.name, price=item.price, qty=1)
        else:
            line = item.model_copy(update={"qty": 1})
        existing = self._lines.get(line.key)
        if existing is not None and line.kind != "time_charge":
            line = existing.model_copy(update={"qty": existing.qty + 1})
        self._lines[line.key] = line
        self.dirty = True
        return line

    def set_quantity(self, item_id: str, qty: int, kind: LineKindLiteral = "item") -> Optional[OrderItem]:
        key = (kind, item_id)
        existing = self._lines.get(key)
        if existing is None:
            return None
        qty = max(0, int(qty))
        self.dirty = True
        if qty == 0:
            del self._lines[key]
            return None
        line = existing.model_copy(update={"qty": qty})
        self._lines[key] = line
        return line

    def change_quantity(self, item_id: str, delta: int, kind: LineKindLiteral = "item") -> Optional[OrderItem]:
        existing = self._lines.get((kind, item_id))
        if existing is None:
            return None
        return self.set_quantity(item_id, existing.qty + delta, kind)

    def remove_item(self, item_id: str, kind: LineKindLiteral = "item") -> None:
        self.set_quantity(item_id, 0, kind)

    def apply_misc_charge(self, now: datetime, rate_per_minute: float) -> OrderItem:
        start = self.table.session_start_time or now
        minutes, price = time_charge(start, now, rate_per_minute)
        line = OrderItem(
            id=TIME_CHARGE_LINE_ID, name=time_charge_label(minutes),
            price=price, qty=1, kind="time_charge",
        )
        # replaces any earlier charge; never accumulates
        self._lines[line.key] = line
        self.dirty = True
        return line

    def set_discount(self, value: float) -> float:
        value = float(value or 0)
        if not math.isfinite(value):
            raise ValidationError(f"discount must be a finite number, got {value!r}")
        self.discount = max(0.0, value)
        self.dirty = True
        return self.discount

    def clear(self) -> None:
        self._lines = {}
        self.discount = 0.0
        self.dirty = False

    # ── submission ─────────────────────────────────────────────────────────
    def build_order(self, *, order_id: str, status: str, created_at: datetime,
                    payment_method: str = "-", cash_amount: float | None = None,
                    upi_amount: float | None = None) -> Order:
        totals = self.compute_totals()
        return Order(
            id=order_id,
            table_id=self.table.id,
            table_name=self.table.name,
            items=self.lines,
            subtotal=totals.subtotal,
            tax=0.0,
            discount=totals.discount,
            total=totals.total,
            status=status,
            payment_method=payment_method,
            created_at=created_at,
            cash_amount=cash_amount,
            upi_amount=upi_amount,
        )
