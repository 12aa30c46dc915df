from __future__ import annotations

import calendar
import csv
import io
from collections import Counter
from datetime import date, datetime, time, timedelta, timezone, tzinfo
from typing import Iterable, Optional

from tablepos.errors import NotFoundError, ValidationError
from tablepos.schemas.orders import Order
from tablepos.schemas.reports import (
    DailyRevenue, PaymentSlice, SalesReport, SalesSummary, TopItem,
)
from tablepos.services.billing import _dec, _money

CSV_HEADERS = ["Order ID", "Table", "Date", "Items Count", "Payment", "Subtotal", "Discount", "Total"]
STATUS_FILTERS = ("all", "pending", "billed", "paid")


class OrderLog:
    """Latest snapshot of persisted orders, newest first."""

    def __init__(self, orders: Iterable[Order] = ()):
        self._orders: dict[str, Order] = {}
        self.replace_all(orders)

    def replace_all(self, orders: Iterable[Order]) -> None:
        self._orders = {o.id: o for o in orders}

    def upsert(self, order: Order) -> None:
        self._orders[order.id] = order

    def list(self) -> list[Order]:
        return sorted(self._orders.values(), key=lambda o: o.created_at, reverse=True)

    def get(self, order_id: str) -> Order:
        o = self._orders.get(order_id)
        if o is None:
            raise NotFoundError(f"order {order_id} not found")
        return o


def _sum(values: Iterable[float]) -> float:
    return _money(sum((_dec(v) for v in values), _dec(0)))


def preset_range(kind: str, today: date) -> tuple[date, date]:
    if kind == "weekly":
        return today - timedelta(days=7), today
    if kind == "monthly":
        year, month = (today.year, today.month - 1) if today.month > 1 else (today.year - 1, 12)
        day = min(today.day, calendar.monthrange(year, month)[1])
        return date(year, month, day), today
    raise ValidationError(f"unknown range {kind!r}")


class ReportIndex:
    """Read-only aggregation over the order log. Never writes."""

    def __init__(self, orders: OrderLog, tz: tzinfo = timezone.utc):
        self.orders = orders
        self.tz = tz

    # ── selection ──────────────────────────────────────────────────────────
    def _local_day(self, o: Order) -> date:
        return o.created_at.astimezone(self.tz).date()

    def paid_between(self, start: Optional[date] = None, end: Optional[date] = None) -> list[Order]:
        if start and end and start > end:
            raise ValidationError("start date is after end date")
        lo = datetime.combine(start, time.min, self.tz) if start else None
        hi = datetime.combine(end, time.max, self.tz) if end else None
        return [
            o for o in self.orders.list()
            if o.status == "paid"
            and (lo is None or o.created_at >= lo)
            and (hi is None or o.created_at <= hi)
        ]

    def history(self, search: str = "", status: str = "all") -> list[Order]:
        if status not in STATUS_FILTERS:
            raise ValidationError(f"unknown status filter {status!r}")
        needle = (search or "").lower()
        return [
            o for o in self.orders.list()
            if (needle in o.id.lower() or needle in o.table_name.lower())
            and (status == "all" or o.status == status)
        ]

    # ── aggregates ─────────────────────────────────────────────────────────
    @staticmethod
    def summarize(orders: list[Order], start: Optional[date] = None, end: Optional[date] = None) -> SalesSummary:
        revenue = _sum(o.total for o in orders)
        count = len(orders)
        upi = _sum(o.total for o in orders if o.payment_method == "UPI")
        cash = _sum(o.total for o in orders if o.payment_method == "Cash")
        return SalesSummary(
            start=start, end=end,
            total_revenue=revenue,
            total_orders=count,
            average_order_value=_money(revenue / count) if count else 0.0,
            total_discounts=_sum(o.discount for o in orders),
            upi_sales=upi,
            cash_sales=cash,
            other_sales=_money(_dec(revenue) - _dec(upi) - _dec(cash)),
        )

    @staticmethod
    def payment_breakdown(summary: SalesSummary) -> list[PaymentSlice]:
        slices = [
            PaymentSlice(name="UPI", value=summary.upi_sales),
            PaymentSlice(name="Cash", value=summary.cash_sales),
            PaymentSlice(name="Others", value=summary.other_sales),
        ]
        return [s for s in slices if s.value > 0]

    def daily_revenue(self, orders: list[Order]) -> list[DailyRevenue]:
        days: dict[date, list[float]] = {}
        for o in orders:
            days.setdefault(self._local_day(o), []).append(o.total)
        return [DailyRevenue(day=d, amount=_sum(v)) for d, v in sorted(days.items())]

    @staticmethod
    def top_items(orders: list[Order], n: int = 5) -> list[TopItem]:
        counts: Counter[str] = Counter()
        for o in orders:
            for line in o.items:
                if line.kind != "item":
                    continue
                counts[line.name] += line.qty
        return [TopItem(name=name, qty=qty) for name, qty in counts.most_common(n)]

    def sales_report(self, start: Optional[date] = None, end: Optional[date] = None, top_n: int = 5) -> SalesReport:
        orders = self.paid_between(start, end)
        summary = self.summarize(orders, start, end)
        return SalesReport(
            summary=summary,
            payments=self.payment_breakdown(summary),
            daily=self.daily_revenue(orders),
            top_items=self.top_items(orders, top_n),
        )

    def dashboard(self) -> SalesReport:
        # all-time paid orders, same shape as a ranged report
        return self.sales_report()

    # ── export ─────────────────────────────────────────────────────────────
    def export_csv(self, start: Optional[date] = None, end: Optional[date] = None) -> str:
        buf = io.StringIO()
        w = csv.writer(buf, lineterminator="\n")
        w.writerow(CSV_HEADERS)
        for o in self.paid_between(start, end):
            w.writerow([
                o.id, o.table_name,
                o.created_at.astimezone(self.tz).strftime("%Y-%m-%d %H:%M:%S"),
                len(o.items), o.payment_method,
                o.subtotal, o.discount, o.total,
            ])
        return buf.getvalue()
