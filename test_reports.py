from datetime import date, datetime, timedelta, timezone

import pytest

from tablepos.errors import NotFoundError, ValidationError
from tablepos.schemas.orders import Order, OrderItem
from tablepos.services.reports import CSV_HEADERS, OrderLog, ReportIndex, preset_range

UTC = timezone.utc


def _order(oid, total, method="Cash", when=datetime(2024, 5, 10, 13, 0, tzinfo=UTC), status="paid",
           items=None, table="T1", discount=0.0):
    items = items or [OrderItem(id="1", name="Veggie Wrap", price=total, qty=1)]
    return Order(
        id=oid, table_id=table.lower(), table_name=table, items=items,
        subtotal=total + discount, discount=discount, total=total,
        status=status, payment_method=method if status == "paid" else "-", created_at=when,
    )


def _index(*orders, tz=UTC):
    return ReportIndex(OrderLog(orders), tz=tz)


def test_revenue_and_average_over_paid_orders():
    idx = _index(
        _order("a", 100, "Cash"),
        _order("b", 200, "UPI"),
        _order("c", 300, "Card"),
        _order("d", 999, status="pending"),
    )
    report = idx.sales_report(date(2024, 5, 10), date(2024, 5, 10))
    s = report.summary
    assert s.total_revenue == 600.0
    assert s.total_orders == 3
    assert s.average_order_value == 200.0
    assert (s.cash_sales, s.upi_sales, s.other_sales) == (100.0, 200.0, 300.0)
    assert [(p.name, p.value) for p in report.payments] == [("UPI", 200.0), ("Cash", 100.0), ("Others", 300.0)]


def test_empty_range_has_zero_average():
    s = _index().sales_report(date(2024, 5, 1), date(2024, 5, 2)).summary
    assert (s.total_revenue, s.total_orders, s.average_order_value) == (0.0, 0, 0.0)


def test_payment_breakdown_skips_empty_slices():
    report = _index(_order("a", 50, "UPI")).dashboard()
    assert [p.name for p in report.payments] == ["UPI"]


def test_range_bounds_are_inclusive_local_days():
    ist = timezone(timedelta(hours=5, minutes=30))
    # 2024-05-09 19:00 UTC is 2024-05-10 00:30 in Kolkata
    early = _order("early", 10, when=datetime(2024, 5, 9, 19, 0, tzinfo=UTC))
    late = _order("late", 20, when=datetime(2024, 5, 10, 18, 29, tzinfo=UTC))
    after = _order("after", 40, when=datetime(2024, 5, 10, 18, 31, tzinfo=UTC))
    idx = _index(early, late, after, tz=ist)

    ids = [o.id for o in idx.paid_between(date(2024, 5, 10), date(2024, 5, 10))]
    assert sorted(ids) == ["early", "late"]


def test_reversed_range_rejected():
    with pytest.raises(ValidationError):
        _index().paid_between(date(2024, 5, 10), date(2024, 5, 1))


def test_daily_series_ascending_by_day():
    idx = _index(
        _order("a", 100, when=datetime(2024, 5, 12, 9, tzinfo=UTC)),
        _order("b", 50, when=datetime(2024, 5, 10, 9, tzinfo=UTC)),
        _order("c", 25.5, when=datetime(2024, 5, 12, 20, tzinfo=UTC)),
    )
    daily = idx.sales_report().daily
    assert [(d.day, d.amount) for d in daily] == [(date(2024, 5, 10), 50.0), (date(2024, 5, 12), 125.5)]


def test_top_items_by_quantity_without_time_charges():
    wrap = lambda q: OrderItem(id="1", name="Veggie Wrap", price=149, qty=q)
    fries = lambda q: OrderItem(id="9", name="Potato Wedges", price=129, qty=q)
    misc = OrderItem(id="MISC_TIME_BASED", name="MISC Charges (90 min)", price=225, qty=1, kind="time_charge")
    idx = _index(
        _order("a", 500, items=[wrap(1), fries(3), misc]),
        _order("b", 500, items=[wrap(1), misc]),
        _order("c", 500, items=[fries(1)], status="billed"),
    )
    top = idx.sales_report().top_items
    assert [(t.name, t.qty) for t in top] == [("Potato Wedges", 3), ("Veggie Wrap", 2)]


def test_top_items_capped_at_five():
    items = [OrderItem(id=str(i), name=f"Item {i}", price=10, qty=10 - i) for i in range(8)]
    top = _index(_order("a", 100, items=items)).sales_report().top_items
    assert [t.name for t in top] == [f"Item {i}" for i in range(5)]


def test_discount_total_summed():
    idx = _index(_order("a", 90, discount=10), _order("b", 45, discount=5.5))
    assert idx.dashboard().summary.total_discounts == 15.5


def test_history_search_and_status_filter():
    idx = _index(
        _order("ORD-0001", 100, table="T1"),
        _order("ORD-0002", 100, table="C2", status="billed",
               when=datetime(2024, 5, 10, 14, tzinfo=UTC)),
        _order("ORD-0003", 100, table="T5", status="pending",
               when=datetime(2024, 5, 10, 15, tzinfo=UTC)),
    )
    assert [o.id for o in idx.history()] == ["ORD-0003", "ORD-0002", "ORD-0001"]
    assert [o.id for o in idx.history("c2")] == ["ORD-0002"]
    assert [o.id for o in idx.history("ord-000", status="pending")] == ["ORD-0003"]
    assert [o.id for o in idx.history(status="paid")] == ["ORD-0001"]
    with pytest.raises(ValidationError):
        idx.history(status="void")


def test_order_log_lookup():
    log = OrderLog([_order("a", 1)])
    assert log.get("a").total == 1.0
    with pytest.raises(NotFoundError):
        log.get("missing")


def test_csv_export_rows():
    idx = _index(
        _order("ORD-0001", 298, "Cash", when=datetime(2024, 5, 10, 12, 5, 9, tzinfo=UTC)),
        _order("ORD-0002", 50, status="pending"),
    )
    lines = idx.export_csv(date(2024, 5, 10), date(2024, 5, 10)).splitlines()
    assert lines[0] == ",".join(CSV_HEADERS)
    assert lines[1:] == ["ORD-0001,T1,2024-05-10 12:05:09,1,Cash,298.0,0.0,298.0"]


def test_csv_quotes_table_names_with_commas():
    idx = _index(_order("a", 10, table="Patio, left"))
    row = idx.export_csv().splitlines()[1]
    assert row.startswith('a,"Patio, left",')


@pytest.mark.parametrize(
    "kind,today,expected",
    [
        ("weekly", date(2024, 5, 10), (date(2024, 5, 3), date(2024, 5, 10))),
        ("monthly", date(2024, 5, 10), (date(2024, 4, 10), date(2024, 5, 10))),
        ("monthly", date(2024, 3, 31), (date(2024, 2, 29), date(2024, 3, 31))),
        ("monthly", date(2024, 1, 15), (date(2023, 12, 15), date(2024, 1, 15))),
    ],
)
def test_preset_ranges(kind, today, expected):
    assert preset_range(kind, today) == expected


def test_unknown_preset_rejected():
    with pytest.raises(ValidationError):
        preset_range("yearly", date(2024, 5, 10))


def test_reports_follow_order_log_updates():
    log = OrderLog()
    idx = ReportIndex(log)
    assert idx.dashboard().summary.total_orders == 0
    log.upsert(_order("a", 75))
    log.upsert(_order("a", 80))
    assert idx.dashboard().summary.total_revenue == 80.0
