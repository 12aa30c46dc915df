from datetime import timedelta

import pytest

from conftest import START
from tablepos.errors import ConfirmationRequired, NotFoundError, PersistenceError, ValidationError
from tablepos.store import Entity


def _open_with_wraps(runtime, n=2, table_id="t1"):
    cart = runtime.lifecycle.select_table(table_id)
    wrap = runtime.catalog.get("1")
    for _ in range(n):
        cart.add_item(wrap)
    return cart


def test_select_vacant_table_gives_clean_cart(runtime):
    cart = runtime.lifecycle.select_table("t1")
    assert cart.table.status == "vacant"
    assert cart.is_empty() and not cart.dirty and cart.order_id is None


def test_select_unknown_table_is_not_found(runtime):
    with pytest.raises(NotFoundError):
        runtime.lifecycle.select_table("nope")


def test_punch_vacant_table_opens_session(runtime, store):
    cart = _open_with_wraps(runtime)
    cart.set_discount(0)

    order = runtime.lifecycle.punch(cart)

    assert order.id == "ORD-0001"
    assert (order.subtotal, order.discount, order.total) == (298.0, 0.0, 298.0)
    assert order.status == "pending"
    assert order.items[0].qty == 2

    table = runtime.registry.get("t1")
    assert table.status == "occupied"
    assert table.current_order_id == "ORD-0001"
    assert table.order_value == 298.0
    assert table.session_start_time == START

    persisted = {o.id: o for o in store.read(Entity.ORDERS)}
    assert persisted["ORD-0001"].status == "pending"
    assert not cart.dirty and cart.order_id == "ORD-0001"


def test_repunch_keeps_order_id_and_session_start(runtime, clock):
    cart = _open_with_wraps(runtime, n=1)
    first = runtime.lifecycle.punch(cart)

    clock.advance(minutes=5)
    cart.add_item(runtime.catalog.get("2"))
    second = runtime.lifecycle.punch(cart)

    assert second.id == first.id
    assert second.total == 348.0
    assert second.created_at == START + timedelta(minutes=5)
    table = runtime.registry.get("t1")
    assert table.session_start_time == START
    assert table.order_value == 348.0
    assert len(runtime.orders.list()) == 1


def test_misc_charge_after_ten_minutes(runtime, clock):
    cart = _open_with_wraps(runtime)
    runtime.lifecycle.punch(cart)

    clock.advance(minutes=10)
    line = runtime.lifecycle.apply_misc_charge(cart)

    assert line.name == "MISC Charges (10 min)"
    assert line.price == 25.0
    assert cart.compute_totals().subtotal == 323.0
    assert cart.dirty

    clock.advance(minutes=2)
    runtime.lifecycle.apply_misc_charge(cart)
    misc = [l for l in cart.lines if l.kind == "time_charge"]
    assert len(misc) == 1 and misc[0].price == 30.0


def test_bill_then_punch_reopens(runtime):
    cart = _open_with_wraps(runtime)
    runtime.lifecycle.punch(cart)

    billed = runtime.lifecycle.bill(cart)
    assert billed.status == "billed"
    assert runtime.registry.get("t1").status == "billed"

    cart.add_item(runtime.catalog.get("9"))
    reopened = runtime.lifecycle.punch(cart)
    assert reopened.id == billed.id
    assert reopened.status == "pending"
    assert runtime.registry.get("t1").status == "occupied"


def test_bill_straight_from_vacant(runtime):
    cart = _open_with_wraps(runtime, n=1)
    order = runtime.lifecycle.bill(cart)
    table = runtime.registry.get("t1")
    assert order.status == "billed"
    assert table.status == "billed" and table.session_start_time == START


def test_settle_cash_frees_table(runtime, store):
    cart = _open_with_wraps(runtime)
    punched = runtime.lifecycle.punch(cart)

    paid = runtime.lifecycle.settle(cart, "Cash")

    assert paid.id == punched.id
    assert paid.status == "paid"
    assert paid.payment_method == "Cash"
    assert (paid.cash_amount, paid.upi_amount) == (298.0, 0.0)

    table = runtime.registry.get("t1")
    assert table.status == "vacant"
    assert table.current_order_id is None
    assert table.order_value is None
    assert table.session_start_time is None

    assert runtime.orders.get(paid.id).status == "paid"
    assert [o.status for o in store.read(Entity.ORDERS)] == ["paid"]
    assert cart.is_empty() and cart.order_id is None


@pytest.mark.parametrize("method,cash,upi", [("UPI", 0.0, 298.0), ("Card", None, None)])
def test_settle_other_methods_record_amounts(runtime, method, cash, upi):
    cart = _open_with_wraps(runtime)
    paid = runtime.lifecycle.settle(cart, method)
    assert (paid.cash_amount, paid.upi_amount) == (cash, upi)


def test_settle_split_covering_total(runtime):
    cart = _open_with_wraps(runtime)
    paid = runtime.lifecycle.settle(cart, "Split", cash_amount=200, upi_amount=98)
    assert (paid.cash_amount, paid.upi_amount) == (200.0, 98.0)
    assert paid.payment_method == "Split"


def test_short_split_rejected_and_nothing_changes(runtime, store):
    cart = _open_with_wraps(runtime)
    runtime.lifecycle.punch(cart)
    lines_before = cart.lines
    table_before = runtime.registry.get("t1")

    with pytest.raises(ValidationError):
        runtime.lifecycle.settle(cart, "Split", cash_amount=100, upi_amount=100)

    assert runtime.registry.get("t1") == table_before
    assert [o.status for o in store.read(Entity.ORDERS)] == ["pending"]
    assert cart.lines == lines_before


def test_unknown_payment_method_rejected(runtime):
    cart = _open_with_wraps(runtime)
    with pytest.raises(ValidationError):
        runtime.lifecycle.settle(cart, "Cheque")


def test_empty_cart_cannot_be_punched(runtime, store):
    cart = runtime.lifecycle.select_table("t1")
    for action in (runtime.lifecycle.punch, runtime.lifecycle.bill):
        with pytest.raises(ValidationError):
            action(cart)
    with pytest.raises(ValidationError):
        runtime.lifecycle.settle(cart, "Cash")
    assert store.read(Entity.ORDERS) == []


def test_failed_save_keeps_draft(runtime, store, monkeypatch):
    cart = _open_with_wraps(runtime)

    def boom(batch):
        raise OSError("disk gone")

    monkeypatch.setattr(store, "_apply", boom)
    with pytest.raises(PersistenceError):
        runtime.lifecycle.punch(cart)

    assert cart.dirty
    assert [(l.id, l.qty) for l in cart.lines] == [("1", 2)]
    assert cart.order_id is None
    assert runtime.registry.get("t1").status == "vacant"
    assert runtime.orders.list() == []


def test_reselect_loads_in_flight_order(runtime):
    cart = _open_with_wraps(runtime)
    cart.set_discount(20)
    runtime.lifecycle.punch(cart)

    again = runtime.lifecycle.select_table("t1")
    assert [(l.id, l.qty) for l in again.lines] == [("1", 2)]
    assert again.discount == 20.0
    assert again.order_id == "ORD-0001"
    assert not again.dirty


def test_exit_guard(runtime):
    cart = _open_with_wraps(runtime, n=1)
    with pytest.raises(ConfirmationRequired):
        runtime.lifecycle.exit(cart)
    assert not cart.is_empty()

    runtime.lifecycle.exit(cart, confirmed=True)
    assert cart.is_empty()


def test_exit_without_changes_needs_no_confirm(runtime):
    cart = _open_with_wraps(runtime, n=1)
    runtime.lifecycle.punch(cart)
    runtime.lifecycle.exit(cart)


def test_clear_is_local_only(runtime, store):
    cart = _open_with_wraps(runtime)
    runtime.lifecycle.punch(cart)
    cart.add_item(runtime.catalog.get("2"))

    with pytest.raises(ConfirmationRequired):
        runtime.lifecycle.clear(cart)
    runtime.lifecycle.clear(cart, confirmed=True)

    assert cart.is_empty() and cart.discount == 0
    assert runtime.registry.get("t1").status == "occupied"
    assert store.read(Entity.ORDERS)[0].total == 298.0


def test_deleted_table_cannot_be_punched(runtime):
    cart = _open_with_wraps(runtime)
    runtime.delete_table("t1")
    with pytest.raises(NotFoundError):
        runtime.lifecycle.punch(cart)


def test_sessions_are_kept_per_table(runtime):
    a = runtime.open_session("t1")
    assert runtime.open_session("t1") is a
    a.add_item(runtime.catalog.get("1"))

    with pytest.raises(ConfirmationRequired):
        runtime.close_session("t1")
    runtime.close_session("t1", confirmed=True)
    with pytest.raises(NotFoundError):
        runtime.session("t1")


def test_two_tables_get_distinct_orders(runtime):
    a = _open_with_wraps(runtime, n=1, table_id="t1")
    b = _open_with_wraps(runtime, n=1, table_id="t5")
    assert runtime.lifecycle.punch(a).id != runtime.lifecycle.punch(b).id
    assert runtime.registry.get("t5").status == "occupied"


def test_non_finite_split_amount_rejected(runtime, store):
    cart = _open_with_wraps(runtime)
    runtime.lifecycle.punch(cart)
    with pytest.raises(ValidationError):
        runtime.lifecycle.settle(cart, "Split", cash_amount=float("inf"), upi_amount=0)
    assert runtime.registry.get("t1").status == "occupied"
    assert [o.status for o in store.read(Entity.ORDERS)] == ["pending"]
