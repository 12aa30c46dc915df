# tablepos/routers/dining.py
from fastapi import APIRouter, Depends
from typing import List

from tablepos.deps import get_runtime
from tablepos.schemas.common import Ok
from tablepos.schemas.orders import (
    CartItemIn, CartOut, CartQtyIn, ConfirmIn, DiscountIn, Order, SettleIn,
)
from tablepos.schemas.tables import Table, TableIn, TableSection
from tablepos.services.cart import Cart
from tablepos.services.runtime import PosRuntime

router = APIRouter(prefix="/dining", tags=["dining"])


def _cart_out(cart: Cart) -> CartOut:
    return CartOut(
        table=cart.table,
        items=cart.lines,
        totals=cart.compute_totals(),
        dirty=cart.dirty,
        order_id=cart.order_id,
    )


# ------------------------------------------------------------------
# floor setup
# ------------------------------------------------------------------
@router.get("/tables", response_model=List[TableSection])
def list_tables(rt: PosRuntime = Depends(get_runtime)):
    """
    Tables grouped for the floor view:
      [ {"section": "Main Floor", "tables": [...]}, {"section": "Terrace", ...} ]
    Sections come out in the order they were first seen.
    """
    return [TableSection(section=s, tables=ts) for s, ts in rt.registry.list_by_section().items()]


@router.get("/tables/{table_id}", response_model=Table)
def get_table(table_id: str, rt: PosRuntime = Depends(get_runtime)):
    return rt.registry.get(table_id)


@router.post("/tables", response_model=Table)
def upsert_table(body: TableIn, rt: PosRuntime = Depends(get_runtime)):
    """
    body:
      id: str | None   (omit to create)
      name: str
      section: str
    Editing an existing table only changes name/section; a live session is kept.
    """
    return rt.upsert_table(body)


@router.delete("/tables/{table_id}", response_model=Ok)
def delete_table(table_id: str, rt: PosRuntime = Depends(get_runtime)):
    rt.delete_table(table_id)
    return Ok(id=table_id)


# ------------------------------------------------------------------
# table session: cart editing
# ------------------------------------------------------------------
@router.post("/tables/{table_id}/session", response_model=CartOut)
def open_session(table_id: str, rt: PosRuntime = Depends(get_runtime)):
    """Select a table. A non-vacant table comes back with its in-flight order loaded."""
    return _cart_out(rt.open_session(table_id))


@router.get("/tables/{table_id}/session", response_model=CartOut)
def get_session(table_id: str, rt: PosRuntime = Depends(get_runtime)):
    return _cart_out(rt.session(table_id))


@router.delete("/tables/{table_id}/session", response_model=Ok)
def close_session(table_id: str, confirm: bool = False, rt: PosRuntime = Depends(get_runtime)):
    """Leave the table. 409 if there are unsaved changes and ?confirm=true was not sent."""
    rt.close_session(table_id, confirmed=confirm)
    return Ok(id=table_id)


@router.post("/tables/{table_id}/session/items", response_model=CartOut)
def add_item(table_id: str, body: CartItemIn, rt: PosRuntime = Depends(get_runtime)):
    cart = rt.session(table_id)
    cart.add_item(rt.catalog.get(body.menu_item_id))
    return _cart_out(cart)


@router.patch("/tables/{table_id}/session/items/{item_id}", response_model=CartOut)
def set_quantity(table_id: str, item_id: str, body: CartQtyIn, rt: PosRuntime = Depends(get_runtime)):
    """qty <= 0 removes the line."""
    cart = rt.session(table_id)
    cart.set_quantity(item_id, body.qty, body.kind)
    return _cart_out(cart)


@router.post("/tables/{table_id}/session/misc", response_model=CartOut)
def apply_misc_charge(table_id: str, rt: PosRuntime = Depends(get_runtime)):
    cart = rt.session(table_id)
    rt.lifecycle.apply_misc_charge(cart)
    return _cart_out(cart)


@router.put("/tables/{table_id}/session/discount", response_model=CartOut)
def set_discount(table_id: str, body: DiscountIn, rt: PosRuntime = Depends(get_runtime)):
    cart = rt.session(table_id)
    cart.set_discount(body.discount)
    return _cart_out(cart)


# ------------------------------------------------------------------
# table session: lifecycle events
# ------------------------------------------------------------------
@router.post("/tables/{table_id}/session/punch", response_model=Order)
def punch(table_id: str, rt: PosRuntime = Depends(get_runtime)):
    return rt.lifecycle.punch(rt.session(table_id))


@router.post("/tables/{table_id}/session/bill", response_model=Order)
def bill(table_id: str, rt: PosRuntime = Depends(get_runtime)):
    return rt.lifecycle.bill(rt.session(table_id))


@router.post("/tables/{table_id}/session/settle", response_model=Order)
def settle(table_id: str, body: SettleIn, rt: PosRuntime = Depends(get_runtime)):
    """
    body: {payment_method: UPI|Cash|Card|Split, cash_amount?, upi_amount?}
    Split needs cash_amount + upi_amount >= total, else 422 and nothing is saved.
    The session is closed once the table is free again.
    """
    order = rt.lifecycle.settle(
        rt.session(table_id), body.payment_method,
        cash_amount=body.cash_amount, upi_amount=body.upi_amount,
    )
    rt.close_session(table_id)
    return order


@router.post("/tables/{table_id}/session/clear", response_model=CartOut)
def clear(table_id: str, body: ConfirmIn, rt: PosRuntime = Depends(get_runtime)):
    cart = rt.session(table_id)
    rt.lifecycle.clear(cart, confirmed=body.confirm)
    return _cart_out(cart)
