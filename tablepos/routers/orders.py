from fastapi import APIRouter, Depends
from typing import List

from tablepos.deps import get_runtime
from tablepos.schemas.orders import Order
from tablepos.services.runtime import PosRuntime

router = APIRouter(prefix="/orders", tags=["orders"])


@router.get("/", response_model=List[Order])
def list_orders(
    q: str = "",
    status: str = "all",
    rt: PosRuntime = Depends(get_runtime),
):
    """
    Order history, newest first.

    Query params:
      - q:      substring of the order id or table name (case-insensitive)
      - status: all | pending | billed | paid
    """
    return rt.reports.history(q, status)


@router.get("/{order_id}", response_model=Order)
def get_order(order_id: str, rt: PosRuntime = Depends(get_runtime)):
    return rt.orders.get(order_id)
