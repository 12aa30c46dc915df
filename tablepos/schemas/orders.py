from datetime import datetime
from pydantic import BaseModel, ConfigDict, Field
from typing import Literal, Optional

from tablepos.schemas.tables import Table

OrderStatusLiteral = Literal["pending", "billed", "paid"]
PayMethodLiteral = Literal["UPI", "Cash", "Card", "Split", "-"]
LineKindLiteral = Literal["item", "time_charge"]

# Synthetic cart line for the time-based service charge. Lines are keyed by
# (kind, id), so a menu item that happens to share this id never collides.
TIME_CHARGE_LINE_ID = "MISC_TIME_BASED"

class OrderItem(BaseModel):
    model_config = ConfigDict(frozen=True)
    id: str
    name: str
    price: float = Field(allow_inf_nan=False)
    qty: int = Field(gt=0)
    kind: LineKindLiteral = "item"

    @property
    def key(self) -> tuple[str, str]:
        return (self.kind, self.id)

class Order(BaseModel):
    model_config = ConfigDict(frozen=True)
    id: str
    table_id: str
    table_name: str
    items: list[OrderItem]
    subtotal: float
    tax: float = 0.0
    discount: float = Field(default=0.0, ge=0)
    total: float
    status: OrderStatusLiteral
    payment_method: PayMethodLiteral = "-"
    created_at: datetime
    cash_amount: Optional[float] = None
    upi_amount: Optional[float] = None

class Totals(BaseModel):
    subtotal: float
    discount: float
    total: float

# ── request bodies ────────────────────────────────────────────────────────────
class CartItemIn(BaseModel):
    menu_item_id: str

class CartQtyIn(BaseModel):
    qty: int
    kind: LineKindLiteral = "item"

class DiscountIn(BaseModel):
    discount: float = Field(allow_inf_nan=False)

class SettleIn(BaseModel):
    payment_method: Literal["UPI", "Cash", "Card", "Split"]
    cash_amount: Optional[float] = Field(default=None, allow_inf_nan=False)
    upi_amount: Optional[float] = Field(default=None, allow_inf_nan=False)

class ConfirmIn(BaseModel):
    confirm: bool = False

class CartOut(BaseModel):
    table: Table
    items: list[OrderItem]
    totals: Totals
    dirty: bool
    order_id: Optional[str] = None
