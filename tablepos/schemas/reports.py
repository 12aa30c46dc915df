from datetime import date
from pydantic import BaseModel

class SalesSummary(BaseModel):
    start: date | None = None
    end: date | None = None
    total_revenue: float
    total_orders: int
    average_order_value: float
    total_discounts: float
    upi_sales: float
    cash_sales: float
    other_sales: float

class PaymentSlice(BaseModel):
    name: str
    value: float

class DailyRevenue(BaseModel):
    day: date
    amount: float

class TopItem(BaseModel):
    name: str
    qty: int

class SalesReport(BaseModel):
    summary: SalesSummary
    payments: list[PaymentSlice]
    daily: list[DailyRevenue]
    top_items: list[TopItem]
