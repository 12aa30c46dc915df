from sqlalchemy import String, Float, Text, DateTime, Boolean, JSON, Integer
from sqlalchemy.orm import Mapped, mapped_column
from datetime import datetime
from tablepos.db import Base
from tablepos.models.common import IdMixin, TSMMixin

# Rows mirror the pydantic records in tablepos.schemas one-to-one. Money is
# stored as Float (not Numeric) so values read back exactly as written.

# ── Menu ────────────────────────────────────────────────────────────────────
class MenuItemRow(Base, IdMixin, TSMMixin):
    __tablename__ = "menu_item"
    name: Mapped[str] = mapped_column(String(160))
    category: Mapped[str] = mapped_column(String(120))
    price: Mapped[float] = mapped_column(Float, default=0)
    food_type: Mapped[str] = mapped_column(String(10), default="veg")  # veg | non-veg
    position: Mapped[int] = mapped_column(Integer, default=0)         # catalog order

# ── Dining ──────────────────────────────────────────────────────────────────
class DiningTableRow(Base, IdMixin, TSMMixin):
    __tablename__ = "dining_table"
    name: Mapped[str] = mapped_column(String(30))
    section: Mapped[str] = mapped_column(String(60))
    status: Mapped[str] = mapped_column(String(10), default="vacant")  # vacant | occupied | billed
    current_order_id: Mapped[str | None] = mapped_column(String(64))
    order_value: Mapped[float | None] = mapped_column(Float)
    session_start_time: Mapped[datetime | None] = mapped_column(DateTime(timezone=True))
    position: Mapped[int] = mapped_column(Integer, default=0)

# ── Orders ──────────────────────────────────────────────────────────────────
class OrderRow(Base, IdMixin, TSMMixin):
    __tablename__ = "order"
    table_id: Mapped[str] = mapped_column(String(64))
    table_name: Mapped[str] = mapped_column(String(30))
    items: Mapped[list] = mapped_column(JSON, default=list)  # [{id, name, price, qty, kind}]
    subtotal: Mapped[float] = mapped_column(Float, default=0)
    tax: Mapped[float] = mapped_column(Float, default=0)
    discount: Mapped[float] = mapped_column(Float, default=0)
    total: Mapped[float] = mapped_column(Float, default=0)
    status: Mapped[str] = mapped_column(String(10))          # pending | billed | paid
    payment_method: Mapped[str] = mapped_column(String(10), default="-")
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True))
    cash_amount: Mapped[float | None] = mapped_column(Float)
    upi_amount: Mapped[float | None] = mapped_column(Float)

# ── Settings / profile (single row each, id "default") ──────────────────────
class AppSettingsRow(Base, IdMixin, TSMMixin):
    __tablename__ = "app_settings"
    theme: Mapped[str] = mapped_column(String(40))
    logo_url: Mapped[str | None] = mapped_column(String(400))
    show_logo_on_bill: Mapped[bool] = mapped_column(Boolean, default=True)
    show_address_on_bill: Mapped[bool] = mapped_column(Boolean, default=True)
    invoice_header: Mapped[str] = mapped_column(String(200))
    invoice_footer: Mapped[str] = mapped_column(String(200))
    gst_enabled: Mapped[bool] = mapped_column(Boolean, default=False)
    gst_percentage: Mapped[float] = mapped_column(Float, default=5)

class BusinessProfileRow(Base, IdMixin, TSMMixin):
    __tablename__ = "business_profile"
    owner_name: Mapped[str] = mapped_column(String(160))
    owner_number: Mapped[str] = mapped_column(String(30))
    fssai: Mapped[str] = mapped_column(String(32))
    address: Mapped[str] = mapped_column(Text)
