from datetime import datetime
from decimal import Decimal, ROUND_HALF_UP
from typing import Iterable

from tablepos.schemas.orders import OrderItem, Totals

def _dec(x) -> Decimal:
    # go through str to avoid float binary artifacts
    return Decimal(str(x))

def _money(x) -> float:
    return float(_dec(x).quantize(Decimal('0.01'), rounding=ROUND_HALF_UP))

def line_total(line: OrderItem) -> float:
    return _money(_dec(line.price) * line.qty)

def subtotal(lines: Iterable[OrderItem]) -> float:
    # exact Decimal sum, rounded to cents once; independent of line order
    return _money(sum((_dec(l.price) * l.qty for l in lines), Decimal(0)))

def compute_totals(lines: Iterable[OrderItem], discount: float) -> Totals:
    sub = subtotal(lines)
    disc = _money(max(0.0, float(discount or 0)))
    # no floor: a discount larger than the subtotal yields a negative total
    return Totals(subtotal=sub, discount=disc, total=_money(_dec(sub) - _dec(disc)))

def duration_minutes(start: datetime, now: datetime) -> int:
    """Whole minutes since `start`, never less than 1 so a fresh session doesn't read "0 min"."""
    return max(1, int((now - start).total_seconds() // 60))

def time_charge(start: datetime, now: datetime, rate_per_minute: float) -> tuple[int, float]:
    minutes = duration_minutes(start, now)
    return minutes, _money(_dec(rate_per_minute) * minutes)
