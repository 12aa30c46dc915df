from fastapi import APIRouter, Depends
from fastapi.responses import PlainTextResponse
from datetime import date, datetime
from typing import Optional

from tablepos.deps import get_runtime
from tablepos.schemas.reports import SalesReport
from tablepos.services.reports import preset_range
from tablepos.services.runtime import PosRuntime

router = APIRouter(prefix="/reports", tags=["reports"])


def _resolve_range(rt: PosRuntime, start: Optional[date], end: Optional[date], preset: Optional[str]):
    if preset:
        today = datetime.now(rt.reports.tz).date()
        return preset_range(preset, today)
    return start, end


@router.get("/summary", response_model=SalesReport)
def sales_summary(
    start: Optional[date] = None,
    end: Optional[date] = None,
    preset: Optional[str] = None,
    rt: PosRuntime = Depends(get_runtime),
):
    """
    Paid orders in [start 00:00, end 23:59:59] (local TZ).
    ?preset=weekly|monthly overrides start/end with a range ending today.
    """
    start, end = _resolve_range(rt, start, end, preset)
    return rt.reports.sales_report(start, end)


@router.get("/dashboard", response_model=SalesReport)
def dashboard(rt: PosRuntime = Depends(get_runtime)):
    return rt.reports.dashboard()


@router.get("/export.csv", response_class=PlainTextResponse)
def export_csv(
    start: Optional[date] = None,
    end: Optional[date] = None,
    preset: Optional[str] = None,
    rt: PosRuntime = Depends(get_runtime),
):
    start, end = _resolve_range(rt, start, end, preset)
    body = rt.reports.export_csv(start, end)
    fname = f"Report_{start or 'all'}_to_{end or 'all'}.csv"
    return PlainTextResponse(
        body,
        media_type="text/csv",
        headers={"Content-Disposition": f'attachment; filename="{fname}"'},
    )
