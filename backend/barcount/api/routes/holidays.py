"""Holiday calendar routes."""

from datetime import date
from typing import List, Optional

from fastapi import APIRouter, Query

from barcount.core.config import settings
from barcount.schemas.purchase_order import Holiday
from barcount.services.holiday_service import DEFAULT_HOLIDAYS, get_upcoming_holiday

router = APIRouter()


@router.get("/", response_model=List[Holiday])
def list_holidays():
    return DEFAULT_HOLIDAYS


@router.get("/upcoming")
def upcoming_holiday(
    on: Optional[date] = Query(None, description="Check date, defaults to today"),
    days_before: Optional[int] = Query(None, ge=0, le=366),
):
    """Name of a holiday falling on ``on`` or within ``days_before`` days after it."""
    check_date = on or date.today()
    if days_before is None:
        days_before = settings.holiday_lookup_days
    return {
        "date": check_date.isoformat(),
        "days_before": days_before,
        "holiday": get_upcoming_holiday(check_date, DEFAULT_HOLIDAYS, days_before),
    }
