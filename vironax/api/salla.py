"""
Salla Orders API

Storefront order summaries for a date range.
"""
from datetime import date, timedelta
from typing import Optional

from fastapi import APIRouter, Depends, HTTPException, Query
from sqlalchemy.orm import Session

from vironax.config import get_settings
from vironax.models.base import get_db
from vironax.services.salla_order_service import SallaOrderService
from vironax.utils.logger import log

settings = get_settings()

router = APIRouter(prefix="/salla", tags=["salla"])


@router.get("/orders")
async def get_salla_orders(
    start: Optional[date] = Query(None, description="Start date (YYYY-MM-DD)"),
    end: Optional[date] = Query(None, description="End date (YYYY-MM-DD), defaults to today"),
    db: Session = Depends(get_db),
):
    """
    Storefront orders summary

    Returns totals with average order value, revenue by country (highest
    first) and a daily series.
    """
    end_date = end or date.today()
    start_date = start or end_date - timedelta(days=settings.default_range_days - 1)
    if end_date < start_date:
        raise HTTPException(status_code=400, detail="end must not be before start")
    try:
        return {
            "success": True,
            "data": SallaOrderService(db).summary(start_date, end_date),
            "date_range": {"start_date": start_date.isoformat(), "end_date": end_date.isoformat()},
        }
    except Exception as e:
        log.error(f"Error getting Salla orders: {str(e)}")
        raise HTTPException(status_code=500, detail=str(e))
