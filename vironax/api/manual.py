"""
Manual Orders API

Entry and cleanup of orders taken outside the storefront.
"""
import datetime as dt
from datetime import date, timedelta
from typing import Optional

from fastapi import APIRouter, Depends, HTTPException, Query
from pydantic import BaseModel, Field, field_validator
from sqlalchemy.orm import Session

from vironax.config import get_settings
from vironax.models.base import get_db
from vironax.services.manual_order_service import ManualOrderService
from vironax.utils.logger import log

settings = get_settings()

router = APIRouter(prefix="/manual", tags=["manual"])


class ManualOrderCreate(BaseModel):
    date: dt.date
    country: str
    orders_count: int = Field(..., gt=0)
    revenue: float = Field(..., gt=0)
    campaign: Optional[str] = None
    source: Optional[str] = None  # whatsapp, instagram, phone, ...
    notes: Optional[str] = None


class ManualOrderUpdate(BaseModel):
    date: Optional[dt.date] = None
    country: Optional[str] = None
    orders_count: Optional[int] = Field(None, gt=0)
    revenue: Optional[float] = Field(None, ge=0)
    campaign: Optional[str] = None
    source: Optional[str] = None
    notes: Optional[str] = None

    @field_validator("date", "country", "orders_count", "revenue")
    @classmethod
    def _not_null(cls, v, info):
        # Omit a field to leave it unchanged; these columns can't be cleared
        if v is None:
            raise ValueError(f"{info.field_name} cannot be null")
        return v


class BulkDeleteRequest(BaseModel):
    scope: str  # day, week, month, year, custom, all
    date: Optional[dt.date] = None
    start_date: Optional[dt.date] = None
    end_date: Optional[dt.date] = None


@router.get("")
async def list_manual_orders(
    start: Optional[date] = Query(None, description="Start date (YYYY-MM-DD)"),
    end: Optional[date] = Query(None, description="End date (YYYY-MM-DD)"),
    db: Session = Depends(get_db),
):
    """Manual orders, newest first. Both start and end are needed to filter."""
    try:
        orders = ManualOrderService(db).list_orders(start, end)
        return {"success": True, "data": [o.to_dict() for o in orders]}
    except Exception as e:
        log.error(f"Error listing manual orders: {str(e)}")
        raise HTTPException(status_code=500, detail=str(e))


@router.post("", status_code=201)
async def add_manual_order(payload: ManualOrderCreate, db: Session = Depends(get_db)):
    try:
        order = ManualOrderService(db).add_order(
            order_date=payload.date,
            country=payload.country,
            orders_count=payload.orders_count,
            revenue=payload.revenue,
            campaign=payload.campaign,
            source=payload.source,
            notes=payload.notes,
        )
        return {"success": True, "data": order.to_dict()}
    except Exception as e:
        log.error(f"Error adding manual order: {str(e)}")
        raise HTTPException(status_code=500, detail=str(e))


@router.put("/{order_id}")
async def update_manual_order(order_id: int, payload: ManualOrderUpdate, db: Session = Depends(get_db)):
    try:
        order = ManualOrderService(db).update_order(order_id, **payload.model_dump(exclude_unset=True))
        if order is None:
            raise HTTPException(status_code=404, detail="Order not found")
        return {"success": True, "data": order.to_dict()}
    except HTTPException:
        raise
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e))
    except Exception as e:
        log.error(f"Error updating manual order {order_id}: {str(e)}")
        raise HTTPException(status_code=500, detail=str(e))


@router.delete("/{order_id}")
async def delete_manual_order(order_id: int, db: Session = Depends(get_db)):
    try:
        deleted = ManualOrderService(db).delete_order(order_id)
    except Exception as e:
        log.error(f"Error deleting manual order {order_id}: {str(e)}")
        raise HTTPException(status_code=500, detail=str(e))
    if not deleted:
        raise HTTPException(status_code=404, detail="Order not found")
    return {"success": True, "deleted": order_id}


@router.post("/delete-bulk")
async def bulk_delete_manual_orders(payload: BulkDeleteRequest, db: Session = Depends(get_db)):
    """Delete all manual orders in a day / week / month / year / custom range, or all of them"""
    try:
        deleted = ManualOrderService(db).bulk_delete(
            payload.scope,
            day=payload.date,
            start=payload.start_date,
            end=payload.end_date,
        )
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e))
    except Exception as e:
        log.error(f"Error bulk deleting manual orders: {str(e)}")
        raise HTTPException(status_code=500, detail=str(e))
    return {"success": True, "deleted": deleted}


@router.get("/summary")
async def get_manual_summary(
    start: Optional[date] = Query(None, description="Start date (YYYY-MM-DD)"),
    end: Optional[date] = Query(None, description="End date (YYYY-MM-DD), defaults to today"),
    db: Session = Depends(get_db),
):
    """Totals, by country and by source for manual orders in the range"""
    end_date = end or date.today()
    start_date = start or end_date - timedelta(days=settings.default_range_days - 1)
    try:
        return {"success": True, "data": ManualOrderService(db).summary(start_date, end_date)}
    except Exception as e:
        log.error(f"Error getting manual summary: {str(e)}")
        raise HTTPException(status_code=500, detail=str(e))
