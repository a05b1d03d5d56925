"""
Manual Order Service

Manages orders entered by hand (WhatsApp, Instagram DMs, phone) that never
pass through the Salla storefront. These rows feed channel B of the
analytics engine.
"""
import calendar
from datetime import date, timedelta
from typing import Dict, List, Optional, Tuple

from sqlalchemy import func
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from vironax.models.orders import ManualOrder
from vironax.utils.logger import log

BULK_DELETE_SCOPES = ("day", "week", "month", "year", "custom", "all")

EDITABLE_FIELDS = ("date", "country", "campaign", "orders_count", "revenue", "source", "notes")
REQUIRED_FIELDS = ("date", "country", "orders_count", "revenue")


def bulk_delete_range(
    scope: str,
    day: Optional[date] = None,
    start: Optional[date] = None,
    end: Optional[date] = None,
) -> Optional[Tuple[date, date]]:
    """
    Resolve a bulk-delete scope to an inclusive date range.

    Returns None for scope "all". Weeks run Sunday to Saturday.
    """
    if scope not in BULK_DELETE_SCOPES:
        raise ValueError(f"Invalid scope: {scope}")
    if scope == "all":
        return None
    if scope == "custom":
        if start is None or end is None:
            raise ValueError("Custom scope requires start and end dates")
        return start, end

    if day is None:
        raise ValueError(f"Scope '{scope}' requires a date")
    if scope == "day":
        return day, day
    if scope == "week":
        week_start = day - timedelta(days=(day.weekday() + 1) % 7)
        return week_start, week_start + timedelta(days=6)
    if scope == "month":
        last = calendar.monthrange(day.year, day.month)[1]
        return day.replace(day=1), day.replace(day=last)
    return date(day.year, 1, 1), date(day.year, 12, 31)


class ManualOrderService:
    """CRUD and summaries over manual_orders"""

    def __init__(self, db: Session):
        self.db = db

    def _commit(self):
        try:
            self.db.commit()
        except SQLAlchemyError:
            self.db.rollback()
            raise

    def list_orders(self, start: Optional[date] = None, end: Optional[date] = None) -> List[ManualOrder]:
        query = self.db.query(ManualOrder)
        if start and end:
            query = query.filter(ManualOrder.date >= start, ManualOrder.date <= end)
        return query.order_by(ManualOrder.date.desc(), ManualOrder.created_at.desc(), ManualOrder.id.desc()).all()

    def add_order(
        self,
        order_date: date,
        country: str,
        orders_count: int,
        revenue: float,
        campaign: Optional[str] = None,
        source: Optional[str] = None,
        notes: Optional[str] = None,
    ) -> ManualOrder:
        order = ManualOrder(
            date=order_date,
            country=country,
            campaign=campaign,
            orders_count=orders_count,
            revenue=revenue,
            source=source or "whatsapp",
            notes=notes,
        )
        self.db.add(order)
        self._commit()
        self.db.refresh(order)
        log.info(f"Manual order added: {country} x{orders_count} on {order_date}")
        return order

    def update_order(self, order_id: int, **changes) -> Optional[ManualOrder]:
        """Apply editable fields. Required fields cannot be cleared."""
        cleared = [f for f in REQUIRED_FIELDS if f in changes and changes[f] is None]
        if cleared:
            raise ValueError(f"Fields cannot be null: {', '.join(cleared)}")

        order = self.db.query(ManualOrder).filter(ManualOrder.id == order_id).first()
        if order is None:
            return None
        for field_name, value in changes.items():
            if field_name in EDITABLE_FIELDS:
                setattr(order, field_name, value)
        self._commit()
        self.db.refresh(order)
        return order

    def delete_order(self, order_id: int) -> bool:
        deleted = self.db.query(ManualOrder).filter(ManualOrder.id == order_id).delete()
        self._commit()
        return deleted > 0

    def bulk_delete(
        self,
        scope: str,
        day: Optional[date] = None,
        start: Optional[date] = None,
        end: Optional[date] = None,
    ) -> int:
        date_range = bulk_delete_range(scope, day=day, start=start, end=end)
        query = self.db.query(ManualOrder)
        if date_range is not None:
            query = query.filter(ManualOrder.date >= date_range[0], ManualOrder.date <= date_range[1])
        deleted = query.delete(synchronize_session=False)
        self._commit()
        log.info(f"Bulk deleted {deleted} manual orders (scope={scope})")
        return deleted

    def summary(self, start: date, end: date) -> Dict:
        in_range = (ManualOrder.date >= start, ManualOrder.date <= end)

        totals = (
            self.db.query(
                func.sum(ManualOrder.orders_count).label('orders'),
                func.sum(ManualOrder.revenue).label('revenue'),
                func.count(ManualOrder.id).label('entries'),
            )
            .filter(*in_range)
            .one()
        )
        by_country = (
            self.db.query(
                ManualOrder.country,
                func.sum(ManualOrder.orders_count).label('orders'),
                func.sum(ManualOrder.revenue).label('revenue'),
            )
            .filter(*in_range)
            .group_by(ManualOrder.country)
            .order_by(ManualOrder.country)
            .all()
        )
        by_source = (
            self.db.query(
                ManualOrder.source,
                func.sum(ManualOrder.orders_count).label('orders'),
                func.sum(ManualOrder.revenue).label('revenue'),
            )
            .filter(*in_range)
            .group_by(ManualOrder.source)
            .order_by(ManualOrder.source)
            .all()
        )

        return {
            'summary': {
                'total_orders': totals.orders or 0,
                'total_revenue': float(totals.revenue or 0),
                'entries': totals.entries or 0,
            },
            'by_country': [
                {'country': r.country, 'orders': r.orders or 0, 'revenue': float(r.revenue or 0)}
                for r in by_country
            ],
            'by_source': [
                {'source': r.source, 'orders': r.orders or 0, 'revenue': float(r.revenue or 0)}
                for r in by_source
            ],
        }
