"""
Salla Order Service

Read-only summaries over storefront orders (channel A of the analytics
engine): totals, per-country and per-day breakdowns for a date range.
"""
from datetime import date
from typing import Dict

from sqlalchemy import func
from sqlalchemy.orm import Session

from vironax.models.orders import SallaOrder
from vironax.services.row_source import UNKNOWN_COUNTRY


class SallaOrderService:
    """Summaries over salla_orders"""

    def __init__(self, db: Session):
        self.db = db

    def summary(self, start: date, end: date) -> Dict:
        in_range = (SallaOrder.date >= start, SallaOrder.date <= end)
        revenue = func.sum(SallaOrder.order_total)

        totals = (
            self.db.query(
                func.count(SallaOrder.id).label('orders'),
                revenue.label('revenue'),
                func.avg(SallaOrder.order_total).label('aov'),
            )
            .filter(*in_range)
            .one()
        )
        by_country = (
            self.db.query(
                SallaOrder.country,
                func.count(SallaOrder.id).label('orders'),
                revenue.label('revenue'),
            )
            .filter(*in_range)
            .group_by(SallaOrder.country)
            .order_by(revenue.desc(), SallaOrder.country)
            .all()
        )
        by_day = (
            self.db.query(
                SallaOrder.date,
                func.count(SallaOrder.id).label('orders'),
                revenue.label('revenue'),
            )
            .filter(*in_range)
            .group_by(SallaOrder.date)
            .order_by(SallaOrder.date)
            .all()
        )

        return {
            'summary': {
                'total_orders': totals.orders or 0,
                'total_revenue': float(totals.revenue or 0),
                'avg_order_value': float(totals.aov or 0),
            },
            'by_country': [
                {
                    'country': r.country or UNKNOWN_COUNTRY,
                    'orders': r.orders,
                    'revenue': float(r.revenue or 0),
                }
                for r in by_country
            ],
            'by_day': [
                {'date': r.date.isoformat(), 'orders': r.orders, 'revenue': float(r.revenue or 0)}
                for r in by_day
            ],
        }
