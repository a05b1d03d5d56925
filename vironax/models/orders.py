"""
Order Data Models

Salla storefront orders (one row per order) and manually entered orders
(WhatsApp, Instagram DMs, phone) that never pass through the storefront.
"""
from sqlalchemy import Column, Integer, String, Float, Date, DateTime, Text
from datetime import datetime

from vironax.models.base import Base


class SallaOrder(Base):
    """Storefront order synced from Salla"""
    __tablename__ = "salla_orders"

    id = Column(Integer, primary_key=True, index=True)
    order_id = Column(String, unique=True, nullable=False)

    date = Column(Date, index=True, nullable=False)
    country = Column(String, nullable=True)
    order_total = Column(Float, default=0.0)
    items_count = Column(Integer, default=1)
    status = Column(String, nullable=True)
    payment_method = Column(String, nullable=True)

    created_at = Column(DateTime, default=datetime.utcnow, nullable=False)

    def __repr__(self):
        return f"<SallaOrder {self.order_id} - {self.date}>"


class ManualOrder(Base):
    """Manually entered order batch"""
    __tablename__ = "manual_orders"

    id = Column(Integer, primary_key=True, index=True)

    date = Column(Date, index=True, nullable=False)
    country = Column(String, nullable=False)
    campaign = Column(String, nullable=True)
    orders_count = Column(Integer, default=1)
    revenue = Column(Float, default=0.0)
    source = Column(String, default="whatsapp")
    notes = Column(Text, nullable=True)

    created_at = Column(DateTime, default=datetime.utcnow, nullable=False)

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "date": self.date.isoformat() if self.date else None,
            "country": self.country,
            "campaign": self.campaign,
            "orders_count": self.orders_count,
            "revenue": self.revenue,
            "source": self.source,
            "notes": self.notes,
            "created_at": self.created_at.isoformat() if self.created_at else None,
        }

    def __repr__(self):
        return f"<ManualOrder {self.country} x{self.orders_count} - {self.date}>"
