"""
Meta Ads Data Models

Daily campaign delivery and funnel counters pulled from the Meta Marketing API.
One row per (date, campaign, country); country "ALL" holds the account-wide
aggregate for that campaign and day.
"""
from sqlalchemy import Column, Integer, String, Float, Date, DateTime, UniqueConstraint
from datetime import datetime

from vironax.models.base import Base


class MetaDailyMetric(Base):
    """Meta campaign performance (daily, per country breakdown)"""
    __tablename__ = "meta_daily_metrics"
    __table_args__ = (
        UniqueConstraint("date", "campaign_id", "country", name="uq_meta_date_campaign_country"),
    )

    id = Column(Integer, primary_key=True, index=True)

    date = Column(Date, index=True, nullable=False)
    campaign_id = Column(String, index=True, nullable=False)
    campaign_name = Column(String, nullable=True)
    country = Column(String, default="ALL", nullable=False)
    # ISO country code, or "ALL" for the aggregate row

    # Delivery
    spend = Column(Float, default=0.0)
    impressions = Column(Integer, default=0)
    reach = Column(Integer, default=0)
    clicks = Column(Integer, default=0)
    frequency = Column(Float, default=0.0)

    # Funnel
    landing_page_views = Column(Integer, default=0)
    add_to_cart = Column(Integer, default=0)
    checkouts_initiated = Column(Integer, default=0)
    conversions = Column(Integer, default=0)
    conversion_value = Column(Float, default=0.0)

    created_at = Column(DateTime, default=datetime.utcnow, nullable=False)

    def __repr__(self):
        return f"<MetaDailyMetric {self.campaign_name} {self.country} - {self.date}>"
