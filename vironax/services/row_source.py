"""
Row sources for the analytics engine.

The engine never queries storage itself. Callers hand it a RowSource that
returns three typed row collections for a window: Meta spend rows, Salla
(channel A) orders and manual (channel B) orders. Blocking I/O and any
failure handling live here, before the pure computation starts.
"""
from dataclasses import dataclass
from datetime import date
from typing import List, Optional, Protocol, Sequence

from sqlalchemy.orm import Session

from vironax.models.meta_data import MetaDailyMetric
from vironax.models.orders import SallaOrder, ManualOrder
from vironax.services.period import PeriodWindow
from vironax.utils.logger import log

# Country value Meta rows use for the account-wide aggregate
AGGREGATE_COUNTRY = "ALL"
# Grouping key for order rows that carry no country
UNKNOWN_COUNTRY = "UNKNOWN"


@dataclass(frozen=True)
class SpendRow:
    """One Meta campaign/day/country delivery row"""
    date: date
    campaign_id: str
    campaign_name: str
    country: str
    spend: float = 0.0
    impressions: int = 0
    reach: int = 0
    clicks: int = 0
    landing_page_views: int = 0
    add_to_cart: int = 0
    checkouts_initiated: int = 0
    conversions: int = 0
    conversion_value: float = 0.0
    frequency: float = 0.0

    @property
    def is_aggregate(self) -> bool:
        return self.country == AGGREGATE_COUNTRY


@dataclass(frozen=True)
class ChannelAOrderRow:
    """One storefront order"""
    date: date
    country: str
    order_total: float = 0.0


@dataclass(frozen=True)
class ChannelBOrderRow:
    """One manual order entry, possibly covering several orders"""
    date: date
    country: str
    orders_count: int = 0
    revenue: float = 0.0


class RowSource(Protocol):
    """Supplies the three raw collections for a window"""

    def spend_rows(self, window: PeriodWindow) -> List[SpendRow]:
        ...

    def channel_a_orders(self, window: PeriodWindow) -> List[ChannelAOrderRow]:
        ...

    def channel_b_orders(self, window: PeriodWindow) -> List[ChannelBOrderRow]:
        ...


class StaticRowSource:
    """RowSource over rows already held in memory; filters by window."""

    def __init__(
        self,
        spend: Sequence[SpendRow] = (),
        channel_a: Sequence[ChannelAOrderRow] = (),
        channel_b: Sequence[ChannelBOrderRow] = (),
    ):
        self._spend = tuple(spend)
        self._channel_a = tuple(channel_a)
        self._channel_b = tuple(channel_b)

    def spend_rows(self, window: PeriodWindow) -> List[SpendRow]:
        return [r for r in self._spend if window.contains(r.date)]

    def channel_a_orders(self, window: PeriodWindow) -> List[ChannelAOrderRow]:
        return [r for r in self._channel_a if window.contains(r.date)]

    def channel_b_orders(self, window: PeriodWindow) -> List[ChannelBOrderRow]:
        return [r for r in self._channel_b if window.contains(r.date)]


def _country(value: Optional[str]) -> str:
    return value or UNKNOWN_COUNTRY


class SqlRowSource:
    """RowSource backed by the SQLAlchemy store. NULL columns become zero here."""

    def __init__(self, db: Session):
        self.db = db

    def spend_rows(self, window: PeriodWindow) -> List[SpendRow]:
        rows = (
            self.db.query(MetaDailyMetric)
            .filter(
                MetaDailyMetric.date >= window.start_date,
                MetaDailyMetric.date <= window.end_date,
            )
            .order_by(MetaDailyMetric.date, MetaDailyMetric.id)
            .all()
        )
        log.debug(f"Loaded {len(rows)} Meta rows for {window.start_date} to {window.end_date}")
        return [
            SpendRow(
                date=r.date,
                campaign_id=r.campaign_id,
                campaign_name=r.campaign_name or '',
                country=r.country or AGGREGATE_COUNTRY,
                spend=r.spend or 0.0,
                impressions=r.impressions or 0,
                reach=r.reach or 0,
                clicks=r.clicks or 0,
                landing_page_views=r.landing_page_views or 0,
                add_to_cart=r.add_to_cart or 0,
                checkouts_initiated=r.checkouts_initiated or 0,
                conversions=r.conversions or 0,
                conversion_value=r.conversion_value or 0.0,
                frequency=r.frequency or 0.0,
            )
            for r in rows
        ]

    def channel_a_orders(self, window: PeriodWindow) -> List[ChannelAOrderRow]:
        rows = (
            self.db.query(SallaOrder.date, SallaOrder.country, SallaOrder.order_total)
            .filter(
                SallaOrder.date >= window.start_date,
                SallaOrder.date <= window.end_date,
            )
            .order_by(SallaOrder.date, SallaOrder.id)
            .all()
        )
        return [
            ChannelAOrderRow(date=r.date, country=_country(r.country), order_total=r.order_total or 0.0)
            for r in rows
        ]

    def channel_b_orders(self, window: PeriodWindow) -> List[ChannelBOrderRow]:
        rows = (
            self.db.query(ManualOrder.date, ManualOrder.country, ManualOrder.orders_count, ManualOrder.revenue)
            .filter(
                ManualOrder.date >= window.start_date,
                ManualOrder.date <= window.end_date,
            )
            .order_by(ManualOrder.date, ManualOrder.id)
            .all()
        )
        return [
            ChannelBOrderRow(
                date=r.date,
                country=_country(r.country),
                orders_count=r.orders_count or 0,
                revenue=r.revenue or 0.0,
            )
            for r in rows
        ]
