"""
Metrics Aggregator

Reduces raw Meta spend rows and the two order channels into the overview
KPIs, the daily series, campaign metrics and country metrics. Everything
here is a pure function of the rows passed in; ratios go through
safe_divide so an empty denominator yields 0.
"""
from collections import defaultdict
from dataclasses import dataclass
from datetime import date
from typing import Dict, List, Sequence, Tuple

from vironax.services.period import PeriodWindow
from vironax.services.row_source import (
    ChannelAOrderRow,
    ChannelBOrderRow,
    RowSource,
    SpendRow,
)
from vironax.utils.helpers import mean, safe_divide
from vironax.utils.logger import log

# Display names for the markets we sell into; unmapped codes show as-is
COUNTRY_NAMES: Dict[str, str] = {
    'SA': 'Saudi Arabia',
    'AE': 'UAE',
    'KW': 'Kuwait',
    'QA': 'Qatar',
    'BH': 'Bahrain',
    'OM': 'Oman',
}


def country_name(code: str) -> str:
    return COUNTRY_NAMES.get(code, code)


# ---------------------------------------------------------------------------
# Result records
# ---------------------------------------------------------------------------

@dataclass(frozen=True)
class OverviewKPI:
    spend: float
    orders: int
    channel_a_orders: int
    channel_b_orders: int
    revenue: float
    aov: float
    cac: float
    roas: float


@dataclass(frozen=True)
class DailyMetric:
    date: date
    spend: float
    orders: int
    revenue: float
    aov: float
    cac: float
    roas: float


@dataclass(frozen=True)
class CampaignMetric:
    """Meta-reported campaign totals for a window (aggregate-country rows)"""
    campaign_id: str
    campaign_name: str
    spend: float
    impressions: int
    reach: int
    clicks: int
    landing_page_views: int
    add_to_cart: int
    checkouts_initiated: int
    conversions: int
    conversion_value: float
    frequency: float
    cpm: float
    cpc: float
    ctr: float  # percent
    cr: float  # percent
    meta_roas: float
    meta_aov: float
    meta_cac: float


@dataclass(frozen=True)
class CampaignCountryMetric:
    campaign_id: str
    campaign_name: str
    country: str
    spend: float
    impressions: int
    reach: int
    clicks: int
    conversions: int
    conversion_value: float
    frequency: float
    ctr: float
    meta_roas: float


@dataclass(frozen=True)
class CountryMetric:
    """Spend from Meta joined with orders from both channels for one market"""
    code: str
    name: str
    spend: float
    channel_a_orders: int
    channel_b_orders: int
    channel_a_revenue: float
    channel_b_revenue: float
    total_orders: int
    total_revenue: float
    aov: float
    cac: float
    roas: float


@dataclass(frozen=True)
class MetricsSnapshot:
    """Everything the comparator needs about one window"""
    window: PeriodWindow
    overview: OverviewKPI
    daily: Tuple[DailyMetric, ...]
    campaigns: Tuple[CampaignMetric, ...]
    countries: Tuple[CountryMetric, ...]


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------

def _in_window(rows, window: PeriodWindow) -> list:
    return [r for r in rows if window.contains(r.date)]


def _aggregate_spend_rows(rows: Sequence[SpendRow]) -> List[SpendRow]:
    return [r for r in rows if r.is_aggregate]


def _country_spend_rows(rows: Sequence[SpendRow]) -> List[SpendRow]:
    return [r for r in rows if not r.is_aggregate]


# ---------------------------------------------------------------------------
# Reductions
# ---------------------------------------------------------------------------

def build_overview(
    spend_rows: Sequence[SpendRow],
    channel_a: Sequence[ChannelAOrderRow],
    channel_b: Sequence[ChannelBOrderRow],
) -> OverviewKPI:
    spend = sum(r.spend for r in _aggregate_spend_rows(spend_rows))
    channel_a_orders = len(channel_a)
    channel_b_orders = sum(r.orders_count for r in channel_b)
    revenue = sum(r.order_total for r in channel_a) + sum(r.revenue for r in channel_b)
    orders = channel_a_orders + channel_b_orders

    return OverviewKPI(
        spend=spend,
        orders=orders,
        channel_a_orders=channel_a_orders,
        channel_b_orders=channel_b_orders,
        revenue=revenue,
        aov=safe_divide(revenue, orders),
        cac=safe_divide(spend, orders),
        roas=safe_divide(revenue, spend),
    )


def build_daily_series(
    spend_rows: Sequence[SpendRow],
    channel_a: Sequence[ChannelAOrderRow],
    channel_b: Sequence[ChannelBOrderRow],
) -> List[DailyMetric]:
    """One entry per date seen in any source, ascending."""
    spend_by_day: Dict[date, float] = defaultdict(float)
    orders_by_day: Dict[date, int] = defaultdict(int)
    revenue_by_day: Dict[date, float] = defaultdict(float)

    for r in _aggregate_spend_rows(spend_rows):
        spend_by_day[r.date] += r.spend
    for r in channel_a:
        orders_by_day[r.date] += 1
        revenue_by_day[r.date] += r.order_total
    for r in channel_b:
        orders_by_day[r.date] += r.orders_count
        revenue_by_day[r.date] += r.revenue

    days = sorted(set(spend_by_day) | set(orders_by_day) | set(revenue_by_day))

    series = []
    for day in days:
        spend = spend_by_day.get(day, 0.0)
        orders = orders_by_day.get(day, 0)
        revenue = revenue_by_day.get(day, 0.0)
        series.append(DailyMetric(
            date=day,
            spend=spend,
            orders=orders,
            revenue=revenue,
            aov=safe_divide(revenue, orders),
            cac=safe_divide(spend, orders),
            roas=safe_divide(revenue, spend),
        ))
    return series


def build_campaign_metrics(spend_rows: Sequence[SpendRow]) -> List[CampaignMetric]:
    """Campaign totals from aggregate-country rows, highest spend first."""
    groups: Dict[Tuple[str, str], List[SpendRow]] = defaultdict(list)
    for r in _aggregate_spend_rows(spend_rows):
        groups[(r.campaign_id, r.campaign_name)].append(r)

    campaigns = []
    for (campaign_id, campaign_name), rows in groups.items():
        spend = sum(r.spend for r in rows)
        impressions = sum(r.impressions for r in rows)
        clicks = sum(r.clicks for r in rows)
        conversions = sum(r.conversions for r in rows)
        conversion_value = sum(r.conversion_value for r in rows)

        campaigns.append(CampaignMetric(
            campaign_id=campaign_id,
            campaign_name=campaign_name,
            spend=spend,
            impressions=impressions,
            reach=sum(r.reach for r in rows),
            clicks=clicks,
            landing_page_views=sum(r.landing_page_views for r in rows),
            add_to_cart=sum(r.add_to_cart for r in rows),
            checkouts_initiated=sum(r.checkouts_initiated for r in rows),
            conversions=conversions,
            conversion_value=conversion_value,
            # Frequency is already a per-viewer average; summing days would inflate it
            frequency=mean(r.frequency for r in rows),
            cpm=safe_divide(spend, impressions) * 1000,
            cpc=safe_divide(spend, clicks),
            ctr=safe_divide(clicks, impressions) * 100,
            cr=safe_divide(conversions, clicks) * 100,
            meta_roas=safe_divide(conversion_value, spend),
            meta_aov=safe_divide(conversion_value, conversions),
            meta_cac=safe_divide(spend, conversions),
        ))

    campaigns.sort(key=lambda c: c.spend, reverse=True)
    return campaigns


def build_campaigns_by_country(spend_rows: Sequence[SpendRow]) -> List[CampaignCountryMetric]:
    """Per-country campaign breakdown, grouped by campaign name then spend."""
    groups: Dict[Tuple[str, str, str], List[SpendRow]] = defaultdict(list)
    for r in _country_spend_rows(spend_rows):
        groups[(r.campaign_id, r.campaign_name, r.country)].append(r)

    breakdown = []
    for (campaign_id, campaign_name, country), rows in groups.items():
        spend = sum(r.spend for r in rows)
        impressions = sum(r.impressions for r in rows)
        clicks = sum(r.clicks for r in rows)
        conversion_value = sum(r.conversion_value for r in rows)
        breakdown.append(CampaignCountryMetric(
            campaign_id=campaign_id,
            campaign_name=campaign_name,
            country=country,
            spend=spend,
            impressions=impressions,
            reach=sum(r.reach for r in rows),
            clicks=clicks,
            conversions=sum(r.conversions for r in rows),
            conversion_value=conversion_value,
            frequency=mean(r.frequency for r in rows),
            ctr=safe_divide(clicks, impressions) * 100,
            meta_roas=safe_divide(conversion_value, spend),
        ))

    breakdown.sort(key=lambda c: -c.spend)
    breakdown.sort(key=lambda c: c.campaign_name)
    return breakdown


def build_country_metrics(
    spend_rows: Sequence[SpendRow],
    channel_a: Sequence[ChannelAOrderRow],
    channel_b: Sequence[ChannelBOrderRow],
) -> List[CountryMetric]:
    """Merge Meta spend and both order channels by country code."""
    spend_by_country: Dict[str, float] = defaultdict(float)
    a_orders_by_country: Dict[str, int] = defaultdict(int)
    b_orders_by_country: Dict[str, int] = defaultdict(int)
    a_revenue_by_country: Dict[str, float] = defaultdict(float)
    b_revenue_by_country: Dict[str, float] = defaultdict(float)
    # First-seen order across sources keeps ties deterministic
    codes: Dict[str, None] = {}

    for r in _country_spend_rows(spend_rows):
        codes.setdefault(r.country)
        spend_by_country[r.country] += r.spend
    for r in channel_a:
        codes.setdefault(r.country)
        a_orders_by_country[r.country] += 1
        a_revenue_by_country[r.country] += r.order_total
    for r in channel_b:
        codes.setdefault(r.country)
        b_orders_by_country[r.country] += r.orders_count
        b_revenue_by_country[r.country] += r.revenue

    countries = []
    for code in codes:
        spend = spend_by_country.get(code, 0.0)
        a_orders = a_orders_by_country.get(code, 0)
        b_orders = b_orders_by_country.get(code, 0)
        a_revenue = a_revenue_by_country.get(code, 0.0)
        b_revenue = b_revenue_by_country.get(code, 0.0)
        total_orders = a_orders + b_orders
        total_revenue = a_revenue + b_revenue
        countries.append(CountryMetric(
            code=code,
            name=country_name(code),
            spend=spend,
            channel_a_orders=a_orders,
            channel_b_orders=b_orders,
            channel_a_revenue=a_revenue,
            channel_b_revenue=b_revenue,
            total_orders=total_orders,
            total_revenue=total_revenue,
            aov=safe_divide(total_revenue, total_orders),
            cac=safe_divide(spend, total_orders),
            roas=safe_divide(total_revenue, spend),
        ))

    countries.sort(key=lambda c: c.spend, reverse=True)
    return countries


# ---------------------------------------------------------------------------
# Entry points
# ---------------------------------------------------------------------------

def aggregate(
    window: PeriodWindow,
    spend_rows: Sequence[SpendRow],
    channel_a: Sequence[ChannelAOrderRow],
    channel_b: Sequence[ChannelBOrderRow],
) -> MetricsSnapshot:
    """Reduce one window's rows to a snapshot. Rows outside the window are ignored."""
    spend_rows = _in_window(spend_rows, window)
    channel_a = _in_window(channel_a, window)
    channel_b = _in_window(channel_b, window)

    return MetricsSnapshot(
        window=window,
        overview=build_overview(spend_rows, channel_a, channel_b),
        daily=tuple(build_daily_series(spend_rows, channel_a, channel_b)),
        campaigns=tuple(build_campaign_metrics(spend_rows)),
        countries=tuple(build_country_metrics(spend_rows, channel_a, channel_b)),
    )


def aggregate_from_source(window: PeriodWindow, source: RowSource) -> MetricsSnapshot:
    """Fetch a window's rows from the source and aggregate them."""
    spend_rows = source.spend_rows(window)
    channel_a = source.channel_a_orders(window)
    channel_b = source.channel_b_orders(window)
    log.debug(
        f"Aggregating {window.start_date} to {window.end_date}: "
        f"{len(spend_rows)} spend rows, {len(channel_a)} + {len(channel_b)} order rows"
    )
    return aggregate(window, spend_rows, channel_a, channel_b)
