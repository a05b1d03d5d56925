"""
Period Comparator

Compares a window against the equal-length window immediately before it:
spend and ROAS change, the efficiency ratio, and marginal CAC (the cost of
the orders gained versus last period, as opposed to average CAC).
"""
from dataclasses import dataclass

from vironax.services.metrics_aggregator import MetricsSnapshot, aggregate_from_source
from vironax.services.period import PeriodWindow
from vironax.services.row_source import RowSource
from vironax.utils.helpers import calculate_percentage_change, safe_divide


@dataclass(frozen=True)
class PeriodComparison:
    current: MetricsSnapshot
    previous: MetricsSnapshot
    spend_change_pct: float
    roas_change_pct: float
    efficiency_ratio: float
    incremental_spend: float
    incremental_orders: int
    marginal_cac: float
    marginal_premium_pct: float


def efficiency_ratio(spend_change_pct: float, roas_change_pct: float) -> float:
    """
    Proportional ROAS change over proportional spend change.

    Stays at 1 unless both changes are non-zero, so a flat spend with a
    moving ROAS (or the reverse) reads as neutral.
    """
    if spend_change_pct != 0 and roas_change_pct != 0:
        return (1 + roas_change_pct / 100) / (1 + spend_change_pct / 100)
    return 1.0


def compare_snapshots(current: MetricsSnapshot, previous: MetricsSnapshot) -> PeriodComparison:
    cur = current.overview
    prev = previous.overview

    spend_change = calculate_percentage_change(cur.spend, prev.spend)
    roas_change = calculate_percentage_change(cur.roas, prev.roas)

    incremental_spend = cur.spend - prev.spend
    incremental_orders = cur.orders - prev.orders
    if incremental_orders > 0:
        marginal_cac = incremental_spend / incremental_orders
    else:
        marginal_cac = cur.cac

    return PeriodComparison(
        current=current,
        previous=previous,
        spend_change_pct=spend_change,
        roas_change_pct=roas_change,
        efficiency_ratio=efficiency_ratio(spend_change, roas_change),
        incremental_spend=incremental_spend,
        incremental_orders=incremental_orders,
        marginal_cac=marginal_cac,
        marginal_premium_pct=safe_divide(marginal_cac - cur.cac, cur.cac) * 100,
    )


def compare_periods(window: PeriodWindow, source: RowSource) -> PeriodComparison:
    """Aggregate the window and its predecessor from the source and compare them."""
    current = aggregate_from_source(window, source)
    previous = aggregate_from_source(window.previous(), source)
    return compare_snapshots(current, previous)
