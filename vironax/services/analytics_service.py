"""
Analytics Service

Caller-facing queries over a RowSource. Every call recomputes from the
source's current rows; nothing is cached between calls, so two calls with
the same rows and window return equal results.
"""
from dataclasses import dataclass
from datetime import date
from typing import Dict, List

from vironax.services.diagnostics_engine import Diagnostic, run_diagnostics
from vironax.services.efficiency_classifier import EfficiencyReport, build_efficiency_report
from vironax.services.metrics_aggregator import (
    CampaignCountryMetric,
    CampaignMetric,
    CountryMetric,
    DailyMetric,
    OverviewKPI,
    aggregate_from_source,
    build_campaigns_by_country,
)
from vironax.services.period import PeriodWindow
from vironax.services.period_comparator import compare_periods
from vironax.services.recommendation_engine import Recommendation, build_recommendations
from vironax.services.row_source import RowSource
from vironax.utils.helpers import safe_divide
from vironax.utils.logger import log

ROLLING_WINDOW_DAYS = 3


@dataclass(frozen=True)
class EfficiencyTrendPoint:
    date: date
    spend: float
    orders: int
    revenue: float
    aov: float
    cac: float
    roas: float
    rolling_cac: float
    rolling_roas: float
    marginal_cac: float


def rolling_efficiency(
    daily: List[DailyMetric], window_size: int = ROLLING_WINDOW_DAYS,
) -> List[EfficiencyTrendPoint]:
    """
    Trailing rolling CAC/ROAS over the last ``window_size`` entries, plus a
    day-over-day marginal CAC.

    The first day's rolling values equal its own. Marginal CAC falls back to
    the day's CAC when orders did not grow versus the previous entry.
    """
    points = []
    for i, day in enumerate(daily):
        trailing = daily[max(0, i - window_size + 1):i + 1]
        rolling_spend = sum(d.spend for d in trailing)
        rolling_orders = sum(d.orders for d in trailing)
        rolling_revenue = sum(d.revenue for d in trailing)

        marginal_cac = day.cac
        if i > 0:
            order_delta = day.orders - daily[i - 1].orders
            if order_delta > 0:
                marginal_cac = (day.spend - daily[i - 1].spend) / order_delta

        points.append(EfficiencyTrendPoint(
            date=day.date,
            spend=day.spend,
            orders=day.orders,
            revenue=day.revenue,
            aov=day.aov,
            cac=day.cac,
            roas=day.roas,
            rolling_cac=safe_divide(rolling_spend, rolling_orders),
            rolling_roas=safe_divide(rolling_revenue, rolling_spend),
            marginal_cac=marginal_cac,
        ))
    return points


class AnalyticsService:
    """Marketing efficiency queries for one RowSource"""

    def __init__(self, row_source: RowSource, currency: str = "USD"):
        self.row_source = row_source
        self.currency = currency

    def overview(self, window: PeriodWindow) -> OverviewKPI:
        return aggregate_from_source(window, self.row_source).overview

    def daily_trends(self, window: PeriodWindow) -> List[DailyMetric]:
        return list(aggregate_from_source(window, self.row_source).daily)

    def campaign_metrics(self, window: PeriodWindow) -> List[CampaignMetric]:
        return list(aggregate_from_source(window, self.row_source).campaigns)

    def campaigns_by_country(self, window: PeriodWindow) -> List[CampaignCountryMetric]:
        rows = [r for r in self.row_source.spend_rows(window) if window.contains(r.date)]
        return build_campaigns_by_country(rows)

    def country_metrics(self, window: PeriodWindow) -> List[CountryMetric]:
        return list(aggregate_from_source(window, self.row_source).countries)

    def efficiency_report(self, window: PeriodWindow) -> EfficiencyReport:
        log.info(f"Building efficiency report for {window.start_date} to {window.end_date}")
        report = build_efficiency_report(compare_periods(window, self.row_source))
        log.info(
            f"Efficiency {report.status}: ratio {report.efficiency_ratio:.2f}, "
            f"marginal CAC {report.marginal_cac:.2f} vs average {report.average_cac:.2f}"
        )
        return report

    def efficiency_trends(self, window: PeriodWindow) -> List[EfficiencyTrendPoint]:
        return rolling_efficiency(self.daily_trends(window))

    def diagnostics(self, window: PeriodWindow) -> List[Diagnostic]:
        comparison = compare_periods(window, self.row_source)
        report = build_efficiency_report(comparison)
        return run_diagnostics(comparison.current.campaigns, report, self.currency)

    def recommendations(self, window: PeriodWindow) -> List[Recommendation]:
        return build_recommendations(self.efficiency_report(window), self.currency)

    def dashboard(self, window: PeriodWindow) -> Dict:
        """Overview, trends, campaigns, countries and diagnostics in one pass."""
        comparison = compare_periods(window, self.row_source)
        report = build_efficiency_report(comparison)
        current = comparison.current
        return {
            'overview': current.overview,
            'trends': list(current.daily),
            'campaigns': list(current.campaigns),
            'countries': list(current.countries),
            'diagnostics': run_diagnostics(current.campaigns, report, self.currency),
            'date_range': window,
        }
