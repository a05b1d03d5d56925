"""
Diagnostics Engine

Rule scan over the current window. Emits warnings for creative fatigue,
weak click-through, cart abandonment and Meta-vs-Salla attribution gaps,
followed by positive signals worth acting on.

Order of findings: campaign rules in campaign order, then the cross-source
check, then positive signals.
"""
from dataclasses import dataclass
from typing import List, Literal, Sequence

from vironax.services.efficiency_classifier import GREEN, EfficiencyReport
from vironax.services.metrics_aggregator import CampaignMetric
from vironax.utils.helpers import format_currency, safe_divide

Severity = Literal["warning", "success"]

HIGH_FREQUENCY = 3.5
LOW_CTR_PCT = 0.8
LOW_CTR_MIN_IMPRESSIONS = 10000
CART_DROP_OFF_PCT = 60.0
ATTRIBUTION_MISMATCH_PCT = 15.0
STRONG_COUNTRY_ROAS = 3.0
ROAS_IMPROVEMENT_PCT = 5.0
HEALTHY_MARGINAL_PREMIUM_PCT = 10.0


@dataclass(frozen=True)
class Diagnostic:
    severity: Severity
    title: str
    detail: str
    action: str


def _campaign_diagnostics(camp: CampaignMetric) -> List[Diagnostic]:
    findings = []

    if camp.frequency > HIGH_FREQUENCY:
        findings.append(Diagnostic(
            severity="warning",
            title=f"{camp.campaign_name}: High Frequency ({camp.frequency:.1f})",
            detail="Audience seeing ads 3.5+ times per week. Creative fatigue likely.",
            action="Reduce budget 20% and refresh creatives",
        ))

    if camp.ctr < LOW_CTR_PCT and camp.impressions > LOW_CTR_MIN_IMPRESSIONS:
        findings.append(Diagnostic(
            severity="warning",
            title=f"{camp.campaign_name}: Low CTR ({camp.ctr:.2f}%)",
            detail="Below average click-through rate indicates creative or targeting issues.",
            action="Test new creatives or refine audience targeting",
        ))

    if camp.add_to_cart > 0 and camp.checkouts_initiated > 0:
        drop_off = (camp.add_to_cart - camp.checkouts_initiated) / camp.add_to_cart * 100
        if drop_off > CART_DROP_OFF_PCT:
            findings.append(Diagnostic(
                severity="warning",
                title=f"{camp.campaign_name}: High Cart Abandonment ({drop_off:.0f}%)",
                detail=(
                    f"{camp.add_to_cart} added to cart but only "
                    f"{camp.checkouts_initiated} started checkout."
                ),
                action="Check cart page UX, shipping costs, payment options",
            ))

    return findings


def attribution_mismatch_pct(meta_conversions: float, storefront_orders: int) -> float:
    """Gap between Meta-reported conversions and storefront orders, as % of Meta's count."""
    return safe_divide(abs(meta_conversions - storefront_orders), meta_conversions) * 100


def run_diagnostics(
    campaigns: Sequence[CampaignMetric],
    report: EfficiencyReport,
    currency: str = "USD",
) -> List[Diagnostic]:
    diagnostics: List[Diagnostic] = []

    for camp in campaigns:
        diagnostics.extend(_campaign_diagnostics(camp))

    # Meta pixel conversions vs Salla orders; manual orders never reach the pixel
    total_meta_conversions = sum(c.conversions for c in campaigns)
    salla_orders = report.current.channel_a_orders
    if total_meta_conversions > 0 and salla_orders > 0:
        mismatch = attribution_mismatch_pct(total_meta_conversions, salla_orders)
        if mismatch > ATTRIBUTION_MISMATCH_PCT:
            diagnostics.append(Diagnostic(
                severity="warning",
                title=f"Attribution Mismatch: {mismatch:.0f}%",
                detail=f"Meta reports {total_meta_conversions} conversions, Salla shows {salla_orders} orders.",
                action="Check pixel setup and order confirmation page",
            ))

    for scaling in report.countries:
        country = scaling.country
        if scaling.status == GREEN and country.roas > STRONG_COUNTRY_ROAS:
            diagnostics.append(Diagnostic(
                severity="success",
                title=f"{country.name}: Strong Performance ({country.roas:.2f}x ROAS)",
                detail=f"Efficient CAC at {format_currency(country.cac, currency)}. Market is performing well.",
                action=f"Consider scaling {country.name} budget +30%",
            ))

    if report.roas_change_pct > ROAS_IMPROVEMENT_PCT:
        diagnostics.append(Diagnostic(
            severity="success",
            title=f"ROAS improved {report.roas_change_pct:.1f}% vs last period",
            detail="Overall acquisition efficiency is improving.",
            action="Continue current strategy",
        ))

    if report.marginal_premium_pct < HEALTHY_MARGINAL_PREMIUM_PCT:
        diagnostics.append(Diagnostic(
            severity="success",
            title="Marginal CAC is healthy",
            detail=f"New spending is only {report.marginal_premium_pct:.0f}% less efficient than average.",
            action="Room to scale if needed",
        ))

    return diagnostics
