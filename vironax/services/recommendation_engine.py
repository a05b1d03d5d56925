"""
Recommendation Engine

Turns an EfficiencyReport into budget actions, most urgent first.

Priority 1 = urgent cut, 2 = standard fix or reallocation, 3 = scale-up.
Each campaign gets at most one recommendation (first matching branch).
"""
import math
from dataclasses import dataclass
from typing import List, Literal

from vironax.services.efficiency_classifier import GREEN, RED, YELLOW, CampaignEfficiency, EfficiencyReport
from vironax.utils.helpers import format_currency, safe_divide

Kind = Literal["urgent", "standard", "positive"]

BUDGET_CUT_SHARE = 0.25
SCALE_UP_SHARE = 0.25
CREATIVE_REFRESH_CTR_DROP_PCT = -10.0
SCALE_MARGINAL_CAC_MULTIPLE = 1.1
COUNTRY_SHIFT_SHARE = 0.2
MAX_COUNTRY_SHIFT = 1000.0


@dataclass(frozen=True)
class Recommendation:
    priority: int
    kind: Kind
    title: str
    detail: str
    impact: str


def _campaign_recommendation(
    ce: CampaignEfficiency, window_days: int, currency: str,
) -> List[Recommendation]:
    camp = ce.campaign

    if ce.status == RED:
        daily_saving = safe_divide(camp.spend * BUDGET_CUT_SHARE, window_days)
        return [Recommendation(
            priority=1,
            kind="urgent",
            title=f"Reduce {camp.campaign_name} budget by 25%",
            detail=(
                f"Frequency at {camp.frequency:.1f} means audience is oversaturated. "
                "Reduce spend and let audience recover."
            ),
            impact=f"Expected: Save ~{format_currency(daily_saving, currency, 0, grouping=False)}/day, improve efficiency by 15%",
        )]

    if ce.status == YELLOW and ce.ctr_change_pct < CREATIVE_REFRESH_CTR_DROP_PCT:
        return [Recommendation(
            priority=2,
            kind="standard",
            title=f"Refresh {camp.campaign_name} creatives",
            detail=(
                f"CTR dropped {abs(ce.ctr_change_pct):.0f}% while frequency rising. "
                "Creative fatigue setting in."
            ),
            impact="Expected: Restore CTR, reduce CPC by ~15%",
        )]

    if ce.status == GREEN and ce.marginal_cac < camp.meta_cac * SCALE_MARGINAL_CAC_MULTIPLE:
        extra = math.floor(camp.conversions * SCALE_UP_SHARE)
        return [Recommendation(
            priority=3,
            kind="positive",
            title=f"Scale {camp.campaign_name} by 25%",
            detail=(
                f"Low frequency ({camp.frequency:.1f}), stable metrics, efficient marginal CAC. "
                "Room to grow."
            ),
            impact=f"Expected: +{extra} additional conversions at current efficiency",
        )]

    return []


def build_recommendations(report: EfficiencyReport, currency: str = "USD") -> List[Recommendation]:
    recommendations: List[Recommendation] = []
    window_days = report.window.days

    for ce in report.campaigns:
        recommendations.extend(_campaign_recommendation(ce, window_days, currency))

    green_countries = [s.country for s in report.countries if s.status == GREEN]
    red_countries = [s.country for s in report.countries if s.status == RED]

    if green_countries and red_countries:
        shift_amount = min(
            sum(c.spend * COUNTRY_SHIFT_SHARE for c in red_countries),
            MAX_COUNTRY_SHIFT,
        )
        red_names = [c.name for c in red_countries]
        green_names = [c.name for c in green_countries]
        recommendations.append(Recommendation(
            priority=2,
            kind="standard",
            title=(
                f"Shift {format_currency(shift_amount, currency, 0, grouping=False)} from "
                f"{', '.join(red_names)} to {', '.join(green_names)}"
            ),
            detail=(
                f"{' and '.join(red_names)} showing saturation. "
                f"{' and '.join(green_names)} still efficient with room to grow."
            ),
            impact="Expected: Better overall ROAS with same spend",
        ))

    # sort() is stable, so equal priorities keep campaign order
    recommendations.sort(key=lambda r: r.priority)
    return recommendations
