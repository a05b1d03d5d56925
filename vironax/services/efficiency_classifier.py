"""
Efficiency Classifier

Maps a period comparison to green / yellow / red health at three levels:
the account as a whole, each campaign, and each country. Thresholds are
fixed heuristics; red always overrides yellow.
"""
from dataclasses import dataclass
from typing import Dict, List, Literal, Optional, Sequence, Tuple

from vironax.services.metrics_aggregator import CampaignMetric, CountryMetric, OverviewKPI
from vironax.services.period import PeriodWindow
from vironax.services.period_comparator import PeriodComparison
from vironax.utils.helpers import calculate_percentage_change

Status = Literal["green", "yellow", "red"]

GREEN: Status = "green"
YELLOW: Status = "yellow"
RED: Status = "red"

# Overall: efficiency ratio floor / marginal CAC ceiling as a multiple of average CAC
OVERALL_THRESHOLDS = {
    YELLOW: {'efficiency_ratio': 0.85, 'marginal_cac_multiple': 1.3},
    RED: {'efficiency_ratio': 0.70, 'marginal_cac_multiple': 1.5},
}

CAMPAIGN_THRESHOLDS = {
    YELLOW: {'frequency': 3.0, 'cpm_change_pct': 15.0, 'ctr_change_pct': -10.0, 'marginal_cac_multiple': 1.3},
    RED: {'frequency': 4.0, 'cpm_change_pct': 25.0, 'ctr_change_pct': -20.0, 'marginal_cac_multiple': 1.5},
}

# Country CAC growth (%) -> scaling status and budget headroom
COUNTRY_YELLOW_CAC_CHANGE = 15.0
COUNTRY_RED_CAC_CHANGE = 30.0
HEADROOM = {
    GREEN: "Can scale +40%",
    YELLOW: "Hold budget",
    RED: "Reduce -20%",
}


@dataclass(frozen=True)
class CampaignEfficiency:
    campaign: CampaignMetric
    status: Status
    cpm_change_pct: float
    ctr_change_pct: float
    marginal_cac: float
    has_previous: bool


@dataclass(frozen=True)
class CountryScaling:
    country: CountryMetric
    status: Status
    headroom: str
    cac_change_pct: float
    has_previous: bool


@dataclass(frozen=True)
class EfficiencyReport:
    status: Status
    window: PeriodWindow
    previous_window: PeriodWindow
    current: OverviewKPI
    previous: OverviewKPI
    spend_change_pct: float
    roas_change_pct: float
    efficiency_ratio: float
    average_cac: float
    marginal_cac: float
    marginal_premium_pct: float
    campaigns: Tuple[CampaignEfficiency, ...]
    countries: Tuple[CountryScaling, ...]


# ---------------------------------------------------------------------------
# Classification
# ---------------------------------------------------------------------------

def classify_overall(efficiency_ratio: float, marginal_cac: float, current_cac: float) -> Status:
    status = GREEN
    for level in (YELLOW, RED):
        t = OVERALL_THRESHOLDS[level]
        if efficiency_ratio < t['efficiency_ratio'] or marginal_cac > current_cac * t['marginal_cac_multiple']:
            status = level
    return status


def _campaign_status(
    frequency: float, cpm_change: float, ctr_change: float, marginal_cac: float, meta_cac: float,
) -> Status:
    status = GREEN
    for level in (YELLOW, RED):
        t = CAMPAIGN_THRESHOLDS[level]
        if (
            frequency > t['frequency']
            or cpm_change > t['cpm_change_pct']
            or ctr_change < t['ctr_change_pct']
            or marginal_cac > meta_cac * t['marginal_cac_multiple']
        ):
            status = level
    return status


def classify_campaign(current: CampaignMetric, previous: Optional[CampaignMetric]) -> CampaignEfficiency:
    """A campaign with no previous-period match is a first appearance: green, zero deltas."""
    if previous is None:
        return CampaignEfficiency(
            campaign=current,
            status=GREEN,
            cpm_change_pct=0.0,
            ctr_change_pct=0.0,
            marginal_cac=current.meta_cac,
            has_previous=False,
        )

    cpm_change = calculate_percentage_change(current.cpm, previous.cpm)
    ctr_change = calculate_percentage_change(current.ctr, previous.ctr)

    incremental_spend = current.spend - previous.spend
    incremental_conversions = current.conversions - previous.conversions
    if incremental_conversions > 0:
        marginal_cac = incremental_spend / incremental_conversions
    else:
        marginal_cac = current.meta_cac

    return CampaignEfficiency(
        campaign=current,
        status=_campaign_status(current.frequency, cpm_change, ctr_change, marginal_cac, current.meta_cac),
        cpm_change_pct=cpm_change,
        ctr_change_pct=ctr_change,
        marginal_cac=marginal_cac,
        has_previous=True,
    )


def classify_campaigns(
    current: Sequence[CampaignMetric], previous: Sequence[CampaignMetric],
) -> List[CampaignEfficiency]:
    # Matched on exact campaign_id; renamed or re-created campaigns start fresh
    previous_by_id: Dict[str, CampaignMetric] = {}
    for c in previous:
        previous_by_id.setdefault(c.campaign_id, c)
    return [classify_campaign(c, previous_by_id.get(c.campaign_id)) for c in current]


def classify_country(current: CountryMetric, previous: Optional[CountryMetric]) -> CountryScaling:
    if previous is None or previous.cac <= 0:
        return CountryScaling(
            country=current,
            status=GREEN,
            headroom=HEADROOM[GREEN],
            cac_change_pct=0.0,
            has_previous=previous is not None,
        )

    cac_change = calculate_percentage_change(current.cac, previous.cac)
    status = GREEN
    if cac_change > COUNTRY_YELLOW_CAC_CHANGE:
        status = YELLOW
    if cac_change > COUNTRY_RED_CAC_CHANGE:
        status = RED

    return CountryScaling(
        country=current,
        status=status,
        headroom=HEADROOM[status],
        cac_change_pct=cac_change,
        has_previous=True,
    )


def classify_countries(
    current: Sequence[CountryMetric], previous: Sequence[CountryMetric],
) -> List[CountryScaling]:
    previous_by_code = {c.code: c for c in previous}
    return [classify_country(c, previous_by_code.get(c.code)) for c in current]


def build_efficiency_report(comparison: PeriodComparison) -> EfficiencyReport:
    current = comparison.current
    previous = comparison.previous

    return EfficiencyReport(
        status=classify_overall(
            comparison.efficiency_ratio, comparison.marginal_cac, current.overview.cac,
        ),
        window=current.window,
        previous_window=previous.window,
        current=current.overview,
        previous=previous.overview,
        spend_change_pct=comparison.spend_change_pct,
        roas_change_pct=comparison.roas_change_pct,
        efficiency_ratio=comparison.efficiency_ratio,
        average_cac=current.overview.cac,
        marginal_cac=comparison.marginal_cac,
        marginal_premium_pct=comparison.marginal_premium_pct,
        campaigns=tuple(classify_campaigns(current.campaigns, previous.campaigns)),
        countries=tuple(classify_countries(current.countries, previous.countries)),
    )
