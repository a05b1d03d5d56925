"""
Diagnostics rule tests.

Each rule is checked at its boundary, then the full scan is checked for
output order: campaign warnings, attribution, then positive signals.
"""
import pytest

from vironax.services.diagnostics_engine import attribution_mismatch_pct, run_diagnostics
from vironax.services.efficiency_classifier import RED


def _titles(diagnostics):
    return [d.title for d in diagnostics]


class TestCampaignRules:

    def test_quiet_baseline(self, make_campaign, make_report):
        assert run_diagnostics([make_campaign()], make_report()) == []

    def test_high_frequency(self, make_campaign, make_report):
        (finding,) = run_diagnostics([make_campaign(campaign_name="Retargeting", frequency=3.8)], make_report())

        assert finding.severity == "warning"
        assert finding.title == "Retargeting: High Frequency (3.8)"
        assert finding.action == "Reduce budget 20% and refresh creatives"

    def test_frequency_at_threshold_is_quiet(self, make_campaign, make_report):
        assert run_diagnostics([make_campaign(frequency=3.5)], make_report()) == []

    def test_low_ctr_needs_enough_impressions(self, make_campaign, make_report):
        low = make_campaign(ctr=0.5, impressions=20000)
        too_small = make_campaign(ctr=0.5, impressions=8000)

        assert _titles(run_diagnostics([low], make_report())) == ["Prospecting: Low CTR (0.50%)"]
        assert run_diagnostics([too_small], make_report()) == []

    def test_cart_abandonment_above_threshold(self, make_campaign, make_report):
        camp = make_campaign(add_to_cart=100, checkouts_initiated=30)
        (finding,) = run_diagnostics([camp], make_report())

        assert finding.title == "Prospecting: High Cart Abandonment (70%)"
        assert finding.detail == "100 added to cart but only 30 started checkout."

    def test_cart_abandonment_below_threshold(self, make_campaign, make_report):
        camp = make_campaign(add_to_cart=100, checkouts_initiated=50)
        assert run_diagnostics([camp], make_report()) == []

    def test_cart_rule_skipped_without_checkouts(self, make_campaign, make_report):
        camp = make_campaign(add_to_cart=100, checkouts_initiated=0)
        assert run_diagnostics([camp], make_report()) == []


class TestAttribution:

    def test_mismatch_pct(self):
        assert attribution_mismatch_pct(20, 10) == pytest.approx(50.0)
        assert attribution_mismatch_pct(20, 30) == pytest.approx(50.0)
        assert attribution_mismatch_pct(0, 10) == 0

    def test_flags_large_gap(self, make_campaign, make_report, make_overview):
        report = make_report(current=make_overview(channel_a_orders=10))
        (finding,) = run_diagnostics([make_campaign(conversions=20)], report)

        assert finding.title == "Attribution Mismatch: 50%"
        assert finding.detail == "Meta reports 20 conversions, Salla shows 10 orders."

    def test_small_gap_is_quiet(self, make_campaign, make_report, make_overview):
        report = make_report(current=make_overview(channel_a_orders=18))
        assert run_diagnostics([make_campaign(conversions=20)], report) == []

    def test_skipped_without_storefront_orders(self, make_campaign, make_report):
        assert run_diagnostics([make_campaign(conversions=20)], make_report()) == []


class TestPositiveSignals:

    def test_strong_green_country(self, make_report, make_country, make_country_scaling):
        sa = make_country(roas=3.5, cac=28.57)
        report = make_report(countries=[make_country_scaling(sa)])
        (finding,) = run_diagnostics([], report)

        assert finding.severity == "success"
        assert finding.title == "Saudi Arabia: Strong Performance (3.50x ROAS)"
        assert finding.detail == "Efficient CAC at $28.57. Market is performing well."
        assert finding.action == "Consider scaling Saudi Arabia budget +30%"

    def test_strong_roas_in_red_country_is_not_praised(self, make_report, make_country, make_country_scaling):
        report = make_report(countries=[make_country_scaling(make_country(roas=4.0), status=RED)])
        assert run_diagnostics([], report) == []

    def test_roas_improvement(self, make_report):
        (finding,) = run_diagnostics([], make_report(roas_change_pct=12.34))
        assert finding.title == "ROAS improved 12.3% vs last period"

    def test_healthy_marginal_cac(self, make_report):
        (finding,) = run_diagnostics([], make_report(marginal_premium_pct=4.0))
        assert finding.title == "Marginal CAC is healthy"
        assert finding.detail == "New spending is only 4% less efficient than average."


def test_findings_are_ordered(make_campaign, make_report, make_overview, make_country, make_country_scaling):
    campaigns = [
        make_campaign(campaign_name="A", frequency=4.0, ctr=0.5),
        make_campaign(campaign_name="B", add_to_cart=50, checkouts_initiated=10),
    ]
    report = make_report(
        current=make_overview(channel_a_orders=5),
        countries=[make_country_scaling(make_country(roas=3.2))],
        roas_change_pct=8.0,
        marginal_premium_pct=2.0,
    )

    titles = _titles(run_diagnostics(campaigns, report))

    assert titles == [
        "A: High Frequency (4.0)",
        "A: Low CTR (0.50%)",
        "B: High Cart Abandonment (80%)",
        "Attribution Mismatch: 88%",
        "Saudi Arabia: Strong Performance (3.20x ROAS)",
        "ROAS improved 8.0% vs last period",
        "Marginal CAC is healthy",
    ]
